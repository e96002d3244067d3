"""
Configuration schema for the bag-of-bigrams feature pipeline.

Provides a validated, immutable configuration dataclass that can be loaded
from a dictionary or a YAML file.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, asdict
from functools import lru_cache
from pathlib import Path
from typing import Optional, Dict, Any, Sequence, Tuple

import yaml


VALID_HISTOGRAM_TYPES = {"equi_depth", "equi_frequency"}


@lru_cache(maxsize=None)
def default_n_jobs() -> int:
    """Worker pool size: available CPUs, never fewer than 8."""
    return max(8, os.cpu_count() or 1)


@dataclass(frozen=True)
class MuseConfig:
    """Feature extraction configuration.

    ``word_length`` is the longest word the quantizers are fit with; it is
    rounded up to an even number. Bags may later be built with any shorter
    word length through masking.
    """
    word_length: int
    alphabet_size: int
    window_lengths: Tuple[int, ...]
    histogram_type: str = "equi_depth"
    norm_mean: bool = True
    lower_bounding: bool = True
    chi_limit: float = 2.0
    n_jobs: Optional[int] = None

    def __post_init__(self):
        """Validate configuration."""
        if self.word_length < 1:
            raise ValueError(f"word_length must be >= 1, got {self.word_length}")
        if self.alphabet_size < 1:
            raise ValueError(f"alphabet_size must be >= 1, got {self.alphabet_size}")

        windows = tuple(int(w) for w in self.window_lengths)
        if not windows:
            raise ValueError("window_lengths must not be empty")
        if min(windows) < 1:
            raise ValueError(f"window lengths must be >= 1, got {list(windows)}")

        if self.histogram_type not in VALID_HISTOGRAM_TYPES:
            raise ValueError(
                f"histogram_type must be one of {VALID_HISTOGRAM_TYPES}, "
                f"got {self.histogram_type}"
            )
        if self.chi_limit < 0:
            raise ValueError(f"chi_limit must be >= 0, got {self.chi_limit}")
        if self.n_jobs is not None and self.n_jobs < 1:
            raise ValueError(f"n_jobs must be >= 1, got {self.n_jobs}")

        # frozen: normalise through object.__setattr__
        object.__setattr__(self, "word_length", self.word_length + self.word_length % 2)
        object.__setattr__(self, "window_lengths", windows)

    @property
    def workers(self) -> int:
        return self.n_jobs if self.n_jobs is not None else default_n_jobs()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> MuseConfig:
        """Create MuseConfig from dictionary (e.g., from YAML)."""
        data = dict(data)
        windows: Sequence[int] = data.pop("window_lengths", ())
        return cls(window_lengths=tuple(windows), **data)

    @classmethod
    def from_yaml(cls, yaml_path: str | Path) -> MuseConfig:
        """Load configuration from YAML file.

        The file may either hold the fields at top level or under a
        ``features`` section.
        """
        yaml_path = Path(yaml_path)
        if not yaml_path.exists():
            raise FileNotFoundError(f"Config file not found: {yaml_path}")

        with open(yaml_path, 'r') as f:
            data = yaml.safe_load(f) or {}

        if "features" in data:
            data = data["features"]
        for key in ("word_length", "alphabet_size", "window_lengths"):
            if key not in data:
                raise ValueError(f"Missing required field: {key}")

        return cls.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        data = asdict(self)
        data["window_lengths"] = list(self.window_lengths)
        return data
