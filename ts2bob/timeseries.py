"""
Multivariate sample container.

A sample is an ordered set of univariate series (variates) and one class
label. Labels are opaque tokens: they are grouped by type and exact value
(floats bit for bit) and never compared arithmetically.
"""

from __future__ import annotations

import math
import struct
from dataclasses import dataclass, field
from typing import Any, Hashable, List, Optional, Sequence

import numpy as np
from numpy.typing import NDArray


def _check_label(label: Any) -> Hashable:
    if label is None:
        raise ValueError("Sample label must not be None")
    if isinstance(label, (float, np.floating)) and math.isnan(label):
        raise ValueError("Sample label must not be NaN")
    try:
        hash(label)
    except TypeError:
        raise ValueError(f"Sample label must be hashable, got {type(label).__name__}") from None
    if isinstance(label, np.generic):
        label = label.item()
    return label


def label_key(label: Hashable) -> Hashable:
    """Grouping key for a class label.

    Floats compare bit for bit, so ``0.0`` and ``-0.0`` are different
    classes, and ``1``, ``1.0`` and ``True`` never merge.
    """
    if isinstance(label, (bool, np.bool_)):
        return ("bool", bool(label))
    if isinstance(label, (float, np.floating)):
        return ("float", struct.pack("<d", float(label)))
    if isinstance(label, (int, np.integer)):
        return ("int", int(label))
    return (type(label).__name__, label)


@dataclass
class MultivariateSample:
    """One labelled multivariate time series."""
    series: List[NDArray[np.float64]]
    label: Hashable = field(default=0)

    def __post_init__(self):
        self.series = [np.asarray(s, dtype=float).ravel() for s in self.series]
        if not self.series:
            raise ValueError("A sample needs at least one variate")
        self.label = _check_label(self.label)

    @property
    def dimensions(self) -> int:
        return len(self.series)

    def __len__(self) -> int:
        return max(len(s) for s in self.series)


def as_samples(X: Sequence, y: Optional[Sequence] = None) -> List[MultivariateSample]:
    """Build samples from a (n_samples, n_variates, n_points) array or nested lists.

    Nested lists may hold one flat series per sample (univariate) or a list
    of variates per sample; variates of one sample may differ in length.
    ``y`` defaults to label 0 for every sample.
    """
    if isinstance(X, np.ndarray):
        if X.ndim == 2:
            X = X[:, np.newaxis, :]
        if X.ndim != 3:
            raise ValueError(f"X must be 2D or 3D array, got shape {X.shape}")

    if y is None:
        y = [0] * len(X)
    if len(y) != len(X):
        raise ValueError(f"Got {len(X)} samples but {len(y)} labels")

    return [MultivariateSample(series=_variates(x), label=label) for x, label in zip(X, y)]


def _variates(x) -> list:
    # a flat sequence of numbers is one univariate series
    if len(x) == 0 or np.ndim(x[0]) == 0:
        return [x]
    return list(x)


def check_dimensions(samples: Sequence[MultivariateSample],
                     expected: Optional[int] = None) -> int:
    """Return the shared variate count of ``samples``.

    Raises ValueError for an empty batch or when any sample disagrees with
    ``expected`` (or, if not given, with the first sample).
    """
    if len(samples) == 0:
        raise ValueError("No samples given")

    dimensionality = expected if expected is not None else samples[0].dimensions
    for i, sample in enumerate(samples):
        if sample.dimensions != dimensionality:
            raise ValueError(
                f"Sample {i} has {sample.dimensions} variates, "
                f"expected {dimensionality}"
            )
    return dimensionality
