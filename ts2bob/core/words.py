"""
Symbolic word extraction.

Each window length gets its own quantizer, fit once on the training samples
and then used to turn every sliding window of every variate into one
bit-packed symbolic word. Window lengths are processed in parallel.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Protocol, Sequence

import numpy as np
from numpy.typing import NDArray
from joblib import Parallel, delayed

from ..config import MuseConfig
from ..timeseries import MultivariateSample, check_dimensions

logger = logging.getLogger(__name__)

# words[window_index][sample * dimensionality + dim] -> word sequence
Words = List[List[NDArray[np.int64]]]


def bits_needed(n_symbols: int) -> int:
    """Number of bits per symbol for an alphabet of ``n_symbols``.

    ceil(log2(n)): 1 -> 0, 2 -> 1, 3 -> 2, 4 -> 2, 5 -> 3.
    """
    if n_symbols < 1:
        raise ValueError(f"n_symbols must be >= 1, got {n_symbols}")
    return (n_symbols - 1).bit_length()


def word_mask(alphabet_size: int, word_length: int) -> int:
    """Mask keeping the low ``word_length`` symbols of a packed word."""
    if word_length < 0:
        raise ValueError(f"word_length must be >= 0, got {word_length}")
    return (1 << (bits_needed(alphabet_size) * word_length)) - 1


class Quantizer(Protocol):
    """Windowed symbolic quantizer (e.g. SFA)."""

    def fit_windowing(self, samples: Sequence[MultivariateSample], window_length: int,
                      word_length: int, alphabet_size: int,
                      norm_mean: bool, lower_bounding: bool) -> object:
        ...

    def transform_windowing_int(self, series: NDArray[np.float64],
                                word_length: int) -> Sequence[int]:
        ...


QuantizerFactory = Callable[[str], Quantizer]


class WordExtractor:
    """Extract word sequences for all window lengths.

    Args:
        config: Feature configuration, shared read-only by all workers.
        quantizer_factory: Called with ``config.histogram_type`` to create
            one quantizer per window length.
        n_jobs: Worker count, defaults to ``config.workers``.
    """

    def __init__(self, config: MuseConfig, quantizer_factory: QuantizerFactory,
                 n_jobs: Optional[int] = None):
        if n_jobs is not None and n_jobs < 1:
            raise ValueError(f"n_jobs must be >= 1, got {n_jobs}")
        self.config = config
        self.quantizer_factory = quantizer_factory
        self.n_jobs = n_jobs if n_jobs is not None else config.workers
        self.quantizers: List[Optional[Quantizer]] = [None] * len(config.window_lengths)

    def reset(self) -> None:
        self.quantizers = [None] * len(self.config.window_lengths)

    @property
    def is_fitted(self) -> bool:
        return all(q is not None for q in self.quantizers)

    def extract(self, samples: Sequence[MultivariateSample]) -> Words:
        """Create words for every window length, sample and variate.

        Window index ``w`` is handled by worker ``w % n_jobs``; each worker
        only writes ``words[w]`` for the indices it owns. Returns once all
        workers are done. An exception in any worker propagates.
        """
        check_dimensions(samples)
        n_windows = len(self.config.window_lengths)
        words: Words = [None] * n_windows

        n_workers = min(self.n_jobs, n_windows)
        logger.info(
            f"Extracting words for {len(samples)} samples, "
            f"{n_windows} window lengths, {n_workers} workers"
        )

        if n_workers == 1:
            self._run_partition(0, 1, samples, words)
        else:
            # threading backend: workers fill the shared ``words`` list in place
            Parallel(n_jobs=n_workers, backend='threading')(
                delayed(self._run_partition)(worker, n_workers, samples, words)
                for worker in range(n_workers)
            )

        return words

    def _run_partition(self, worker: int, n_workers: int,
                       samples: Sequence[MultivariateSample], words: Words) -> None:
        for w in range(len(self.config.window_lengths)):
            if w % n_workers == worker:
                words[w] = self.extract_window(samples, w)

    def extract_window(self, samples: Sequence[MultivariateSample],
                       index: int) -> List[NDArray[np.int64]]:
        """Words of every (sample, variate) pair for one window length."""
        cfg = self.config
        window_length = cfg.window_lengths[index]

        if self.quantizers[index] is None:
            quantizer = self.quantizer_factory(cfg.histogram_type)
            quantizer.fit_windowing(
                samples, window_length, cfg.word_length, cfg.alphabet_size,
                cfg.norm_mean, cfg.lower_bounding,
            )
            self.quantizers[index] = quantizer
        quantizer = self.quantizers[index]

        words: List[NDArray[np.int64]] = []
        for i, sample in enumerate(samples):
            for d, series in enumerate(sample.series):
                if len(series) >= window_length:
                    seq = quantizer.transform_windowing_int(series, cfg.word_length)
                    words.append(np.asarray(seq, dtype=np.int64))
                else:
                    logger.debug(
                        f"Sample {i} variate {d}: length {len(series)} "
                        f"shorter than window {window_length}"
                    )
                    words.append(np.empty(0, dtype=np.int64))
        return words
