"""
WEASEL+MUSE style bag-of-bigrams feature transform.

Clean fit/transform API over the extraction stages:

1. word extraction, parallel over window lengths
2. bag-of-bigrams construction (single-threaded, assigns feature ids)
3. chi-squared feature selection
4. dictionary compaction

Reference: Schäfer, P., Leser, U.: Multivariate Time Series Classification
with WEASEL+MUSE. arXiv 2017, http://arxiv.org/abs/1711.11343
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

import numpy as np
from numpy.typing import NDArray
from scipy import sparse

from .config import MuseConfig
from .core.bags import BagOfBigrams, build_bags
from .core.chi2 import filter_chi_squared
from .core.dictionary import FeatureDictionary
from .core.words import QuantizerFactory, WordExtractor
from .timeseries import MultivariateSample, check_dimensions

logger = logging.getLogger(__name__)


class MUSE:
    """Multivariate symbolic bag-of-bigrams feature extractor.

    Parameters
    ----------
    config : MuseConfig
    quantizer_factory : callable
        ``quantizer_factory(histogram_type)`` returns an unfitted quantizer
        implementing ``fit_windowing`` and ``transform_windowing_int``.
    n_jobs : int, optional
        Worker count for word extraction. Defaults to ``config.workers``.

    Examples
    --------
    >>> muse = MUSE(MuseConfig(word_length=4, alphabet_size=4,
    ...                        window_lengths=(8, 12, 16)), MySFAQuantizer)
    >>> bags = muse.fit_transform(train_samples)
    >>> X, y = muse.to_sparse(bags)
    >>> X_test, y_test = muse.to_sparse(muse.transform(test_samples))
    """

    def __init__(self, config: MuseConfig, quantizer_factory: QuantizerFactory,
                 n_jobs: Optional[int] = None):
        self.config = config
        self.quantizer_factory = quantizer_factory
        self.n_jobs = n_jobs
        self.extractor = WordExtractor(config, quantizer_factory, n_jobs=n_jobs)
        self.dictionary = FeatureDictionary()
        self.dimensionality_: Optional[int] = None
        self.word_length_: Optional[int] = None
        self.scores_: Optional[NDArray[np.float64]] = None

    def reset(self) -> None:
        """Forget fitted quantizers and both dictionary id spaces."""
        self.extractor.reset()
        self.dictionary.reset()
        self.dimensionality_ = None
        self.word_length_ = None
        self.scores_ = None

    @property
    def n_features(self) -> int:
        return self.dictionary.size()

    def _word_length(self, word_length: Optional[int]) -> int:
        if word_length is None:
            return self.config.word_length
        if not 1 <= word_length <= self.config.word_length:
            raise ValueError(
                f"word_length must be in [1, {self.config.word_length}], got {word_length}"
            )
        return word_length

    def fit_transform(self, samples: Sequence[MultivariateSample],
                      word_length: Optional[int] = None) -> List[BagOfBigrams]:
        """Fit quantizers and dictionary on ``samples`` and return their bags.

        ``word_length`` (default ``config.word_length``) selects the masked
        word length used for features. Bags hold compacted feature ids.
        Every call is a new run with fresh quantizers and dictionary; the
        fitted state is only replaced once the run has succeeded.
        """
        dimensionality = check_dimensions(samples)
        word_length = self._word_length(word_length)

        extractor = WordExtractor(self.config, self.quantizer_factory, n_jobs=self.n_jobs)
        dictionary = FeatureDictionary()

        words = extractor.extract(samples)
        bags = build_bags(
            words, samples, dimensionality, word_length,
            self.config.window_lengths, self.config.alphabet_size, dictionary,
        )
        scores = filter_chi_squared(bags, self.config.chi_limit, dictionary)

        self.extractor = extractor
        self.dictionary = dictionary
        self.scores_ = scores
        self.dimensionality_ = dimensionality
        self.word_length_ = word_length
        logger.info(f"Fitted {len(bags)} samples: {self.n_features} features")
        return bags

    def fit(self, samples: Sequence[MultivariateSample],
            word_length: Optional[int] = None) -> MUSE:
        self.fit_transform(samples, word_length)
        return self

    def transform(self, samples: Sequence[MultivariateSample]) -> List[BagOfBigrams]:
        """Bags of unseen samples in the fitted (compacted) feature space."""
        if self.dimensionality_ is None:
            raise ValueError("Must call fit() or fit_transform() first")
        check_dimensions(samples, self.dimensionality_)

        words = self.extractor.extract(samples)
        bags = build_bags(
            words, samples, self.dimensionality_, self.word_length_,
            self.config.window_lengths, self.config.alphabet_size, self.dictionary,
            grow=False,
        )
        self.dictionary.project(bags)
        return bags

    def to_sparse(self, bags: Sequence[BagOfBigrams],
                  n_features: Optional[int] = None) -> Tuple[sparse.csr_matrix, NDArray]:
        """Stack bags into a (n_samples, n_features) CSR matrix and label array.

        Column ``j`` holds the count of feature id ``j + 1``.
        """
        if n_features is None:
            n_features = self.n_features
        return bags_to_sparse(bags, n_features)


def bags_to_sparse(bags: Sequence[BagOfBigrams],
                   n_features: int) -> Tuple[sparse.csr_matrix, NDArray]:
    rows, cols, data = [], [], []
    for i, bag in enumerate(bags):
        for feature_id, count in bag.counts.items():
            if count > 0:
                if feature_id > n_features:
                    raise ValueError(
                        f"Feature id {feature_id} outside feature space of size {n_features}"
                    )
                rows.append(i)
                cols.append(feature_id - 1)
                data.append(count)

    X = sparse.csr_matrix(
        (np.asarray(data, dtype=np.int64), (rows, cols)),
        shape=(len(bags), n_features),
    )
    y = np.array([bag.label for bag in bags])
    return X, y
