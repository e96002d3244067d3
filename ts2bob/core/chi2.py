"""
Chi-squared feature selection over bags of bigrams.

Adapted from the univariate chi2 test in scikit-learn
(sklearn/feature_selection/_univariate_selection.py), with one change: the
observed frequencies are *presence* counts, i.e. the number of samples of a
class that contain a feature at least once. The test therefore asks whether a
feature occurs in a class more or less often than chance, not how many times
it occurs.
"""

from __future__ import annotations

import logging
from typing import Dict, Hashable, List, Optional, Sequence, Tuple

import numpy as np
from numpy.typing import NDArray
from scipy import sparse

from .bags import BagOfBigrams
from .dictionary import FeatureDictionary
from ..timeseries import label_key

logger = logging.getLogger(__name__)


def presence_matrix(bags: Sequence[BagOfBigrams], n_features: Optional[int] = None) -> sparse.csr_matrix:
    """Binary (n_samples, n_features + 1) matrix; column ``f`` is feature id ``f``."""
    rows, cols = [], []
    for i, bag in enumerate(bags):
        for feature_id, count in bag.counts.items():
            if count > 0:
                rows.append(i)
                cols.append(feature_id)

    if n_features is None:
        n_features = max(cols, default=0)
    data = np.ones(len(rows), dtype=np.float64)
    return sparse.csr_matrix((data, (rows, cols)), shape=(len(bags), n_features + 1))


def class_indicator(bags: Sequence[BagOfBigrams]) -> Tuple[sparse.csr_matrix, List[Hashable]]:
    """One-hot (n_samples, n_classes) label matrix and the classes in first-seen order."""
    index: Dict[Hashable, int] = {}
    classes: List[Hashable] = []
    cols = []
    for bag in bags:
        key = label_key(bag.label)
        if key not in index:
            index[key] = len(classes)
            classes.append(bag.label)
        cols.append(index[key])
    data = np.ones(len(bags), dtype=np.float64)
    Y = sparse.csr_matrix((data, (np.arange(len(bags)), cols)), shape=(len(bags), len(classes)))
    return Y, classes


def chi_squared_scores(bags: Sequence[BagOfBigrams], chi_limit: float,
                       n_features: Optional[int] = None) -> NDArray[np.float64]:
    """Best per-class chi statistic of every feature id.

    For each class ``c`` and feature ``f`` present in at least one sample::

        expected = P(c) * presence(f)
        chi      = (observed(c, f) - expected) ** 2 / expected

    The score of ``f`` is the maximum ``chi`` over classes that reach
    ``chi_limit``; features with no such class score 0. Pairs with
    ``expected == 0`` are skipped.

    Returns
    -------
    scores : array (n_features + 1,)
        Indexed by feature id; entry 0 is unused.
    """
    if len(bags) == 0:
        return np.zeros((n_features or 0) + 1)

    X = presence_matrix(bags, n_features)
    Y, classes = class_indicator(bags)

    presence = np.asarray(X.sum(axis=0)).ravel()
    present = presence.nonzero()[0]
    class_prob = np.asarray(Y.sum(axis=0)).ravel() / len(bags)

    # only columns of features that occur: (n_classes, n_present)
    observed = (Y.T @ X[:, present]).toarray()
    expected = np.outer(class_prob, presence[present])
    chi = np.zeros_like(expected)
    valid = expected > 0
    chi[valid] = (observed[valid] - expected[valid]) ** 2 / expected[valid]
    chi[chi < chi_limit] = 0.0

    scores = np.zeros(X.shape[1])
    if len(present):
        scores[present] = chi.max(axis=0)
    logger.debug(f"Chi-squared over {len(classes)} classes, {X.shape[1] - 1} features")
    return scores


def filter_chi_squared(bags: Sequence[BagOfBigrams], chi_limit: float,
                       dictionary: FeatureDictionary) -> NDArray[np.float64]:
    """Zero non-discriminative features in ``bags`` and compact ``dictionary``.

    Every entry whose feature scores below ``chi_limit`` has its count set to
    0; :meth:`FeatureDictionary.compact` then drops those entries and remaps
    the rest. Returns the scores indexed by raw feature id.
    """
    scores = chi_squared_scores(bags, chi_limit, dictionary.raw_size)

    removed = 0
    for bag in bags:
        for feature_id in bag.counts:
            if scores[feature_id] < chi_limit:
                bag.counts[feature_id] = 0
                removed += 1

    logger.info(f"Chi-squared filter (limit={chi_limit}): zeroed {removed} entries")

    dictionary.compact(bags)
    return scores
