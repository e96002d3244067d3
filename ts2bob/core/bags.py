"""
Bag-of-bigrams construction.

Turns the word sequences of every sample into a sparse histogram of unigram
and bigram features. A bigram pairs the word at position ``p`` with the word
at ``p - window_length``, i.e. two adjacent non-overlapping windows.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Hashable, List, Sequence

from .dictionary import FeatureDictionary, bigram_key, unigram_key
from .words import Words, word_mask
from ..timeseries import MultivariateSample

logger = logging.getLogger(__name__)


@dataclass
class BagOfBigrams:
    """Sparse feature id -> occurrence count histogram of one sample."""
    label: Hashable
    counts: Dict[int, int] = field(default_factory=dict)

    def add(self, feature_id: int, n: int = 1) -> None:
        self.counts[feature_id] = self.counts.get(feature_id, 0) + n

    def __len__(self) -> int:
        return len(self.counts)


def build_bags(
    words: Words,
    samples: Sequence[MultivariateSample],
    dimensionality: int,
    word_length: int,
    window_lengths: Sequence[int],
    alphabet_size: int,
    dictionary: FeatureDictionary,
    grow: bool = True,
) -> List[BagOfBigrams]:
    """Create one bag of unigrams and bigrams per sample.

    Parameters
    ----------
    words : list
        Output of :meth:`WordExtractor.extract`.
    samples : sequence of MultivariateSample
        Samples in the order used for extraction (labels are taken from here).
    dimensionality : int
        Variates per sample.
    word_length : int
        Target word length; words are masked down to it and window lengths
        shorter than it are skipped.
    window_lengths : sequence of int
    alphabet_size : int
    dictionary : FeatureDictionary
        Mutated when ``grow`` is True. Not safe for concurrent use.
    grow : bool
        If False, keys missing from ``dictionary`` are skipped instead of
        inserted (used for unseen samples).

    Returns
    -------
    bags : list of BagOfBigrams
        One bag per sample, possibly empty.
    """
    mask = word_mask(alphabet_size, word_length)
    get_id = dictionary.lookup_or_insert if grow else dictionary.lookup

    bags = []
    for i, sample in enumerate(samples):
        bag = BagOfBigrams(label=sample.label)
        offset = i * dimensionality

        for w, window_length in enumerate(window_lengths):
            if window_length < word_length:
                continue
            for d in range(dimensionality):
                seq = words[w][offset + d]
                masked = [int(word) & mask for word in seq]
                for p, word in enumerate(masked):
                    feature_id = get_id(unigram_key(w, d, word))
                    if feature_id:
                        bag.add(feature_id)

                    if p - window_length >= 0:
                        feature_id = get_id(bigram_key(w, d, masked[p - window_length], word))
                        if feature_id:
                            bag.add(feature_id)

        bags.append(bag)

    logger.info(f"Built {len(bags)} bags, dictionary holds {dictionary.raw_size} features")
    return bags
