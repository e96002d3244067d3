"""
Feature dictionary: symbolic feature keys to compact integer ids.

Two id spaces are kept in separate maps. ``raw_ids`` assigns an id to every
feature key seen while building bags. ``compacted_ids`` is filled only by
:meth:`FeatureDictionary.compact` and maps the raw ids that survived feature
selection onto a dense range. Id 0 is never assigned in either space.
"""

from __future__ import annotations

import logging
from typing import Dict, Sequence, TYPE_CHECKING

if TYPE_CHECKING:
    from .bags import BagOfBigrams

logger = logging.getLogger(__name__)


def unigram_key(window_index: int, dim: int, word: int) -> str:
    return f"{window_index}_{dim}_{word}"


def bigram_key(window_index: int, dim: int, prev_word: int, word: int) -> str:
    return f"{unigram_key(window_index, dim, prev_word)}_{unigram_key(window_index, dim, word)}"


class FeatureDictionary:
    """Maps feature keys to ids, assigned in first-seen order from 1."""

    def __init__(self):
        self.raw_ids: Dict[str, int] = {}
        self.compacted_ids: Dict[int, int] = {}
        self._compacted = False

    def reset(self) -> None:
        self.raw_ids = {}
        self.compacted_ids = {}
        self._compacted = False

    def lookup_or_insert(self, key: str) -> int:
        """Return the raw id of ``key``, assigning the next id if unseen."""
        feature_id = self.raw_ids.get(key)
        if feature_id is None:
            feature_id = len(self.raw_ids) + 1
            self.raw_ids[key] = feature_id
        return feature_id

    def lookup(self, key: str) -> int:
        """Return the raw id of ``key`` or 0 if unknown. Never inserts."""
        return self.raw_ids.get(key, 0)

    def _compacted_id(self, raw_id: int) -> int:
        feature_id = self.compacted_ids.get(raw_id)
        if feature_id is None:
            feature_id = len(self.compacted_ids) + 1
            self.compacted_ids[raw_id] = feature_id
        return feature_id

    @property
    def raw_size(self) -> int:
        return len(self.raw_ids)

    @property
    def compacted_size(self) -> int:
        return len(self.compacted_ids)

    @property
    def is_compacted(self) -> bool:
        return self._compacted

    def size(self) -> int:
        """Feature space size: compacted after compact(), raw before."""
        if self._compacted:
            return len(self.compacted_ids)
        return len(self.raw_ids)

    def __len__(self) -> int:
        return self.size()

    def compact(self, bags: Sequence[BagOfBigrams]) -> None:
        """Remap surviving (non-zero) features of ``bags`` to compacted ids.

        Bags are rewritten in place; zero-count entries are dropped. New ids
        are handed out in encounter order over bags and their entries.
        """
        for bag in bags:
            bag.counts = {
                self._compacted_id(raw_id): count
                for raw_id, count in bag.counts.items()
                if count > 0
            }
        self._compacted = True
        logger.info(
            f"Compacted dictionary: {self.raw_size} raw features -> "
            f"{self.compacted_size} compacted"
        )

    def project(self, bags: Sequence[BagOfBigrams]) -> None:
        """Remap ``bags`` holding raw ids into the existing compacted space.

        Used for samples seen after :meth:`compact`. Features with no
        compacted id are dropped and the compacted space does not grow.
        """
        if not self._compacted:
            raise ValueError("Dictionary has not been compacted")
        for bag in bags:
            bag.counts = {
                self.compacted_ids[raw_id]: count
                for raw_id, count in bag.counts.items()
                if count > 0 and raw_id in self.compacted_ids
            }
