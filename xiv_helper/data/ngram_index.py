"""Character n-gram inverted index used to pick OCR candidates."""

from __future__ import annotations

from collections import defaultdict
import logging
from typing import Iterable

from .fuzzy import ngrams
from .models import ItemRecord

logger = logging.getLogger(__name__)


class NgramIndex:
    """Immutable map of n-gram window -> item ids.

    Names shorter than ``n`` are indexed under the whole name so single
    character items stay reachable.
    """

    def __init__(self, postings: dict[str, frozenset[int]], n: int = 2) -> None:
        self._postings = postings
        self._n = n

    @classmethod
    def build(cls, records: Iterable[ItemRecord], n: int = 2) -> "NgramIndex":
        if n < 1:
            raise ValueError("n-gram size must be at least 1")
        buckets: dict[str, set[int]] = defaultdict(set)
        count = 0
        for record in records:
            if not record.name:
                continue
            count += 1
            for window in cls._windows(record.name, n):
                buckets[window].add(record.id)
        postings = {window: frozenset(ids) for window, ids in buckets.items()}
        logger.info("[NgramIndex] Indexed %s names into %s windows (n=%s)", count, len(postings), n)
        return cls(postings, n)

    @staticmethod
    def _windows(text: str, n: int) -> list[str]:
        if len(text) < n:
            return [text]
        return ngrams(text, n)

    @property
    def n(self) -> int:
        return self._n

    def __len__(self) -> int:
        return len(self._postings)

    def postings(self, window: str) -> frozenset[int]:
        return self._postings.get(window, frozenset())

    def query(self, text: str) -> dict[int, int]:
        """Return item id -> number of shared windows (always >= 1)."""
        counts: dict[int, int] = defaultdict(int)
        if not text:
            return {}
        if len(text) < self._n:
            for window, ids in self._postings.items():
                if text in window:
                    for item_id in ids:
                        counts[item_id] += 1
            return dict(counts)
        for window in set(ngrams(text, self._n)):
            for item_id in self._postings.get(window, ()):
                counts[item_id] += 1
        return dict(counts)

    def candidates(self, text: str) -> list[int]:
        counts = self.query(text)
        return sorted(counts, key=lambda item_id: (-counts[item_id], item_id))
