"""Caches owned by a search engine instance.

``TTLCache`` keeps short-lived provider lookups. ``CorpusCache`` owns the
expensive full-corpus snapshot, its n-gram index and the simplified-script
snapshot; each is loaded at most once at a time and published only when the
load succeeds.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from functools import partial
import logging
from threading import Lock
from time import monotonic
from typing import Any, Awaitable, Callable, Hashable

from .models import ItemRecord
from .ngram_index import NgramIndex

logger = logging.getLogger(__name__)

CorpusLoader = Callable[[], Awaitable[list[ItemRecord]]]

_CORPUS = "corpus"
_INDEX = "index"
_SIMPLIFIED = "simplified"
_RECORDS_BY_ID = "records_by_id"
_SIMPLIFIED_BY_ID = "simplified_by_id"


@dataclass(frozen=True)
class CacheEntry:
    value: Any
    expires_at: float


class TTLCache:
    """Thread-safe TTL cache keyed by any hashable value."""

    def __init__(self, ttl_s: float) -> None:
        self._ttl_s = max(ttl_s, 0.0)
        self._entries: dict[Hashable, CacheEntry] = {}
        self._lock = Lock()

    def get(self, key: Hashable) -> Any | None:
        now = monotonic()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.expires_at <= now:
                del self._entries[key]
                return None
            return entry.value

    def set(self, key: Hashable, value: Any) -> None:
        if self._ttl_s == 0:
            return
        with self._lock:
            self._entries[key] = CacheEntry(value=value, expires_at=monotonic() + self._ttl_s)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


class CorpusCache:
    """Single-flight loader for the corpus, the simplified catalog and their derived lookups.

    The n-gram index and the id maps are slots of their own, built from the
    snapshot they derive from and dropped with it on ``invalidate``.

    Concurrent callers share one ``asyncio.Task`` per slot and await it through
    ``asyncio.shield`` so one caller being cancelled does not abort the load
    for the others. Failed loads are never published; the next call retries.
    """

    def __init__(
        self,
        corpus_loader: CorpusLoader,
        simplified_loader: CorpusLoader | None = None,
        *,
        ngram_size: int = 2,
    ) -> None:
        self._loaders: dict[str, Callable[[], Awaitable[Any]]] = {
            _CORPUS: corpus_loader,
            _INDEX: self._build_index,
            _RECORDS_BY_ID: self._build_records_by_id,
        }
        if simplified_loader is not None:
            self._loaders[_SIMPLIFIED] = simplified_loader
            self._loaders[_SIMPLIFIED_BY_ID] = self._build_simplified_by_id
        self._ngram_size = ngram_size
        self._values: dict[str, Any] = {}
        self._tasks: dict[str, asyncio.Task] = {}
        self._generation = 0

    @property
    def has_simplified(self) -> bool:
        return _SIMPLIFIED in self._loaders

    def is_loaded(self, slot: str = _CORPUS) -> bool:
        return slot in self._values

    async def corpus(self) -> list[ItemRecord]:
        return await self._get(_CORPUS)

    async def index(self) -> NgramIndex:
        return await self._get(_INDEX)

    async def simplified(self) -> list[ItemRecord]:
        if not self.has_simplified:
            return []
        return await self._get(_SIMPLIFIED)

    async def records_by_id(self) -> dict[int, ItemRecord]:
        return await self._get(_RECORDS_BY_ID)

    async def simplified_names(self) -> dict[int, str]:
        if not self.has_simplified:
            return {}
        return await self._get(_SIMPLIFIED_BY_ID)

    def invalidate(self) -> None:
        """Forget published values. In-flight loads finish but are not kept."""
        self._generation += 1
        self._values.clear()
        self._tasks.clear()

    def reset(self) -> None:
        """Forget everything and cancel in-flight loads."""
        tasks = list(self._tasks.values())
        self.invalidate()
        for task in tasks:
            task.cancel()

    async def _get(self, slot: str) -> Any:
        if slot in self._values:
            return self._values[slot]
        task = self._tasks.get(slot)
        if task is None:
            logger.info("[Cache] Loading %s", slot)
            task = asyncio.create_task(self._loaders[slot]())
            task.add_done_callback(partial(self._publish, slot, self._generation))
            self._tasks[slot] = task
        return await asyncio.shield(task)

    def _publish(self, slot: str, generation: int, task: asyncio.Task) -> None:
        if self._tasks.get(slot) is task:
            del self._tasks[slot]
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.warning("[Cache] Loading %s failed: %s", slot, exc)
            return
        if generation != self._generation:
            return
        self._values[slot] = task.result()

    async def _build_index(self) -> NgramIndex:
        records = await self.corpus()
        return NgramIndex.build(records, self._ngram_size)

    async def _build_records_by_id(self) -> dict[int, ItemRecord]:
        return {record.id: record for record in await self.corpus()}

    async def _build_simplified_by_id(self) -> dict[int, str]:
        return {record.id: record.name for record in await self.simplified()}
