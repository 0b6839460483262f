"""Tests for the TTL cache and the single-flight corpus cache."""

import asyncio
from unittest.mock import patch

import pytest

from xiv_helper.data import CorpusCache, ItemRecord, TTLCache


RECORDS = [ItemRecord(id=1, name="遠古地圖"), ItemRecord(id=2, name="鞣革地圖")]


class CountingLoader:
    def __init__(self, records=RECORDS, fail_times=0):
        self.records = records
        self.fail_times = fail_times
        self.calls = 0
        self.gate = asyncio.Event()
        self.gate.set()

    async def __call__(self):
        self.calls += 1
        await self.gate.wait()
        if self.calls <= self.fail_times:
            raise RuntimeError("snapshot failed")
        return list(self.records)


class TestTTLCache:
    def test_get_and_set(self):
        cache = TTLCache(ttl_s=60)
        cache.set(("tw", (1, 2)), {1: "遠古地圖"})

        assert cache.get(("tw", (1, 2))) == {1: "遠古地圖"}
        assert cache.get(("tw", (3,))) is None
        assert len(cache) == 1

    def test_expired_entry_is_dropped(self):
        cache = TTLCache(ttl_s=10)
        with patch("xiv_helper.data.cache.monotonic", return_value=100.0):
            cache.set("key", "value")
        with patch("xiv_helper.data.cache.monotonic", return_value=111.0):
            assert cache.get("key") is None
        assert len(cache) == 0

    def test_zero_ttl_stores_nothing(self):
        cache = TTLCache(ttl_s=0)
        cache.set("key", "value")
        assert cache.get("key") is None

    def test_clear(self):
        cache = TTLCache(ttl_s=60)
        cache.set("key", "value")
        cache.clear()
        assert len(cache) == 0


class TestCorpusCache:
    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_load(self):
        loader = CountingLoader()
        loader.gate.clear()
        cache = CorpusCache(loader)

        pending = asyncio.gather(cache.corpus(), cache.corpus(), cache.corpus())
        await asyncio.sleep(0)
        loader.gate.set()
        results = await pending

        assert loader.calls == 1
        assert all(result == RECORDS for result in results)
        assert cache.is_loaded()

    @pytest.mark.asyncio
    async def test_failed_load_is_not_published(self):
        loader = CountingLoader(fail_times=1)
        cache = CorpusCache(loader)

        with pytest.raises(RuntimeError):
            await cache.corpus()
        assert not cache.is_loaded()

        assert await cache.corpus() == RECORDS
        assert loader.calls == 2

    @pytest.mark.asyncio
    async def test_invalidate_reloads(self):
        loader = CountingLoader()
        cache = CorpusCache(loader)

        await cache.corpus()
        cache.invalidate()
        assert not cache.is_loaded()
        await cache.corpus()

        assert loader.calls == 2

    @pytest.mark.asyncio
    async def test_reset_cancels_in_flight_load(self):
        loader = CountingLoader()
        loader.gate.clear()
        cache = CorpusCache(loader)

        waiter = asyncio.create_task(cache.corpus())
        await asyncio.sleep(0)
        cache.reset()

        with pytest.raises(asyncio.CancelledError):
            await waiter
        assert not cache.is_loaded()

    @pytest.mark.asyncio
    async def test_cancelled_caller_does_not_abort_shared_load(self):
        loader = CountingLoader()
        loader.gate.clear()
        cache = CorpusCache(loader)

        first = asyncio.create_task(cache.corpus())
        second = asyncio.create_task(cache.corpus())
        await asyncio.sleep(0)
        first.cancel()
        loader.gate.set()

        assert await second == RECORDS
        with pytest.raises(asyncio.CancelledError):
            await first
        assert loader.calls == 1

    @pytest.mark.asyncio
    async def test_index_built_once_from_corpus(self):
        loader = CountingLoader()
        cache = CorpusCache(loader, ngram_size=2)

        index, again = await asyncio.gather(cache.index(), cache.index())

        assert index is again
        assert index.candidates("地圖") == [1, 2]
        assert loader.calls == 1
        assert cache.is_loaded("index")

    @pytest.mark.asyncio
    async def test_simplified_slot(self):
        simplified = CountingLoader(records=[ItemRecord(id=7, name="神秘材料", language="zh")])
        cache = CorpusCache(CountingLoader(), simplified)

        assert cache.has_simplified
        assert [record.id for record in await cache.simplified()] == [7]

    @pytest.mark.asyncio
    async def test_simplified_without_loader(self):
        cache = CorpusCache(CountingLoader())

        assert not cache.has_simplified
        assert await cache.simplified() == []

    @pytest.mark.asyncio
    async def test_records_by_id_built_once_per_snapshot(self):
        loader = CountingLoader()
        cache = CorpusCache(loader)

        by_id, again = await asyncio.gather(cache.records_by_id(), cache.records_by_id())

        assert by_id is again
        assert by_id == {1: RECORDS[0], 2: RECORDS[1]}
        assert loader.calls == 1
        assert cache.is_loaded("records_by_id")

    @pytest.mark.asyncio
    async def test_invalidate_drops_derived_id_maps(self):
        corpus = CountingLoader()
        simplified = CountingLoader(records=[ItemRecord(id=7, name="神秘材料", language="zh")])
        cache = CorpusCache(corpus, simplified)

        assert await cache.simplified_names() == {7: "神秘材料"}
        first = await cache.records_by_id()

        cache.invalidate()
        simplified.records = [ItemRecord(id=7, name="神祕材料", language="zh")]
        corpus.records = [ItemRecord(id=3, name="精金錠")]

        assert not cache.is_loaded("simplified_by_id")
        assert await cache.simplified_names() == {7: "神祕材料"}
        assert list(await cache.records_by_id()) == [3]
        assert await cache.records_by_id() is not first
        assert simplified.calls == 2
        assert corpus.calls == 2

    @pytest.mark.asyncio
    async def test_map_from_superseded_load_is_not_published(self):
        loader = CountingLoader()
        loader.gate.clear()
        cache = CorpusCache(loader)

        stale = asyncio.create_task(cache.records_by_id())
        await asyncio.sleep(0)
        cache.invalidate()
        loader.gate.set()
        await stale

        assert not cache.is_loaded("records_by_id")
