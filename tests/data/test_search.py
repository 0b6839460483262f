"""Tests for the cascading item search engine."""

import asyncio

import pytest

from xiv_helper.data import (
    CancellationToken,
    CatalogProviderError,
    CorpusCache,
    InMemoryCatalog,
    ItemRecord,
    ItemSearchEngine,
    SearchConfig,
    SearchStatus,
)
from xiv_helper.data.models import FIELD_LEVEL
from xiv_helper.data.search import (
    ExactPrimaryStage,
    FuzzyPrimaryStage,
    SearchContext,
    StageSupport,
    build_query,
)

from tests.conftest import OTHER_NAMES, TW_NAMES


def _ids(response):
    return [result.item_id for result in response.results]


class FailingLanguageCatalog(InMemoryCatalog):
    """Raises a provider error for one language."""

    def __init__(self, *args, failing_language, **kwargs):
        super().__init__(*args, **kwargs)
        self.failing_language = failing_language

    async def exact_search(self, tokens, language, fuzzy=False):
        if language == self.failing_language:
            raise CatalogProviderError("Catalog API error (503).", status_code=503)
        return await super().exact_search(tokens, language, fuzzy)


class FailingLevelsCatalog(InMemoryCatalog):
    async def batch_lookup_by_ids(self, ids, field):
        if field == FIELD_LEVEL:
            raise RuntimeError("ilvls unavailable")
        return await super().batch_lookup_by_ids(ids, field)


class CancellingCatalog(InMemoryCatalog):
    """Cancels the caller's token while the first search is in flight."""

    token = None

    async def exact_search(self, tokens, language, fuzzy=False):
        self.token.cancel()
        return await super().exact_search(tokens, language, fuzzy)


class GatedCatalog(InMemoryCatalog):
    """Holds the first search until ``gate`` is set."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.gate = asyncio.Event()
        self.calls = 0

    async def exact_search(self, tokens, language, fuzzy=False):
        self.calls += 1
        if self.calls == 1:
            await self.gate.wait()
        return await super().exact_search(tokens, language, fuzzy)


class RenamingAlternateCatalog:
    """Simplified catalog whose names change on every snapshot."""

    def __init__(self):
        self.snapshots = 0

    async def simplified_snapshot(self):
        self.snapshots += 1
        return [ItemRecord(id=7, name=f"神秘材料{self.snapshots}", language="zh")]


def _names():
    return {"tw": TW_NAMES, **OTHER_NAMES}


class TestCascade:
    @pytest.mark.asyncio
    async def test_substring_returns_every_containing_name(self, engine):
        response = await engine.search("地圖")

        assert response.status == SearchStatus.OK
        assert _ids(response) == [2, 1]
        assert not response.used_script_conversion
        assert not response.used_alternate_catalog

    @pytest.mark.asyncio
    async def test_exact_results_are_exactly_the_substring_matches(self, engine):
        response = await engine.search("金")

        expected = {item_id for item_id, name in TW_NAMES.items() if "金" in name}
        assert set(_ids(response)) == expected

    @pytest.mark.asyncio
    async def test_sorted_tradable_then_level_then_id(self, engine):
        response = await engine.search("金")

        assert _ids(response) == [3, 6, 4]
        assert response.results[0].level == 560
        assert response.results[-1].tradable is False

    @pytest.mark.asyncio
    async def test_fuzzy_stage_keeps_character_order(self, engine):
        response = await engine.search("精金 指環")

        # 鉍金精準指環 has 金 before 精 and must not match
        assert _ids(response) == [6]

    @pytest.mark.asyncio
    async def test_other_language_match_shows_primary_name(self, engine):
        response = await engine.search("精金锭")

        assert _ids(response) == [3]
        result = response.results[0]
        assert result.name == "精金錠"
        assert result.search_language_name == "精金锭"
        assert not response.used_script_conversion

    @pytest.mark.asyncio
    async def test_script_converted_retry(self, engine):
        response = await engine.search("远古地图")

        assert _ids(response) == [1]
        assert response.used_script_conversion
        assert response.converted_text == "遠古地圖"
        assert not response.used_alternate_catalog

    @pytest.mark.asyncio
    async def test_alternate_catalog(self, engine):
        response = await engine.search("神秘材料")

        assert _ids(response) == [7]
        assert response.results[0].name == "奇異素材"
        assert response.used_alternate_catalog
        assert response.used_script_conversion
        assert response.converted_text == "神秘材料"

    @pytest.mark.asyncio
    async def test_no_results(self, engine):
        response = await engine.search("不存在的東西")

        assert response.status == SearchStatus.OK
        assert response.results == []
        assert not response.used_alternate_catalog

    @pytest.mark.asyncio
    async def test_advanced_fuzzy_scans_corpus(self, engine):
        response = await engine.search("精金", fuzzy=True)

        assert _ids(response) == [3, 6]
        assert not response.used_script_conversion

    def test_stage_order(self, engine):
        assert [stage.name for stage in engine.stages] == [
            "exact",
            "fuzzy",
            "languages",
            "converted",
            "alternate",
        ]


class TestInputChecks:
    @pytest.mark.asyncio
    async def test_blank_input(self, engine):
        response = await engine.search("   ")
        assert response.status == SearchStatus.EMPTY_INPUT
        assert response.results == []

    @pytest.mark.asyncio
    async def test_non_chinese_input_rejected(self, engine):
        response = await engine.search("map")
        assert response.status == SearchStatus.NOT_CHINESE

    @pytest.mark.asyncio
    async def test_english_allowed_when_cjk_not_required(self, catalog):
        config = SearchConfig(require_cjk=False, fallback_languages=("zh", "en"))
        engine = ItemSearchEngine(catalog, config=config)

        response = await engine.search("map")

        assert _ids(response) == [2, 1]
        assert response.results[0].name == "鞣革地圖"
        assert response.results[0].search_language_name == "Leather Map"

    @pytest.mark.asyncio
    async def test_name_without_primary_translation(self, catalog):
        config = SearchConfig(require_cjk=False, fallback_languages=("en",))
        engine = ItemSearchEngine(catalog, config=config)

        response = await engine.search("box")

        assert _ids(response) == [10]
        assert response.results[0].name == "Mystery Box"
        assert response.results[0].search_language_name is None


class TestProviderFailures:
    @pytest.mark.asyncio
    async def test_primary_failure_falls_back_to_corpus(self, search_config):
        catalog = FailingLanguageCatalog(_names(), tradable_ids={1, 2}, failing_language="tw")
        engine = ItemSearchEngine(catalog, config=search_config)

        response = await engine.search("地圖")

        assert _ids(response) == [2, 1]

    @pytest.mark.asyncio
    async def test_failing_language_is_skipped(self, search_config):
        catalog = FailingLanguageCatalog(_names(), failing_language="zh")
        engine = ItemSearchEngine(catalog, config=search_config)

        response = await engine.search("精金锭")

        assert _ids(response) == [3]
        assert response.used_script_conversion
        assert response.converted_text == "精金錠"

    @pytest.mark.asyncio
    async def test_enrichment_failure_keeps_results(self, search_config):
        catalog = FailingLevelsCatalog(_names(), levels={3: 560})
        engine = ItemSearchEngine(catalog, config=search_config)

        response = await engine.search("精金錠")

        assert _ids(response) == [3]
        assert response.results[0].level is None


class TestCancellation:
    @pytest.mark.asyncio
    async def test_cancelled_before_start(self, engine):
        token = CancellationToken()
        token.cancel()

        response = await engine.search("地圖", token=token)

        assert response.status == SearchStatus.CANCELLED
        assert response.cancelled
        assert response.results == []

    @pytest.mark.asyncio
    async def test_cancelled_during_provider_call(self, search_config):
        catalog = CancellingCatalog(_names())
        catalog.token = CancellationToken()
        engine = ItemSearchEngine(catalog, config=search_config)

        response = await engine.search("地圖", token=catalog.token)

        assert response.status == SearchStatus.CANCELLED
        assert response.results == []

    @pytest.mark.asyncio
    async def test_overtaken_request_is_stale(self, search_config):
        catalog = GatedCatalog(_names())
        engine = ItemSearchEngine(catalog, config=search_config)

        first = asyncio.create_task(engine.search_latest("地圖"))
        await asyncio.sleep(0)
        second = await engine.search_latest("精金錠")
        catalog.gate.set()
        stale = await first

        assert second.status == SearchStatus.OK
        assert second.request_id == 2
        assert _ids(second) == [3]
        assert stale.status == SearchStatus.STALE
        assert stale.request_id == 1
        assert stale.results == []


class TestOcr:
    @pytest.mark.asyncio
    async def test_exact_name_scores_one(self, engine):
        response = await engine.search_ocr("火")

        assert response.is_ocr
        assert _ids(response) == [8, 9]
        assert response.results[0].score == 1.0
        assert response.results[1].score < response.results[0].score

    @pytest.mark.asyncio
    async def test_noise_is_removed_before_search(self, engine):
        response = await engine.search_ocr("遠古.地圖")

        assert _ids(response) == [1]
        assert response.original_text == "遠古.地圖"

    @pytest.mark.asyncio
    async def test_misread_character_found_by_similarity(self, engine):
        response = await engine.search_ocr("遠古池圖")

        assert _ids(response) == [1]
        expected = 0.4 * (1 / 3) + 0.4 * 0.75 + 0.2 * 0.75
        assert response.results[0].score == pytest.approx(expected)

    @pytest.mark.asyncio
    async def test_low_confidence_applies_bonus(self, engine):
        plain = await engine.search_ocr("遠古池圖")
        boosted = await engine.search_ocr("遠古池圖", confidence=30)

        # below the 0.7 bonus threshold, so unchanged
        assert boosted.results[0].score == pytest.approx(plain.results[0].score)

    @pytest.mark.asyncio
    async def test_blank_ocr_text(self, engine):
        response = await engine.search_ocr(" .,- ")
        assert response.status == SearchStatus.EMPTY_INPUT
        assert response.is_ocr

    @pytest.mark.asyncio
    async def test_quotes_only_ocr_text_is_empty(self, engine):
        for text in ('""', "''", "「」", ' " '):
            response = await engine.search_ocr(text)

            assert response.status == SearchStatus.EMPTY_INPUT
            assert response.results == []

    @pytest.mark.asyncio
    async def test_similarity_queries_share_one_id_map(self, search_config):
        catalog = InMemoryCatalog({"tw": TW_NAMES})
        snapshots = []

        async def snapshot():
            snapshots.append(1)
            return await catalog.full_corpus_snapshot()

        engine = ItemSearchEngine(catalog, cache=CorpusCache(snapshot), config=search_config)

        first = await engine.search_ocr("遠古池圖")
        by_id = await engine.cache.records_by_id()
        second = await engine.search_ocr("鞣革池圖")

        assert _ids(first) == [1]
        assert _ids(second) == [2]
        assert await engine.cache.records_by_id() is by_id
        assert len(snapshots) == 1


class TestItemDetails:
    @pytest.mark.asyncio
    async def test_primary_name(self, engine):
        item = await engine.get_item(1)

        assert item.name == "遠古地圖"
        assert item.search_language_name is None
        assert item.tradable is True

    @pytest.mark.asyncio
    async def test_falls_back_to_other_language(self, engine):
        item = await engine.get_item(10)

        assert item.name == "Mystery Box"
        assert item.search_language_name == "Mystery Box"

    @pytest.mark.asyncio
    async def test_unknown_item(self, engine):
        assert await engine.get_item(999) is None
        assert await engine.get_item(0) is None

    @pytest.mark.asyncio
    async def test_simplified_name(self, engine):
        assert await engine.simplified_name(7) == "神秘材料"
        assert await engine.simplified_name(999) is None

    @pytest.mark.asyncio
    async def test_simplified_name_follows_reloaded_catalog(self, catalog, search_config):
        alternate = RenamingAlternateCatalog()
        engine = ItemSearchEngine(catalog, alternate=alternate, config=search_config)

        assert await engine.simplified_name(7) == "神秘材料1"
        engine.cache.invalidate()

        assert await engine.simplified_name(7) == "神秘材料2"
        assert alternate.snapshots == 2

    @pytest.mark.asyncio
    async def test_simplified_name_without_alternate_catalog(self, catalog, search_config):
        engine = ItemSearchEngine(catalog, config=search_config)
        assert await engine.simplified_name(7) is None


class TestStages:
    @pytest.mark.asyncio
    async def test_exact_stage_alone(self, catalog, search_config):
        support = StageSupport(catalog, CorpusCache(catalog.full_corpus_snapshot), search_config)
        ctx = SearchContext(query=build_query("地圖"), token=CancellationToken())

        results = await ExactPrimaryStage(support).attempt(ctx)

        assert [result.item_id for result in results] == [2, 1]

    @pytest.mark.asyncio
    async def test_fuzzy_stage_skips_single_token(self, catalog, search_config):
        support = StageSupport(catalog, CorpusCache(catalog.full_corpus_snapshot), search_config)
        ctx = SearchContext(query=build_query("精金"), token=CancellationToken())

        assert await FuzzyPrimaryStage(support).attempt(ctx) == []
