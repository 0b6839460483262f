"""Cascading item-name search.

The cascade is an ordered list of stages. Each stage gets the request
context and returns results or an empty list; the first non-empty list
wins::

    exact (tw) -> fuzzy (tw, multi-word only) -> other languages
        -> script-converted retry -> simplified alternate catalog

OCR lookups use a shorter path: an exact primary search whose hits are
scored, then n-gram candidates from the full corpus scored with
``ocr_similarity``.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, replace
import logging
from typing import Any, Awaitable, Callable, Sequence, TypeVar

from .cache import CorpusCache
from .cancellation import CancellationToken, OperationCancelled
from .config import DETAIL_FALLBACK_LANGUAGES, SearchConfig
from .fuzzy import OcrSearchParams, contains_all_tokens, matches_all_tokens, ocr_similarity
from .models import (
    FIELD_LEVEL,
    FIELD_PATCH,
    FIELD_TRADABLE,
    ItemRecord,
    SearchQuery,
    SearchResponse,
    SearchResult,
    SearchStatus,
)
from .normalizer import (
    ScriptDirection,
    clean_name,
    contains_cjk,
    convert_script,
    is_traditional,
    normalize,
    normalize_ocr_text,
    opposite_script,
    tokenize,
)
from .providers import AlternateCatalogProvider, CandidateProvider

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RequestTracker:
    """Hands out increasing request ids; only the newest one is current."""

    def __init__(self) -> None:
        self._latest = 0

    def begin(self) -> int:
        self._latest += 1
        return self._latest

    @property
    def latest(self) -> int:
        return self._latest

    def is_current(self, request_id: int) -> bool:
        return request_id == self._latest


@dataclass
class SearchContext:
    query: SearchQuery
    token: CancellationToken
    used_script_conversion: bool = False
    converted_text: str | None = None
    used_alternate_catalog: bool = False


def build_query(text: str, fuzzy: bool = False) -> SearchQuery:
    normalized = normalize(text)
    return SearchQuery(raw=text, text=normalized, tokens=tuple(tokenize(normalized)), fuzzy=fuzzy)


def result_sort_key(result: SearchResult) -> tuple:
    """Tradable first, then known item level descending, then id descending."""
    return (
        not result.tradable,
        result.level is None,
        -(result.level or 0),
        -result.item_id,
    )


def ocr_sort_key(result: SearchResult) -> tuple:
    return (-(result.score or 0.0), *result_sort_key(result))


def result_from_record(record: ItemRecord, score: float | None = None) -> SearchResult:
    return SearchResult(
        item_id=record.id,
        name=record.name,
        tradable=record.tradable,
        level=record.level,
        patch=record.patch,
        score=score,
    )


class StageSupport:
    """Provider access shared by every stage."""

    def __init__(self, provider: CandidateProvider, cache: CorpusCache, config: SearchConfig) -> None:
        self.provider = provider
        self.cache = cache
        self.config = config

    @property
    def primary(self) -> str:
        return self.config.primary_language

    async def call(self, token: CancellationToken, fn: Callable[..., Awaitable[T]], *args: Any) -> T:
        token.raise_if_cancelled()
        result = await fn(*args)
        token.raise_if_cancelled()
        return result

    async def lookup(self, token: CancellationToken, ids: Sequence[int], field: str) -> dict[int, Any]:
        """Batch lookup that degrades to an empty mapping when the provider fails."""
        try:
            return await self.call(token, self.provider.batch_lookup_by_ids, list(ids), field)
        except OperationCancelled:
            raise
        except Exception as exc:
            logger.warning("[Search] Lookup of %s for %s ids failed: %s", field, len(ids), exc)
            return {}

    async def assemble(
        self,
        token: CancellationToken,
        names: dict[int, str],
        search_names: dict[int, str] | None = None,
    ) -> list[SearchResult]:
        """Attach tradability, item level and patch to matched names and sort."""
        if not names:
            return []
        ids = list(names)
        tradable, levels, patches = await asyncio.gather(
            self.lookup(token, ids, FIELD_TRADABLE),
            self.lookup(token, ids, FIELD_LEVEL),
            self.lookup(token, ids, FIELD_PATCH),
        )
        search_names = search_names or {}
        results = [
            SearchResult(
                item_id=item_id,
                name=name,
                tradable=bool(tradable.get(item_id, True)),
                level=levels.get(item_id),
                patch=patches.get(item_id),
                search_language_name=search_names.get(item_id),
            )
            for item_id, name in names.items()
        ]
        results.sort(key=result_sort_key)
        return results

    async def scan_corpus(self, ctx: SearchContext, *, fuzzy: bool) -> list[SearchResult]:
        """Filter the full primary-language corpus locally."""
        try:
            corpus = await self.call(ctx.token, self.cache.corpus)
        except OperationCancelled:
            raise
        except Exception as exc:
            logger.warning("[Search] Full corpus unavailable: %s", exc)
            return []
        tokens = ctx.query.tokens
        results = [
            result_from_record(record)
            for record in corpus
            if matches_all_tokens(tokens, record.name, fuzzy)
        ]
        results.sort(key=result_sort_key)
        return results


class SearchStage:
    name = "stage"

    def __init__(self, support: StageSupport) -> None:
        self._support = support

    async def attempt(self, ctx: SearchContext) -> list[SearchResult]:
        raise NotImplementedError


class ExactPrimaryStage(SearchStage):
    """Contiguous substring match on primary-language names."""

    name = "exact"
    fuzzy = False

    def applies(self, query: SearchQuery) -> bool:
        return bool(query.tokens)

    async def attempt(self, ctx: SearchContext) -> list[SearchResult]:
        query = ctx.query
        if not self.applies(query):
            return []
        support = self._support
        try:
            hits = await support.call(
                ctx.token, support.provider.exact_search, query.tokens, support.primary, self.fuzzy
            )
        except OperationCancelled:
            raise
        except Exception as exc:
            logger.warning("[Search] %s search failed, scanning local corpus: %s", self.name, exc)
            return await support.scan_corpus(ctx, fuzzy=self.fuzzy)
        verified = {
            item_id: name
            for item_id, name in hits.items()
            if name and matches_all_tokens(query.tokens, name, self.fuzzy)
        }
        return await support.assemble(ctx.token, verified)


class FuzzyPrimaryStage(ExactPrimaryStage):
    """Order-preserving subsequence match, only for multi-word queries."""

    name = "fuzzy"
    fuzzy = True

    def applies(self, query: SearchQuery) -> bool:
        return query.has_spaces


class OtherLanguagesStage(SearchStage):
    """Retry the query against each fallback language in priority order."""

    name = "languages"

    async def attempt(self, ctx: SearchContext) -> list[SearchResult]:
        support = self._support
        for language in support.config.fallback_languages:
            if language == support.primary:
                continue
            try:
                results = await self._search_language(ctx, language)
            except OperationCancelled:
                raise
            except Exception as exc:
                logger.warning("[Search] %s search failed, skipping: %s", language, exc)
                continue
            if results:
                logger.debug("[Search] Matched %s results in %s", len(results), language)
                return results
        return []

    async def _search_language(self, ctx: SearchContext, language: str) -> list[SearchResult]:
        support = self._support
        tokens = ctx.query.tokens
        modes = (False, True) if ctx.query.has_spaces else (False,)
        for fuzzy in modes:
            hits = await support.call(ctx.token, support.provider.exact_search, tokens, language, fuzzy)
            verified = {
                item_id: name
                for item_id, name in hits.items()
                if name and matches_all_tokens(tokens, name, fuzzy)
            }
            if not verified:
                continue
            primary_names = await support.lookup(ctx.token, list(verified), support.primary)
            names: dict[int, str] = {}
            search_names: dict[int, str] = {}
            for item_id, name in verified.items():
                primary_name = clean_name(primary_names.get(item_id))
                names[item_id] = primary_name or name
                if primary_name and primary_name != name:
                    search_names[item_id] = name
            results = await support.assemble(ctx.token, names, search_names)
            if results:
                return results
        return []


class ScriptConvertedStage(SearchStage):
    """Re-run the primary stages on the other script's rendering of the input."""

    name = "converted"

    def __init__(self, support: StageSupport, stages: Sequence[SearchStage]) -> None:
        super().__init__(support)
        self._stages = tuple(stages)

    async def attempt(self, ctx: SearchContext) -> list[SearchResult]:
        text = ctx.query.text
        converted = opposite_script(text)
        if converted == text or not contains_cjk(converted):
            return []
        ctx.used_script_conversion = True
        ctx.converted_text = converted
        converted_ctx = replace(ctx, query=build_query(converted, ctx.query.fuzzy))
        for stage in self._stages:
            results = await stage.attempt(converted_ctx)
            if results:
                return results
        return []


class AlternateCatalogStage(SearchStage):
    """Substring search over the simplified-script catalog, shown with primary names."""

    name = "alternate"

    async def attempt(self, ctx: SearchContext) -> list[SearchResult]:
        support = self._support
        if not support.cache.has_simplified:
            return []
        text = ctx.query.text
        if is_traditional(text):
            text = convert_script(text, ScriptDirection.TO_SIMPLIFIED)
        tokens = tokenize(text)
        if not tokens:
            return []
        try:
            records = await support.call(ctx.token, support.cache.simplified)
        except OperationCancelled:
            raise
        except Exception as exc:
            logger.warning("[Search] Simplified catalog unavailable: %s", exc)
            return []
        ids = [record.id for record in records if contains_all_tokens(tokens, record.name)]
        if not ids:
            return []
        ctx.used_alternate_catalog = True
        if not ctx.used_script_conversion:
            ctx.used_script_conversion = True
            ctx.converted_text = text
        primary_names = await support.lookup(ctx.token, ids, support.primary)
        names = {
            item_id: clean_name(primary_names[item_id])
            for item_id in ids
            if clean_name(primary_names.get(item_id))
        }
        return await support.assemble(ctx.token, names)


class ItemSearchEngine:
    """Entry point for name, advanced and OCR searches over one catalog."""

    def __init__(
        self,
        provider: CandidateProvider,
        *,
        alternate: AlternateCatalogProvider | None = None,
        cache: CorpusCache | None = None,
        config: SearchConfig | None = None,
    ) -> None:
        self._config = config or SearchConfig()
        self._provider = provider
        self._cache = cache or CorpusCache(
            provider.full_corpus_snapshot,
            alternate.simplified_snapshot if alternate is not None else None,
            ngram_size=self._config.ngram_size,
        )
        self._support = StageSupport(provider, self._cache, self._config)
        self._exact = ExactPrimaryStage(self._support)
        primary_stages = [self._exact, FuzzyPrimaryStage(self._support)]
        self._stages: list[SearchStage] = [
            *primary_stages,
            OtherLanguagesStage(self._support),
            ScriptConvertedStage(self._support, primary_stages),
            AlternateCatalogStage(self._support),
        ]
        self._tracker = RequestTracker()

    @property
    def cache(self) -> CorpusCache:
        return self._cache

    @property
    def stages(self) -> list[SearchStage]:
        return list(self._stages)

    @property
    def tracker(self) -> RequestTracker:
        return self._tracker

    async def search(
        self,
        text: str,
        *,
        fuzzy: bool = False,
        token: CancellationToken | None = None,
    ) -> SearchResponse:
        """Run the cascade, or a full-corpus subsequence scan when ``fuzzy``."""
        token = token or CancellationToken()
        original = normalize(text or "")
        if not original:
            return SearchResponse(status=SearchStatus.EMPTY_INPUT)
        if self._config.require_cjk and not contains_cjk(original):
            return SearchResponse(status=SearchStatus.NOT_CHINESE, original_text=original)

        ctx = SearchContext(query=build_query(original, fuzzy), token=token)
        try:
            if fuzzy:
                results = await self._support.scan_corpus(ctx, fuzzy=True)
            else:
                results = await self._run_cascade(ctx)
        except OperationCancelled:
            logger.info("[Search] Cancelled search for %r", original)
            return SearchResponse(status=SearchStatus.CANCELLED, original_text=original)

        return SearchResponse(
            results=results,
            original_text=original,
            used_script_conversion=ctx.used_script_conversion,
            converted_text=ctx.converted_text,
            used_alternate_catalog=ctx.used_alternate_catalog,
        )

    async def search_ocr(
        self,
        text: str,
        *,
        confidence: float | None = None,
        token: CancellationToken | None = None,
    ) -> SearchResponse:
        """Search with recognizer output: exact hits first, else n-gram similarity."""
        token = token or CancellationToken()
        original = (text or "").strip()
        query = build_query(normalize_ocr_text(original))
        if not query.text:
            return SearchResponse(status=SearchStatus.EMPTY_INPUT, original_text=original, is_ocr=True)

        params = OcrSearchParams.for_confidence(
            confidence, self._config.ocr_top_k, self._config.ocr_min_score
        )
        ctx = SearchContext(query=query, token=token)
        try:
            results = await self._ocr_exact(ctx)
            if not results:
                results = await self._ocr_similar(ctx, params)
        except OperationCancelled:
            logger.info("[Search] Cancelled OCR search for %r", original)
            return SearchResponse(status=SearchStatus.CANCELLED, original_text=original, is_ocr=True)
        return SearchResponse(results=results, original_text=original, is_ocr=True)

    async def search_latest(self, text: str, **kwargs: Any) -> SearchResponse:
        """Like ``search`` but a response overtaken by a newer request comes back stale."""
        return await self._latest(self.search(text, **kwargs))

    async def search_ocr_latest(self, text: str, **kwargs: Any) -> SearchResponse:
        return await self._latest(self.search_ocr(text, **kwargs))

    async def get_item(self, item_id: int) -> SearchResult | None:
        """Primary-language item, falling back through other languages for its name."""
        if item_id <= 0:
            return None
        token = CancellationToken()
        primary = self._config.primary_language
        languages = [primary, *(lang for lang in DETAIL_FALLBACK_LANGUAGES if lang != primary)]
        for language in languages:
            try:
                names = await self._provider.batch_lookup_by_ids([item_id], language)
            except Exception as exc:
                logger.warning("[Search] Name lookup for %s in %s failed: %s", item_id, language, exc)
                continue
            name = clean_name(names.get(item_id))
            if not name:
                continue
            search_names = {item_id: name} if language != primary else None
            results = await self._support.assemble(token, {item_id: name}, search_names)
            return results[0]
        return None

    async def simplified_name(self, item_id: int) -> str | None:
        if item_id <= 0 or not self._cache.has_simplified:
            return None
        names = await self._cache.simplified_names()
        return names.get(item_id)

    async def _run_cascade(self, ctx: SearchContext) -> list[SearchResult]:
        for stage in self._stages:
            ctx.token.raise_if_cancelled()
            results = await stage.attempt(ctx)
            if results:
                logger.debug("[Search] %s stage returned %s results for %r", stage.name, len(results), ctx.query.text)
                return results
        logger.debug("[Search] No results for %r", ctx.query.text)
        return []

    async def _ocr_exact(self, ctx: SearchContext) -> list[SearchResult]:
        text = ctx.query.text
        results = [
            replace(result, score=ocr_similarity(text, result.name, self._config.ngram_size))
            for result in await self._exact.attempt(ctx)
        ]
        results.sort(key=ocr_sort_key)
        return results

    async def _ocr_similar(self, ctx: SearchContext, params: OcrSearchParams) -> list[SearchResult]:
        support = self._support
        try:
            index = await support.call(ctx.token, self._cache.index)
            by_id = await support.call(ctx.token, self._cache.records_by_id)
        except OperationCancelled:
            raise
        except Exception as exc:
            logger.warning("[Search] OCR corpus unavailable: %s", exc)
            return []

        text = ctx.query.text
        scored: list[SearchResult] = []
        for item_id in index.candidates(text):
            record = by_id.get(item_id)
            if record is None:
                continue
            score = params.apply_bonus(ocr_similarity(text, record.name, index.n))
            if score >= params.min_score:
                scored.append(result_from_record(record, score))
        scored.sort(key=ocr_sort_key)
        return scored[: params.top_k]

    async def _latest(self, pending: Awaitable[SearchResponse]) -> SearchResponse:
        request_id = self._tracker.begin()
        response = await pending
        if not self._tracker.is_current(request_id):
            logger.debug("[Search] Dropping stale response for request %s", request_id)
            return SearchResponse(
                status=SearchStatus.STALE,
                original_text=response.original_text,
                is_ocr=response.is_ocr,
                request_id=request_id,
            )
        response.request_id = request_id
        return response
