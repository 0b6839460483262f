"""Async PostgREST client for the Supabase-hosted item catalog."""

from __future__ import annotations

import json
import logging
from typing import Any, Sequence

import httpx

from .cache import TTLCache
from .catalog import record_from_row, recipe_from_row, records_from_names
from .config import CatalogConfig, PRIMARY_LANGUAGE
from .models import FIELD_LEVEL, FIELD_PATCH, FIELD_TRADABLE, ItemRecord, Recipe

logger = logging.getLogger(__name__)

PAGE_SIZE = 1000
BATCH_SIZE = 1000

# Simplified Chinese names live in ``cn_items`` under the ``zh`` column.
_TABLE_OVERRIDES = {"zh": "cn_items"}
_VALUE_TABLES = {FIELD_LEVEL: "ilvls", FIELD_PATCH: "item_patch"}


class CatalogProviderError(RuntimeError):
    """Raised when the catalog API returns an error response."""

    def __init__(self, message: str, *, status_code: int | None = None, payload: Any | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload


def table_for(language: str) -> tuple[str, str]:
    """Return ``(table, column)`` holding names for ``language``."""
    return _TABLE_OVERRIDES.get(language, f"{language}_items"), language


def name_pattern(token: str, fuzzy: bool) -> str:
    if fuzzy:
        return "%" + "%".join(token) + "%"
    return f"%{token}%"


class SupabaseCatalogClient:
    """CandidateProvider and RecipeProvider backed by PostgREST tables.

    Tables: ``{lang}_items`` (``id``, ``<lang>``), ``market_items`` (``id``),
    ``ilvls`` / ``item_patch`` (``id``, ``value``) and ``tw_recipes``.
    """

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout_s: float | None = None,
        *,
        cache_ttl_s: float | None = None,
        primary_language: str = PRIMARY_LANGUAGE,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        config = CatalogConfig()
        base_url = base_url or config.supabase_url
        if not base_url:
            raise ValueError("SUPABASE_URL is not configured.")
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key or config.supabase_key or ""
        self._timeout_s = timeout_s or config.timeout_s
        self._primary = primary_language
        self._transport = transport
        self._cache = TTLCache(config.cache_ttl_s if cache_ttl_s is None else cache_ttl_s)
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "SupabaseCatalogClient":
        self._http()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    @property
    def base_url(self) -> str:
        """Return the configured base URL (for logging/debugging)."""
        return self._base_url

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            headers = {"Accept": "application/json", "Accept-Encoding": "gzip, deflate"}
            if self._api_key:
                headers["apikey"] = self._api_key
                headers["Authorization"] = f"Bearer {self._api_key}"
            self._client = httpx.AsyncClient(
                base_url=f"{self._base_url}/rest/v1",
                timeout=self._timeout_s,
                headers=headers,
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def clear_cache(self) -> None:
        self._cache.clear()

    async def exact_search(
        self,
        tokens: Sequence[str],
        language: str,
        fuzzy: bool = False,
    ) -> dict[int, str]:
        """Names matching every token via ``ilike``; ``fuzzy`` uses ``%c1%c2%`` patterns."""
        words = [token for token in tokens if token]
        if not words:
            return {}
        table, column = table_for(language)
        params: list[tuple[str, str]] = [
            ("select", f"id,{column}"),
            (column, "not.is.null"),
            (column, "neq."),
        ]
        params.extend((column, f"ilike.{name_pattern(word, fuzzy)}") for word in words)
        rows = await self._select_all(table, params)
        names: dict[int, str] = {}
        for row in rows:
            record = record_from_row(row.get("id"), row.get(column), language)
            if record is not None:
                names[record.id] = record.name
        logger.debug("[Supabase] %s search %s fuzzy=%s -> %s rows", table, words, fuzzy, len(names))
        return names

    async def batch_lookup_by_ids(self, ids: Sequence[int], field: str) -> dict[int, Any]:
        unique_ids = sorted({item_id for item_id in ids if item_id and item_id > 0})
        if not unique_ids:
            return {}
        cache_key = (field, tuple(unique_ids))
        cached = self._cache.get(cache_key)
        if cached is not None:
            return cached

        if field == FIELD_TRADABLE:
            rows = await self._select_in("market_items", "id", unique_ids, select="id")
            marketable = {row.get("id") for row in rows}
            result: dict[int, Any] = {item_id: item_id in marketable for item_id in unique_ids}
        elif field in _VALUE_TABLES:
            rows = await self._select_in(_VALUE_TABLES[field], "id", unique_ids, select="id,value")
            result = {
                row["id"]: row["value"]
                for row in rows
                if row.get("id") is not None and row.get("value") is not None
            }
        else:
            table, column = table_for(field)
            rows = await self._select_in(table, "id", unique_ids, select=f"id,{column}")
            result = {}
            for row in rows:
                record = record_from_row(row.get("id"), row.get(column), field)
                if record is not None:
                    result[record.id] = record.name

        self._cache.set(cache_key, result)
        return result

    async def full_corpus_snapshot(self) -> list[ItemRecord]:
        table, column = table_for(self._primary)
        logger.info("[Supabase] Loading full %s corpus from %s", table, self._base_url)
        name_rows = await self._select_all(table, [("select", f"id,{column}"), (column, "not.is.null")])
        market_rows = await self._select_all("market_items", [("select", "id")])
        level_rows = await self._select_all("ilvls", [("select", "id,value")])
        patch_rows = await self._select_all("item_patch", [("select", "id,value")])
        records = records_from_names(
            {row.get("id"): row.get(column) for row in name_rows},
            self._primary,
            tradable_ids=[row["id"] for row in market_rows if row.get("id") is not None],
            levels={row["id"]: row.get("value") for row in level_rows if row.get("id") is not None},
            patches={row["id"]: row.get("value") for row in patch_rows if row.get("id") is not None},
        )
        logger.info("[Supabase] Loaded %s corpus records", len(records))
        return records

    async def recipes_by_result_id(self, item_id: int) -> list[Recipe]:
        if item_id <= 0:
            return []
        cache_key = ("recipes_by_result", item_id)
        cached = self._cache.get(cache_key)
        if cached is not None:
            return list(cached)
        rows = await self._select("tw_recipes", [("select", "*"), ("result", f"eq.{item_id}")])
        recipes = [recipe for recipe in map(recipe_from_row, rows) if recipe is not None]
        self._cache.set(cache_key, tuple(recipes))
        return recipes

    async def recipes_by_ingredient_id(self, item_id: int) -> list[Recipe]:
        if item_id <= 0:
            return []
        cache_key = ("recipes_by_ingredient", item_id)
        cached = self._cache.get(cache_key)
        if cached is not None:
            return list(cached)
        contains = json.dumps([{"id": item_id}], separators=(",", ":"))
        rows = await self._select_all("tw_recipes", [("select", "*"), ("ingredients", f"cs.{contains}")])
        recipes = [recipe for recipe in map(recipe_from_row, rows) if recipe is not None]
        self._cache.set(cache_key, tuple(recipes))
        return recipes

    async def _select(self, table: str, params: list[tuple[str, str]]) -> list[dict[str, Any]]:
        response = await self._http().get(f"/{table}", params=params)
        return self._handle_response(response)

    async def _select_all(self, table: str, params: list[tuple[str, str]]) -> list[dict[str, Any]]:
        """Page through a query ``PAGE_SIZE`` rows at a time until a short page."""
        rows: list[dict[str, Any]] = []
        offset = 0
        while True:
            page = await self._select(
                table,
                [*params, ("order", "id.asc"), ("limit", str(PAGE_SIZE)), ("offset", str(offset))],
            )
            rows.extend(page)
            if len(page) < PAGE_SIZE:
                return rows
            offset += PAGE_SIZE

    async def _select_in(
        self,
        table: str,
        column: str,
        ids: Sequence[int],
        *,
        select: str = "*",
    ) -> list[dict[str, Any]]:
        rows: list[dict[str, Any]] = []
        for start in range(0, len(ids), BATCH_SIZE):
            batch = ids[start:start + BATCH_SIZE]
            id_list = ",".join(str(item_id) for item_id in batch)
            rows.extend(await self._select(table, [("select", select), (column, f"in.({id_list})")]))
        return rows

    def _handle_response(self, response: httpx.Response) -> list[dict[str, Any]]:
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            payload: Any | None = None
            try:
                payload = response.json()
            except ValueError:
                payload = response.text
            raise CatalogProviderError(
                f"Catalog API error ({response.status_code}).",
                status_code=response.status_code,
                payload=payload,
            ) from exc

        data = response.json()
        if isinstance(data, list):
            return [row for row in data if isinstance(row, dict)]
        return []
