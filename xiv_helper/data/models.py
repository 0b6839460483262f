"""Typed records shared by the search engine and the crafting tree builder."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

# Enrichment fields understood by ``CandidateProvider.batch_lookup_by_ids``.
# Language codes (``tw``, ``en``...) look up names.
FIELD_TRADABLE = "tradable"
FIELD_LEVEL = "level"
FIELD_PATCH = "patch"


@dataclass(frozen=True)
class ItemRecord:
    """A single catalog row after the ingestion mapping layer."""
    id: int
    name: str
    language: str = "tw"
    tradable: bool = True
    level: int | None = None
    patch: float | None = None

    def __post_init__(self) -> None:
        if self.id <= 0:
            raise ValueError(f"Item id must be positive, got {self.id}")


@dataclass(frozen=True)
class SearchQuery:
    raw: str
    text: str
    tokens: tuple[str, ...]
    fuzzy: bool = False

    @property
    def has_spaces(self) -> bool:
        return len(self.tokens) > 1


@dataclass(frozen=True)
class SearchResult:
    item_id: int
    name: str
    tradable: bool = True
    level: int | None = None
    patch: float | None = None
    score: float | None = None
    search_language_name: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.item_id,
            "name": self.name,
            "isTradable": self.tradable,
            "ilvl": self.level,
            "version": self.patch,
        }
        if self.score is not None:
            data["ocrScore"] = round(self.score, 4)
        if self.search_language_name is not None:
            data["searchLanguageName"] = self.search_language_name
        return data


class SearchStatus(StrEnum):
    """Outcome of a search call."""

    OK = "ok"
    EMPTY_INPUT = "empty_input"
    NOT_CHINESE = "not_chinese"
    CANCELLED = "cancelled"
    STALE = "stale"


@dataclass
class SearchResponse:
    results: list[SearchResult] = field(default_factory=list)
    status: SearchStatus = SearchStatus.OK
    original_text: str = ""
    used_script_conversion: bool = False
    converted_text: str | None = None
    used_alternate_catalog: bool = False
    is_ocr: bool = False
    request_id: int | None = None

    @property
    def cancelled(self) -> bool:
        return self.status == SearchStatus.CANCELLED

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": str(self.status),
            "results": [result.to_dict() for result in self.results],
            "originalText": self.original_text,
            "usedScriptConversion": self.used_script_conversion,
            "convertedText": self.converted_text,
            "usedAlternateCatalog": self.used_alternate_catalog,
            "isOCRSearch": self.is_ocr,
            "requestId": self.request_id,
        }


@dataclass(frozen=True)
class Ingredient:
    id: int
    amount: int


@dataclass(frozen=True)
class Recipe:
    """Crafting recipe keyed by the item it produces."""
    id: int
    result_id: int
    yields: int = 1
    ingredients: tuple[Ingredient, ...] = ()
    job: int | None = None
    level: int | None = None


@dataclass(frozen=True)
class RecipeNode:
    """One node of a crafting tree. Built once, never mutated."""
    item_id: int
    amount: int
    recipe_yield: int = 1
    crafts_needed: int = 0
    children: tuple["RecipeNode", ...] = ()
    is_base_material: bool = False
    is_cyclic: bool = False
    max_depth_reached: bool = False
    recipe_id: int | None = None
    job: int | None = None
    level: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "itemId": self.item_id,
            "amount": self.amount,
            "yields": self.recipe_yield,
            "craftsNeeded": self.crafts_needed,
            "recipeId": self.recipe_id,
            "job": self.job,
            "level": self.level,
            "isBaseMaterial": self.is_base_material,
            "isCyclic": self.is_cyclic,
            "maxDepthReached": self.max_depth_reached,
            "children": [child.to_dict() for child in self.children],
        }


@dataclass(frozen=True)
class MaterialTotal:
    item_id: int
    total_amount: int

    def to_dict(self) -> dict[str, Any]:
        return {"itemId": self.item_id, "totalAmount": self.total_amount}
