"""Provider contracts consumed by the search engine and crafting builder.

Anything that can answer these async calls can back a search: the local
Teamcraft JSON files, the PostgREST catalog, or a fixture in a test.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Iterable, Mapping, Protocol, Sequence

from .config import PRIMARY_LANGUAGE
from .fuzzy import matches_all_tokens
from .models import FIELD_LEVEL, FIELD_PATCH, FIELD_TRADABLE, ItemRecord, Recipe


class CandidateProvider(Protocol):
    async def exact_search(
        self,
        tokens: Sequence[str],
        language: str,
        fuzzy: bool = False,
    ) -> dict[int, str]:
        """Return ``{item_id: name}`` for names in ``language`` matching every token."""
        ...

    async def batch_lookup_by_ids(self, ids: Sequence[int], field: str) -> dict[int, Any]:
        """Return ``{item_id: value}`` for a language code or an enrichment field."""
        ...

    async def full_corpus_snapshot(self) -> list[ItemRecord]:
        """Every primary-language record. Expensive."""
        ...


class RecipeProvider(Protocol):
    async def recipes_by_result_id(self, item_id: int) -> list[Recipe]:
        ...

    async def recipes_by_ingredient_id(self, item_id: int) -> list[Recipe]:
        ...


class AlternateCatalogProvider(Protocol):
    async def simplified_snapshot(self) -> list[ItemRecord]:
        ...


class InMemoryCatalog:
    """CandidateProvider over names already held in process."""

    def __init__(
        self,
        names: Mapping[str, Mapping[int, str]],
        *,
        tradable_ids: Iterable[int] | None = None,
        levels: Mapping[int, int] | None = None,
        patches: Mapping[int, float] | None = None,
        primary_language: str = PRIMARY_LANGUAGE,
    ) -> None:
        self._names = {lang: dict(table) for lang, table in names.items()}
        self._tradable = frozenset(tradable_ids) if tradable_ids is not None else None
        self._levels = dict(levels or {})
        self._patches = dict(patches or {})
        self._primary = primary_language

    @classmethod
    def from_records(
        cls,
        records: Iterable[ItemRecord],
        *,
        primary_language: str = PRIMARY_LANGUAGE,
    ) -> "InMemoryCatalog":
        names: dict[str, dict[int, str]] = defaultdict(dict)
        tradable: set[int] = set()
        levels: dict[int, int] = {}
        patches: dict[int, float] = {}
        for record in records:
            names[record.language][record.id] = record.name
            if record.language != primary_language:
                continue
            if record.tradable:
                tradable.add(record.id)
            if record.level is not None:
                levels[record.id] = record.level
            if record.patch is not None:
                patches[record.id] = record.patch
        return cls(
            names,
            tradable_ids=tradable,
            levels=levels,
            patches=patches,
            primary_language=primary_language,
        )

    @property
    def languages(self) -> list[str]:
        return sorted(self._names)

    def names_for(self, language: str) -> dict[int, str]:
        return self._names.get(language, {})

    async def exact_search(
        self,
        tokens: Sequence[str],
        language: str,
        fuzzy: bool = False,
    ) -> dict[int, str]:
        if not tokens:
            return {}
        return {
            item_id: name
            for item_id, name in self._names.get(language, {}).items()
            if name and matches_all_tokens(tokens, name, fuzzy)
        }

    async def batch_lookup_by_ids(self, ids: Sequence[int], field: str) -> dict[int, Any]:
        if field == FIELD_TRADABLE:
            if self._tradable is None:
                return {item_id: True for item_id in ids}
            return {item_id: item_id in self._tradable for item_id in ids}
        if field == FIELD_LEVEL:
            source: Mapping[int, Any] = self._levels
        elif field == FIELD_PATCH:
            source = self._patches
        else:
            source = self._names.get(field, {})
        return {item_id: source[item_id] for item_id in ids if item_id in source}

    async def full_corpus_snapshot(self) -> list[ItemRecord]:
        records = []
        for item_id, name in self._names.get(self._primary, {}).items():
            if not name:
                continue
            records.append(
                ItemRecord(
                    id=item_id,
                    name=name,
                    language=self._primary,
                    tradable=self._tradable is None or item_id in self._tradable,
                    level=self._levels.get(item_id),
                    patch=self._patches.get(item_id),
                )
            )
        return records


class InMemoryRecipeBook:
    """RecipeProvider over a list of recipes."""

    def __init__(self, recipes: Iterable[Recipe]) -> None:
        self._by_result: dict[int, list[Recipe]] = defaultdict(list)
        self._by_ingredient: dict[int, list[Recipe]] = defaultdict(list)
        for recipe in recipes:
            self._by_result[recipe.result_id].append(recipe)
            for ingredient_id in {ingredient.id for ingredient in recipe.ingredients}:
                self._by_ingredient[ingredient_id].append(recipe)

    def __len__(self) -> int:
        return sum(len(recipes) for recipes in self._by_result.values())

    async def recipes_by_result_id(self, item_id: int) -> list[Recipe]:
        return list(self._by_result.get(item_id, ()))

    async def recipes_by_ingredient_id(self, item_id: int) -> list[Recipe]:
        return list(self._by_ingredient.get(item_id, ()))


class InMemoryAlternateCatalog:
    """AlternateCatalogProvider over pre-parsed simplified records."""

    def __init__(self, records: Iterable[ItemRecord]) -> None:
        self._records = list(records)

    async def simplified_snapshot(self) -> list[ItemRecord]:
        return list(self._records)
