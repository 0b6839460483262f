"""Local item catalog built from Teamcraft JSON exports.

Expected layout under the data directory (any file may be absent)::

    tw-items.json      {"<id>": {"tw": "..."}}
    items.json         {"<id>": {"en": "...", "de": "...", "ja": "...", "fr": "..."}}
    zh-items.json      {"<id>": {"zh": "..."}}
    ko-items.json      {"<id>": {"ko": "..."}}
    ilvls.json         {"<id>": 560}
    item-patch.json    {"<id>": 70}
    market-items.json  [<id>, ...]
    tw-recipes.json    [{"id", "result", "yields", "ingredients": [{"id", "amount"}], "job", "lvl"}]

Raw rows only become ``ItemRecord`` / ``Recipe`` through the helpers in
this module.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable, Mapping

from .config import PRIMARY_LANGUAGE
from .models import Ingredient, ItemRecord, Recipe
from .normalizer import clean_name
from .providers import InMemoryCatalog, InMemoryRecipeBook

logger = logging.getLogger(__name__)

NAME_FILES: dict[str, tuple[str, ...]] = {
    "tw-items.json": ("tw",),
    "items.json": ("en", "de", "ja", "fr"),
    "zh-items.json": ("zh",),
    "ko-items.json": ("ko",),
}
LEVELS_FILE = "ilvls.json"
PATCH_FILE = "item-patch.json"
MARKET_FILE = "market-items.json"
RECIPES_FILE = "tw-recipes.json"


def _to_int(value: Any) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _to_float(value: Any) -> float | None:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def record_from_row(
    item_id: Any,
    name: Any,
    language: str = PRIMARY_LANGUAGE,
    *,
    tradable: bool = True,
    level: Any = None,
    patch: Any = None,
) -> ItemRecord | None:
    """Map one raw row to an ItemRecord, or None if it has no usable id or name."""
    parsed_id = _to_int(item_id)
    cleaned = clean_name(name)
    if parsed_id is None or parsed_id <= 0 or not cleaned:
        return None
    return ItemRecord(
        id=parsed_id,
        name=cleaned,
        language=language,
        tradable=tradable,
        level=_to_int(level),
        patch=_to_float(patch),
    )


def records_from_names(
    names: Mapping[Any, Any],
    language: str = PRIMARY_LANGUAGE,
    *,
    tradable_ids: Iterable[int] | None = None,
    levels: Mapping[int, Any] | None = None,
    patches: Mapping[int, Any] | None = None,
) -> list[ItemRecord]:
    tradable = frozenset(tradable_ids) if tradable_ids is not None else None
    levels = levels or {}
    patches = patches or {}
    records = []
    for raw_id, name in names.items():
        item_id = _to_int(raw_id)
        if item_id is None:
            continue
        record = record_from_row(
            item_id,
            name,
            language,
            tradable=tradable is None or item_id in tradable,
            level=levels.get(item_id),
            patch=patches.get(item_id),
        )
        if record is not None:
            records.append(record)
    return records


def names_from_table(raw: Mapping[str, Any], language: str) -> dict[int, str]:
    """Extract ``{id: name}`` for one language from a ``{id: {lang: name}}`` table."""
    names: dict[int, str] = {}
    for raw_id, entry in raw.items():
        if not isinstance(entry, dict):
            continue
        record = record_from_row(raw_id, entry.get(language), language)
        if record is not None:
            names[record.id] = record.name
    return names


def parse_ingredients(raw: Any) -> tuple[Ingredient, ...]:
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError:
            return ()
    if not isinstance(raw, list):
        return ()
    ingredients = []
    for entry in raw:
        if not isinstance(entry, dict):
            continue
        ingredient_id = _to_int(entry.get("id"))
        amount = _to_int(entry.get("amount"))
        if ingredient_id and ingredient_id > 0 and amount and amount > 0:
            ingredients.append(Ingredient(id=ingredient_id, amount=amount))
    return tuple(ingredients)


def recipe_from_row(row: Mapping[str, Any]) -> Recipe | None:
    result_id = _to_int(row.get("result"))
    if not result_id or result_id <= 0:
        return None
    return Recipe(
        id=_to_int(row.get("id")) or 0,
        result_id=result_id,
        yields=_to_int(row.get("yields")) or 1,
        ingredients=parse_ingredients(row.get("ingredients")),
        job=_to_int(row.get("job")),
        level=_to_int(row.get("lvl")),
    )


def _read_json(path: Path) -> Any | None:
    if not path.exists():
        return None
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning("[Catalog] Skipping unreadable %s: %s", path.name, exc)
        return None


class LocalCatalog(InMemoryCatalog):
    """Item names, enrichment data and recipes loaded from a data directory."""

    def __init__(self, *args: Any, recipes: InMemoryRecipeBook | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.recipes = recipes or InMemoryRecipeBook(())

    @classmethod
    def from_dir(cls, data_dir: Path, primary_language: str = PRIMARY_LANGUAGE) -> "LocalCatalog":
        names: dict[str, dict[int, str]] = {}
        for filename, languages in NAME_FILES.items():
            raw = _read_json(data_dir / filename)
            if not isinstance(raw, dict):
                continue
            for language in languages:
                table = names_from_table(raw, language)
                if table:
                    names[language] = table

        levels_raw = _read_json(data_dir / LEVELS_FILE)
        levels = {
            item_id: level
            for item_id, level in (
                (_to_int(key), _to_int(value)) for key, value in (levels_raw or {}).items()
            )
            if item_id is not None and level is not None
        }
        patches_raw = _read_json(data_dir / PATCH_FILE)
        patches = {
            item_id: patch
            for item_id, patch in (
                (_to_int(key), _to_float(value)) for key, value in (patches_raw or {}).items()
            )
            if item_id is not None and patch is not None
        }
        market_raw = _read_json(data_dir / MARKET_FILE)
        tradable_ids = (
            [item_id for item_id in map(_to_int, market_raw) if item_id is not None]
            if isinstance(market_raw, list)
            else None
        )
        recipes_raw = _read_json(data_dir / RECIPES_FILE)
        recipes = [
            recipe
            for recipe in map(recipe_from_row, recipes_raw if isinstance(recipes_raw, list) else [])
            if recipe is not None
        ]

        if primary_language not in names:
            logger.warning("[Catalog] No %s item names found under %s", primary_language, data_dir)
        logger.info(
            "[Catalog] Loaded %s %s names, %s languages, %s recipes from %s",
            len(names.get(primary_language, {})),
            primary_language,
            len(names),
            len(recipes),
            data_dir,
        )
        return cls(
            names,
            tradable_ids=tradable_ids,
            levels=levels,
            patches=patches,
            primary_language=primary_language,
            recipes=InMemoryRecipeBook(recipes),
        )
