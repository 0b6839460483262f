"""Application service for item lookup and crafting workflows."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any

from xiv_helper.data import (
    CraftingTreeBuilder,
    ItemSearchEngine,
    RecipeLookupError,
    collect_item_ids,
    flatten,
)

logger = logging.getLogger(__name__)

MAX_CRAFT_AMOUNT = 9999


@dataclass
class LookupServiceError(RuntimeError):
    message: str
    status_code: int = 400

    def __str__(self) -> str:
        return self.message


def _check_item_id(item_id: int) -> None:
    if item_id <= 0:
        raise LookupServiceError(f"Invalid item id: {item_id}", status_code=400)


def _check_amount(amount: int) -> None:
    if amount < 1 or amount > MAX_CRAFT_AMOUNT:
        raise LookupServiceError(
            f"Amount must be between 1 and {MAX_CRAFT_AMOUNT}, got {amount}",
            status_code=400,
        )


class LookupApplicationService:
    """Single entry point for search, item detail and crafting use-cases."""

    def __init__(self, *, search_engine: ItemSearchEngine, crafting: CraftingTreeBuilder) -> None:
        self._search = search_engine
        self._crafting = crafting

    async def search_items(self, *, query: str, fuzzy: bool = False) -> dict[str, Any]:
        response = await self._search.search(query, fuzzy=fuzzy)
        return response.to_dict()

    async def ocr_search(self, *, text: str, confidence: float | None = None) -> dict[str, Any]:
        response = await self._search.search_ocr(text, confidence=confidence)
        return response.to_dict()

    async def get_item(self, item_id: int, *, include_simplified: bool = False) -> dict[str, Any]:
        _check_item_id(item_id)
        item = await self._search.get_item(item_id)
        if item is None:
            raise LookupServiceError(f"Item {item_id} not found", status_code=404)

        result = item.to_dict()
        result["hasRecipe"] = await self._has_recipe(item_id)
        if include_simplified:
            try:
                result["simplifiedName"] = await self._search.simplified_name(item_id)
            except Exception as exc:
                logger.error("[LookupApplicationService] Simplified name lookup failed: %s", exc)
                result["simplifiedName"] = None
        return result

    async def crafting_tree(self, item_id: int, *, amount: int = 1) -> dict[str, Any]:
        _check_item_id(item_id)
        _check_amount(amount)
        tree = await self._build(item_id, amount)
        return {
            "tree": tree.to_dict(),
            "itemIds": collect_item_ids(tree),
        }

    async def crafting_materials(self, item_id: int, *, amount: int = 1) -> dict[str, Any]:
        _check_item_id(item_id)
        _check_amount(amount)
        tree = await self._build(item_id, amount)
        return {
            "itemId": item_id,
            "amount": amount,
            "materials": [total.to_dict() for total in flatten(tree)],
        }

    async def related_items(self, item_id: int) -> dict[str, Any]:
        _check_item_id(item_id)
        try:
            related = await self._crafting.find_related_items(item_id)
        except RecipeLookupError as exc:
            raise LookupServiceError(str(exc), status_code=502) from exc
        return {"itemId": item_id, "relatedItemIds": related}

    async def _build(self, item_id: int, amount: int):
        try:
            return await self._crafting.build(item_id, amount)
        except RecipeLookupError as exc:
            raise LookupServiceError(str(exc), status_code=502) from exc

    async def _has_recipe(self, item_id: int) -> bool:
        try:
            return await self._crafting.has_recipe(item_id)
        except RecipeLookupError as exc:
            logger.warning("[LookupApplicationService] Recipe check failed for %s: %s", item_id, exc)
            return False
