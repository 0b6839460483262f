"""Recursive crafting tree expansion over a recipe provider."""

from __future__ import annotations

import asyncio
import logging
import math

from .cancellation import CancellationToken, OperationCancelled
from .config import CraftingConfig
from .models import MaterialTotal, Recipe, RecipeNode
from .providers import RecipeProvider

logger = logging.getLogger(__name__)


class RecipeLookupError(RuntimeError):
    """Raised when the recipe provider cannot answer for an item."""

    def __init__(self, message: str, *, item_id: int) -> None:
        super().__init__(message)
        self.item_id = item_id


class CraftingTreeBuilder:
    """Expands an item into the full tree of ingredients needed to craft it.

    The first recipe listed for an item is always used. Each branch carries
    its own set of ancestors, so a cycle stops only the branch that closes
    it and siblings are expanded normally. Sibling ingredients are expanded
    concurrently and keep the recipe's ingredient order.
    """

    def __init__(self, recipes: RecipeProvider, config: CraftingConfig | None = None) -> None:
        self._recipes = recipes
        self._config = config or CraftingConfig()

    @property
    def config(self) -> CraftingConfig:
        return self._config

    async def build(
        self,
        item_id: int,
        amount: int = 1,
        token: CancellationToken | None = None,
    ) -> RecipeNode:
        """Expand ``item_id``. A cancelled ``token`` raises ``OperationCancelled`` and no tree is returned."""
        if item_id <= 0:
            raise ValueError(f"Item id must be positive, got {item_id}")
        if amount < 1:
            raise ValueError(f"Amount must be at least 1, got {amount}")
        token = token or CancellationToken()
        tree = await self._expand(item_id, amount, frozenset(), 0, token)
        logger.info("[Crafting] Built tree for item %s x%s", item_id, amount)
        return tree

    async def has_recipe(self, item_id: int) -> bool:
        return bool(await self._recipes_for(item_id, CancellationToken()))

    async def find_related_items(
        self,
        item_id: int,
        token: CancellationToken | None = None,
    ) -> list[int]:
        """Result ids of every recipe that uses ``item_id`` as an ingredient."""
        if item_id <= 0:
            return []
        token = token or CancellationToken()
        token.raise_if_cancelled()
        try:
            recipes = await self._recipes.recipes_by_ingredient_id(item_id)
        except OperationCancelled:
            raise
        except Exception as exc:
            raise RecipeLookupError(
                f"Recipe lookup by ingredient {item_id} failed.", item_id=item_id
            ) from exc
        token.raise_if_cancelled()
        related: dict[int, None] = {}
        for recipe in recipes:
            if recipe.result_id > 0 and any(ing.id == item_id for ing in recipe.ingredients):
                related.setdefault(recipe.result_id, None)
        return list(related)

    async def _recipes_for(self, item_id: int, token: CancellationToken) -> list[Recipe]:
        token.raise_if_cancelled()
        try:
            recipes = await self._recipes.recipes_by_result_id(item_id)
        except OperationCancelled:
            raise
        except Exception as exc:
            raise RecipeLookupError(f"Recipe lookup for item {item_id} failed.", item_id=item_id) from exc
        token.raise_if_cancelled()
        return recipes

    async def _expand(
        self,
        item_id: int,
        amount: int,
        ancestors: frozenset[int],
        depth: int,
        token: CancellationToken,
    ) -> RecipeNode:
        is_cyclic = item_id in ancestors
        too_deep = depth > self._config.max_depth
        if is_cyclic or too_deep:
            if is_cyclic:
                logger.debug("[Crafting] Cycle at item %s", item_id)
            return RecipeNode(
                item_id=item_id,
                amount=amount,
                is_cyclic=is_cyclic,
                max_depth_reached=too_deep,
            )

        recipes = await self._recipes_for(item_id, token)
        if not recipes:
            return RecipeNode(item_id=item_id, amount=amount, is_base_material=True)

        recipe = recipes[0]
        recipe_yield = recipe.yields if recipe.yields and recipe.yields > 0 else 1
        crafts_needed = math.ceil(amount / recipe_yield)
        branch = ancestors | {item_id}
        excluded = self._config.excluded_item_ids

        children = await asyncio.gather(
            *(
                self._expand(ingredient.id, ingredient.amount * crafts_needed, branch, depth + 1, token)
                for ingredient in recipe.ingredients
                if ingredient.id not in excluded
            )
        )
        return RecipeNode(
            item_id=item_id,
            amount=amount,
            recipe_yield=recipe_yield,
            crafts_needed=crafts_needed,
            children=tuple(children),
            recipe_id=recipe.id,
            job=recipe.job,
            level=recipe.level,
        )


def _walk(node: RecipeNode):
    yield node
    for child in node.children:
        yield from _walk(child)


def flatten(tree: RecipeNode) -> list[MaterialTotal]:
    """Sum amounts per item id over every node, in first-seen order."""
    totals: dict[int, int] = {}
    for node in _walk(tree):
        totals[node.item_id] = totals.get(node.item_id, 0) + node.amount
    return [MaterialTotal(item_id=item_id, total_amount=total) for item_id, total in totals.items()]


def collect_item_ids(tree: RecipeNode) -> list[int]:
    seen: dict[int, None] = {}
    for node in _walk(tree):
        seen.setdefault(node.item_id, None)
    return list(seen)
