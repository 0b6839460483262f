"""Dependency composition root."""

from __future__ import annotations

from dataclasses import dataclass
import logging

from xiv_helper.application import LookupApplicationService
from xiv_helper.data import (
    AlternateCatalogConfig,
    CandidateProvider,
    CatalogConfig,
    CraftingConfig,
    CraftingTreeBuilder,
    ItemSearchEngine,
    LocalCatalog,
    RecipeProvider,
    SearchConfig,
    SimplifiedCsvCatalog,
    SupabaseCatalogClient,
)
from xiv_helper.data.gamedata import ensure_game_files

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AppContainer:
    """Wired application dependencies."""

    lookup: LookupApplicationService
    search: ItemSearchEngine
    crafting: CraftingTreeBuilder
    catalog: CandidateProvider
    recipes: RecipeProvider


_CONTAINER: AppContainer | None = None


def build_container(
    *,
    catalog_config: CatalogConfig | None = None,
    search_config: SearchConfig | None = None,
    crafting_config: CraftingConfig | None = None,
    alternate_config: AlternateCatalogConfig | None = None,
) -> AppContainer:
    catalog_config = catalog_config or CatalogConfig()
    search_config = search_config or SearchConfig()
    alternate_config = alternate_config or AlternateCatalogConfig()

    catalog: CandidateProvider
    recipes: RecipeProvider
    if catalog_config.supabase_url:
        remote = SupabaseCatalogClient(
            catalog_config.supabase_url,
            catalog_config.supabase_key,
            catalog_config.timeout_s,
            cache_ttl_s=catalog_config.cache_ttl_s,
            primary_language=search_config.primary_language,
        )
        logger.info("[Container] Using remote catalog at %s", remote.base_url)
        catalog, recipes = remote, remote
    else:
        if catalog_config.download_missing:
            ensure_game_files(catalog_config.data_dir)
        local = LocalCatalog.from_dir(catalog_config.data_dir, search_config.primary_language)
        catalog, recipes = local, local.recipes

    alternate = None
    if alternate_config.enabled:
        alternate = SimplifiedCsvCatalog(alternate_config.csv_url, alternate_config.timeout_s)

    search = ItemSearchEngine(catalog, alternate=alternate, config=search_config)
    crafting = CraftingTreeBuilder(recipes, crafting_config or CraftingConfig())
    return AppContainer(
        lookup=LookupApplicationService(search_engine=search, crafting=crafting),
        search=search,
        crafting=crafting,
        catalog=catalog,
        recipes=recipes,
    )


def get_container() -> AppContainer:
    global _CONTAINER
    if _CONTAINER is not None:
        return _CONTAINER
    _CONTAINER = build_container()
    return _CONTAINER


def reset_container() -> None:
    global _CONTAINER
    _CONTAINER = None
