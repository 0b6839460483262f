"""Data access, search and crafting for XIV Helper."""

from .alternate_catalog import SimplifiedCsvCatalog, parse_item_csv
from .cache import CorpusCache, TTLCache
from .cancellation import CancellationToken, OperationCancelled
from .catalog import LocalCatalog, record_from_row, recipe_from_row, records_from_names
from .config import AlternateCatalogConfig, CatalogConfig, CraftingConfig, SearchConfig
from .crafting import CraftingTreeBuilder, RecipeLookupError, collect_item_ids, flatten
from .fuzzy import OcrSearchParams, ocr_similarity, subsequence_score
from .models import (
    Ingredient,
    ItemRecord,
    MaterialTotal,
    Recipe,
    RecipeNode,
    SearchQuery,
    SearchResponse,
    SearchResult,
    SearchStatus,
)
from .ngram_index import NgramIndex
from .providers import (
    AlternateCatalogProvider,
    CandidateProvider,
    InMemoryAlternateCatalog,
    InMemoryCatalog,
    InMemoryRecipeBook,
    RecipeProvider,
)
from .search import ItemSearchEngine, RequestTracker
from .supabase_client import CatalogProviderError, SupabaseCatalogClient

__all__ = [
    "SimplifiedCsvCatalog",
    "parse_item_csv",
    "CorpusCache",
    "TTLCache",
    "CancellationToken",
    "OperationCancelled",
    "LocalCatalog",
    "record_from_row",
    "recipe_from_row",
    "records_from_names",
    "AlternateCatalogConfig",
    "CatalogConfig",
    "CraftingConfig",
    "SearchConfig",
    "CraftingTreeBuilder",
    "RecipeLookupError",
    "collect_item_ids",
    "flatten",
    "OcrSearchParams",
    "ocr_similarity",
    "subsequence_score",
    "Ingredient",
    "ItemRecord",
    "MaterialTotal",
    "Recipe",
    "RecipeNode",
    "SearchQuery",
    "SearchResponse",
    "SearchResult",
    "SearchStatus",
    "NgramIndex",
    "AlternateCatalogProvider",
    "CandidateProvider",
    "InMemoryAlternateCatalog",
    "InMemoryCatalog",
    "InMemoryRecipeBook",
    "RecipeProvider",
    "ItemSearchEngine",
    "RequestTracker",
    "CatalogProviderError",
    "SupabaseCatalogClient",
]
