"""Configuration for catalog search, crafting trees and data providers."""

from __future__ import annotations

from dataclasses import dataclass, field
import os
from pathlib import Path

PRIMARY_LANGUAGE = "tw"
DEFAULT_FALLBACK_LANGUAGES = ("zh", "en", "ja", "ko", "de", "fr")
# Item detail pages prefer names players can read without the Chinese client.
DETAIL_FALLBACK_LANGUAGES = ("en", "ja", "ko", "zh", "de", "fr")

# Crystals, shards and clusters are never expanded in crafting trees.
DEFAULT_EXCLUDED_ITEM_IDS = frozenset(range(2, 20))

_DEFAULT_DATA_DIR = Path("data/xiv")
_BUNDLED_DATA_DIR = Path("docs/teamcraft-json")
_DEFAULT_SIMPLIFIED_CSV_URL = (
    "https://raw.githubusercontent.com/thewakingsands/ffxiv-datamining-cn/master/Item.csv"
)


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


def _env_languages() -> tuple[str, ...]:
    raw = os.getenv("XIV_FALLBACK_LANGUAGES")
    if not raw:
        return DEFAULT_FALLBACK_LANGUAGES
    return tuple(lang.strip().lower() for lang in raw.split(",") if lang.strip())


def parse_id_set(raw: str) -> frozenset[int]:
    """Parse ``"2-19,25"`` style id lists."""
    ids: set[int] = set()
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        if "-" in part:
            start, end = part.split("-", 1)
            ids.update(range(int(start), int(end) + 1))
        else:
            ids.add(int(part))
    return frozenset(ids)


def _env_excluded_ids() -> frozenset[int]:
    raw = os.getenv("XIV_CRAFT_EXCLUDED_IDS")
    if not raw:
        return DEFAULT_EXCLUDED_ITEM_IDS
    return parse_id_set(raw)


def _get_data_dir() -> Path:
    """Resolve the local data directory.

    Priority:
    1. Explicit `XIV_DATA_DIR` env override.
    2. Bundled repository data (`docs/teamcraft-json`) when present.
    3. Writable runtime cache path (`data/xiv`).
    """
    explicit = os.getenv("XIV_DATA_DIR")
    if explicit:
        return Path(explicit)
    if _BUNDLED_DATA_DIR.exists():
        return _BUNDLED_DATA_DIR
    return _DEFAULT_DATA_DIR


@dataclass(frozen=True)
class SearchConfig:
    primary_language: str = field(
        default_factory=lambda: os.getenv("XIV_PRIMARY_LANGUAGE", PRIMARY_LANGUAGE).lower()
    )
    fallback_languages: tuple[str, ...] = field(default_factory=_env_languages)
    require_cjk: bool = field(default_factory=lambda: _env_flag("XIV_REQUIRE_CJK", "1"))
    ocr_top_k: int = field(default_factory=lambda: int(os.getenv("XIV_OCR_TOP_K", "50")))
    ocr_min_score: float = field(default_factory=lambda: float(os.getenv("XIV_OCR_MIN_SCORE", "0.4")))
    ngram_size: int = field(default_factory=lambda: int(os.getenv("XIV_NGRAM_SIZE", "2")))


@dataclass(frozen=True)
class CraftingConfig:
    max_depth: int = field(default_factory=lambda: int(os.getenv("XIV_CRAFT_MAX_DEPTH", "10")))
    excluded_item_ids: frozenset[int] = field(default_factory=_env_excluded_ids)


@dataclass(frozen=True)
class CatalogConfig:
    data_dir: Path = field(default_factory=_get_data_dir)
    supabase_url: str | None = field(default_factory=lambda: os.getenv("SUPABASE_URL") or None)
    supabase_key: str | None = field(default_factory=lambda: os.getenv("SUPABASE_ANON_KEY") or None)
    timeout_s: float = field(default_factory=lambda: float(os.getenv("SUPABASE_TIMEOUT_S", "15")))
    cache_ttl_s: float = field(default_factory=lambda: float(os.getenv("SUPABASE_CACHE_TTL_S", "300")))
    download_missing: bool = field(default_factory=lambda: _env_flag("XIV_DOWNLOAD_DATA", "1"))


@dataclass(frozen=True)
class AlternateCatalogConfig:
    enabled: bool = field(default_factory=lambda: _env_flag("XIV_SIMPLIFIED_CATALOG", "1"))
    csv_url: str = field(
        default_factory=lambda: os.getenv("XIV_SIMPLIFIED_CSV_URL", _DEFAULT_SIMPLIFIED_CSV_URL)
    )
    timeout_s: float = field(default_factory=lambda: float(os.getenv("XIV_SIMPLIFIED_TIMEOUT_S", "60")))
