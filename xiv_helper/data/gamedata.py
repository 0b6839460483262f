"""Download the Teamcraft JSON exports the local catalog reads."""

from __future__ import annotations

import logging
from pathlib import Path

import httpx

logger = logging.getLogger(__name__)

_TEAMCRAFT_RAW = (
    "https://raw.githubusercontent.com/ffxiv-teamcraft/ffxiv-teamcraft/staging/libs/data/src/lib/json"
)

GAME_FILES = {
    "tw-items.json": f"{_TEAMCRAFT_RAW}/tw/tw-items.json",
    "tw-recipes.json": f"{_TEAMCRAFT_RAW}/tw/tw-recipes.json",
    "items.json": f"{_TEAMCRAFT_RAW}/items.json",
    "zh-items.json": f"{_TEAMCRAFT_RAW}/zh/zh-items.json",
    "ko-items.json": f"{_TEAMCRAFT_RAW}/ko/ko-items.json",
    "ilvls.json": f"{_TEAMCRAFT_RAW}/ilvls.json",
    "item-patch.json": f"{_TEAMCRAFT_RAW}/item-patch.json",
    "market-items.json": f"{_TEAMCRAFT_RAW}/market-items.json",
}


def missing_game_files(data_dir: Path) -> dict[str, str]:
    return {
        name: url
        for name, url in GAME_FILES.items()
        if not (data_dir / name).exists()
    }


def ensure_game_files(data_dir: Path, *, client: httpx.Client | None = None) -> list[str]:
    """Download any catalog files missing from ``data_dir``; returns what was fetched."""
    missing = missing_game_files(data_dir)
    if not missing:
        return []

    data_dir.mkdir(parents=True, exist_ok=True)
    logger.info("[GameData] Downloading %s data file(s) to %s", len(missing), data_dir)

    owns_client = client is None
    http = client or httpx.Client(timeout=120, follow_redirects=True)
    try:
        for name, url in missing.items():
            target = data_dir / name
            partial = target.with_suffix(target.suffix + ".part")
            logger.info("[GameData] Downloading %s...", name)
            with http.stream("GET", url) as resp:
                resp.raise_for_status()
                with partial.open("wb") as f:
                    for chunk in resp.iter_bytes(chunk_size=65536):
                        f.write(chunk)
            partial.replace(target)
            logger.info(
                "[GameData] Saved %s (%.1f MB)",
                name,
                target.stat().st_size / 1024 / 1024,
            )
    finally:
        if owns_client:
            http.close()
    return list(missing)
