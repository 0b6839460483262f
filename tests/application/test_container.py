"""Tests for dependency wiring."""

import json

import pytest

from xiv_helper.bootstrap import build_container
from xiv_helper.data import AlternateCatalogConfig, CatalogConfig, LocalCatalog, SearchConfig


@pytest.mark.asyncio
async def test_local_catalog_container(tmp_path):
    (tmp_path / "tw-items.json").write_text(
        json.dumps({"1": {"tw": "遠古地圖"}}, ensure_ascii=False), encoding="utf-8"
    )

    container = build_container(
        catalog_config=CatalogConfig(data_dir=tmp_path, supabase_url=None, download_missing=False),
        search_config=SearchConfig(),
        alternate_config=AlternateCatalogConfig(enabled=False),
    )

    assert isinstance(container.catalog, LocalCatalog)
    assert container.recipes is container.catalog.recipes
    assert not container.search.cache.has_simplified
    result = await container.lookup.search_items(query="地圖")
    assert [item["id"] for item in result["results"]] == [1]
