"""Shared catalog fixtures."""

import pytest

from xiv_helper.data import (
    CraftingConfig,
    InMemoryAlternateCatalog,
    InMemoryCatalog,
    ItemRecord,
    ItemSearchEngine,
    SearchConfig,
)

TW_NAMES = {
    1: "遠古地圖",
    2: "鞣革地圖",
    3: "精金錠",
    4: "鉍金精準指環",
    6: "精製金指環",
    7: "奇異素材",
    8: "火",
    9: "火焰碎晶",
}

OTHER_NAMES = {
    "zh": {3: "精金锭"},
    "en": {1: "Ancient Map", 2: "Leather Map", 3: "Adamantite Ingot", 10: "Mystery Box"},
    "ja": {3: "アダマン鉱"},
}


@pytest.fixture
def search_config():
    return SearchConfig(
        primary_language="tw",
        fallback_languages=("zh", "en", "ja", "ko", "de", "fr"),
        require_cjk=True,
        ocr_top_k=50,
        ocr_min_score=0.4,
        ngram_size=2,
    )


@pytest.fixture
def crafting_config():
    return CraftingConfig(max_depth=10, excluded_item_ids=frozenset(range(2, 20)))


@pytest.fixture
def catalog():
    return InMemoryCatalog(
        {"tw": TW_NAMES, **OTHER_NAMES},
        tradable_ids={1, 2, 3, 6, 7, 8},
        levels={3: 560, 6: 90},
        patches={3: 6.0},
    )


@pytest.fixture
def alternate():
    return InMemoryAlternateCatalog(
        [
            ItemRecord(id=3, name="精金锭", language="zh"),
            ItemRecord(id=7, name="神秘材料", language="zh"),
        ]
    )


@pytest.fixture
def engine(catalog, alternate, search_config):
    return ItemSearchEngine(catalog, alternate=alternate, config=search_config)
