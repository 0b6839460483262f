"""Simplified-script item names from the datamining ``Item.csv`` export."""

from __future__ import annotations

import asyncio
import csv
import io
import logging

import httpx

from .catalog import record_from_row
from .config import AlternateCatalogConfig
from .models import ItemRecord

logger = logging.getLogger(__name__)

# key row, label row, type row, default row
HEADER_LINES = 4
ID_COLUMN = "key: #"
NAME_COLUMN = "9: Name"
SINGULAR_COLUMN = "0: Singular"
SIMPLIFIED_LANGUAGE = "zh"


def parse_item_csv(text: str) -> list[ItemRecord]:
    """Parse the export into records, preferring ``Name`` over ``Singular``."""
    rows = list(csv.reader(io.StringIO(text)))
    if len(rows) < HEADER_LINES:
        return []
    keys, labels = rows[0], rows[1]
    columns = {f"{key.strip()}: {label.strip()}": i for i, (key, label) in enumerate(zip(keys, labels))}
    id_col = columns.get(ID_COLUMN, 0)
    name_col = columns.get(NAME_COLUMN)
    singular_col = columns.get(SINGULAR_COLUMN)

    records = []
    for row in rows[HEADER_LINES:]:
        if not row or id_col >= len(row):
            continue
        name = _cell(row, name_col) or _cell(row, singular_col)
        record = record_from_row(row[id_col].strip(), name, SIMPLIFIED_LANGUAGE)
        if record is not None:
            records.append(record)
    return records


def _cell(row: list[str], index: int | None) -> str:
    if index is None or index >= len(row):
        return ""
    return row[index].strip()


class SimplifiedCsvCatalog:
    """AlternateCatalogProvider that downloads and parses ``Item.csv`` once."""

    def __init__(
        self,
        csv_url: str | None = None,
        timeout_s: float | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        config = AlternateCatalogConfig()
        self._csv_url = csv_url or config.csv_url
        self._timeout_s = timeout_s or config.timeout_s
        self._transport = transport
        self._records: list[ItemRecord] | None = None
        self._lock = asyncio.Lock()

    @property
    def csv_url(self) -> str:
        return self._csv_url

    async def simplified_snapshot(self) -> list[ItemRecord]:
        if self._records is not None:
            return self._records
        async with self._lock:
            if self._records is None:
                self._records = await self._download()
        return self._records

    def clear(self) -> None:
        self._records = None

    async def _download(self) -> list[ItemRecord]:
        logger.info("[Catalog] Downloading simplified item names from %s", self._csv_url)
        async with httpx.AsyncClient(
            timeout=self._timeout_s, follow_redirects=True, transport=self._transport
        ) as client:
            response = await client.get(self._csv_url)
            response.raise_for_status()
        records = parse_item_csv(response.text)
        logger.info("[Catalog] Parsed %s simplified item names", len(records))
        return records
