"""Item search endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field, field_validator

from xiv_helper.application import LookupServiceError
from xiv_helper.bootstrap import get_container

router = APIRouter()


class OcrSearchRequest(BaseModel):
    """Recognized text from the screenshot reader."""

    text: str = Field(..., description="Recognized item name")
    confidence: float | None = Field(default=None, description="Recognizer confidence (0-100)")

    @field_validator("confidence")
    @classmethod
    def check_confidence(cls, value: float | None) -> float | None:
        if value is not None and not 0 <= value <= 100:
            raise ValueError("confidence must be between 0 and 100")
        return value


@router.get("/items/search")
async def search_items(q: str, fuzzy: bool = False) -> dict[str, Any]:
    return await get_container().lookup.search_items(query=q, fuzzy=fuzzy)


@router.post("/items/ocr-search")
async def ocr_search(request: OcrSearchRequest) -> dict[str, Any]:
    return await get_container().lookup.ocr_search(text=request.text, confidence=request.confidence)


@router.get("/items/{item_id}")
async def get_item(item_id: int, simplified: bool = False) -> dict[str, Any]:
    try:
        return await get_container().lookup.get_item(item_id, include_simplified=simplified)
    except LookupServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc
