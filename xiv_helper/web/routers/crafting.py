"""Crafting tree endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException

from xiv_helper.application import LookupServiceError
from xiv_helper.bootstrap import get_container

router = APIRouter(prefix="/crafting")


@router.get("/{item_id}/tree")
async def crafting_tree(item_id: int, amount: int = 1) -> dict[str, Any]:
    try:
        return await get_container().lookup.crafting_tree(item_id, amount=amount)
    except LookupServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc


@router.get("/{item_id}/materials")
async def crafting_materials(item_id: int, amount: int = 1) -> dict[str, Any]:
    try:
        return await get_container().lookup.crafting_materials(item_id, amount=amount)
    except LookupServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc


@router.get("/{item_id}/related")
async def related_items(item_id: int) -> dict[str, Any]:
    try:
        return await get_container().lookup.related_items(item_id)
    except LookupServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc
