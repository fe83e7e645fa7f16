"""Endpoints over the bundled kost data and its sync jobs."""
from __future__ import annotations

import asyncio
import json
import logging
from functools import lru_cache
from typing import Any

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from ..core.config import settings
from ..repositories.kosts import KostStore
from ..services import sync as sync_service
from ..services.aggregator import Aggregator
from ..services.search import get_aggregator, get_web_search
from ..services.web_search import GoogleSearchClient

logger = logging.getLogger(__name__)

router = APIRouter()


@lru_cache
def get_kost_store() -> KostStore:
    return KostStore(settings.kost_data_path)


@router.get("/kosts")
async def list_kosts(store: KostStore = Depends(get_kost_store)) -> Any:
    """Return the stored kosts exactly as they appear in the file."""

    loop = asyncio.get_running_loop()
    try:
        raw = await loop.run_in_executor(None, store.read_raw)
        kosts = json.loads(raw)
    except (OSError, ValueError):
        logger.exception("Failed to read kosts from %s", store.path)
        return JSONResponse({"error": "Failed to load kosts"}, status_code=500)
    return kosts


@router.post("/sync")
async def sync_kosts(store: KostStore = Depends(get_kost_store)) -> Any:
    loop = asyncio.get_running_loop()
    try:
        added = await loop.run_in_executor(None, sync_service.append_placeholder, store)
    except (OSError, ValueError):
        logger.exception("Failed to sync kosts into %s", store.path)
        return JSONResponse({"error": "Failed to sync data"}, status_code=500)
    return {"success": True, "message": "Data synchronized successfully", "newKosts": added}


@router.post("/sync/realtime")
async def sync_realtime(
    keyword: str = Query(default=sync_service.DEFAULT_KEYWORD),
    aggregator: Aggregator = Depends(get_aggregator),
    web_search: GoogleSearchClient = Depends(get_web_search),
) -> Any:
    """Collect fresh listings for ``keyword`` from providers and web search."""

    try:
        report = await sync_service.sync_realtime(keyword, aggregator, web_search)
    except Exception:  # noqa: BLE001
        logger.exception("Real-time sync failed for %r", keyword)
        return JSONResponse({"error": "Failed to sync data"}, status_code=500)
    return report.to_payload()
