"""Search and chat endpoints."""
from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from ..schemas.kosts import DEFAULT_MAX_BUDGET, Category, SearchFilters
from ..services import llm
from ..services.search import SearchService, get_search_service

logger = logging.getLogger(__name__)

router = APIRouter()


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


@router.get("/search")
async def search_kosts(
    location: str = Query(default=""),
    max_budget: str = Query(default=str(DEFAULT_MAX_BUDGET), alias="maxBudget"),
    facilities: str = Query(default=""),
    category: str = Query(default=Category.ANY.value, alias="type"),
    max_distance: Optional[str] = Query(default=None, alias="maxDistance"),
    service: SearchService = Depends(get_search_service),
) -> Any:
    """Return ranked hits for the query string filters."""

    try:
        filters = SearchFilters(
            location=location,
            maxBudget=max_budget,
            facilities=facilities,
            type=category,
            maxDistance=max_distance or None,
        )
    except ValidationError as exc:
        logger.warning("Rejected search filters: %s", exc)
        return _error("Invalid search filters", 400)

    try:
        hits = await service.search(filters)
    except Exception:  # noqa: BLE001
        logger.exception("Search failed for %r", filters.location)
        return _error("Failed to search kosts", 500)
    return [hit.to_payload() for hit in hits]


async def _handle_chat(payload: Optional[dict[str, Any]], service: SearchService) -> Any:
    message = payload.get("message") if isinstance(payload, dict) else None
    if not isinstance(message, str) or not message.strip():
        return _error("Message is required", 400)

    try:
        filters = await llm.extract_filters(message)
        if filters is not None:
            hits = await service.search(filters)
            return {"results": [hit.to_payload() for hit in hits], "filters": filters.to_wire()}
        reply = await llm.chat_reply(message)
    except Exception:  # noqa: BLE001
        logger.exception("Chat request failed")
        return _error("Failed to process chat", 500)
    return {"message": reply, "type": "chat"}


@router.post("/search")
async def chat_search(
    payload: Optional[dict[str, Any]] = Body(default=None),
    service: SearchService = Depends(get_search_service),
) -> Any:
    """Extract filters from a chat message and search, or answer as the assistant."""

    return await _handle_chat(payload, service)


@router.post("/chat")
async def chat(
    payload: Optional[dict[str, Any]] = Body(default=None),
    service: SearchService = Depends(get_search_service),
) -> Any:
    return await _handle_chat(payload, service)
