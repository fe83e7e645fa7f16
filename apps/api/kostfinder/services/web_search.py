"""Google Custom Search client used to supplement the marketplace aggregate."""
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any

import httpx

from ..schemas.kosts import Listing, SearchFilters
from .cache import TTLCache
from .text_extraction import (
    clean_title,
    extract_address,
    extract_category,
    extract_contact,
    extract_facilities,
    extract_price,
)

GOOGLE_SEARCH_URL = "https://www.googleapis.com/customsearch/v1"
RESULTS_PER_QUERY = 10
SNIPPET_RATING = 4.0
SNIPPET_SOURCE = "google-search"
SNIPPET_DESCRIPTION = "Kos dari pencarian Google"

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SearchSnippet:
    title: str
    snippet: str
    link: str


class GoogleSearchClient:
    """Cached, time-bounded web search; ``search`` returns ``[]`` on any failure."""

    def __init__(
        self,
        api_key: str,
        engine_id: str,
        cache: TTLCache,
        *,
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.engine_id = engine_id
        self.timeout = timeout
        self._cache = cache
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.api_key and self.engine_id)

    async def search(self, query: str) -> list[SearchSnippet]:
        if not self.configured:
            logger.debug("Google search credentials not configured; skipping")
            return []

        cache_key = f"google-{query}"
        cached = self._cache.get(cache_key)
        if cached is not None:
            return list(cached)

        try:
            payload = await asyncio.wait_for(self._request(query), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning("Google search timed out after %.1fs", self.timeout)
            return []
        except httpx.HTTPError as exc:
            logger.warning("Google search failed: %s", exc)
            return []
        except ValueError as exc:
            logger.warning("Google search returned malformed JSON: %s", exc)
            return []
        except Exception:  # noqa: BLE001
            logger.exception("Google search raised unexpectedly")
            return []

        snippets = _parse_items(payload)
        self._cache.set(cache_key, snippets)
        return list(snippets)

    async def _request(self, query: str) -> Any:
        params = {"q": query, "key": self.api_key, "cx": self.engine_id, "num": str(RESULTS_PER_QUERY)}
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.get(GOOGLE_SEARCH_URL, params=params)
        response.raise_for_status()
        return response.json()


def _parse_items(payload: Any) -> list[SearchSnippet]:
    items = payload.get("items") if isinstance(payload, dict) else None
    if not isinstance(items, list):
        return []

    snippets: list[SearchSnippet] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        snippets.append(
            SearchSnippet(
                title=str(item.get("title") or ""),
                snippet=str(item.get("snippet") or ""),
                link=str(item.get("link") or ""),
            )
        )
    return snippets


def snippet_to_listing(snippet: SearchSnippet, filters: SearchFilters, index: int) -> Listing:
    """Turn one search result into a listing using the text-extraction helpers."""

    contact = extract_contact(snippet.snippet)
    return Listing(
        id=f"google-{int(time.time() * 1000)}-{index}",
        name=clean_title(snippet.title),
        address=extract_address(snippet.snippet),
        price=extract_price(snippet.snippet, filters.max_budget),
        facilities=extract_facilities(snippet.snippet),
        category=extract_category(snippet.snippet),
        available=True,
        source=snippet.link or SNIPPET_SOURCE,
        source_url=snippet.link or None,
        rating=SNIPPET_RATING,
        whatsapp=contact or None,
        description=snippet.snippet or SNIPPET_DESCRIPTION,
    )
