"""Search orchestration: marketplace aggregate first, generative fallback second."""
from __future__ import annotations

import logging
from functools import lru_cache

from ..core.config import settings
from ..schemas.kosts import SearchFilters, SearchHit, Sourced
from . import generative
from .aggregator import Aggregator
from .cache import TTLCache
from .providers.registry import build_adapters
from .web_search import GoogleSearchClient

logger = logging.getLogger(__name__)


class SearchService:
    """Resolve a query to tagged hits; never returns an empty list."""

    def __init__(self, aggregator: Aggregator, *, result_limit: int = 20) -> None:
        self.aggregator = aggregator
        self.result_limit = result_limit

    async def search(self, filters: SearchFilters) -> list[SearchHit]:
        listings = await self.aggregator.collect(filters)
        if listings:
            return [Sourced(listing) for listing in listings[: self.result_limit]]

        logger.info("No provider listings for %r; using generative fallback", filters.location)
        hits = await generative.generate_listings(filters)
        return list(hits[: self.result_limit])


@lru_cache
def get_cache() -> TTLCache:
    """Process-wide cache shared by the adapters and the web-search client."""

    return TTLCache(ttl_seconds=settings.cache_ttl_seconds, max_entries=settings.cache_max_entries)


@lru_cache
def get_aggregator() -> Aggregator:
    return Aggregator(build_adapters(settings, get_cache()))


@lru_cache
def get_web_search() -> GoogleSearchClient:
    return GoogleSearchClient(
        settings.google_api_key,
        settings.custom_search_engine_id,
        get_cache(),
        timeout=settings.web_search_timeout_seconds,
    )


@lru_cache
def get_search_service() -> SearchService:
    return SearchService(get_aggregator(), result_limit=settings.search_result_limit)
