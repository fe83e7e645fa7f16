"""Sync jobs that refresh the bundled kost data from external sources."""
from __future__ import annotations

import asyncio
import logging
import re
import time
from dataclasses import dataclass, field
from typing import Any

from ..repositories.kosts import KostStore
from ..schemas.kosts import Category, Listing, SearchFilters
from .aggregator import Aggregator, merge_listings
from .text_extraction import extract_budget
from .web_search import GoogleSearchClient, snippet_to_listing

DEFAULT_KEYWORD = "kos murah"
DEFAULT_SYNC_LOCATION = "Bandung"
DEFAULT_SYNC_BUDGET = 2_000_000
KEYWORD_LOCATION_PATTERN = re.compile(r"kos\s+(\w+)", re.I)

logger = logging.getLogger(__name__)


def placeholder_listing(now_ms: int | None = None) -> Listing:
    """The simulated listing appended by a manual sync."""

    stamp = now_ms if now_ms is not None else int(time.time() * 1000)
    return Listing(
        id=f"sync-{stamp}",
        name="Kos Update dari Sync",
        address="Hasil Pencarian Google - Area Bandung",
        price=800_000,
        distance_km=2.5,
        facilities=["WiFi", "Parkir Motor"],
        category=Category.MIXED,
        available=True,
        source="google-search",
        rating=4.0,
    )


def append_placeholder(store: KostStore) -> int:
    listing = placeholder_listing()
    added = store.append([listing.model_dump(mode="json", exclude_none=True)])
    logger.info("Appended %d synced kost(s) to %s", added, store.path)
    return added


def filters_from_keyword(keyword: str) -> SearchFilters:
    """Derive filters from a search keyword such as ``"kos jatinangor 1.5 jt"``."""

    location = DEFAULT_SYNC_LOCATION
    match = KEYWORD_LOCATION_PATTERN.search(keyword or "")
    if match:
        location = match.group(1)
    budget = extract_budget(keyword)
    return SearchFilters(
        location=location,
        max_budget=budget if budget is not None else DEFAULT_SYNC_BUDGET,
        category=Category.ANY,
    )


@dataclass(slots=True)
class SyncReport:
    keyword: str
    filters: SearchFilters
    listings: list[Listing] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.listings)

    @property
    def sources(self) -> list[str]:
        return list(dict.fromkeys(listing.source for listing in self.listings))

    @property
    def price_range(self) -> dict[str, int] | None:
        if not self.listings:
            return None
        prices = [listing.price for listing in self.listings]
        return {"min": min(prices), "max": max(prices)}

    def to_payload(self) -> dict[str, Any]:
        return {
            "keyword": self.keyword,
            "filters": self.filters.to_wire(),
            "total": self.total,
            "sources": self.sources,
            "priceRange": self.price_range,
            "results": [listing.model_dump(mode="json") for listing in self.listings],
        }


async def sync_realtime(keyword: str, aggregator: Aggregator, web_search: GoogleSearchClient) -> SyncReport:
    """Combine the provider aggregate with web-search snippets for ``keyword``.

    The combined list is deduped and then ranked by price and rating, like a search.
    """

    keyword = keyword.strip() or DEFAULT_KEYWORD
    filters = filters_from_keyword(keyword)
    logger.info("Starting real-time sync for %r", keyword)

    provider_listings, snippets = await asyncio.gather(
        aggregator.collect(filters),
        web_search.search(keyword),
    )
    snippet_listings = [snippet_to_listing(snippet, filters, index) for index, snippet in enumerate(snippets)]

    report = SyncReport(
        keyword=keyword,
        filters=filters,
        listings=merge_listings([provider_listings, snippet_listings]),
    )
    logger.info("Sync complete: %d listings from %d sources", report.total, len(report.sources))
    return report
