"""Concurrent fan-out over every marketplace adapter."""
from __future__ import annotations

import asyncio
import logging
from typing import Iterable, Sequence

from ..schemas.kosts import Listing, SearchFilters
from .providers.base import ProviderAdapter

logger = logging.getLogger(__name__)


def dedupe_listings(listings: Iterable[Listing]) -> list[Listing]:
    """Drop repeated ``(address, price)`` pairs, keeping the first occurrence.

    Two distinct kosts that share both fields are merged, and one kost re-priced by
    another provider is not; the key is kept as-is.
    """

    seen: set[tuple[str, int]] = set()
    unique: list[Listing] = []
    for listing in listings:
        key = listing.dedupe_key
        if key in seen:
            continue
        seen.add(key)
        unique.append(listing)
    return unique


def rank_listings(listings: Iterable[Listing]) -> list[Listing]:
    """Sort by price ascending, then rating descending (missing rating counts as 0)."""

    return sorted(listings, key=lambda item: (item.price, -(item.rating or 0.0)))


def merge_listings(batches: Iterable[Sequence[Listing]]) -> list[Listing]:
    """Concatenate batches in order, dedupe, then rank."""

    combined = [listing for batch in batches for listing in batch]
    return rank_listings(dedupe_listings(combined))


class Aggregator:
    """Run all adapters concurrently and wait for every one of them to settle."""

    def __init__(self, adapters: Sequence[ProviderAdapter]) -> None:
        self._adapters = list(adapters)

    @property
    def adapters(self) -> list[ProviderAdapter]:
        return list(self._adapters)

    async def collect(self, filters: SearchFilters) -> list[Listing]:
        logger.info("Collecting listings for %r from %d providers", filters.location, len(self._adapters))
        outcomes = await asyncio.gather(
            *(adapter.fetch(filters) for adapter in self._adapters),
            return_exceptions=True,
        )

        batches: list[list[Listing]] = []
        for adapter, outcome in zip(self._adapters, outcomes):
            if isinstance(outcome, BaseException):
                logger.error("%s adapter raised %r; treating as empty", adapter.name, outcome)
                batches.append([])
                continue
            logger.info("%s: %d listings", adapter.name, len(outcome))
            batches.append(outcome)

        merged = merge_listings(batches)
        logger.info("Total unique listings: %d", len(merged))
        return merged
