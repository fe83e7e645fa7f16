"""Rumah123 property portal connector."""
from __future__ import annotations

from ...schemas.kosts import SearchFilters
from .base import ProviderAdapter, ProviderProfile


class Rumah123Adapter(ProviderAdapter):
    profile = ProviderProfile(
        name="rumah123",
        source="rumah123.com",
        base_url="https://api.rumah123.com/v1",
        search_path="/properties/search",
        envelope_key="properties",
        default_name="Kos Rumah123",
        default_description="Kos dari Rumah123",
    )

    def build_params(self, filters: SearchFilters) -> dict[str, str]:
        return {
            "location": filters.location,
            "price_max": str(filters.max_budget),
            "property_type": "kos",
            "limit": "15",
            "page": "1",
        }
