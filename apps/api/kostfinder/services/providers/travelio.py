"""Travelio monthly rental connector."""
from __future__ import annotations

from ...schemas.kosts import SearchFilters
from .base import ProviderAdapter, ProviderProfile


class TravelioAdapter(ProviderAdapter):
    profile = ProviderProfile(
        name="travelio",
        source="travelio.com",
        base_url="https://api.travelio.com/v1",
        search_path="/properties",
        envelope_key="data",
        default_name="Kos Travelio",
        default_description="Kos dari Travelio",
    )

    def build_params(self, filters: SearchFilters) -> dict[str, str]:
        return {
            "city": filters.location,
            "max_price": str(filters.max_budget),
            "property_type": "kost",
            "limit": "10",
            "page": "1",
        }
