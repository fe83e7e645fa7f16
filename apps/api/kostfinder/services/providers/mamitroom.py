"""Mamitroom marketplace connector."""
from __future__ import annotations

from ...schemas.kosts import SearchFilters
from .base import ProviderAdapter, ProviderProfile


class MamitroomAdapter(ProviderAdapter):
    profile = ProviderProfile(
        name="mamitroom",
        source="mamitroom.com",
        base_url="https://api.mamitroom.com/v1",
        search_path="/kos/search",
        envelope_key="kos",
        default_name="Kos Mamitroom",
        default_description="Kos dari Mamitroom",
    )

    def build_params(self, filters: SearchFilters) -> dict[str, str]:
        return {
            "location": filters.location,
            "max_price": str(filters.max_budget),
            "type": filters.category.value,
            "facilities": ",".join(filters.facilities),
            "limit": "12",
            "page": "1",
        }
