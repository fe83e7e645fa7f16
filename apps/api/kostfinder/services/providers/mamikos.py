"""Mamikos marketplace connector."""
from __future__ import annotations

from ...schemas.kosts import SearchFilters
from .base import ProviderAdapter, ProviderProfile


class MamikosAdapter(ProviderAdapter):
    """Search ``/kos/search`` on the Mamikos partner API."""

    profile = ProviderProfile(
        name="mamikos",
        source="mamikos.com",
        base_url="https://api.mamikos.com/v1",
        search_path="/kos/search",
        envelope_key="data",
        default_name="Kos Mamikos",
        default_description="Kos nyaman dengan fasilitas lengkap",
    )

    def build_params(self, filters: SearchFilters) -> dict[str, str]:
        return {
            "location": filters.location,
            "max_price": str(filters.max_budget),
            "type": filters.category.value.lower(),
            "facilities": ",".join(filters.facilities),
            "limit": "20",
            "page": "1",
        }
