"""OLX Indonesia classifieds connector."""
from __future__ import annotations

from pydantic import AliasChoices, Field, model_validator

from ...schemas.kosts import SearchFilters
from .base import ProviderAdapter, ProviderItem, ProviderProfile


class OLXItem(ProviderItem):
    """OLX classifieds use ``title``/``location`` and flag sold ads instead of availability."""

    name: str | None = Field(default=None, validation_alias=AliasChoices("title", "name"))
    address: str | None = Field(default=None, validation_alias=AliasChoices("location"))
    contact: str | None = Field(default=None, validation_alias=AliasChoices("contact_phone"))
    whatsapp: str | None = Field(default=None, validation_alias=AliasChoices("contact_whatsapp"))
    sold: bool = False

    @model_validator(mode="after")
    def _apply_classified_rules(self) -> "OLXItem":
        # Classified ads carry no distance or rating of their own.
        self.available = not self.sold
        self.distance = None
        self.rating = None
        return self


class OLXAdapter(ProviderAdapter):
    """Search the OLX listings API within the kos subcategory."""

    profile = ProviderProfile(
        name="olx",
        source="olx.co.id",
        base_url="https://api.olx.co.id/v1",
        search_path="/listings",
        envelope_key="listings",
        default_name="Kos OLX",
        default_description="Kos dari OLX",
    )
    item_model = OLXItem

    def auth_headers(self) -> dict[str, str]:
        return {"X-API-Key": self.api_key}

    def build_params(self, filters: SearchFilters) -> dict[str, str]:
        return {
            "q": f"kos {filters.location}".strip(),
            "price_max": str(filters.max_budget),
            "category": "rumah-dijual-dan-disewakan",
            "subcategory": "kos",
            "limit": "15",
            "page": "1",
        }
