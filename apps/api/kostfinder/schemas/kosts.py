"""Schemas for kost listings, search filters and search hits."""
from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, ClassVar, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_MAX_BUDGET = 1_000_000
GENERATED_SOURCE = "generated"


class Category(str, enum.Enum):
    """Occupancy category of a kost, serialized with the Indonesian tokens."""

    MALE = "Putra"
    FEMALE = "Putri"
    MIXED = "Campur"
    ANY = "Semua"

    @classmethod
    def parse(cls, value: object, default: "Category") -> "Category":
        """Map a wire token or English name onto a category, failing closed to ``default``."""

        if isinstance(value, Category):
            return value
        if not isinstance(value, str):
            return default
        token = value.strip().lower()
        for member in cls:
            if token in (member.value.lower(), member.name.lower()):
                return member
        return default


def clamp_price(value: int | float | None, max_budget: int) -> int:
    """Clamp a price into ``[0, max_budget]``."""

    if value is None:
        return 0
    return max(0, min(int(value), max_budget))


class SearchFilters(BaseModel):
    """A single search request. Constructed per request and never mutated."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    location: str = Field(default="")
    max_budget: int = Field(default=DEFAULT_MAX_BUDGET, ge=0, alias="maxBudget")
    facilities: list[str] = Field(default_factory=list)
    category: Category = Field(default=Category.ANY, alias="type")
    max_distance_km: float | None = Field(default=None, ge=0, alias="maxDistance")

    @field_validator("location", mode="before")
    @classmethod
    def _coerce_location(cls, value: object) -> object:
        if value is None:
            return ""
        return str(value).strip() if isinstance(value, (str, int, float)) else value

    @field_validator("facilities", mode="before")
    @classmethod
    def _split_facilities(cls, value: object) -> object:
        if value is None:
            return []
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        if isinstance(value, (list, tuple)):
            return [str(item).strip() for item in value if str(item).strip()]
        return value

    @field_validator("category", mode="before")
    @classmethod
    def _parse_category(cls, value: object) -> Category:
        return Category.parse(value, default=Category.ANY)

    def cache_key(self, provider: str) -> str:
        """Deterministic cache key for ``provider`` and the filters sent upstream.

        ``max_distance_km`` is accepted but not applied to any search, so it is left out.
        """

        return f"{provider}-{self.model_dump_json(by_alias=True, exclude={'max_distance_km'})}"

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Listing(BaseModel):
    """Canonical normalized record for one rentable unit."""

    id: str
    name: str
    address: str
    price: int = Field(ge=0)
    distance_km: float | None = Field(default=None, ge=0)
    facilities: list[str] = Field(default_factory=list)
    category: Category = Category.MIXED
    available: bool = True
    source: str
    source_url: str | None = None
    rating: float | None = Field(default=None, ge=1.0, le=5.0)
    coordinates: tuple[float, float] | None = None
    contact: str | None = None
    whatsapp: str | None = None
    description: str | None = None
    images: list[str] = Field(default_factory=list)
    district: str | None = None
    city: str | None = None
    province: str | None = None
    nearby_campuses: list[str] = Field(default_factory=list)
    nearby_malls: list[str] = Field(default_factory=list)
    nearby_transport: list[str] = Field(default_factory=list)
    extra_costs: list[str] = Field(default_factory=list)
    rules: list[str] = Field(default_factory=list)
    highlights: list[str] = Field(default_factory=list)

    @field_validator("facilities")
    @classmethod
    def _dedupe_facilities(cls, value: list[str]) -> list[str]:
        return list(dict.fromkeys(value))

    @property
    def dedupe_key(self) -> tuple[str, int]:
        return self.address, self.price


@dataclass(frozen=True, slots=True)
class Sourced:
    """A listing that came from a provider or web search."""

    listing: Listing
    synthetic: ClassVar[bool] = False

    def to_payload(self) -> dict[str, Any]:
        return {**self.listing.model_dump(mode="json"), "synthetic": self.synthetic}


@dataclass(frozen=True, slots=True)
class Synthetic:
    """A listing produced by the language model or the local generator."""

    listing: Listing
    synthetic: ClassVar[bool] = True

    def to_payload(self) -> dict[str, Any]:
        return {**self.listing.model_dump(mode="json"), "synthetic": self.synthetic}


SearchHit = Union[Sourced, Synthetic]
