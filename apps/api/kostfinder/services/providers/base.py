"""Base adapter for external kost marketplace APIs."""
from __future__ import annotations

import asyncio
import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, ClassVar

import httpx
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from ...schemas.kosts import Category, Listing, SearchFilters, clamp_price
from ..cache import TTLCache

DEFAULT_PRICE = 1_000_000
DEFAULT_RATING = 4.0
DEFAULT_ADDRESS = "Alamat tidak tersedia"

logger = logging.getLogger(__name__)


def _coerce_text(value: object) -> str | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (str, int, float)):
        text = str(value).strip()
        return text or None
    return None


def _coerce_int(value: object) -> int | None:
    """Parse prices such as 850000, 850000.0 or 'Rp 850.000'."""

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(round(value))
    if isinstance(value, str):
        digits = re.sub(r"[^\d]", "", value)
        return int(digits) if digits else None
    return None


def _coerce_float(value: object) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None


def coerce_strings(value: object) -> list[str]:
    if not isinstance(value, (list, tuple)):
        return []
    return [text for text in (_coerce_text(item) for item in value) if text]


class ProviderItem(BaseModel):
    """Lenient schema for one provider record; invalid fields become ``None``."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str | None = None
    name: str | None = None
    address: str | None = Field(default=None, validation_alias=AliasChoices("address", "location"))
    price: int | None = None
    distance: float | None = None
    facilities: list[str] = Field(default_factory=list)
    type: str | None = None
    available: bool | None = None
    rating: float | None = None
    images: list[str] = Field(default_factory=list)
    description: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    contact: str | None = Field(default=None, validation_alias=AliasChoices("contact", "phone"))
    whatsapp: str | None = None

    @field_validator("id", "name", "address", "type", "description", "contact", "whatsapp", mode="before")
    @classmethod
    def _text(cls, value: object) -> str | None:
        return _coerce_text(value)

    @field_validator("price", mode="before")
    @classmethod
    def _price(cls, value: object) -> int | None:
        return _coerce_int(value)

    @field_validator("latitude", "longitude", mode="before")
    @classmethod
    def _coordinate(cls, value: object) -> float | None:
        return _coerce_float(value)

    @field_validator("distance", mode="before")
    @classmethod
    def _distance(cls, value: object) -> float | None:
        distance = _coerce_float(value)
        return distance if distance is not None and distance >= 0 else None

    @field_validator("rating", mode="before")
    @classmethod
    def _rating(cls, value: object) -> float | None:
        rating = _coerce_float(value)
        return rating if rating is not None and 1.0 <= rating <= 5.0 else None

    @field_validator("available", mode="before")
    @classmethod
    def _available(cls, value: object) -> bool | None:
        return value if isinstance(value, bool) else None

    @field_validator("facilities", "images", mode="before")
    @classmethod
    def _strings(cls, value: object) -> list[str]:
        return coerce_strings(value)


@dataclass(frozen=True, slots=True)
class ProviderProfile:
    """Static description of one marketplace integration."""

    name: str
    source: str
    base_url: str
    search_path: str
    envelope_key: str
    default_name: str
    default_description: str


def to_listing(item: ProviderItem, filters: SearchFilters, *, profile: ProviderProfile, index: int) -> Listing:
    """Map a validated provider record onto the canonical listing."""

    price = item.price if item.price is not None else DEFAULT_PRICE
    coordinates = None
    if item.latitude is not None and item.longitude is not None:
        coordinates = (item.latitude, item.longitude)

    return Listing(
        id=f"{profile.name}-{item.id if item.id is not None else index}",
        name=item.name or profile.default_name,
        address=item.address or DEFAULT_ADDRESS,
        price=clamp_price(price, filters.max_budget),
        distance_km=item.distance,
        facilities=item.facilities,
        category=Category.parse(item.type, default=Category.MIXED),
        available=item.available if item.available is not None else True,
        source=profile.source,
        rating=item.rating if item.rating is not None else DEFAULT_RATING,
        coordinates=coordinates,
        contact=item.contact,
        whatsapp=item.whatsapp,
        description=item.description or profile.default_description,
        images=item.images,
    )


class ProviderAdapter(ABC):
    """Fetch, cache and normalize listings from one marketplace.

    ``fetch`` never raises: missing credentials, timeouts, transport errors and
    malformed payloads all degrade to an empty list.
    """

    profile: ClassVar[ProviderProfile]
    item_model: ClassVar[type[ProviderItem]] = ProviderItem

    def __init__(
        self,
        api_key: str,
        cache: TTLCache,
        *,
        timeout: float = 30.0,
        base_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.timeout = timeout
        self.base_url = base_url or self.profile.base_url
        self._cache = cache
        self._transport = transport

    @property
    def name(self) -> str:
        return self.profile.name

    @abstractmethod
    def build_params(self, filters: SearchFilters) -> dict[str, str]:
        """Query parameters for the provider's search endpoint."""

    def auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}"}

    async def fetch(self, filters: SearchFilters) -> list[Listing]:
        if not self.api_key:
            logger.debug("%s API key not configured; skipping", self.name)
            return []

        cache_key = filters.cache_key(self.name)
        cached = self._cache.get(cache_key)
        if cached is not None:
            return list(cached)

        try:
            payload = await asyncio.wait_for(self._request(filters), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning("%s request timed out after %.1fs", self.name, self.timeout)
            return []
        except httpx.HTTPError as exc:
            logger.warning("%s request failed: %s", self.name, exc)
            return []
        except ValueError as exc:
            logger.warning("%s returned malformed JSON: %s", self.name, exc)
            return []
        except Exception:  # noqa: BLE001
            logger.exception("%s request raised unexpectedly", self.name)
            return []

        listings = self.parse_payload(payload, filters)
        self._cache.set(cache_key, listings)
        return list(listings)

    async def _request(self, filters: SearchFilters) -> Any:
        headers = {**self.auth_headers(), "Content-Type": "application/json"}
        async with httpx.AsyncClient(
            base_url=self.base_url, timeout=self.timeout, transport=self._transport
        ) as client:
            response = await client.get(self.profile.search_path, params=self.build_params(filters), headers=headers)
        response.raise_for_status()
        return response.json()

    def parse_payload(self, payload: Any, filters: SearchFilters) -> list[Listing]:
        """Validate the response envelope and map every usable record."""

        items = payload.get(self.profile.envelope_key) if isinstance(payload, dict) else None
        if not isinstance(items, list):
            logger.warning("%s response has no %r list", self.name, self.profile.envelope_key)
            return []

        listings: list[Listing] = []
        for index, raw in enumerate(items):
            if not isinstance(raw, dict):
                logger.warning("%s skipped non-object record at index %d", self.name, index)
                continue
            try:
                item = self.item_model.model_validate(raw)
                listings.append(to_listing(item, filters, profile=self.profile, index=index))
            except ValidationError as exc:
                logger.warning("%s skipped invalid record at index %d: %s", self.name, index, exc)
        return listings
