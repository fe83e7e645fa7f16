"""Generative fallback used when no marketplace returns anything."""
from __future__ import annotations

import logging
import random
from typing import Optional

from pydantic import AliasChoices, Field, ValidationError, field_validator

from ..data.cities import city_profile
from ..schemas.kosts import GENERATED_SOURCE, Category, Listing, SearchFilters, Synthetic, clamp_price
from . import llm
from .providers.base import DEFAULT_ADDRESS, DEFAULT_PRICE, DEFAULT_RATING, ProviderItem, coerce_strings
from .text_extraction import find_json_literal

SEARCH_PROMPT = """Generate realistic Indonesian kos/kost listings with these criteria:
  Location: {location}
  Max Budget: Rp {budget:,} per month
  Facilities: {facilities}
  Type: {category}

Return only a JSON array. Each element must be an object with:
  - name: kos name
  - address: complete address with landmark references
  - price: monthly price in rupiah (integer, at most {budget})
  - facilities: list of facilities
  - category: Putra, Putri or Campur
  - rating: 1-5
  - description: short description with unique selling points
  - latitude, longitude: coordinates
  - distance_km: distance from the nearest campus
  - contact: WhatsApp number (format 628xxxxxxxxx)
  - district, city, province
  - nearby_campuses, nearby_malls, nearby_transport: lists of landmarks
  - extra_costs, rules, highlights: lists of short strings
Use current market rates and landmarks that really exist in the location."""

DEFAULT_GENERATED_NAME = "Kos Pilihan"
DEFAULT_GENERATED_DESCRIPTION = "Kos nyaman dengan fasilitas lengkap"
SYNTHETIC_TARGET_FACILITIES = 8
PRICE_STEP = 50_000
PRICE_CEILING = 2_000_000

CATEGORY_MULTIPLIERS = {Category.MALE: 1.0, Category.FEMALE: 1.1, Category.MIXED: 0.9}
BASE_FACILITIES = ("WiFi", "AC", "Kamar Mandi Dalam", "Spring Bed", "Lemari", "Meja Belajar")
PREMIUM_FACILITIES = (
    "Smart TV",
    "Kulkas Mini",
    "Dispenser",
    "CCTV Security",
    "Akses 24 Jam",
    "Dapur Bersama",
    "Rooftop Garden",
    "Gym Mini",
    "Laundry",
)
PHONE_PREFIXES = ("62811", "62812", "62813", "62821", "62822", "62823", "62852", "62853", "62881", "62882")
IMAGE_IDS = (
    "1522771731443-4a6f2d3fbc4c",
    "1502672260266-1c1ef2d93688",
    "1493809842364-78817d7e3ef7",
    "1505691938895-60b36390c4de",
    "1522708329358-968a97250483",
    "1507089947367-2c5e2e8c2cca",
)
DESCRIPTIONS = (
    "Kos {category} nyaman di {location} dengan fasilitas lengkap. Dekat kampus dan tempat belanja.",
    "Kos {category} di lokasi strategis {location}. Akses mudah ke transportasi umum.",
    "Kos {category} modern dengan konsep minimalis di {location}. Lokasi sangat strategis.",
    "Kos {category} di {location} dengan lingkungan tenang dan asri, cocok untuk yang mengutamakan privasi.",
)
EXTRA_COSTS = (
    "Listrik: Rp 150.000 - 300.000/bulan",
    "Air: Rp 50.000 - 100.000/bulan",
    "WiFi: Rp 100.000 - 200.000/bulan",
    "Keamanan: Rp 50.000 - 100.000/bulan",
    "Kebersihan: Rp 50.000 - 100.000/bulan",
)
HOUSE_RULES = (
    "Tidak boleh membawa tamu lawan jenis ke kamar",
    "Tidak boleh merokok di dalam kamar",
    "Wajib menjaga kebersihan kamar dan lingkungan",
    "Dilarang membawa hewan peliharaan",
    "Jam malam berlaku setelah jam 22:00",
)
HIGHLIGHTS = (
    "Lokasi strategis dekat kampus dan tempat belanja",
    "Lingkungan aman dengan CCTV 24 jam",
    "Fasilitas lengkap siap huni",
    "Akses mudah ke transportasi umum",
    "Area parkir luas untuk motor dan mobil",
)

logger = logging.getLogger(__name__)


class GeneratedItem(ProviderItem):
    """One object from the model's JSON array; accepts English or Indonesian keys."""

    name: str | None = Field(default=None, validation_alias=AliasChoices("name", "nama"))
    address: str | None = Field(default=None, validation_alias=AliasChoices("address", "alamat"))
    price: int | None = Field(default=None, validation_alias=AliasChoices("price", "harga"))
    distance: float | None = Field(default=None, validation_alias=AliasChoices("distance_km", "jarak_km"))
    facilities: list[str] = Field(default_factory=list, validation_alias=AliasChoices("facilities", "fasilitas"))
    type: str | None = Field(default=None, validation_alias=AliasChoices("category", "type", "tipe"))
    description: str | None = Field(default=None, validation_alias=AliasChoices("description", "deskripsi"))
    contact: str | None = Field(default=None, validation_alias=AliasChoices("contact", "kontak"))
    district: str | None = Field(default=None, validation_alias=AliasChoices("district", "kecamatan"))
    city: str | None = Field(default=None, validation_alias=AliasChoices("city", "kota"))
    province: str | None = Field(default=None, validation_alias=AliasChoices("province", "provinsi"))
    nearby_campuses: list[str] = Field(default_factory=list, validation_alias=AliasChoices("nearby_campuses", "dekat_kampus"))
    nearby_malls: list[str] = Field(default_factory=list, validation_alias=AliasChoices("nearby_malls", "dekat_mall"))
    nearby_transport: list[str] = Field(
        default_factory=list, validation_alias=AliasChoices("nearby_transport", "dekat_transport")
    )
    extra_costs: list[str] = Field(default_factory=list, validation_alias=AliasChoices("extra_costs", "biaya_tambahan"))
    rules: list[str] = Field(default_factory=list, validation_alias=AliasChoices("rules", "peraturan"))
    highlights: list[str] = Field(default_factory=list, validation_alias=AliasChoices("highlights", "keunggulan"))

    @field_validator("district", "city", "province", mode="before")
    @classmethod
    def _place(cls, value: object) -> str | None:
        return value.strip() or None if isinstance(value, str) else None

    @field_validator(
        "nearby_campuses", "nearby_malls", "nearby_transport", "extra_costs", "rules", "highlights", mode="before"
    )
    @classmethod
    def _string_lists(cls, value: object) -> list[str]:
        return coerce_strings(value)


def build_search_prompt(filters: SearchFilters) -> str:
    return SEARCH_PROMPT.format(
        location=filters.location or "Indonesia",
        budget=filters.max_budget,
        facilities=", ".join(filters.facilities) or "bebas",
        category=filters.category.value,
    )


def _fallback_category(filters: SearchFilters) -> Category:
    return Category.MIXED if filters.category is Category.ANY else filters.category


def _generated_id(rng: random.Random) -> str:
    return f"{rng.getrandbits(48):012x}"


def parse_generated_listings(
    text: str, filters: SearchFilters, rng: Optional[random.Random] = None
) -> list[Listing]:
    """Map the first JSON array found in a model reply onto listings."""

    rng = rng or random.Random()
    payload = find_json_literal(text, "[")
    if not isinstance(payload, list):
        return []

    listings: list[Listing] = []
    for raw in payload:
        if not isinstance(raw, dict):
            continue
        try:
            item = GeneratedItem.model_validate(raw)
        except ValidationError as exc:
            logger.warning("Skipping invalid generated listing: %s", exc)
            continue

        coordinates = None
        if item.latitude is not None and item.longitude is not None:
            coordinates = (item.latitude, item.longitude)
        listings.append(
            Listing(
                id=f"ai-{_generated_id(rng)}",
                name=item.name or DEFAULT_GENERATED_NAME,
                address=item.address or DEFAULT_ADDRESS,
                price=clamp_price(item.price if item.price is not None else DEFAULT_PRICE, filters.max_budget),
                distance_km=item.distance,
                facilities=item.facilities,
                category=Category.parse(item.type, default=_fallback_category(filters)),
                available=True,
                source=GENERATED_SOURCE,
                rating=item.rating if item.rating is not None else DEFAULT_RATING,
                coordinates=coordinates,
                contact=item.contact,
                whatsapp=item.whatsapp,
                description=item.description or DEFAULT_GENERATED_DESCRIPTION,
                images=item.images,
                district=item.district,
                city=item.city,
                province=item.province,
                nearby_campuses=item.nearby_campuses,
                nearby_malls=item.nearby_malls,
                nearby_transport=item.nearby_transport,
                extra_costs=item.extra_costs,
                rules=item.rules,
                highlights=item.highlights,
            )
        )
    return listings


def _synthetic_price(filters: SearchFilters, category: Category, multiplier: float, rng: random.Random) -> int:
    base_price = min(filters.max_budget * 0.8, PRICE_CEILING)
    variation = 0.8 + rng.random() * 0.4
    raw = base_price * multiplier * CATEGORY_MULTIPLIERS.get(category, 1.0) * variation
    return clamp_price(round(raw / PRICE_STEP) * PRICE_STEP, filters.max_budget)


def _synthetic_facilities(requested: list[str], local: list[str], rng: random.Random) -> list[str]:
    selected = list(dict.fromkeys(requested))
    pool = [facility for facility in (*BASE_FACILITIES, *PREMIUM_FACILITIES) if facility not in selected]
    missing = max(0, SYNTHETIC_TARGET_FACILITIES - len(selected))
    selected.extend(rng.sample(pool, min(missing, len(pool))))
    return list(dict.fromkeys([*selected, *local]))


def synthesize_listing(filters: SearchFilters, rng: Optional[random.Random] = None) -> Listing:
    """Build one plausible listing from local randomization and the city table."""

    rng = rng or random.Random()
    profile = city_profile(filters.location)
    category = _fallback_category(filters)
    contact = f"{rng.choice(PHONE_PREFIXES)}{rng.randint(10_000_000, 99_999_999)}"
    location_name = filters.location or profile.city

    return Listing(
        id=f"generated-{_generated_id(rng)}",
        name=f"{profile.prefix} {category.value} {profile.area}",
        address=f"{profile.street} No. {rng.randint(1, 199)}, {profile.area}, {profile.city}",
        price=_synthetic_price(filters, category, profile.price_multiplier, rng),
        distance_km=round(0.5 + rng.random() * 4.5, 1),
        facilities=_synthetic_facilities(filters.facilities, profile.local_facilities, rng),
        category=category,
        available=rng.random() > 0.15,
        source=GENERATED_SOURCE,
        rating=round(3.5 + rng.random() * 1.5, 1),
        coordinates=(
            profile.latitude + (rng.random() - 0.5) * 0.02,
            profile.longitude + (rng.random() - 0.5) * 0.02,
        ),
        contact=contact,
        whatsapp=f"https://wa.me/{contact}",
        description=rng.choice(DESCRIPTIONS).format(category=category.value, location=location_name),
        images=[f"https://images.unsplash.com/photo-{image}?w=800&q=80" for image in IMAGE_IDS[: rng.randint(3, 5)]],
        district=profile.district,
        city=profile.city,
        province=profile.province,
        nearby_campuses=list(profile.campuses),
        nearby_malls=list(profile.malls),
        nearby_transport=list(profile.transport),
        extra_costs=list(EXTRA_COSTS[: rng.randint(2, 4)]),
        rules=list(HOUSE_RULES[: rng.randint(3, 5)]),
        highlights=list(HIGHLIGHTS[: rng.randint(2, 4)]),
    )


async def generate_listings(filters: SearchFilters, rng: Optional[random.Random] = None) -> list[Synthetic]:
    """Ask Gemini for listings; synthesize exactly one locally if that yields nothing."""

    try:
        text = await llm.generate_text(build_search_prompt(filters))
    except llm.LLMUnavailableError as exc:
        logger.warning("Generative search unavailable (%s); synthesizing a listing", exc)
    else:
        listings = parse_generated_listings(text, filters, rng)
        if listings:
            return [Synthetic(listing) for listing in listings]
        logger.warning("Gemini reply contained no parseable listings; synthesizing a listing")

    return [Synthetic(synthesize_listing(filters, rng))]
