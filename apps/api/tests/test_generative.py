"""Generative fallback: JSON location, mapping and local synthesis."""
from __future__ import annotations

import random
from unittest.mock import AsyncMock

import pytest

from kostfinder.schemas.kosts import GENERATED_SOURCE, Category, SearchFilters, Synthetic
from kostfinder.services import generative, llm
from kostfinder.services.text_extraction import find_json_literal

BANDUNG = SearchFilters(location="Bandung", max_budget=1_000_000, facilities=["WiFi"], category="Campur")


def test_find_json_literal_skips_prose_and_fences() -> None:
    text = 'Berikut datanya:\n```json\n[{"name": "Kos [Baru]", "price": 900000}]\n```\nSemoga membantu!'

    assert find_json_literal(text) == [{"name": "Kos [Baru]", "price": 900000}]


def test_find_json_literal_handles_escaped_quotes_and_nesting() -> None:
    text = r'[{"name": "Kos \"Melati\" ]", "tags": [["a"], {"b": [1]}]}]'

    assert find_json_literal(text) == [{"name": 'Kos "Melati" ]', "tags": [["a"], {"b": [1]}]}]


def test_find_json_literal_tries_later_candidates() -> None:
    assert find_json_literal("lihat [catatan] lalu [1, 2]") == [1, 2]
    assert find_json_literal('{"location": "Depok"} ekstra', "{") == {"location": "Depok"}


def test_find_json_literal_returns_none_without_json() -> None:
    assert find_json_literal("tidak ada data") is None
    assert find_json_literal("[1, 2") is None
    assert find_json_literal("") is None


def test_find_json_literal_rejects_unknown_opener() -> None:
    with pytest.raises(ValueError):
        find_json_literal("(1)", "(")


def test_build_search_prompt_embeds_filters() -> None:
    prompt = generative.build_search_prompt(BANDUNG)

    assert "Location: Bandung" in prompt
    assert "Rp 1,000,000" in prompt
    assert "WiFi" in prompt
    assert "Type: Campur" in prompt


def test_parse_generated_listings_maps_and_clamps() -> None:
    text = """[
        {"name": "Kos Melati", "address": "Jl. Dago 5", "price": 1500000, "category": "Putri",
         "facilities": ["WiFi", "AC"], "rating": 4.7, "latitude": -6.9, "longitude": 107.6,
         "nearby_campuses": ["ITB"]},
        {"nama": "Kos Mawar", "alamat": "Jl. Sekeloa 2", "harga": "Rp 750.000", "tipe": "putra"},
        "bukan objek"
    ]"""

    listings = generative.parse_generated_listings(text, BANDUNG, random.Random(1))

    assert len(listings) == 2
    melati, mawar = listings
    assert melati.price == 1_000_000
    assert melati.category is Category.FEMALE
    assert melati.coordinates == (-6.9, 107.6)
    assert melati.nearby_campuses == ["ITB"]
    assert mawar.name == "Kos Mawar"
    assert mawar.price == 750_000
    assert mawar.category is Category.MALE
    assert all(listing.source == GENERATED_SOURCE for listing in listings)
    assert all(listing.id.startswith("ai-") for listing in listings)


def test_parse_generated_listings_without_array() -> None:
    assert generative.parse_generated_listings("Maaf, tidak ada data.", BANDUNG) == []


@pytest.mark.parametrize("seed", range(25))
def test_synthesized_listing_respects_request(seed: int) -> None:
    listing = generative.synthesize_listing(BANDUNG, random.Random(seed))

    assert 0 <= listing.price <= BANDUNG.max_budget
    assert "WiFi" in listing.facilities
    assert listing.category is Category.MIXED
    assert listing.source == GENERATED_SOURCE
    assert listing.id.startswith("generated-")
    assert listing.city == "Bandung"


def test_synthesized_listing_maps_any_to_mixed() -> None:
    filters = SearchFilters(location="Surabaya", max_budget=3_000_000)

    listing = generative.synthesize_listing(filters, random.Random(3))

    assert listing.category is Category.MIXED
    assert listing.price <= 3_000_000


def test_synthesized_listing_keeps_requested_category_and_zero_budget() -> None:
    filters = SearchFilters(location="Antah Berantah", max_budget=0, facilities=["AC", "Kulkas"], category="Putri")

    listing = generative.synthesize_listing(filters, random.Random(5))

    assert listing.category is Category.FEMALE
    assert listing.price == 0
    assert {"AC", "Kulkas"} <= set(listing.facilities)


@pytest.mark.asyncio
async def test_generate_listings_without_llm_synthesizes_one(no_gemini_key) -> None:
    hits = await generative.generate_listings(BANDUNG)

    assert len(hits) == 1
    hit = hits[0]
    assert isinstance(hit, Synthetic)
    assert hit.synthetic is True
    assert hit.listing.price <= 1_000_000
    assert hit.listing.category is Category.MIXED
    assert hit.listing.source == "generated"
    assert "WiFi" in hit.listing.facilities


@pytest.mark.asyncio
async def test_generate_listings_uses_model_reply(monkeypatch) -> None:
    reply = '```json\n[{"name": "Kos AI", "address": "Jl. Ganesha 10", "price": 800000}]\n```'
    monkeypatch.setattr(llm, "generate_text", AsyncMock(return_value=reply))

    hits = await generative.generate_listings(BANDUNG)

    assert [hit.listing.name for hit in hits] == ["Kos AI"]
    assert all(isinstance(hit, Synthetic) for hit in hits)


@pytest.mark.asyncio
async def test_generate_listings_falls_back_when_reply_has_no_array(monkeypatch) -> None:
    monkeypatch.setattr(llm, "generate_text", AsyncMock(return_value="Maaf, Mbah tidak tahu."))

    hits = await generative.generate_listings(BANDUNG)

    assert len(hits) == 1
    assert hits[0].listing.id.startswith("generated-")
