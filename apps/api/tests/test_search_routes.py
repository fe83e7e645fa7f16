"""HTTP tests for the search, chat, kosts and sync endpoints."""
from __future__ import annotations

import asyncio
import json
from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from kostfinder.core.config import Settings
from kostfinder.main import app
from kostfinder.repositories.kosts import KostStore
from kostfinder.routers.kosts import get_kost_store
from kostfinder.schemas.kosts import Listing
from kostfinder.services import llm
from kostfinder.services.aggregator import Aggregator
from kostfinder.services.cache import TTLCache
from kostfinder.services.providers.registry import build_adapters
from kostfinder.services.search import SearchService, get_aggregator, get_search_service, get_web_search
from kostfinder.services.web_search import GoogleSearchClient

NO_KEYS = Settings(
    _env_file=None,
    mamikos_api_key="",
    olx_api_key="",
    rumah123_api_key="",
    travelio_api_key="",
    mamitroom_api_key="",
)


class StubAdapter:
    def __init__(self, name: str, listings: list[Listing]) -> None:
        self.name = name
        self.listings = listings

    async def fetch(self, filters) -> list[Listing]:
        return list(self.listings)


@pytest.fixture
def client_factory():
    def make(overrides: dict) -> AsyncClient:
        app.dependency_overrides.update(overrides)
        return AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver")

    yield make
    app.dependency_overrides.clear()


def _keyless_service() -> SearchService:
    return SearchService(Aggregator(build_adapters(NO_KEYS, TTLCache())))


@pytest.mark.asyncio
async def test_search_without_credentials_returns_one_synthetic_listing(client_factory, no_gemini_key) -> None:
    async with client_factory({get_search_service: _keyless_service}) as client:
        response = await client.get(
            "/api/search",
            params={"location": "Bandung", "maxBudget": "1000000", "facilities": "WiFi", "type": "Campur"},
        )

    assert response.status_code == 200
    hits = response.json()
    assert len(hits) == 1
    hit = hits[0]
    assert hit["synthetic"] is True
    assert hit["source"] == "generated"
    assert hit["category"] == "Campur"
    assert 0 <= hit["price"] <= 1_000_000
    assert "WiFi" in hit["facilities"]


@pytest.mark.asyncio
async def test_search_returns_sourced_listings_up_to_the_limit(client_factory) -> None:
    listings = [
        Listing(id=f"mamikos-{index}", name="Kos", address=f"Jl. {index}", price=500_000 + index, source="mamikos.com")
        for index in range(5)
    ]
    service = SearchService(Aggregator([StubAdapter("mamikos", listings)]), result_limit=3)

    async with client_factory({get_search_service: lambda: service}) as client:
        response = await client.get("/api/search", params={"location": "Bandung", "maxBudget": "2000000"})

    hits = response.json()
    assert [hit["id"] for hit in hits] == ["mamikos-0", "mamikos-1", "mamikos-2"]
    assert all(hit["synthetic"] is False for hit in hits)


@pytest.mark.asyncio
async def test_search_rejects_invalid_budget(client_factory) -> None:
    async with client_factory({get_search_service: _keyless_service}) as client:
        response = await client.get("/api/search", params={"maxBudget": "banyak"})

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid search filters"}


@pytest.mark.asyncio
async def test_search_failure_returns_error_envelope(client_factory) -> None:
    service = SearchService(Aggregator([]))
    service.search = AsyncMock(side_effect=RuntimeError("boom"))

    async with client_factory({get_search_service: lambda: service}) as client:
        response = await client.get("/api/search", params={"location": "Bandung"})

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to search kosts"}


@pytest.mark.asyncio
@pytest.mark.parametrize("path", ["/api/chat", "/api/search"])
@pytest.mark.parametrize("body", [{}, {"message": ""}, {"message": "   "}, {"message": 42}])
async def test_chat_requires_a_message(client_factory, path: str, body: dict) -> None:
    async with client_factory({get_search_service: _keyless_service}) as client:
        response = await client.post(path, json=body)

    assert response.status_code == 400
    assert response.json() == {"error": "Message is required"}


@pytest.mark.asyncio
async def test_chat_without_filters_answers_in_persona(client_factory, no_gemini_key) -> None:
    async with client_factory({get_search_service: _keyless_service}) as client:
        response = await client.post("/api/chat", json={"message": "Halo Mbah, apa kabar?"})

    assert response.status_code == 200
    assert response.json() == {"message": llm.CHAT_APOLOGY, "type": "chat"}


@pytest.mark.asyncio
async def test_chat_with_search_intent_returns_results(client_factory, no_gemini_key) -> None:
    async with client_factory({get_search_service: _keyless_service}) as client:
        response = await client.post("/api/search", json={"message": "Cari kos putri di Bandung budget 1.5 juta ada wifi"})

    assert response.status_code == 200
    body = response.json()
    assert body["filters"] == {
        "location": "Bandung",
        "maxBudget": 1_500_000,
        "facilities": ["WiFi"],
        "type": "Putri",
    }
    assert len(body["results"]) == 1
    assert body["results"][0]["category"] == "Putri"
    assert body["results"][0]["price"] <= 1_500_000


@pytest.mark.asyncio
async def test_chat_failure_returns_error_envelope(client_factory, monkeypatch) -> None:
    monkeypatch.setattr(llm, "extract_filters", AsyncMock(side_effect=RuntimeError("boom")))

    async with client_factory({get_search_service: _keyless_service}) as client:
        response = await client.post("/api/chat", json={"message": "halo"})

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to process chat"}


@pytest.fixture
def kost_file(tmp_path):
    path = tmp_path / "kosan.json"
    path.write_text(json.dumps([{"id": "kosan-1", "name": "Kos Lama", "price": 900000}]), encoding="utf-8")
    return path


@pytest.mark.asyncio
async def test_list_kosts_returns_file_contents(client_factory, kost_file) -> None:
    async with client_factory({get_kost_store: lambda: KostStore(kost_file)}) as client:
        response = await client.get("/api/kosts")

    assert response.status_code == 200
    assert response.json() == [{"id": "kosan-1", "name": "Kos Lama", "price": 900000}]


@pytest.mark.asyncio
async def test_list_kosts_missing_file(client_factory, tmp_path) -> None:
    async with client_factory({get_kost_store: lambda: KostStore(tmp_path / "missing.json")}) as client:
        response = await client.get("/api/kosts")

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to load kosts"}


@pytest.mark.asyncio
async def test_sync_appends_a_listing(client_factory, kost_file) -> None:
    async with client_factory({get_kost_store: lambda: KostStore(kost_file)}) as client:
        response = await client.post("/api/sync")
        listing = await client.get("/api/kosts")

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Data synchronized successfully", "newKosts": 1}
    assert len(listing.json()) == 2


@pytest.mark.asyncio
async def test_sync_failure_returns_error_envelope(client_factory, tmp_path) -> None:
    async with client_factory({get_kost_store: lambda: KostStore(tmp_path / "missing.json")}) as client:
        response = await client.post("/api/sync")

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to sync data"}


@pytest.mark.asyncio
async def test_realtime_sync_reports_collected_listings(client_factory) -> None:
    listing = Listing(id="mamikos-1", name="Kos Dago", address="Jl. Dago 1", price=900_000, source="mamikos.com")
    overrides = {
        get_aggregator: lambda: Aggregator([StubAdapter("mamikos", [listing])]),
        get_web_search: lambda: GoogleSearchClient("", "", TTLCache()),
    }

    async with client_factory(overrides) as client:
        response = await client.post("/api/sync/realtime", params={"keyword": "kos dago 1 juta"})

    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 1
    assert body["sources"] == ["mamikos.com"]
    assert body["results"][0]["id"] == "mamikos-1"


@pytest.mark.asyncio
async def test_search_rejects_negative_distance(client_factory) -> None:
    async with client_factory({get_search_service: _keyless_service}) as client:
        response = await client.get("/api/search", params={"location": "Bandung", "maxDistance": "-1"})

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_concurrent_syncs_each_add_a_listing(client_factory, kost_file) -> None:
    async with client_factory({get_kost_store: lambda: KostStore(kost_file)}) as client:
        responses = await asyncio.gather(*(client.post("/api/sync") for _ in range(20)))
        reads = await asyncio.gather(*(client.get("/api/kosts") for _ in range(5)))

    assert [response.status_code for response in responses] == [200] * 20
    assert all(read.status_code == 200 for read in reads)
    assert len(json.loads(kost_file.read_text(encoding="utf-8"))) == 21
