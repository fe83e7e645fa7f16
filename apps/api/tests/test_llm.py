from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from google.api_core import exceptions as google_exceptions

from kostfinder.schemas.kosts import Category
from kostfinder.services import llm


@pytest.mark.asyncio
async def test_generate_text_without_api_key_raises(no_gemini_key) -> None:
    with pytest.raises(llm.LLMUnavailableError):
        await llm.generate_text("halo")


@pytest.mark.asyncio
async def test_generate_text_falls_back_to_next_model(monkeypatch) -> None:
    monkeypatch.setattr(llm.settings, "gemini_api_key", "test-key", raising=False)
    monkeypatch.setattr(llm.settings, "gemini_model", "missing-model", raising=False)
    monkeypatch.setattr(llm.settings, "gemini_model_fallbacks", ["backup-model"], raising=False)

    class MissingModel:
        def generate_content(self, prompt):
            raise google_exceptions.NotFound("model not found")

    class BackupModel:
        def generate_content(self, prompt):
            return SimpleNamespace(text="  jawaban cadangan  ")

    models = {"missing-model": MissingModel(), "backup-model": BackupModel()}
    monkeypatch.setattr(llm, "_get_model", lambda name: models[name])

    assert await llm.generate_text("halo") == "jawaban cadangan"


@pytest.mark.asyncio
async def test_generate_text_raises_when_every_model_is_empty(monkeypatch) -> None:
    monkeypatch.setattr(llm.settings, "gemini_api_key", "test-key", raising=False)
    monkeypatch.setattr(llm.settings, "gemini_model_fallbacks", [], raising=False)
    monkeypatch.setattr(llm, "_get_model", lambda name: SimpleNamespace(generate_content=lambda prompt: SimpleNamespace(text="")))

    with pytest.raises(llm.LLMUnavailableError):
        await llm.generate_text("halo")


@pytest.mark.asyncio
async def test_chat_reply_apologizes_without_llm(no_gemini_key) -> None:
    assert await llm.chat_reply("Apa kabar Mbah?") == llm.CHAT_APOLOGY


@pytest.mark.asyncio
async def test_chat_reply_tidies_markup_and_adds_recommendations(monkeypatch) -> None:
    monkeypatch.setattr(llm, "generate_text", AsyncMock(return_value="**Halo** nak!\n\n\nCari kos itu gampang."))

    reply = await llm.chat_reply("Tips cari kos di Jakarta dong")

    assert reply.startswith("Halo nak!\nCari kos itu gampang.")
    assert "Rekomendasi spesifik dari Mbah" in reply
    assert "Kos Putri Depok" in reply


@pytest.mark.asyncio
async def test_chat_reply_skips_recommendations_for_general_questions(monkeypatch) -> None:
    monkeypatch.setattr(llm, "generate_text", AsyncMock(return_value="Baik, nak."))

    assert await llm.chat_reply("Apa kabar?") == "Baik, nak."


@pytest.mark.asyncio
async def test_extract_filters_parses_model_json(monkeypatch) -> None:
    reply = '```json\n{"location": "Depok", "maxBudget": 900000, "facilities": ["AC"], "type": "Putra"}\n```'
    monkeypatch.setattr(llm, "generate_text", AsyncMock(return_value=reply))

    filters = await llm.extract_filters("kos putra di depok 900 ribu ada AC")

    assert filters is not None
    assert filters.location == "Depok"
    assert filters.max_budget == 900_000
    assert filters.facilities == ["AC"]
    assert filters.category is Category.MALE


@pytest.mark.asyncio
@pytest.mark.parametrize("reply", ["null", "Tidak ada kriteria.", '{"facilities": ["AC"]}', '{"location": "X", "maxBudget": -5}'])
async def test_extract_filters_rejects_unusable_replies(monkeypatch, reply: str) -> None:
    monkeypatch.setattr(llm, "generate_text", AsyncMock(return_value=reply))

    assert await llm.extract_filters("halo mbah") is None


@pytest.mark.asyncio
async def test_extract_filters_falls_back_to_heuristics(no_gemini_key) -> None:
    filters = await llm.extract_filters("Cari kos putri di Bandung budget 1.5 juta ada wifi")

    assert filters is not None
    assert filters.location == "Bandung"
    assert filters.max_budget == 1_500_000
    assert filters.category is Category.FEMALE
