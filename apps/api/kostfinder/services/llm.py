"""LLM helper built on Gemini Flash."""
from __future__ import annotations

import asyncio
import logging
import re
from functools import lru_cache
from typing import Dict, List, Optional

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions
from pydantic import ValidationError

from ..core.config import settings
from ..data.cities import CITY_RECOMMENDATIONS
from ..schemas.kosts import SearchFilters
from .text_extraction import extract_location, find_json_literal, guess_filters

CHAT_SYSTEM_PROMPT = """Anda adalah Mbah, seorang ahli kos di Indonesia yang sangat ramah, berpengalaman, \
dan menguasai semua area kos di Indonesia. Gunakan bahasa Indonesia yang santai, ramah, dan khas anak kos.

Karakteristik Mbah:
- Ramah dan sering menggunakan kata "ya", "nak", "dek"
- Pengetahuan mendalam tentang area kos di Jakarta, Bandung, Yogyakarta, Surabaya, dll
- Memberikan informasi harga realistis dan lokasi strategis
- Memberikan tips kos yang berguna dan rekomendasi berdasarkan budget dan kebutuhan

Format jawaban:
- Untuk pencarian kos: berikan 2-3 rekomendasi spesifik dengan lokasi dan harga
- Untuk pertanyaan umum: jawab dengan pengalaman dan tips"""

CHAT_APOLOGY = "Wah maaf ya dek, Mbah lagi sibuk ngurus kos lain. Coba tanya lagi nanti ya! 😊"

FILTER_PROMPT = """Extract kost search criteria from this Indonesian message: "{message}"

Return only JSON with:
- location: string (area/city)
- maxBudget: number (IDR per month)
- facilities: string[]
- type: one of "Putra", "Putri", "Campur", "Semua"

Return null if no criteria are found."""

KOS_MENTION = re.compile(r"\bkos(?:t|an)?\b", re.I)
BOLD_MARKUP = re.compile(r"\*\*(.*?)\*\*")
DEFAULT_RECOMMENDATION_CITY = "bandung"

logger = logging.getLogger(__name__)


class LLMUnavailableError(RuntimeError):
    """Raised when no configured Gemini models are available."""


def _has_api_key() -> bool:
    return bool(settings.gemini_api_key.strip())


@lru_cache
def _configured_api() -> bool:
    """Configure the Google Generative AI client once."""

    if not _has_api_key():
        raise RuntimeError("GEMINI_API_KEY is missing")

    genai.configure(api_key=settings.gemini_api_key)
    return True


_model_cache: Dict[str, genai.GenerativeModel] = {}


def _get_model(name: str) -> genai.GenerativeModel:
    """Return a cached Gemini model instance."""

    _configured_api()
    model_name = name.strip()
    if not model_name:
        raise RuntimeError("Gemini model name was empty")

    if model_name not in _model_cache:
        _model_cache[model_name] = genai.GenerativeModel(model_name)
    return _model_cache[model_name]


def _candidate_models() -> List[str]:
    candidates: list[str] = []
    seen: set[str] = set()
    for candidate in (settings.gemini_model, *settings.gemini_model_fallbacks):
        if candidate and candidate not in seen:
            candidates.append(candidate)
            seen.add(candidate)
    return candidates


async def generate_text(prompt: str) -> str:
    """Send ``prompt`` to the first Gemini model that answers and return its text.

    Raises ``LLMUnavailableError`` when the key is missing or every candidate model
    fails, times out, or answers with empty text.
    """

    if not _has_api_key():
        raise LLMUnavailableError("GEMINI_API_KEY is missing")

    loop = asyncio.get_running_loop()
    last_error: Exception | None = None

    for model_name in _candidate_models():
        def _run_inference(current_model: str = model_name) -> str:
            response = _get_model(current_model).generate_content(prompt)
            text = getattr(response, "text", "") or ""
            return text.strip()

        try:
            result = await asyncio.wait_for(
                loop.run_in_executor(None, _run_inference),
                timeout=settings.gemini_timeout_seconds,
            )
            if result:
                return result
            logger.warning("Gemini model %s returned an empty reply", model_name)
        except google_exceptions.NotFound as exc:
            logger.warning("Gemini model %s not available: %s", model_name, exc)
            _model_cache.pop(model_name, None)
            last_error = exc
        except asyncio.TimeoutError as exc:
            logger.warning("Gemini model %s timed out", model_name)
            last_error = exc
        except Exception as exc:  # noqa: BLE001
            logger.exception("Gemini generate_content failed for %s", model_name)
            last_error = exc

    raise LLMUnavailableError("No Gemini models responded") from last_error


def _tidy_reply(text: str) -> str:
    text = BOLD_MARKUP.sub(r"\1", text)
    return re.sub(r"\n{2,}", "\n", text).strip()


def _recommendations_for(message: str) -> str:
    location = (extract_location(message) or DEFAULT_RECOMMENDATION_CITY).lower()
    picks = CITY_RECOMMENDATIONS.get(location, CITY_RECOMMENDATIONS[DEFAULT_RECOMMENDATION_CITY])
    lines = "\n".join(f"• {pick}" for pick in picks)
    return f"💡 Rekomendasi spesifik dari Mbah:\n{lines}"


async def chat_reply(message: str) -> str:
    """Answer a general question in the assistant persona; never raises on LLM failure."""

    prompt = f"{CHAT_SYSTEM_PROMPT}\n\nPertanyaan user: {message.strip()}\n\nJawaban Mbah:"
    try:
        reply = _tidy_reply(await generate_text(prompt))
    except LLMUnavailableError as exc:
        logger.warning("Chat reply unavailable, sending apology: %s", exc)
        return CHAT_APOLOGY

    if KOS_MENTION.search(message):
        reply = f"{reply}\n\n{_recommendations_for(message)}"
    return reply


async def extract_filters(message: str) -> Optional[SearchFilters]:
    """Ask Gemini for search filters in ``message``.

    Falls back to keyword heuristics when Gemini is unavailable; returns ``None``
    when the message carries no search criteria.
    """

    try:
        text = await generate_text(FILTER_PROMPT.format(message=message.strip()))
    except LLMUnavailableError as exc:
        logger.warning("Gemini filter extraction unavailable (%s); using keyword heuristics", exc)
        return guess_filters(message)

    payload = find_json_literal(text, "{")
    if not isinstance(payload, dict):
        return None

    cleaned = {key: value for key, value in payload.items() if value is not None}
    if not str(cleaned.get("location") or "").strip() and "maxBudget" not in cleaned:
        return None
    try:
        return SearchFilters.model_validate(cleaned)
    except ValidationError as exc:
        logger.warning("Discarding unusable filters from Gemini: %s", exc)
        return None
