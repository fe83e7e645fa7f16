"""Regex helpers that pull kost attributes out of free text.

Every function here is total and deterministic: unknown input yields the
documented default rather than an exception.
"""
from __future__ import annotations

import json
import re
from typing import Any, Optional

from ..schemas.kosts import DEFAULT_MAX_BUDGET, Category, SearchFilters, clamp_price

PRICE_PATTERN = re.compile(r"(\d+(?:[.,]\d+)?)\s*(jt|juta|rb|ribu)(?:an)?\b", re.I)
UNIT_MULTIPLIERS = {"jt": 1_000_000, "juta": 1_000_000, "rb": 1_000, "ribu": 1_000}
DEFAULT_PRICE_RATIO = 0.8

FACILITY_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("AC", re.compile(r"\b(?:ac|air conditioner|pendingin)\b", re.I)),
    ("WiFi", re.compile(r"\b(?:wifi|wi-fi|internet)\b", re.I)),
    ("Kamar Mandi Dalam", re.compile(r"\b(?:kamar mandi dalam|km dalam|toilet dalam)\b", re.I)),
    ("Parkir Motor", re.compile(r"\b(?:parkir motor|tempat parkir|parkir)\b", re.I)),
    ("TV", re.compile(r"\b(?:tv|televisi)\b", re.I)),
    ("Kulkas", re.compile(r"\b(?:kulkas|refrigerator)\b", re.I)),
    ("Meja Belajar", re.compile(r"\b(?:meja belajar|meja)\b", re.I)),
    ("Lemari", re.compile(r"\b(?:lemari|closet)\b", re.I)),
)

CATEGORY_PATTERNS: tuple[tuple[Category, re.Pattern[str]], ...] = (
    (Category.MALE, re.compile(r"\b(?:putra|pria|cowok|laki-laki)\b", re.I)),
    (Category.FEMALE, re.compile(r"\b(?:putri|wanita|cewek|perempuan)\b", re.I)),
    (Category.MIXED, re.compile(r"\b(?:campur|gabung|mixed)\b", re.I)),
)

CONTACT_PATTERN = re.compile(r"\b(?:telp|hp|wa|whatsapp)\s*:?\s*(\d{10,13})\b", re.I)
ADDRESS_PATTERN = re.compile(r"\b(?:di|dengan alamat|lokasi)\s+([^,.]+)", re.I)
TITLE_NOISE_PATTERN = re.compile(r"\b(?:kos|kost|murah|bandung|jakarta|surabaya|yogyakarta)\b", re.I)
WHITESPACE_PATTERN = re.compile(r"\s+")

DEFAULT_TITLE = "Kos dari Google"
FALLBACK_TITLE = "Kos Terbaik"
DEFAULT_ADDRESS = "Alamat akan ditampilkan saat dihubungi"
UNKNOWN_ADDRESS = "Alamat lengkap akan diberikan saat kontak"

KNOWN_CITIES = ("jakarta", "bandung", "yogyakarta", "jogja", "surabaya", "malang", "semarang", "depok")
CITY_CANONICAL_NAMES = {"jogja": "Yogyakarta"}
LOCATION_HINT_PATTERN = re.compile(
    r"\b(?:di|daerah|sekitar|dekat|area)\s+([a-z][a-z\s]{2,30}?)"
    r"(?=[,.!?]|\s+(?:dengan|budget|harga|max|maks|yang|untuk)\b|$)",
    re.I,
)
KOS_WORDS = ("kos", "kost", "kosan", "kamar")


def _parse_amount(number: str, unit: str) -> int:
    value = float(number.replace(",", "."))
    return int(round(value * UNIT_MULTIPLIERS[unit.lower()]))


def extract_budget(text: str) -> Optional[int]:
    """Return the first ``<n> jt|juta|rb|ribu`` amount in rupiah, or ``None``."""

    match = PRICE_PATTERN.search(text or "")
    if not match:
        return None
    return _parse_amount(match.group(1), match.group(2))


def extract_price(text: str, max_budget: int) -> int:
    """Price mentioned in ``text`` clamped to the budget, else 80% of the budget."""

    amount = extract_budget(text)
    if amount is None:
        return int(max_budget * DEFAULT_PRICE_RATIO)
    return clamp_price(amount, max_budget)


def extract_facilities(text: str) -> list[str]:
    """Facility tags mentioned in ``text``, in vocabulary order."""

    if not text:
        return []
    return [facility for facility, pattern in FACILITY_PATTERNS if pattern.search(text)]


def extract_category(text: str) -> Category:
    """First matching occupancy category in priority order; ``MIXED`` when none match."""

    if not text:
        return Category.MIXED
    for category, pattern in CATEGORY_PATTERNS:
        if pattern.search(text):
            return category
    return Category.MIXED


def extract_contact(text: str) -> str:
    """Phone number following a ``telp``/``hp``/``wa`` label, or an empty string."""

    match = CONTACT_PATTERN.search(text or "")
    return match.group(1) if match else ""


def extract_address(text: str) -> str:
    if not text:
        return DEFAULT_ADDRESS
    match = ADDRESS_PATTERN.search(text)
    return match.group(1).strip() if match else UNKNOWN_ADDRESS


def clean_title(title: str) -> str:
    """Strip generic search words (city names, 'kos', 'murah') from a result title."""

    if not title:
        return DEFAULT_TITLE
    cleaned = WHITESPACE_PATTERN.sub(" ", TITLE_NOISE_PATTERN.sub("", title)).strip(" -|")
    return cleaned or FALLBACK_TITLE


def extract_location(text: str) -> Optional[str]:
    lowered = (text or "").lower()
    for city in KNOWN_CITIES:
        if re.search(rf"\b{city}\b", lowered):
            return CITY_CANONICAL_NAMES.get(city, city.title())
    match = LOCATION_HINT_PATTERN.search(text or "")
    if match:
        return match.group(1).strip()
    return None


def guess_filters(message: str) -> Optional[SearchFilters]:
    """Heuristic filter extraction used when the language model is unavailable.

    Returns ``None`` unless the message talks about a kost and names a location or
    a budget.
    """

    lowered = (message or "").lower()
    if not any(re.search(rf"\b{word}\b", lowered) for word in KOS_WORDS):
        return None

    location = extract_location(message)
    budget = extract_budget(message)
    if location is None and budget is None:
        return None

    category = Category.ANY
    for candidate, pattern in CATEGORY_PATTERNS:
        if pattern.search(message):
            category = candidate
            break

    return SearchFilters(
        location=location or "",
        max_budget=budget if budget is not None else DEFAULT_MAX_BUDGET,
        facilities=extract_facilities(message),
        category=category,
    )


def _matching_close(text: str, start: int) -> int:
    """Index of the bracket closing ``text[start]``, or -1 when unbalanced."""

    closers = {"[": "]", "{": "}"}
    stack = [closers[text[start]]]
    in_string = False
    escaped = False
    for index in range(start + 1, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char in closers:
            stack.append(closers[char])
        elif char in ("]", "}"):
            if char != stack[-1]:
                return -1
            stack.pop()
            if not stack:
                return index
    return -1


def find_json_literal(text: str, opener: str = "[") -> Any:
    """Locate and decode the first parseable JSON array (or object) embedded in ``text``.

    Model replies often wrap JSON in prose or code fences; each ``opener`` occurrence
    is bracket-matched and tried in turn. Returns ``None`` when nothing parses.
    """

    if opener not in ("[", "{"):
        raise ValueError("opener must be '[' or '{'")
    start = (text or "").find(opener)
    while start != -1:
        end = _matching_close(text, start)
        if end != -1:
            try:
                return json.loads(text[start : end + 1])
            except json.JSONDecodeError:
                pass
        start = text.find(opener, start + 1)
    return None
