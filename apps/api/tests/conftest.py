from __future__ import annotations

import pytest

from kostfinder.services import llm


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def no_gemini_key(monkeypatch) -> None:
    monkeypatch.setattr(llm.settings, "gemini_api_key", "", raising=False)
