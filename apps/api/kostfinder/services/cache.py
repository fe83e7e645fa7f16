"""In-memory TTL cache shared by the provider adapters and web search."""
from __future__ import annotations

import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Optional

Clock = Callable[[], float]


@dataclass
class _CacheEntry:
    payload: Any
    captured_at: float


class TTLCache:
    """Small key/payload registry with a freshness window and LRU capacity bound.

    Stale entries are dropped when read; inserting beyond ``max_entries`` evicts the
    least recently used key.
    """

    def __init__(self, ttl_seconds: float = 300, max_entries: int = 512, clock: Clock = time.monotonic) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be positive")
        self._ttl = ttl_seconds
        self._max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, _CacheEntry] = OrderedDict()

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.captured_at >= self._ttl:
            self._entries.pop(key, None)
            return None
        self._entries.move_to_end(key)
        return entry.payload

    def set(self, key: str, payload: Any) -> None:
        self._entries[key] = _CacheEntry(payload=payload, captured_at=self._clock())
        self._entries.move_to_end(key)
        while len(self._entries) > self._max_entries:
            self._entries.popitem(last=False)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries
