"""Construction of the configured marketplace adapters."""
from __future__ import annotations

import httpx

from ...core.config import Settings
from ..cache import TTLCache
from .base import ProviderAdapter
from .mamikos import MamikosAdapter
from .mamitroom import MamitroomAdapter
from .olx import OLXAdapter
from .rumah123 import Rumah123Adapter
from .travelio import TravelioAdapter


def build_adapters(
    config: Settings,
    cache: TTLCache,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> list[ProviderAdapter]:
    """Return every adapter in merge priority order.

    Adapters without a key are still returned; they skip themselves at fetch time.
    """

    keyed = (
        (MamikosAdapter, config.mamikos_api_key),
        (OLXAdapter, config.olx_api_key),
        (Rumah123Adapter, config.rumah123_api_key),
        (TravelioAdapter, config.travelio_api_key),
        (MamitroomAdapter, config.mamitroom_api_key),
    )
    return [
        adapter_cls(api_key, cache, timeout=config.provider_timeout_seconds, transport=transport)
        for adapter_cls, api_key in keyed
    ]
