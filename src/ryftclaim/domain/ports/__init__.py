"""Domain port definitions for adapters."""

from __future__ import annotations

from .delivery import (
    DeliveryDispatcher,
    DeliveryResult,
    TicketChannelGateway,
    TicketRequest,
    TicketResult,
)
from .fetching import (
    GameAccount,
    GameAccountLookup,
    OrderFetcher,
    OrderFetchResult,
    OrderFetchStatus,
)

__all__ = [
    "DeliveryDispatcher",
    "DeliveryResult",
    "GameAccount",
    "GameAccountLookup",
    "OrderFetchResult",
    "OrderFetchStatus",
    "OrderFetcher",
    "TicketChannelGateway",
    "TicketRequest",
    "TicketResult",
]
