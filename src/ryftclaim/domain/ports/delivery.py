"""Ports for handing claims off to fulfilment: item delivery and ticket channels."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ryftclaim.domain.model import ClaimItem, ClaimSnapshot


@dataclass(frozen=True, slots=True)
class DeliveryResult:
    success: bool
    message: str
    game_join_url: str | None = None
    trade_id: str | None = None


@runtime_checkable
class DeliveryDispatcher(Protocol):
    """Queues a claim's items for in-game delivery to ``recipient``."""

    async def dispatch(self, snapshot: ClaimSnapshot, recipient: str) -> DeliveryResult: ...


@dataclass(frozen=True, slots=True)
class TicketRequest:
    order_id: str
    email: str
    game_username: str
    items: tuple[ClaimItem, ...]
    discord_user_id: int | None = None


@dataclass(frozen=True, slots=True)
class TicketResult:
    success: bool
    message: str
    channel_id: str | None = None
    channel_name: str | None = None
    user_added: bool = False


@runtime_checkable
class TicketChannelGateway(Protocol):
    """Creates and removes private support channels on the chat platform."""

    async def open_ticket(self, request: TicketRequest) -> TicketResult: ...

    async def close_ticket(
        self, channel_id: str, *, reason: str, delay_seconds: float = 0
    ) -> bool: ...


__all__ = [
    "DeliveryDispatcher",
    "DeliveryResult",
    "TicketChannelGateway",
    "TicketRequest",
    "TicketResult",
]
