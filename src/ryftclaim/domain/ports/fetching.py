"""Ports for fetching external order and account data."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ryftclaim.domain.model import Order


class OrderFetchStatus(StrEnum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True, slots=True)
class OrderFetchResult:
    """Outcome of one order lookup; ``order`` is set only when ``FOUND``."""

    status: OrderFetchStatus
    order: Order | None = None
    detail: str | None = None

    @classmethod
    def found(cls, order: Order) -> OrderFetchResult:
        return cls(status=OrderFetchStatus.FOUND, order=order)

    @classmethod
    def not_found(cls, detail: str | None = None) -> OrderFetchResult:
        return cls(status=OrderFetchStatus.NOT_FOUND, detail=detail)

    @classmethod
    def unavailable(cls, detail: str | None = None) -> OrderFetchResult:
        return cls(status=OrderFetchStatus.UNAVAILABLE, detail=detail)


@runtime_checkable
class OrderFetcher(Protocol):
    """Port for the storefront's order lookup; implementations never raise."""

    async def fetch_order(self, order_id: str) -> OrderFetchResult: ...


@dataclass(frozen=True, slots=True)
class GameAccount:
    user_id: int
    username: str
    display_name: str | None
    avatar_url: str | None
    has_verified_badge: bool = False


@runtime_checkable
class GameAccountLookup(Protocol):
    async def lookup(self, username: str) -> GameAccount | None: ...


__all__ = [
    "GameAccount",
    "GameAccountLookup",
    "OrderFetchResult",
    "OrderFetchStatus",
    "OrderFetcher",
]
