"""Claim domain model.

An ``Order`` is the storefront's authoritative purchase record and is never
mutated here. A ``Claim`` is the local, mutable record that reconciles one order
with verification and delivery state. Reads hand out ``ClaimSnapshot`` values so
callers never hold a reference into the store.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import StrEnum
from uuid import UUID, uuid4

INVALIDATED_PREFIX = "INVALIDATED-"
BLOCKED_CODE = "BLOCKED"

_CENTS = Decimal("0.01")


def utcnow() -> datetime:
    return datetime.now(tz=UTC)


def to_price(value: Decimal | float | str | None) -> Decimal:
    """Coerce a price into a two-place decimal."""

    if value is None:
        return Decimal("0.00")
    return Decimal(str(value)).quantize(_CENTS, rounding=ROUND_HALF_UP)


class ClaimStatus(StrEnum):
    ACTIVE = "active"
    VERIFIED = "verified"
    CLAIMED = "claimed"
    INVALIDATED = "invalidated"


@dataclass(frozen=True, slots=True, kw_only=True)
class OrderItem:
    name: str
    category: str
    unit_price: Decimal
    quantity: int = 1
    image_url: str | None = None
    delivered: bool = False


@dataclass(frozen=True, slots=True, kw_only=True)
class Order:
    id: str
    email: str
    created_at: datetime
    items: tuple[OrderItem, ...] = ()


@dataclass(frozen=True, slots=True, kw_only=True)
class ClaimItem:
    item_name: str
    item_category: str
    price: Decimal
    quantity: int = 1
    image_url: str | None = None
    delivered: bool = False

    def __post_init__(self) -> None:
        if self.quantity < 1:
            raise ValueError(f"quantity must be at least 1, got {self.quantity}")

    @property
    def line_total(self) -> Decimal:
        return (self.price * self.quantity).quantize(_CENTS)

    @classmethod
    def from_order_item(cls, item: OrderItem) -> ClaimItem:
        return cls(
            item_name=item.name,
            item_category=item.category,
            price=to_price(item.unit_price),
            quantity=max(item.quantity, 1),
            image_url=item.image_url,
            delivered=item.delivered,
        )


@dataclass(slots=True, kw_only=True)
class Claim:
    """Mutable claim state; ``internal_id`` and ``claim_code`` never change."""

    order_id: str
    claim_code: str
    email: str
    internal_id: UUID = field(default_factory=uuid4)
    game_username: str | None = None
    verified: bool = False
    claimed: bool = False
    invalidated: bool = False
    chat_channel_id: str | None = None
    created_at: datetime = field(default_factory=utcnow)

    @property
    def status(self) -> ClaimStatus:
        if self.invalidated:
            return ClaimStatus.INVALIDATED
        if self.claimed:
            return ClaimStatus.CLAIMED
        if self.verified:
            return ClaimStatus.VERIFIED
        return ClaimStatus.ACTIVE

    @property
    def display_code(self) -> str:
        if self.invalidated:
            return f"{INVALIDATED_PREFIX}{self.claim_code}"
        return self.claim_code

    @property
    def is_active(self) -> bool:
        return not self.invalidated and not self.claimed

    @property
    def is_fully_processed(self) -> bool:
        return self.invalidated or (self.claimed and self.verified)

    def copy(self) -> Claim:
        return replace(self)


@dataclass(frozen=True, slots=True)
class ClaimSnapshot:
    """Point-in-time view of a claim together with its items."""

    claim: Claim
    items: tuple[ClaimItem, ...] = ()

    @property
    def total_price(self) -> Decimal:
        return sum((item.line_total for item in self.items), Decimal("0.00"))

    def without_items(self) -> ClaimSnapshot:
        return ClaimSnapshot(claim=self.claim, items=())
