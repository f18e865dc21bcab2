"""Translate SellAuth invoice payloads into domain orders."""

from __future__ import annotations

from datetime import UTC
from logging import getLogger
from typing import TYPE_CHECKING

from ryftclaim.domain.model import Order, OrderItem, to_price, utcnow

from .schema import InvoiceItemPayload, InvoicePayload

if TYPE_CHECKING:
    from datetime import datetime

log = getLogger(__name__)

UNKNOWN_ITEM_NAME = "Unknown Item"
DEFAULT_ITEM_CATEGORY = "Garden Item"


def parse_order(payload: object, *, order_id: str | None = None) -> Order:
    """Build an ``Order`` from a raw invoice payload.

    ``order_id`` is the identifier the buyer typed; it wins over the numeric
    id in the payload so later lookups by that identifier hit the same claim.
    """

    invoice = (
        payload if isinstance(payload, InvoicePayload) else InvoicePayload.model_validate(payload)
    )
    return Order(
        id=order_id or str(invoice.id),
        email=invoice.email.strip(),
        created_at=_as_utc(invoice.created_at),
        items=tuple(parse_order_item(item) for item in invoice.items),
    )


def parse_order_item(item: InvoiceItemPayload) -> OrderItem:
    product = item.product
    variant = item.variant
    name = (product.name if product else None) or (variant.name if variant else None)
    if name is None:
        log.debug("Invoice item without product or variant name")
    return OrderItem(
        name=name or UNKNOWN_ITEM_NAME,
        category=(product.category if product else None) or DEFAULT_ITEM_CATEGORY,
        unit_price=to_price(item.price_usd),
        quantity=item.quantity or 1,
        image_url=item.first_image_url,
        delivered=item.delivered,
    )


def _as_utc(value: datetime | None) -> datetime:
    if value is None:
        return utcnow()
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
