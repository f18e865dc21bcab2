"""Public interface for the SellAuth adapter."""

from __future__ import annotations

from .client import SellAuthOrderClient
from .schema import InvoiceItemPayload, InvoicePayload
from .translator import parse_order

__all__ = [
    "InvoiceItemPayload",
    "InvoicePayload",
    "SellAuthOrderClient",
    "parse_order",
]
