"""Human-typeable claim codes derived from order ids."""

from __future__ import annotations

import random
import re
import string
from typing import Final

from .model import INVALIDATED_PREFIX

CLAIM_CODE_PREFIX: Final[str] = "RYFT"
TICKET_CHANNEL_PREFIX: Final[str] = "web-order-"

_ALPHABET: Final[str] = string.ascii_uppercase + string.digits
_NON_ALNUM = re.compile(r"[^a-zA-Z0-9]")
_CLAIM_CODE_PATTERN = re.compile(rf"^(?:{INVALIDATED_PREFIX})?{CLAIM_CODE_PREFIX}-[A-Z0-9]{{4}}$")
_ERRORISH_MARKERS = ("failed", "error")


def sanitize_order_id(order_id: str) -> str:
    return _NON_ALNUM.sub("", order_id)


def _random_suffix(rng: random.Random | None) -> str:
    chooser = rng or random.SystemRandom()
    return "".join(chooser.choice(_ALPHABET) for _ in range(4))


def generate_claim_code(order_id: str, *, rng: random.Random | None = None) -> str:
    """Derive ``RYFT-XXYY`` from the first and last two characters of the order id.

    Ids shorter than four alphanumeric characters get a random suffix instead.
    Two orders sharing those characters collide; the order id stays the real key.
    """

    cleaned = sanitize_order_id(order_id)
    if len(cleaned) >= 4:
        suffix = f"{cleaned[:2]}{cleaned[-2:]}".upper()
    else:
        suffix = _random_suffix(rng)
    return f"{CLAIM_CODE_PREFIX}-{suffix}"


def normalize_claim_code(value: str) -> str:
    return value.strip().upper()


def is_claim_code(value: str) -> bool:
    return bool(_CLAIM_CODE_PATTERN.match(normalize_claim_code(value)))


def ticket_channel_name(order_id: str, *, rng: random.Random | None = None) -> str:
    """Discord channel name for an order's delivery ticket, e.g. ``web-order-ryft-4e93``."""

    cleaned = sanitize_order_id(order_id).lower()
    if len(cleaned) < 4 or any(marker in cleaned for marker in _ERRORISH_MARKERS):
        cleaned = _random_suffix(rng).lower()
    code = generate_claim_code(cleaned)
    return f"{TICKET_CHANNEL_PREFIX}{code.lower()}"
