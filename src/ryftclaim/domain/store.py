"""In-memory claim store.

Claims live in one table keyed by ``internal_id``. Order ids and claim codes are
secondary indices maintained by the store itself, so every mutation is visible
through every key. Blocked order ids are permanent tombstones: once an order is
invalidated no claim can be materialized for it again, even when the storefront
still returns the order.

All methods are synchronous and hold a single re-entrant lock for their whole
duration. Nothing in here awaits, so an asyncio caller sees each mutation as
atomic, and threaded callers are serialized by the lock.
"""

from __future__ import annotations

import threading
from logging import getLogger
from typing import TYPE_CHECKING
from uuid import NAMESPACE_URL, UUID, uuid5

from .claim_codes import generate_claim_code, normalize_claim_code
from .model import (
    BLOCKED_CODE,
    INVALIDATED_PREFIX,
    Claim,
    ClaimItem,
    ClaimSnapshot,
    utcnow,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator
    from datetime import datetime

    from .model import Order

log = getLogger(__name__)

type ClaimRef = UUID | str


class ClaimStore:
    """Single-process source of truth for claim state between order fetches."""

    def __init__(
        self,
        *,
        code_generator: Callable[[str], str] = generate_claim_code,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._generate_code = code_generator
        self._clock = clock
        self._claims: dict[UUID, Claim] = {}
        self._items: dict[UUID, tuple[ClaimItem, ...]] = {}
        self._by_order_id: dict[str, UUID] = {}
        self._by_claim_code: dict[str, UUID] = {}
        self._blocked: dict[str, datetime] = {}
        self._lock = threading.RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._claims)

    def __iter__(self) -> Iterator[ClaimSnapshot]:
        with self._lock:
            snapshots = [self._snapshot(claim) for claim in self._claims.values()]
        return iter(snapshots)

    # -- reads ---------------------------------------------------------------

    def is_blocked(self, order_id: str) -> bool:
        with self._lock:
            return order_id in self._blocked

    def find_by_order_id(self, order_id: str) -> ClaimSnapshot | None:
        """Return the claim for an order, a blocked view, or ``None`` on a miss."""

        with self._lock:
            claim = self._claim_for_order(order_id)
            if order_id in self._blocked:
                if claim is None:
                    return self._blocked_snapshot(order_id)
                return ClaimSnapshot(claim=claim.copy())
            if claim is None:
                return None
            return self._snapshot(claim)

    def find_by_claim_code(self, code: str) -> ClaimSnapshot | None:
        """Look up by claim code, accepting the invalidated spelling of a code too.

        Items are withheld once a claim is claimed or invalidated so chat flows
        cannot re-display purchased contents.
        """

        normalized = normalize_claim_code(code)
        normalized = normalized.removeprefix(INVALIDATED_PREFIX)
        with self._lock:
            internal_id = self._by_claim_code.get(normalized)
            if internal_id is None:
                return None
            claim = self._claims[internal_id]
            if claim.invalidated or claim.claimed:
                return ClaimSnapshot(claim=claim.copy())
            return self._snapshot(claim)

    def get(self, internal_id: UUID) -> ClaimSnapshot | None:
        with self._lock:
            claim = self._claims.get(internal_id)
            return self._snapshot(claim) if claim is not None else None

    # -- materialization -----------------------------------------------------

    def materialize(self, order: Order, order_id: str | None = None) -> ClaimSnapshot:
        """Build a claim from an order, or return the one that already exists.

        ``order_id`` is the id the buyer typed; it can differ from ``order.id``
        (the storefront's canonical id) and is the key everything else uses.
        """

        key = order_id or order.id
        with self._lock:
            if key in self._blocked:
                log.warning("Refusing to materialize claim for blocked order %s", key)
                blocked = self.find_by_order_id(key)
                if blocked is None:  # pragma: no cover - blocked ids always resolve
                    raise RuntimeError(f"Blocked order {key} has no snapshot")
                return blocked

            existing = self._claim_for_order(key)
            if existing is not None:
                log.info("Returning existing claim %s for order %s", existing.claim_code, key)
                return self._snapshot(existing)

            claim = Claim(
                order_id=key,
                claim_code=self._generate_code(key),
                email=order.email,
                created_at=order.created_at,
            )
            self._claims[claim.internal_id] = claim
            self._items[claim.internal_id] = _items_from_order(order)
            self._by_order_id[key] = claim.internal_id
            previous = self._by_claim_code.setdefault(claim.claim_code, claim.internal_id)
            if previous != claim.internal_id:
                log.warning(
                    "Claim code %s already belongs to another order; order %s is reachable "
                    "by order id only",
                    claim.claim_code,
                    key,
                )
            log.info("Materialized claim %s for order %s", claim.claim_code, key)
            return self._snapshot(claim)

    def refresh_items(self, order_id: str, order: Order) -> ClaimSnapshot | None:
        """Replace a cached claim's items with the live order's, keeping claim state."""

        with self._lock:
            claim = self._claim_for_order(order_id)
            if claim is None or order_id in self._blocked or claim.invalidated:
                return self.find_by_order_id(order_id)
            self._items[claim.internal_id] = _items_from_order(order)
            return self._snapshot(claim)

    # -- mutations -----------------------------------------------------------

    def set_verified(self, ref: ClaimRef) -> ClaimSnapshot | None:
        with self._lock:
            claim = self._resolve(ref)
            if claim is None:
                log.info("Could not find claim %s to mark verified", ref)
                return None
            if claim.invalidated:
                log.info(
                    "Not verifying invalidated claim %s for order %s",
                    claim.claim_code,
                    claim.order_id,
                )
                return self._snapshot(claim)
            if not claim.verified:
                claim.verified = True
                log.info("Marked claim %s for order %s verified", claim.claim_code, claim.order_id)
            return self._snapshot(claim)

    def mark_claimed(self, order_id: str) -> ClaimSnapshot | None:
        with self._lock:
            claim = self._claim_for_order(order_id)
            if claim is None:
                log.info("No claim on record for order %s; nothing to mark claimed", order_id)
                return None
            if not claim.claimed:
                claim.claimed = True
                log.info("Marked claim %s for order %s claimed", claim.claim_code, order_id)
            return self._snapshot(claim)

    def attach_channel(self, order_id: str, channel_id: str) -> ClaimSnapshot | None:
        with self._lock:
            claim = self._claim_for_order(order_id)
            if claim is None:
                log.info(
                    "No claim on record for order %s; channel %s not attached", order_id, channel_id
                )
                return None
            claim.chat_channel_id = channel_id
            log.info("Attached channel %s to claim for order %s", channel_id, order_id)
            return self._snapshot(claim)

    def set_game_username(self, order_id: str, username: str) -> ClaimSnapshot | None:
        with self._lock:
            claim = self._claim_for_order(order_id)
            if claim is None:
                return None
            claim.game_username = username
            return self._snapshot(claim)

    def invalidate(self, order_id: str) -> ClaimSnapshot:
        """Revoke the order's claim for good and block the order id permanently.

        Works for order ids that were never materialized too: the block alone
        keeps any later fetch from minting a usable claim.
        """

        with self._lock:
            claim = self._claim_for_order(order_id)
            if claim is not None and not claim.invalidated:
                claim.claimed = True
                claim.invalidated = True
                log.info("Invalidated claim %s for order %s", claim.claim_code, order_id)
            self._blocked.setdefault(order_id, self._clock())
            log.info("Blocked order %s from further claims", order_id)
            snapshot = self.find_by_order_id(order_id)
            if snapshot is None:  # pragma: no cover - blocked ids always resolve
                raise RuntimeError(f"Blocked order {order_id} has no snapshot")
            return snapshot

    # -- internals -----------------------------------------------------------

    def _claim_for_order(self, order_id: str) -> Claim | None:
        internal_id = self._by_order_id.get(order_id)
        return self._claims.get(internal_id) if internal_id is not None else None

    def _resolve(self, ref: ClaimRef) -> Claim | None:
        if isinstance(ref, UUID):
            return self._claims.get(ref)
        return self._claim_for_order(ref)

    def _snapshot(self, claim: Claim) -> ClaimSnapshot:
        if claim.invalidated:
            return ClaimSnapshot(claim=claim.copy())
        return ClaimSnapshot(claim=claim.copy(), items=self._items.get(claim.internal_id, ()))

    def _blocked_snapshot(self, order_id: str) -> ClaimSnapshot:
        blocked_at = self._blocked[order_id]
        claim = Claim(
            internal_id=uuid5(NAMESPACE_URL, f"ryftclaim:blocked:{order_id}"),
            order_id=order_id,
            claim_code=BLOCKED_CODE,
            email="",
            verified=True,
            claimed=True,
            invalidated=True,
            created_at=blocked_at,
        )
        return ClaimSnapshot(claim=claim)


def _items_from_order(order: Order) -> tuple[ClaimItem, ...]:
    return tuple(ClaimItem.from_order_item(item) for item in order.items)
