"""Claim reconciliation: the read/verify/invalidate surface used by web and chat."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from .errors import (
    ClaimAlreadyProcessedError,
    ClaimNotFoundError,
    ClaimNotVerifiedError,
    EmailMismatchError,
    OrderServiceUnavailableError,
)
from .ports import OrderFetchStatus

if TYPE_CHECKING:
    from .model import ClaimSnapshot
    from .ports import OrderFetcher
    from .store import ClaimStore

log = getLogger(__name__)


class ClaimReconciler:
    """Reconciles the storefront's order records with local claim state.

    Reads go to the store first. On a miss the order is fetched and a claim is
    materialized; on a hit the live order only refreshes the item list. Upstream
    outages fall back to whatever the store knows and surface as
    ``OrderServiceUnavailableError`` when it knows nothing.
    """

    def __init__(self, *, store: ClaimStore, orders: OrderFetcher) -> None:
        self._store = store
        self._orders = orders

    @property
    def store(self) -> ClaimStore:
        return self._store

    async def verify(self, order_id: str, email: str) -> ClaimSnapshot:
        """Match the buyer's email against the order and mark the claim verified."""

        snapshot = await self._resolve(order_id)
        if snapshot is None:
            raise ClaimNotFoundError(order_id)

        claim = snapshot.claim
        if claim.invalidated:
            log.info("Rejected verification for invalidated order %s", order_id)
            raise ClaimAlreadyProcessedError(order_id)
        if claim.claimed and claim.verified:
            log.info("Rejected verification for already processed order %s", order_id)
            raise ClaimAlreadyProcessedError(
                order_id, "This order ID has already been claimed and processed."
            )
        if claim.email.strip().casefold() != email.strip().casefold():
            log.info("Email mismatch verifying order %s", order_id)
            raise EmailMismatchError(order_id)

        verified = self._store.set_verified(claim.internal_id)
        if verified is None or verified.claim.invalidated:
            log.info("Order %s was invalidated while verifying", order_id)
            raise ClaimAlreadyProcessedError(order_id)
        return verified

    async def lookup_by_order_id(self, order_id: str) -> ClaimSnapshot | None:
        return await self._resolve(order_id)

    async def require_verified(self, order_id: str) -> ClaimSnapshot:
        """Return the claim for a later step of the web flow, which needs prior verification."""

        snapshot = await self._resolve(order_id)
        if snapshot is None:
            raise ClaimNotFoundError(order_id)
        if snapshot.claim.invalidated:
            raise ClaimAlreadyProcessedError(order_id)
        if not snapshot.claim.verified:
            raise ClaimNotVerifiedError(order_id)
        return snapshot

    def lookup_by_claim_code(self, code: str) -> ClaimSnapshot | None:
        return self._store.find_by_claim_code(code)

    def record_claimed(self, order_id: str) -> ClaimSnapshot | None:
        return self._store.mark_claimed(order_id.strip())

    def record_channel(self, order_id: str, channel_id: str) -> ClaimSnapshot | None:
        return self._store.attach_channel(order_id.strip(), channel_id)

    def record_game_username(self, order_id: str, username: str) -> ClaimSnapshot | None:
        return self._store.set_game_username(order_id.strip(), username)

    def invalidate(self, order_id: str) -> ClaimSnapshot:
        return self._store.invalidate(order_id.strip())

    async def _resolve(self, order_id: str) -> ClaimSnapshot | None:
        order_id = order_id.strip()
        cached = self._store.find_by_order_id(order_id)
        if cached is not None:
            if cached.claim.invalidated:
                return cached
            return await self._refresh(order_id, cached)

        result = await self._orders.fetch_order(order_id)
        if result.status is OrderFetchStatus.FOUND and result.order is not None:
            return self._store.materialize(result.order, order_id)
        if result.status is OrderFetchStatus.NOT_FOUND:
            log.info("Order %s not found upstream", order_id)
            return None
        log.warning("Order service unavailable for %s: %s", order_id, result.detail)
        raise OrderServiceUnavailableError(order_id)

    async def _refresh(self, order_id: str, cached: ClaimSnapshot) -> ClaimSnapshot:
        result = await self._orders.fetch_order(order_id)
        if result.status is OrderFetchStatus.FOUND and result.order is not None:
            return self._store.refresh_items(order_id, result.order) or cached
        log.info(
            "Serving cached claim for order %s (upstream %s)",
            order_id,
            result.status,
        )
        # the claim may have been invalidated while the fetch was in flight
        return self._store.find_by_order_id(order_id) or cached
