"""Opening delivery tickets for reconciled claims."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from .ports import TicketRequest

if TYPE_CHECKING:
    from .model import ClaimSnapshot
    from .ports import TicketChannelGateway, TicketResult
    from .reconciler import ClaimReconciler

log = getLogger(__name__)


async def open_delivery_ticket(
    *,
    reconciler: ClaimReconciler,
    gateway: TicketChannelGateway,
    snapshot: ClaimSnapshot,
    game_username: str | None = None,
    discord_user_id: int | None = None,
) -> TicketResult:
    """Create the support channel for a claim and record it.

    The claim is marked claimed only after the channel exists and is attached;
    a failed channel creation leaves the claim untouched so the buyer can retry.
    """

    claim = snapshot.claim
    request = TicketRequest(
        order_id=claim.order_id,
        email=claim.email,
        game_username=game_username or claim.game_username or "Unknown",
        items=snapshot.items,
        discord_user_id=discord_user_id,
    )
    result = await gateway.open_ticket(request)
    if not result.success or result.channel_id is None:
        log.warning("Ticket creation failed for order %s: %s", claim.order_id, result.message)
        return result

    reconciler.record_channel(claim.order_id, result.channel_id)
    reconciler.record_claimed(claim.order_id)
    return result
