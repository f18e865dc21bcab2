from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from ryftclaim.domain.tickets import open_delivery_ticket
from tests.helpers.collaborators import FakeTicketGateway
from tests.helpers.orders import SAMPLE_EMAIL, SAMPLE_ORDER_ID

if TYPE_CHECKING:
    from ryftclaim.domain.model import ClaimSnapshot
    from ryftclaim.domain.reconciler import ClaimReconciler


def _verified(reconciler: ClaimReconciler) -> ClaimSnapshot:
    return asyncio.run(reconciler.verify(SAMPLE_ORDER_ID, SAMPLE_EMAIL))


def test_open_ticket_records_channel_and_claims_order(
    reconciler: ClaimReconciler, ticket_gateway: FakeTicketGateway
) -> None:
    snapshot = _verified(reconciler)

    result = asyncio.run(
        open_delivery_ticket(
            reconciler=reconciler,
            gateway=ticket_gateway,
            snapshot=snapshot,
            game_username="GardenFan99",
            discord_user_id=1234,
        )
    )

    assert result.success
    assert result.user_added
    request = ticket_gateway.opened[0]
    assert request.order_id == SAMPLE_ORDER_ID
    assert request.game_username == "GardenFan99"
    assert request.discord_user_id == 1234
    assert len(request.items) == 2
    stored = reconciler.store.find_by_order_id(SAMPLE_ORDER_ID)
    assert stored is not None
    assert stored.claim.claimed
    assert stored.claim.chat_channel_id == result.channel_id


def test_open_ticket_falls_back_to_recorded_username(
    reconciler: ClaimReconciler, ticket_gateway: FakeTicketGateway
) -> None:
    _verified(reconciler)
    snapshot = reconciler.record_game_username(SAMPLE_ORDER_ID, "RecordedName")
    assert snapshot is not None

    asyncio.run(
        open_delivery_ticket(reconciler=reconciler, gateway=ticket_gateway, snapshot=snapshot)
    )

    assert ticket_gateway.opened[0].game_username == "RecordedName"


def test_open_ticket_without_any_username(
    reconciler: ClaimReconciler, ticket_gateway: FakeTicketGateway
) -> None:
    snapshot = _verified(reconciler)

    asyncio.run(
        open_delivery_ticket(reconciler=reconciler, gateway=ticket_gateway, snapshot=snapshot)
    )

    assert ticket_gateway.opened[0].game_username == "Unknown"


def test_failed_ticket_leaves_claim_untouched(reconciler: ClaimReconciler) -> None:
    gateway = FakeTicketGateway(fail_with="Delivery category not found")
    snapshot = _verified(reconciler)

    result = asyncio.run(
        open_delivery_ticket(reconciler=reconciler, gateway=gateway, snapshot=snapshot)
    )

    assert not result.success
    assert result.message == "Delivery category not found"
    stored = reconciler.store.find_by_order_id(SAMPLE_ORDER_ID)
    assert stored is not None
    assert not stored.claim.claimed
    assert stored.claim.chat_channel_id is None
