from __future__ import annotations

import asyncio

import pytest
from discord import app_commands

from ryftclaim.adapters.discord.cog import (
    INVALIDATED_MESSAGE,
    UNAVAILABLE_MESSAGE,
    ClaimCommandsCog,
    channel_to_close,
    resolve_claim_reference,
)
from ryftclaim.domain.ports import OrderFetchResult  # noqa: TC001
from ryftclaim.domain.reconciler import ClaimReconciler
from ryftclaim.domain.store import ClaimStore  # noqa: TC001
from tests.helpers.collaborators import FakeTicketGateway
from tests.helpers.discord_fakes import FakeInteraction, FakeMember, FakeTextChannel, discord_config
from tests.helpers.orders import SAMPLE_ORDER_ID, FakeOrderFetcher, make_order


@pytest.fixture
def cog(reconciler: ClaimReconciler, ticket_gateway: FakeTicketGateway) -> ClaimCommandsCog:
    return ClaimCommandsCog(
        None, reconciler=reconciler, gateway=ticket_gateway, config=discord_config()
    )


def _run_claim(cog: ClaimCommandsCog, interaction: FakeInteraction, value: str) -> None:
    asyncio.run(cog.claim.callback(cog, interaction, value))  # type: ignore[arg-type]


def _run_claimed(cog: ClaimCommandsCog, interaction: FakeInteraction, value: str) -> None:
    async def scenario() -> None:
        await cog.claimed.callback(cog, interaction, value)  # type: ignore[arg-type]
        await asyncio.gather(*cog._pending_deletions)  # noqa: SLF001

    asyncio.run(scenario())


def test_resolve_claim_reference_by_order_id_and_code(reconciler: ClaimReconciler) -> None:
    by_order = asyncio.run(resolve_claim_reference(reconciler, f" {SAMPLE_ORDER_ID} "))
    by_code = asyncio.run(resolve_claim_reference(reconciler, "ryft-4e93"))

    assert by_order is not None and by_code is not None
    assert by_code.claim.internal_id == by_order.claim.internal_id


def test_resolve_unknown_claim_code_does_not_fetch(
    reconciler: ClaimReconciler, order_fetcher: FakeOrderFetcher
) -> None:
    assert asyncio.run(resolve_claim_reference(reconciler, "RYFT-ZZZZ")) is None
    assert sum(order_fetcher.calls.values()) == 0


def test_channel_to_close_prefers_recorded_channel(reconciler: ClaimReconciler) -> None:
    asyncio.run(reconciler.lookup_by_order_id(SAMPLE_ORDER_ID))
    snapshot = reconciler.record_channel(SAMPLE_ORDER_ID, "777")
    assert snapshot is not None

    assert channel_to_close(snapshot, FakeTextChannel(1, "general")) == "777"


def test_channel_to_close_uses_current_ticket_channel(reconciler: ClaimReconciler) -> None:
    snapshot = reconciler.invalidate("unseen-order")

    assert channel_to_close(snapshot, FakeTextChannel(31, "web-order-ryft-unse")) == "31"
    assert channel_to_close(snapshot, FakeTextChannel(32, "general")) is None
    assert channel_to_close(snapshot, None) is None


def test_claim_opens_ticket_and_replies_with_details(
    cog: ClaimCommandsCog, reconciler: ClaimReconciler, ticket_gateway: FakeTicketGateway
) -> None:
    interaction = FakeInteraction(user=FakeMember(55, "buyer"))

    _run_claim(cog, interaction, SAMPLE_ORDER_ID)

    assert interaction.response.deferred == {"ephemeral": True, "thinking": True}
    reply = interaction.followup.messages[0]
    assert reply["ephemeral"] is True
    assert reply["embed"].title == "\U0001f9fe Purchase Details"
    assert ticket_gateway.opened[0].discord_user_id == 55
    stored = reconciler.store.find_by_order_id(SAMPLE_ORDER_ID)
    assert stored is not None
    assert stored.claim.claimed
    assert stored.claim.chat_channel_id == "1001"


def test_claim_accepts_claim_code(
    cog: ClaimCommandsCog, reconciler: ClaimReconciler, ticket_gateway: FakeTicketGateway
) -> None:
    asyncio.run(reconciler.lookup_by_order_id(SAMPLE_ORDER_ID))
    interaction = FakeInteraction()

    _run_claim(cog, interaction, "ryft-4e93")

    assert ticket_gateway.opened[0].order_id == SAMPLE_ORDER_ID


def test_claim_unknown_invoice(cog: ClaimCommandsCog, ticket_gateway: FakeTicketGateway) -> None:
    interaction = FakeInteraction()

    _run_claim(cog, interaction, "  nope-123  ")

    assert interaction.sent[0]["content"] == (
        "❌ Invoice ID nope-123 not found. Please check your invoice ID and try again."
    )
    assert ticket_gateway.opened == []


def test_claim_invalidated_invoice(
    cog: ClaimCommandsCog, reconciler: ClaimReconciler, ticket_gateway: FakeTicketGateway
) -> None:
    reconciler.invalidate(SAMPLE_ORDER_ID)
    interaction = FakeInteraction()

    _run_claim(cog, interaction, SAMPLE_ORDER_ID)

    assert interaction.sent[0]["content"] == INVALIDATED_MESSAGE
    assert ticket_gateway.opened == []


def test_claim_when_order_service_is_down(
    cog: ClaimCommandsCog, order_fetcher: FakeOrderFetcher
) -> None:
    order_fetcher.fail(SAMPLE_ORDER_ID)
    interaction = FakeInteraction()

    _run_claim(cog, interaction, SAMPLE_ORDER_ID)

    assert interaction.sent[0]["content"] == UNAVAILABLE_MESSAGE


def test_claimed_invalidates_and_deletes_ticket(
    cog: ClaimCommandsCog, reconciler: ClaimReconciler, ticket_gateway: FakeTicketGateway
) -> None:
    asyncio.run(reconciler.lookup_by_order_id(SAMPLE_ORDER_ID))
    reconciler.record_channel(SAMPLE_ORDER_ID, "777")
    interaction = FakeInteraction(channel=FakeTextChannel(1, "staff-room"))

    _run_claimed(cog, interaction, SAMPLE_ORDER_ID)

    embed_reply, delete_notice = interaction.sent
    assert embed_reply["ephemeral"] is False
    assert embed_reply["embed"].title == "\U0001f6ab Invoice Completely Invalidated"
    assert delete_notice["content"] == "\U0001f5d1️ **Deleting ticket in 0 seconds...**"
    assert ticket_gateway.closed == [
        ("777", "Order marked as claimed - cleaning up delivery channel", 0.0)
    ]
    assert reconciler.store.is_blocked(SAMPLE_ORDER_ID)


def test_claimed_acknowledges_before_looking_up_the_order(
    store: ClaimStore, ticket_gateway: FakeTicketGateway
) -> None:
    interaction = FakeInteraction(channel=FakeTextChannel(1, "staff-room"))
    deferred_at_fetch: list[bool] = []

    class ObservingOrderFetcher(FakeOrderFetcher):
        async def fetch_order(self, order_id: str) -> OrderFetchResult:
            deferred_at_fetch.append(interaction.response.deferred is not None)
            return await super().fetch_order(order_id)

    reconciler = ClaimReconciler(store=store, orders=ObservingOrderFetcher([make_order()]))
    cog = ClaimCommandsCog(
        None, reconciler=reconciler, gateway=ticket_gateway, config=discord_config()
    )

    _run_claimed(cog, interaction, SAMPLE_ORDER_ID)

    assert deferred_at_fetch == [True]
    assert interaction.response.deferred == {"thinking": True}
    assert interaction.response.messages == []
    assert interaction.followup.messages[0]["embed"].title == (
        "\U0001f6ab Invoice Completely Invalidated"
    )


def test_claimed_unseen_order_blocks_it(
    cog: ClaimCommandsCog, reconciler: ClaimReconciler, ticket_gateway: FakeTicketGateway
) -> None:
    interaction = FakeInteraction(channel=FakeTextChannel(1, "staff-room"))

    _run_claimed(cog, interaction, "brand-new-order")

    assert len(interaction.sent) == 1
    assert ticket_gateway.closed == []
    snapshot = asyncio.run(reconciler.lookup_by_order_id("brand-new-order"))
    assert snapshot is not None and snapshot.claim.invalidated


def test_claimed_twice_reports_already_claimed(
    cog: ClaimCommandsCog, reconciler: ClaimReconciler
) -> None:
    reconciler.invalidate(SAMPLE_ORDER_ID)
    interaction = FakeInteraction()

    _run_claimed(cog, interaction, SAMPLE_ORDER_ID)

    assert interaction.sent[0]["content"] == (
        f"⚠️ Invoice {SAMPLE_ORDER_ID} is already marked as claimed."
    )


def test_claimed_permission_error_is_reported(cog: ClaimCommandsCog) -> None:
    interaction = FakeInteraction()
    error = app_commands.MissingPermissions(["manage_channels"])

    asyncio.run(cog._claimed_error(interaction, error))  # type: ignore[arg-type]  # noqa: SLF001

    assert interaction.sent[0]["content"] == (
        "❌ You need the Manage Channels permission to do that."
    )
    assert interaction.sent[0]["ephemeral"] is True
