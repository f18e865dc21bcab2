"""Slash commands for buyers (``/claim``) and staff (``/claimed``)."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

import discord
from discord import app_commands
from discord.ext import commands

from ryftclaim.domain.claim_codes import (
    TICKET_CHANNEL_PREFIX,
    is_claim_code,
    normalize_claim_code,
)
from ryftclaim.domain.errors import OrderServiceUnavailableError
from ryftclaim.domain.tickets import open_delivery_ticket

from .embeds import invalidated_embed, purchase_details_embed

if TYPE_CHECKING:
    from ryftclaim.config.discord import DiscordConfig
    from ryftclaim.domain.model import ClaimSnapshot
    from ryftclaim.domain.ports import TicketChannelGateway
    from ryftclaim.domain.reconciler import ClaimReconciler

log = getLogger(__name__)

NOT_FOUND_MESSAGE = (
    "❌ Invoice ID {order_id} not found. Please check your invoice ID and try again."
)
INVALIDATED_MESSAGE = (
    "❌ This invoice ID has been **invalidated by staff** and cannot be used.\n\n"
    "If you believe this is an error, please contact support in our Discord server."
)
UNAVAILABLE_MESSAGE = "❌ Order lookup is temporarily unavailable. Please try again shortly."


async def resolve_claim_reference(
    reconciler: ClaimReconciler, reference: str
) -> ClaimSnapshot | None:
    """Look up a claim by claim code when the input looks like one, else by order id."""

    reference = reference.strip()
    if is_claim_code(reference):
        return reconciler.lookup_by_claim_code(normalize_claim_code(reference))
    return await reconciler.lookup_by_order_id(reference)


def channel_to_close(snapshot: ClaimSnapshot, current_channel: object) -> str | None:
    """The ticket channel to delete after ``/claimed``, if any."""

    if snapshot.claim.chat_channel_id:
        return snapshot.claim.chat_channel_id
    name = getattr(current_channel, "name", None)
    channel_id = getattr(current_channel, "id", None)
    if isinstance(name, str) and name.startswith(TICKET_CHANNEL_PREFIX) and channel_id:
        return str(channel_id)
    return None


async def _send(
    interaction: discord.Interaction,
    content: str | None = None,
    *,
    embed: discord.Embed | None = None,
    ephemeral: bool = True,
) -> None:
    kwargs: dict[str, object] = {"ephemeral": ephemeral}
    if content is not None:
        kwargs["content"] = content
    if embed is not None:
        kwargs["embed"] = embed
    if not interaction.response.is_done():
        await interaction.response.send_message(**kwargs)
    else:
        await interaction.followup.send(**kwargs)


class ClaimCommandsCog(commands.Cog, name="Claims"):
    """Thin chat layer over the reconciler and the ticket gateway."""

    def __init__(
        self,
        bot: commands.Bot | None,
        *,
        reconciler: ClaimReconciler,
        gateway: TicketChannelGateway,
        config: DiscordConfig,
    ) -> None:
        self.bot = bot
        self._reconciler = reconciler
        self._gateway = gateway
        self._config = config
        self._pending_deletions: set[asyncio.Task[bool]] = set()

    @app_commands.command(
        name="claim", description="View your purchase details using your invoice ID"
    )
    @app_commands.describe(
        invoiceid="Your invoice ID or claim code (e.g., 4e6d5d5941fbd-0000006644093)"
    )
    async def claim(self, interaction: discord.Interaction, invoiceid: str) -> None:
        await interaction.response.defer(ephemeral=True, thinking=True)
        try:
            snapshot = await resolve_claim_reference(self._reconciler, invoiceid)
        except OrderServiceUnavailableError:
            await _send(interaction, UNAVAILABLE_MESSAGE)
            return

        if snapshot is None:
            await _send(interaction, NOT_FOUND_MESSAGE.format(order_id=invoiceid.strip()))
            return
        if snapshot.claim.invalidated:
            await _send(interaction, INVALIDATED_MESSAGE)
            return

        ticket = await open_delivery_ticket(
            reconciler=self._reconciler,
            gateway=self._gateway,
            snapshot=snapshot,
            discord_user_id=interaction.user.id,
        )
        await _send(interaction, embed=purchase_details_embed(snapshot, ticket=ticket))

    @app_commands.command(name="claimed", description="Mark an order as claimed (Staff only)")
    @app_commands.describe(invoiceid="The invoice ID to mark as claimed")
    @app_commands.default_permissions(manage_channels=True)
    @app_commands.checks.has_permissions(manage_channels=True)
    async def claimed(self, interaction: discord.Interaction, invoiceid: str) -> None:
        await interaction.response.defer(thinking=True)
        order_id = invoiceid.strip()
        try:
            existing = await self._reconciler.lookup_by_order_id(order_id)
        except OrderServiceUnavailableError:
            existing = None
        if existing is not None and existing.claim.invalidated:
            await _send(interaction, f"⚠️ Invoice {order_id} is already marked as claimed.")
            return

        snapshot = self._reconciler.invalidate(order_id)
        log.info("Order %s invalidated by %s", order_id, interaction.user)
        await _send(
            interaction,
            embed=invalidated_embed(order_id, snapshot, invalidated_by=str(interaction.user)),
            ephemeral=False,
        )

        channel_id = channel_to_close(snapshot, interaction.channel)
        if channel_id is None:
            return
        delay = self._config.channel_delete_delay_seconds
        await _send(
            interaction,
            f"\U0001f5d1️ **Deleting ticket in {delay:g} seconds...**",
            ephemeral=False,
        )
        self._schedule_close(channel_id, delay)

    @claimed.error
    async def _claimed_error(
        self, interaction: discord.Interaction, error: app_commands.AppCommandError
    ) -> None:
        if isinstance(error, app_commands.MissingPermissions):
            await _send(interaction, "❌ You need the Manage Channels permission to do that.")
            return
        raise error

    def _schedule_close(self, channel_id: str, delay: float) -> None:
        task = asyncio.create_task(
            self._gateway.close_ticket(
                channel_id,
                reason="Order marked as claimed - cleaning up delivery channel",
                delay_seconds=delay,
            )
        )
        self._pending_deletions.add(task)
        task.add_done_callback(self._pending_deletions.discard)

    async def cog_unload(self) -> None:
        for task in list(self._pending_deletions):
            task.cancel()
