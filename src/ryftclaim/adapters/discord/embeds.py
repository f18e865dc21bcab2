"""Embeds posted by the claim bot."""

from __future__ import annotations

from typing import TYPE_CHECKING

import discord

from ryftclaim.domain.model import utcnow

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime

    from ryftclaim.domain.model import ClaimItem, ClaimSnapshot
    from ryftclaim.domain.ports import TicketRequest, TicketResult

SUCCESS_COLOUR = discord.Colour(0x00FF00)
INVALIDATED_COLOUR = discord.Colour(0xFF0000)
STORE_FOOTER = "Ryft Stock Garden Store"
DELIVERY_FOOTER = "Ryft Stock - Garden Items Delivery"
NO_ITEMS = "No items found"

# Discord rejects field values longer than this.
_FIELD_LIMIT = 1024


def _clip(value: str) -> str:
    if len(value) <= _FIELD_LIMIT:
        return value
    return value[: _FIELD_LIMIT - 1] + "…"


def format_items(items: Iterable[ClaimItem]) -> str:
    lines = [
        f"• **{item.item_name}** (x{item.quantity}) - ${item.line_total:.2f}"
        for item in items
    ]
    return _clip("\n".join(lines)) if lines else NO_ITEMS


def format_purchase_date(value: datetime | None) -> str:
    if value is None:
        return "Unknown"
    return value.strftime("%B %d, %Y %H:%M UTC")


def purchase_details_embed(
    snapshot: ClaimSnapshot, *, ticket: TicketResult | None = None
) -> discord.Embed:
    """Ephemeral reply to ``/claim`` summarising the purchase and the ticket channel."""

    claim = snapshot.claim
    embed = discord.Embed(
        title="\U0001f9fe Purchase Details",
        description=f"Here are the details for invoice **{claim.order_id}**",
        colour=SUCCESS_COLOUR,
        timestamp=utcnow(),
    )
    embed.add_field(name="\U0001f4b0 Total Price", value=f"${snapshot.total_price:.2f}")
    embed.add_field(name="\U0001f4c5 Purchase Date", value=format_purchase_date(claim.created_at))
    embed.add_field(name="\U0001f4e7 Email", value=claim.email or "N/A")
    embed.add_field(name="\U0001f3ae Roblox Username", value=claim.game_username or "Not set")
    embed.add_field(
        name="✅ Status",
        value="Verified" if claim.verified else "Pending Verification",
    )
    embed.add_field(name="\U0001f3ab Claim ID", value=claim.display_code)
    embed.add_field(
        name="\U0001f4e6 Items Purchased", value=format_items(snapshot.items), inline=False
    )
    if ticket is not None:
        if ticket.success and ticket.channel_id:
            status = f"✅ Created: <#{ticket.channel_id}>\nChannel: #{ticket.channel_name}"
        else:
            status = f"❌ Failed to create channel: {ticket.message}"
        embed.add_field(name="\U0001f4cd Delivery Channel", value=_clip(status), inline=False)
    embed.set_footer(text=STORE_FOOTER)
    return embed


def order_summary_embed(request: TicketRequest) -> discord.Embed:
    """First message in a new delivery ticket channel."""

    embed = discord.Embed(
        title="\U0001f3ae New Garden Item Delivery",
        description=f"Order details for **{request.game_username}**",
        colour=SUCCESS_COLOUR,
        timestamp=utcnow(),
    )
    embed.add_field(name="\U0001f4cb Order ID", value=f"`{request.order_id}`")
    embed.add_field(name="\U0001f4e7 Email", value=request.email or "N/A")
    embed.add_field(name="\U0001f3ae Roblox Username", value=request.game_username)
    embed.add_field(
        name="\U0001f4e6 Items Purchased", value=format_items(request.items), inline=False
    )
    embed.set_footer(text=DELIVERY_FOOTER)
    return embed


def invalidated_embed(
    order_id: str, snapshot: ClaimSnapshot, *, invalidated_by: str
) -> discord.Embed:
    claim = snapshot.claim
    embed = discord.Embed(
        title="\U0001f6ab Invoice Completely Invalidated",
        colour=INVALIDATED_COLOUR,
        timestamp=utcnow(),
    )
    embed.add_field(name="Invoice ID", value=f"~~{order_id}~~")
    embed.add_field(name="Roblox Username", value=claim.game_username or "N/A")
    embed.add_field(name="Email", value=claim.email or "N/A")
    embed.add_field(name="Original Claim ID", value=f"~~{claim.claim_code}~~")
    embed.add_field(name="Status", value="\U0001f6ab **INVALIDATED**")
    embed.add_field(
        name="⚠️ Actions Taken:",
        value=(
            "• Invoice ID marked as unavailable\n"
            "• All linked claim IDs invalidated\n"
            "• No further claims can be made"
        ),
        inline=False,
    )
    embed.set_footer(text=f"Invalidated by {invalidated_by}")
    return embed
