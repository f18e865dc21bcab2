"""Private delivery ticket channels on the store's Discord server."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

import discord

from ryftclaim.domain.claim_codes import ticket_channel_name
from ryftclaim.domain.ports import TicketResult

from .embeds import order_summary_embed

if TYPE_CHECKING:
    from ryftclaim.config.discord import DiscordConfig
    from ryftclaim.domain.ports import TicketRequest

log = getLogger(__name__)

type OverwriteTarget = discord.Role | discord.Member | discord.Object


def member_overwrite() -> discord.PermissionOverwrite:
    return discord.PermissionOverwrite(
        view_channel=True,
        send_messages=True,
        read_message_history=True,
        attach_files=True,
        embed_links=True,
    )


def staff_overwrite() -> discord.PermissionOverwrite:
    return discord.PermissionOverwrite(
        view_channel=True,
        send_messages=True,
        read_message_history=True,
        manage_messages=True,
        attach_files=True,
        embed_links=True,
    )


def ticket_overwrites(
    guild: discord.Guild, *, member: discord.Member | None = None
) -> dict[OverwriteTarget, discord.PermissionOverwrite]:
    """Hidden from @everyone; visible to the bot, the owner, administrator roles and ``member``."""

    overwrites: dict[OverwriteTarget, discord.PermissionOverwrite] = {
        guild.default_role: discord.PermissionOverwrite(view_channel=False),
        guild.me: staff_overwrite(),
        discord.Object(id=guild.owner_id): staff_overwrite(),
    }
    for role in guild.roles:
        if role.permissions.administrator and role != guild.default_role:
            overwrites[role] = staff_overwrite()
    if member is not None:
        overwrites[member] = member_overwrite()
    return overwrites


class DiscordTicketGateway:
    """Creates, reuses and deletes ``web-order-*`` ticket channels."""

    def __init__(self, client: discord.Client, config: DiscordConfig) -> None:
        self._client = client
        self._config = config

    async def open_ticket(self, request: TicketRequest) -> TicketResult:
        try:
            return await self._open_ticket(request)
        except discord.DiscordException as exc:
            log.exception("Failed to create delivery channel for order %s", request.order_id)
            return TicketResult(
                success=False, message=f"Failed to create delivery channel: {exc}"
            )

    async def _open_ticket(self, request: TicketRequest) -> TicketResult:
        guild = self._client.get_guild(self._config.guild_id)
        if guild is None:
            return TicketResult(success=False, message="Discord server not found")

        category = guild.get_channel(self._config.delivery_category_id)
        if not isinstance(category, discord.CategoryChannel):
            return TicketResult(
                success=False,
                message=f"Category {self._config.delivery_category_id} not found",
            )

        member = await self._resolve_member(guild, request.discord_user_id)
        name = ticket_channel_name(request.order_id)

        existing = discord.utils.get(guild.text_channels, name=name)
        if existing is not None:
            user_added = False
            if member is not None:
                await existing.set_permissions(
                    member, overwrite=member_overwrite(), reason="Buyer reopened delivery ticket"
                )
                user_added = True
            log.info("Reusing delivery channel #%s for order %s", name, request.order_id)
            return TicketResult(
                success=True,
                message=f"Channel #{existing.name} already exists for this order",
                channel_id=str(existing.id),
                channel_name=existing.name,
                user_added=user_added,
            )

        channel = await guild.create_text_channel(
            name,
            category=category,
            topic=f"Delivery channel for order {request.order_id[:90]}",
            overwrites=ticket_overwrites(guild, member=member),
            reason=f"Automated delivery channel for {request.game_username}",
        )
        await channel.send(embed=order_summary_embed(request))
        log.info("Created delivery channel #%s for order %s", name, request.order_id)
        return TicketResult(
            success=True,
            message=f"Delivery channel #{channel.name} created successfully",
            channel_id=str(channel.id),
            channel_name=channel.name,
            user_added=member is not None,
        )

    async def _resolve_member(
        self, guild: discord.Guild, user_id: int | None
    ) -> discord.Member | None:
        if user_id is None:
            return None
        member = guild.get_member(user_id)
        if member is not None:
            return member
        try:
            return await guild.fetch_member(user_id)
        except discord.NotFound:
            log.warning("Discord user %s is not a member of %s", user_id, guild.id)
            return None

    async def close_ticket(
        self, channel_id: str, *, reason: str, delay_seconds: float = 0
    ) -> bool:
        if delay_seconds > 0:
            await asyncio.sleep(delay_seconds)
        try:
            channel = self._client.get_channel(int(channel_id))
            if channel is None:
                channel = await self._client.fetch_channel(int(channel_id))
            if not isinstance(channel, discord.abc.GuildChannel):
                log.warning("Channel %s is not a guild channel; not deleting", channel_id)
                return False
            await channel.delete(reason=reason)
        except discord.NotFound:
            log.info("Delivery channel %s was already deleted", channel_id)
            return False
        except discord.HTTPException as exc:
            log.warning("Could not delete delivery channel %s: %s", channel_id, exc)
            return False
        log.info("Deleted delivery channel %s", channel_id)
        return True
