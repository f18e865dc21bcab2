"""Discord bot hosting the claim commands."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

import discord
from discord.ext import commands

from .cog import ClaimCommandsCog
from .gateway import DiscordTicketGateway

if TYPE_CHECKING:
    from ryftclaim.config.discord import DiscordConfig
    from ryftclaim.domain.reconciler import ClaimReconciler

log = getLogger(__name__)


class ClaimBot(commands.Bot):
    """Slash-command bot; commands are synced to the store guild on startup."""

    def __init__(self, *, config: DiscordConfig, reconciler: ClaimReconciler) -> None:
        intents = discord.Intents.default()
        intents.guilds = True
        intents.members = True
        super().__init__(
            command_prefix=commands.when_mentioned,
            intents=intents,
            help_command=None,
        )
        self.config = config
        self.reconciler = reconciler
        self.gateway = DiscordTicketGateway(self, config)

    async def setup_hook(self) -> None:
        await self.add_cog(
            ClaimCommandsCog(
                self,
                reconciler=self.reconciler,
                gateway=self.gateway,
                config=self.config,
            )
        )
        guild = discord.Object(id=self.config.guild_id)
        self.tree.copy_global_to(guild=guild)
        synced = await self.tree.sync(guild=guild)
        log.info("Synced %d slash commands to guild %s", len(synced), self.config.guild_id)

    async def on_ready(self) -> None:
        log.info("Discord bot ready as %s in %d guilds", self.user, len(self.guilds))
        if self.get_guild(self.config.guild_id) is None:
            log.warning("Bot is not a member of the configured guild %s", self.config.guild_id)
