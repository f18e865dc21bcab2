"""Application wiring: builds the store, reconciler and adapters from configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from ryftclaim.adapters.delivery import WebhookDeliveryDispatcher
from ryftclaim.adapters.roblox import RobloxAccountClient
from ryftclaim.adapters.sellauth import SellAuthOrderClient
from ryftclaim.config import (
    DEFAULT_INVITE_URL,
    get_delivery_config,
    get_discord_config,
    get_roblox_config,
    get_sellauth_config,
)
from ryftclaim.domain.reconciler import ClaimReconciler
from ryftclaim.domain.store import ClaimStore

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from ryftclaim.adapters.discord import ClaimBot
    from ryftclaim.config import DiscordConfig
    from ryftclaim.domain.ports import (
        DeliveryDispatcher,
        GameAccountLookup,
        OrderFetcher,
        TicketChannelGateway,
    )

log = getLogger(__name__)


@dataclass(slots=True)
class AppServices:
    """Everything the web API and the Discord bot share within one process."""

    reconciler: ClaimReconciler
    accounts: GameAccountLookup
    delivery: DeliveryDispatcher
    tickets: TicketChannelGateway | None = None
    bot: ClaimBot | None = None
    discord: DiscordConfig | None = None
    closers: list[Callable[[], Awaitable[None]]] = field(default_factory=list)

    @property
    def invite_url(self) -> str:
        return self.discord.invite_url if self.discord is not None else DEFAULT_INVITE_URL

    async def aclose(self) -> None:
        """Close the long-lived HTTP clients, newest first."""

        while self.closers:
            await self.closers.pop()()


def build_reconciler(orders: OrderFetcher | None = None) -> ClaimReconciler:
    return ClaimReconciler(
        store=ClaimStore(),
        orders=orders or SellAuthOrderClient(config=get_sellauth_config()),
    )


def build_services(*, with_discord: bool = True) -> AppServices:
    """Assemble the production services from environment configuration.

    Missing credentials raise ``MissingConfigurationError`` here, at startup.
    """

    orders = SellAuthOrderClient(config=get_sellauth_config())
    accounts = RobloxAccountClient(config=get_roblox_config())
    delivery = WebhookDeliveryDispatcher(config=get_delivery_config())
    reconciler = build_reconciler(orders)
    services = AppServices(
        reconciler=reconciler,
        accounts=accounts,
        delivery=delivery,
        closers=[orders.aclose, accounts.aclose, delivery.aclose],
    )
    if with_discord:
        from ryftclaim.adapters.discord import ClaimBot  # noqa: PLC0415

        discord_config = get_discord_config()
        bot = ClaimBot(config=discord_config, reconciler=reconciler)
        services.bot = bot
        services.tickets = bot.gateway
        services.discord = discord_config
    log.info("Services ready (discord=%s)", with_discord)
    return services
