from __future__ import annotations

import pytest

from ryftclaim.domain.reconciler import ClaimReconciler
from ryftclaim.domain.store import ClaimStore
from tests.helpers.collaborators import (
    FakeAccountLookup,
    FakeDeliveryDispatcher,
    FakeTicketGateway,
)
from tests.helpers.orders import FakeOrderFetcher, make_order

_CONFIG_ENV_VARS = (
    "SELLAUTH_API_KEY",
    "SELLAUTH_SHOP_ID",
    "SELLAUTH_BASE_URL",
    "SELLAUTH_TIMEOUT_SECONDS",
    "DISCORD_BOT_TOKEN",
    "DISCORD_GUILD_ID",
    "DISCORD_DELIVERY_CATEGORY_ID",
    "DISCORD_INVITE_URL",
    "DISCORD_CHANNEL_DELETE_DELAY_SECONDS",
    "ROBLOX_GAME_ID",
    "ROBLOX_USERS_URL",
    "ROBLOX_THUMBNAILS_URL",
    "ROBLOX_DELIVERY_WEBHOOK_URL",
    "WEBHOOK_SECRET",
    "HOST",
    "PORT",
    "RYFTCLAIM_ALLOWED_ORIGINS",
    "RYFTCLAIM_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def order_fetcher() -> FakeOrderFetcher:
    return FakeOrderFetcher([make_order()])


@pytest.fixture
def store() -> ClaimStore:
    return ClaimStore()


@pytest.fixture
def reconciler(store: ClaimStore, order_fetcher: FakeOrderFetcher) -> ClaimReconciler:
    return ClaimReconciler(store=store, orders=order_fetcher)


@pytest.fixture
def ticket_gateway() -> FakeTicketGateway:
    return FakeTicketGateway()


@pytest.fixture
def delivery_dispatcher() -> FakeDeliveryDispatcher:
    return FakeDeliveryDispatcher()


@pytest.fixture
def account_lookup() -> FakeAccountLookup:
    return FakeAccountLookup("GardenFan99")
