"""Roblox account lookup and item delivery configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy

ROBLOX_USERS_URL = "https://users.roblox.com/v1"
ROBLOX_THUMBNAILS_URL = "https://thumbnails.roblox.com/v1"
DEFAULT_GAME_ID = "2041312716"
DEFAULT_WEBHOOK_SECRET = "sellauth-garden-delivery"


@dataclass(frozen=True, slots=True)
class RobloxConfig:
    users_base_url: str
    thumbnails_base_url: str
    resilience: ResilienceConfig


@dataclass(frozen=True, slots=True)
class DeliveryConfig:
    """Webhook delivery settings; a missing webhook URL means simulated delivery."""

    game_id: str
    webhook_url: str | None
    webhook_secret: str
    resilience: ResilienceConfig

    def fallback_join_url(self, order_id: str) -> str:
        return f"https://www.roblox.com/games/{self.game_id}/grow-a-garden?ref=delivery-{order_id}"


def get_roblox_config() -> RobloxConfig:
    return RobloxConfig(
        users_base_url=optional_env_var("ROBLOX_USERS_URL", ROBLOX_USERS_URL) or ROBLOX_USERS_URL,
        thumbnails_base_url=optional_env_var("ROBLOX_THUMBNAILS_URL", ROBLOX_THUMBNAILS_URL)
        or ROBLOX_THUMBNAILS_URL,
        resilience=ResilienceConfig(
            name="roblox",
            ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
            retry=RetryPolicy.including_post(),
            cache=CacheConfig.memory(ttl_seconds=300.0),
        ),
    )


def get_delivery_config() -> DeliveryConfig:
    game_id = optional_env_var("ROBLOX_GAME_ID", DEFAULT_GAME_ID) or DEFAULT_GAME_ID
    secret = optional_env_var("WEBHOOK_SECRET", DEFAULT_WEBHOOK_SECRET) or DEFAULT_WEBHOOK_SECRET
    return DeliveryConfig(
        game_id=game_id,
        webhook_url=optional_env_var("ROBLOX_DELIVERY_WEBHOOK_URL"),
        webhook_secret=secret,
        resilience=ResilienceConfig(
            name="delivery",
            retry=RetryPolicy.disabled(),
            cache=None,
        ),
    )
