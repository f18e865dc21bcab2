"""SellAuth order API configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var, optional_float_env_var, require_env_vars
from .http_resilience import DEFAULT_TIMEOUT_SECONDS, RateLimit, ResilienceConfig, RetryPolicy

SELLAUTH_BASE_URL = "https://api.sellauth.com/v1"


@dataclass(frozen=True, slots=True)
class SellAuthConfig:
    """Holds SellAuth API credentials and transport settings."""

    api_key: str
    shop_id: str
    resilience: ResilienceConfig


def get_sellauth_config(*, resilience: ResilienceConfig | None = None) -> SellAuthConfig:
    values = require_env_vars(("SELLAUTH_API_KEY", "SELLAUTH_SHOP_ID"))
    base_url = optional_env_var("SELLAUTH_BASE_URL", SELLAUTH_BASE_URL)
    timeout = optional_float_env_var("SELLAUTH_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS)
    return SellAuthConfig(
        api_key=values["SELLAUTH_API_KEY"],
        shop_id=values["SELLAUTH_SHOP_ID"],
        resilience=resilience
        or ResilienceConfig(
            name="sellauth",
            base_url=base_url,
            timeout_seconds=timeout,
            retry=RetryPolicy(total=2),
            ratelimit=RateLimit(max_calls=5, per_seconds=1.0),
            # Order state (delivered flags, refunds) must always be read live.
            cache=None,
        ),
    )
