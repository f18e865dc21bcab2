"""Application configuration helpers."""

from __future__ import annotations

from .discord import DEFAULT_INVITE_URL, DiscordConfig, get_discord_config
from .env import optional_env_var, require_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .roblox import DeliveryConfig, RobloxConfig, get_delivery_config, get_roblox_config
from .sellauth import SellAuthConfig, get_sellauth_config
from .server import ServerConfig, get_server_config

__all__ = [
    "DEFAULT_INVITE_URL",
    "CacheConfig",
    "ConfigurationError",
    "DeliveryConfig",
    "DiscordConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "RobloxConfig",
    "SellAuthConfig",
    "ServerConfig",
    "configure_logging",
    "get_delivery_config",
    "get_discord_config",
    "get_roblox_config",
    "get_sellauth_config",
    "get_server_config",
    "optional_env_var",
    "require_env_var",
    "require_env_vars",
]
