"""Discord bot configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var, optional_float_env_var, require_env_vars
from .errors import ConfigurationError

DEFAULT_DELIVERY_CATEGORY_ID = 1414912455104266301
DEFAULT_INVITE_URL = "https://discord.gg/ryftstock"
DEFAULT_CHANNEL_DELETE_DELAY_SECONDS = 5.0


@dataclass(frozen=True, slots=True)
class DiscordConfig:
    token: str
    guild_id: int
    delivery_category_id: int
    invite_url: str
    channel_delete_delay_seconds: float


def _parse_snowflake(name: str, raw: str) -> int:
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a numeric Discord id, got {raw!r}") from exc


def get_discord_config() -> DiscordConfig:
    values = require_env_vars(("DISCORD_BOT_TOKEN", "DISCORD_GUILD_ID"))
    category = optional_env_var("DISCORD_DELIVERY_CATEGORY_ID")
    return DiscordConfig(
        token=values["DISCORD_BOT_TOKEN"],
        guild_id=_parse_snowflake("DISCORD_GUILD_ID", values["DISCORD_GUILD_ID"]),
        delivery_category_id=(
            _parse_snowflake("DISCORD_DELIVERY_CATEGORY_ID", category)
            if category is not None
            else DEFAULT_DELIVERY_CATEGORY_ID
        ),
        invite_url=optional_env_var("DISCORD_INVITE_URL", DEFAULT_INVITE_URL) or DEFAULT_INVITE_URL,
        channel_delete_delay_seconds=optional_float_env_var(
            "DISCORD_CHANNEL_DELETE_DELAY_SECONDS", DEFAULT_CHANNEL_DELETE_DELAY_SECONDS
        ),
    )
