from __future__ import annotations

import logging
import os

import pytest

from ryftclaim.config import (
    DEFAULT_INVITE_URL,
    ConfigurationError,
    MissingConfigurationError,
    configure_logging,
    get_discord_config,
    get_server_config,
    optional_env_var,
    require_env_var,
    require_env_vars,
)
from ryftclaim.config.discord import DEFAULT_DELIVERY_CATEGORY_ID
from ryftclaim.config.env import optional_float_env_var, optional_int_env_var


def test_require_env_vars_returns_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", " value ")

    result = require_env_vars(["EXAMPLE_VAR"])

    assert result["EXAMPLE_VAR"] == "value"


def test_require_env_vars_lists_every_missing_name(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MISSING_B", raising=False)
    monkeypatch.delenv("MISSING_A", raising=False)

    with pytest.raises(MissingConfigurationError) as exc:
        require_env_vars(["MISSING_B", "MISSING_A"])

    assert "MISSING_A, MISSING_B" in str(exc.value)
    assert exc.value.names == ("MISSING_A", "MISSING_B")


def test_require_env_var_handles_blank_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "   ")

    with pytest.raises(MissingConfigurationError):
        require_env_var("EXAMPLE_VAR")


def test_optional_env_var_treats_blank_as_unset(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "  ")

    assert optional_env_var("EXAMPLE_VAR", "fallback") == "fallback"
    assert os.getenv("EXAMPLE_VAR") == "  "


def test_optional_numeric_env_vars(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_FLOAT", "2.5")
    monkeypatch.setenv("EXAMPLE_INT", "8080")

    assert optional_float_env_var("EXAMPLE_FLOAT", 1.0) == 2.5
    assert optional_int_env_var("EXAMPLE_INT", 1) == 8080
    assert optional_int_env_var("EXAMPLE_UNSET_INT", 7) == 7


def test_optional_numeric_env_vars_reject_garbage(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_INT", "eighty")

    with pytest.raises(ConfigurationError, match="EXAMPLE_INT"):
        optional_int_env_var("EXAMPLE_INT", 1)


def test_get_discord_config_requires_token_and_guild() -> None:
    with pytest.raises(MissingConfigurationError) as exc:
        get_discord_config()

    assert "DISCORD_BOT_TOKEN" in str(exc.value)
    assert "DISCORD_GUILD_ID" in str(exc.value)


def test_get_discord_config_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DISCORD_BOT_TOKEN", "token")
    monkeypatch.setenv("DISCORD_GUILD_ID", "123")

    config = get_discord_config()

    assert config.guild_id == 123
    assert config.delivery_category_id == DEFAULT_DELIVERY_CATEGORY_ID
    assert config.invite_url == DEFAULT_INVITE_URL
    assert config.channel_delete_delay_seconds == 5.0


def test_get_discord_config_rejects_non_numeric_ids(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DISCORD_BOT_TOKEN", "token")
    monkeypatch.setenv("DISCORD_GUILD_ID", "my-guild")

    with pytest.raises(ConfigurationError, match="DISCORD_GUILD_ID"):
        get_discord_config()


def test_get_server_config(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PORT", "8000")
    monkeypatch.setenv("RYFTCLAIM_ALLOWED_ORIGINS", "https://shop.test, https://www.shop.test,")

    config = get_server_config()

    assert config.host == "0.0.0.0"  # noqa: S104
    assert config.port == 8000
    assert config.allowed_origins == ("https://shop.test", "https://www.shop.test")


def test_configure_logging_reads_level(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RYFTCLAIM_LOG_LEVEL", "debug")

    configure_logging(force=True)

    assert logging.getLogger().level == logging.DEBUG
    assert logging.getLogger("discord").level == logging.WARNING
    configure_logging(level=logging.INFO, force=True)
