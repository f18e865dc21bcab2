"""Web server configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var, optional_int_env_var

DEFAULT_HOST = "0.0.0.0"  # noqa: S104
DEFAULT_PORT = 5000


@dataclass(frozen=True, slots=True)
class ServerConfig:
    host: str
    port: int
    allowed_origins: tuple[str, ...]


def get_server_config() -> ServerConfig:
    origins = optional_env_var("RYFTCLAIM_ALLOWED_ORIGINS", "*") or "*"
    return ServerConfig(
        host=optional_env_var("HOST", DEFAULT_HOST) or DEFAULT_HOST,
        port=optional_int_env_var("PORT", DEFAULT_PORT),
        allowed_origins=tuple(origin.strip() for origin in origins.split(",") if origin.strip()),
    )
