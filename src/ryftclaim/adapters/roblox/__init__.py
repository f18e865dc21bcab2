"""Public interface for the Roblox account adapter."""

from __future__ import annotations

from .client import RobloxAccountClient, RobloxAPIError

__all__ = [
    "RobloxAPIError",
    "RobloxAccountClient",
]
