"""Public interface for the Discord adapter."""

from __future__ import annotations

from .bot import ClaimBot
from .cog import ClaimCommandsCog
from .gateway import DiscordTicketGateway

__all__ = [
    "ClaimBot",
    "ClaimCommandsCog",
    "DiscordTicketGateway",
]
