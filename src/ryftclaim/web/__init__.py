"""HTTP API for the web claim flow."""

from __future__ import annotations

from .api import create_app

__all__ = ["create_app"]
