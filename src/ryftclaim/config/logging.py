"""Shared logging helpers for ryftclaim."""

from __future__ import annotations

import logging

from .env import optional_env_var


def configure_logging(*, level: int | None = None, force: bool = False) -> None:
    """Initialise the root logger once with sensible defaults.

    Parameters mirror ``logging.basicConfig`` with a simplified contract: the level
    defaults to ``RYFTCLAIM_LOG_LEVEL`` (or INFO) and the format is terse enough for
    container logs. Pass ``force=True`` to reconfigure during tests.
    """

    if level is None:
        name = (optional_env_var("RYFTCLAIM_LOG_LEVEL", "INFO") or "INFO").upper()
        resolved = logging.getLevelName(name)
        level = resolved if isinstance(resolved, int) else logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
    # discord.py and httpx are chatty at INFO
    logging.getLogger("discord").setLevel(max(level, logging.WARNING))
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))
