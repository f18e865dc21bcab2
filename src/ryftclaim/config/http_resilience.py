"""Transport settings shared by the SellAuth, Roblox and delivery clients."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import httpx

from .errors import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Mapping

DEFAULT_TIMEOUT_SECONDS = 10.0
USER_AGENT = "ryftclaim (+https://discord.gg/ryftstock)"


@dataclass(slots=True, frozen=True)
class RetryPolicy:
    """Retries for transient failures. Only idempotent methods are retried by default."""

    total: int = 2
    backoff_factor: float = 0.5
    max_backoff_wait: float = 5.0
    respect_retry_after_header: bool = True
    allowed_methods: frozenset[str] = field(
        default_factory=lambda: frozenset({"GET", "HEAD", "OPTIONS"})
    )
    status_forcelist: frozenset[int] = field(
        default_factory=lambda: frozenset({429, 500, 502, 503, 504})
    )
    retry_on_exceptions: tuple[type[httpx.HTTPError], ...] = (
        httpx.TimeoutException,
        httpx.NetworkError,
        httpx.RemoteProtocolError,
    )
    backoff_jitter: float = 1.0

    @classmethod
    def disabled(cls) -> RetryPolicy:
        return cls(total=0, allowed_methods=frozenset(), status_forcelist=frozenset())

    @classmethod
    def including_post(cls, total: int = 2) -> RetryPolicy:
        """Also retry POST, for lookup endpoints that use POST to send a query body."""

        return cls(total=total, allowed_methods=frozenset({"GET", "HEAD", "OPTIONS", "POST"}))


@dataclass(slots=True, frozen=True)
class RateLimit:
    max_calls: int
    per_seconds: float

    def __post_init__(self) -> None:
        if self.max_calls < 1 or self.per_seconds <= 0:
            raise ConfigurationError(
                f"Rate limit needs positive values, got {self.max_calls}/{self.per_seconds}s"
            )


@dataclass(slots=True, frozen=True)
class CacheConfig:
    """In-memory response cache, kept for as long as the owning client lives."""

    enabled: bool = True
    default_ttl_seconds: float | None = None
    refresh_ttl_on_access: bool = True
    methods: frozenset[str] = field(default_factory=lambda: frozenset({"GET"}))

    @classmethod
    def memory(cls, ttl_seconds: float) -> CacheConfig:
        # refreshing on access would keep a popular username cached forever
        return cls(default_ttl_seconds=ttl_seconds, refresh_ttl_on_access=False)


@dataclass(slots=True, frozen=True)
class ResilienceConfig:
    """How one integration talks HTTP.

    ``cache`` defaults to off: order and delivery calls must always reach the
    upstream, so caching is opted into per integration.
    """

    name: str
    base_url: str | None = None
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    ratelimit: RateLimit | None = None
    cache: CacheConfig | None = None
    default_headers: Mapping[str, str] | None = None

    def __post_init__(self) -> None:
        if self.timeout_seconds <= 0:
            raise ConfigurationError(
                f"{self.name}: timeout must be positive, got {self.timeout_seconds}"
            )

    @property
    def headers(self) -> dict[str, str]:
        """Headers sent with every request: the ryftclaim user agent plus ``default_headers``."""

        return {"User-Agent": USER_AGENT, **(self.default_headers or {})}
