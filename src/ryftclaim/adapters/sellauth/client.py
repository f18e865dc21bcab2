"""HTTP client for the SellAuth invoice API."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from ryftclaim.adapters.http_resilience import ResilienceConfig, ResilientClient
from ryftclaim.config.sellauth import SELLAUTH_BASE_URL, SellAuthConfig, get_sellauth_config
from ryftclaim.domain.ports.fetching import OrderFetcher, OrderFetchResult

from .translator import parse_order

if TYPE_CHECKING:
    from collections.abc import Callable

log = getLogger(__name__)


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


@dataclass(slots=True)
class SellAuthOrderClient:
    """Looks up invoices by id and reports the outcome as an ``OrderFetchResult``.

    Transport and payload problems are logged and folded into the result; nothing
    is raised to the caller.
    """

    config: SellAuthConfig = field(default_factory=get_sellauth_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )
    _client: ResilientClient | None = field(default=None, init=False, repr=False)

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _http(self) -> ResilientClient:
        if self._client is None:
            self._client = self.client_factory(self.config.resilience)
        return self._client

    async def fetch_order(self, order_id: str) -> OrderFetchResult:
        order_id = order_id.strip()
        if not order_id:
            return OrderFetchResult.not_found("empty order id")

        path = f"shops/{quote(self.config.shop_id, safe='')}/invoices/{quote(order_id, safe='')}"
        headers = {
            "Authorization": f"Bearer {self.config.api_key}",
            "Accept": "application/json",
        }
        try:
            response = await self._http().get(self._url(path), headers=headers)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            if status == httpx.codes.NOT_FOUND:
                log.info("SellAuth invoice %s not found", order_id)
                return OrderFetchResult.not_found(f"HTTP {status}")
            log.warning("SellAuth returned HTTP %s for invoice %s", status, order_id)
            return OrderFetchResult.unavailable(f"HTTP {status}")
        except httpx.HTTPError as exc:
            log.warning("SellAuth request failed for invoice %s: %r", order_id, exc)
            return OrderFetchResult.unavailable(type(exc).__name__)
        except ValueError:
            log.warning("SellAuth returned a non-JSON body for invoice %s", order_id)
            return OrderFetchResult.not_found("invalid JSON")

        try:
            order = parse_order(payload, order_id=order_id)
        except ValidationError as exc:
            log.warning(
                "Unparseable SellAuth invoice %s (%d errors)", order_id, exc.error_count()
            )
            return OrderFetchResult.not_found("unparseable payload")
        return OrderFetchResult.found(order)

    def _url(self, path: str) -> str:
        if self.config.resilience.base_url:
            return path
        return f"{SELLAUTH_BASE_URL}/{path}"


if TYPE_CHECKING:
    _fetcher_check: OrderFetcher = SellAuthOrderClient()
