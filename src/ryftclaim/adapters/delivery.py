"""Webhook-based item delivery.

The webhook receiver owns the in-game trading; this adapter only hands it the
order. Delivery always answers with a join link: when the webhook is missing or
failing, the buyer gets the public game link and staff finish by hand.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ryftclaim.adapters.http_resilience import ResilienceConfig, ResilientClient
from ryftclaim.config.roblox import DeliveryConfig, get_delivery_config
from ryftclaim.domain.model import utcnow
from ryftclaim.domain.ports.delivery import DeliveryDispatcher, DeliveryResult

if TYPE_CHECKING:
    from collections.abc import Callable

    from ryftclaim.domain.model import ClaimSnapshot

log = getLogger(__name__)

QUEUED_MESSAGE = "Items queued for delivery. Bot will contact you in-game shortly."
SIMULATED_MESSAGE = (
    "Items are being prepared for delivery. Join the game and wait for bot contact."
)
DEGRADED_MESSAGE = (
    "Delivery system is experiencing delays. Join the game and the bot will contact you soon."
)


class WebhookAck(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    game_join_url: str | None = Field(default=None, alias="gameJoinUrl")
    trade_id: str | int | None = Field(default=None, alias="tradeId")


def build_delivery_payload(
    snapshot: ClaimSnapshot, recipient: str, *, game_id: str
) -> dict[str, object]:
    claim = snapshot.claim
    return {
        "invoiceId": claim.order_id,
        "recipient": recipient,
        "email": claim.email,
        "items": [
            {
                "name": item.item_name,
                "category": item.item_category,
                "quantity": item.quantity,
                "price": str(item.price),
            }
            for item in snapshot.items
        ],
        "timestamp": utcnow().isoformat(),
        "gameId": game_id,
    }


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


@dataclass(slots=True)
class WebhookDeliveryDispatcher:
    config: DeliveryConfig = field(default_factory=get_delivery_config)
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

    async def dispatch(self, snapshot: ClaimSnapshot, recipient: str) -> DeliveryResult:
        order_id = snapshot.claim.order_id
        fallback_url = self.config.fallback_join_url(order_id)

        if not self.config.webhook_url:
            log.info(
                "No delivery webhook configured; simulating delivery of %d items to %s",
                len(snapshot.items),
                recipient,
            )
            return DeliveryResult(
                success=True, message=SIMULATED_MESSAGE, game_join_url=fallback_url
            )

        payload = build_delivery_payload(snapshot, recipient, game_id=self.config.game_id)
        headers = {"Authorization": f"Bearer {self.config.webhook_secret}"}
        try:
            response = await self._http().post(
                self.config.webhook_url, json=payload, headers=headers
            )
            response.raise_for_status()
            ack = WebhookAck.model_validate(response.json())
        except (httpx.HTTPError, ValidationError, ValueError) as exc:
            log.warning("Delivery webhook failed for order %s: %r", order_id, exc)
            return DeliveryResult(
                success=True, message=DEGRADED_MESSAGE, game_join_url=fallback_url
            )

        log.info("Queued delivery for order %s to %s", order_id, recipient)
        return DeliveryResult(
            success=True,
            message=QUEUED_MESSAGE,
            game_join_url=ack.game_join_url or fallback_url,
            trade_id=str(ack.trade_id) if ack.trade_id is not None else None,
        )


if TYPE_CHECKING:
    _dispatcher_check: DeliveryDispatcher = WebhookDeliveryDispatcher()
