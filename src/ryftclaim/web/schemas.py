"""Request and response bodies of the claim API (camelCase on the wire)."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003
from decimal import Decimal  # noqa: TC003
from typing import Any
from uuid import UUID  # noqa: TC003

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ryftclaim.domain.model import ClaimSnapshot, ClaimStatus  # noqa: TC001
from ryftclaim.domain.ports import GameAccount  # noqa: TC001


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


def _strip_required(value: object) -> object:
    if isinstance(value, str):
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
    return value


def _order_id_field() -> Any:
    return Field(
        validation_alias=AliasChoices("orderId", "invoiceId", "order_id"),
        min_length=1,
        max_length=200,
    )


def _game_username_field() -> Any:
    return Field(
        validation_alias=AliasChoices("gameUsername", "robloxUsername", "game_username"),
        min_length=1,
        max_length=50,
    )


class VerifyClaimRequest(ApiModel):
    order_id: str = _order_id_field()
    email: str = Field(min_length=3, max_length=320)

    _strip = field_validator("order_id", "email", mode="before")(_strip_required)

    @field_validator("email")
    @classmethod
    def _looks_like_email(cls, value: str) -> str:
        local, _, domain = value.partition("@")
        if not local or "." not in domain:
            raise ValueError("Please enter a valid email address")
        return value


class GameUsernameRequest(ApiModel):
    game_username: str = _game_username_field()

    _strip = field_validator("game_username", mode="before")(_strip_required)


class DeliveryJoinRequest(ApiModel):
    order_id: str = _order_id_field()
    game_username: str = _game_username_field()

    _strip = field_validator("order_id", "game_username", mode="before")(_strip_required)


class CreateTicketRequest(ApiModel):
    order_id: str = _order_id_field()
    email: str = Field(min_length=3, max_length=320)
    game_username: str | None = Field(
        default=None,
        validation_alias=AliasChoices("gameUsername", "robloxUsername", "game_username"),
    )
    discord_user_id: int | None = Field(
        default=None, validation_alias=AliasChoices("discordUserId", "discord_user_id")
    )

    _strip = field_validator("order_id", "email", mode="before")(_strip_required)


class ClaimItemOut(ApiModel):
    item_name: str
    item_category: str
    price: Decimal
    quantity: int
    image_url: str | None
    delivered: bool


class ClaimOut(ApiModel):
    internal_id: UUID
    claim_code: str
    order_id: str
    email: str
    game_username: str | None
    verified: bool
    claimed: bool
    status: ClaimStatus
    chat_channel_id: str | None
    created_at: datetime
    total_price: Decimal
    items: list[ClaimItemOut]

    @classmethod
    def from_snapshot(cls, snapshot: ClaimSnapshot) -> ClaimOut:
        claim = snapshot.claim
        return cls(
            internal_id=claim.internal_id,
            claim_code=claim.display_code,
            order_id=claim.order_id,
            email=claim.email,
            game_username=claim.game_username,
            verified=claim.verified,
            claimed=claim.claimed,
            status=claim.status,
            chat_channel_id=claim.chat_channel_id,
            created_at=claim.created_at,
            total_price=snapshot.total_price,
            items=[
                ClaimItemOut(
                    item_name=item.item_name,
                    item_category=item.item_category,
                    price=item.price,
                    quantity=item.quantity,
                    image_url=item.image_url,
                    delivered=item.delivered,
                )
                for item in snapshot.items
            ],
        )


class VerifyClaimResponse(ApiModel):
    success: bool = True
    claim: ClaimOut


class AccountOut(ApiModel):
    success: bool = True
    user_id: int
    username: str
    display_name: str | None
    avatar_url: str | None
    has_verified_badge: bool

    @classmethod
    def from_account(cls, account: GameAccount) -> AccountOut:
        return cls(
            user_id=account.user_id,
            username=account.username,
            display_name=account.display_name,
            avatar_url=account.avatar_url,
            has_verified_badge=account.has_verified_badge,
        )


class GameUsernameResponse(ApiModel):
    success: bool = True
    claim: ClaimOut
    account: AccountOut


class DeliveryJoinResponse(ApiModel):
    success: bool
    message: str
    game_join_url: str | None = None
    trade_id: str | None = None


class CreateTicketResponse(ApiModel):
    success: bool
    message: str
    invite_url: str | None = None
    channel_name: str | None = None
    channel_id: str | None = None
    user_added: bool = False


class ErrorResponse(ApiModel):
    success: bool = False
    message: str
    reason: str | None = None
