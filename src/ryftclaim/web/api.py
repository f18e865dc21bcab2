"""FastAPI application for the web claim flow.

Buyers verify an order with their email, link a game account, trigger delivery
and finally open a Discord ticket. Every step re-reads the claim through the
reconciler, so the chat commands and the web flow always agree on its state.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from logging import getLogger
from typing import TYPE_CHECKING, Annotated

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ryftclaim import __version__
from ryftclaim.adapters.roblox import RobloxAPIError
from ryftclaim.app import AppServices
from ryftclaim.domain.errors import (
    ClaimNotFoundError,
    ClaimRejectedError,
    EmailMismatchError,
    RejectionReason,
)
from ryftclaim.domain.tickets import open_delivery_ticket

from .schemas import (
    AccountOut,
    ClaimOut,
    CreateTicketRequest,
    CreateTicketResponse,
    DeliveryJoinRequest,
    DeliveryJoinResponse,
    ErrorResponse,
    GameUsernameRequest,
    GameUsernameResponse,
    VerifyClaimRequest,
    VerifyClaimResponse,
)

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Sequence

    from ryftclaim.domain.ports import GameAccount

log = getLogger(__name__)

STATUS_BY_REASON: dict[RejectionReason, int] = {
    RejectionReason.NOT_FOUND: 404,
    RejectionReason.ALREADY_PROCESSED: 409,
    RejectionReason.EMAIL_MISMATCH: 400,
    RejectionReason.NOT_VERIFIED: 400,
    RejectionReason.SERVICE_UNAVAILABLE: 503,
}


class ApiError(RuntimeError):
    """A failure outside the claim rules, reported with an explicit status."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code


def get_services(request: Request) -> AppServices:
    return request.app.state.services


Services = Annotated[AppServices, Depends(get_services)]

claims_router = APIRouter(prefix="/api/claims", tags=["claims"])
roblox_router = APIRouter(prefix="/api/roblox", tags=["roblox"])
delivery_router = APIRouter(prefix="/api/delivery", tags=["delivery"])
discord_router = APIRouter(prefix="/api/discord", tags=["discord"])


@claims_router.post("/verify", response_model=VerifyClaimResponse)
async def verify_claim(body: VerifyClaimRequest, services: Services) -> VerifyClaimResponse:
    snapshot = await services.reconciler.verify(body.order_id, body.email)
    log.info("Verified order %s", body.order_id)
    return VerifyClaimResponse(claim=ClaimOut.from_snapshot(snapshot))


@claims_router.get("/code/{claim_code}", response_model=ClaimOut)
async def get_claim_by_code(claim_code: str, services: Services) -> ClaimOut:
    snapshot = services.reconciler.lookup_by_claim_code(claim_code)
    if snapshot is None:
        raise ClaimNotFoundError(claim_code, "Claim not found")
    return ClaimOut.from_snapshot(snapshot)


@claims_router.get("/{order_id}", response_model=ClaimOut)
async def get_claim(order_id: str, services: Services) -> ClaimOut:
    snapshot = await services.reconciler.lookup_by_order_id(order_id)
    if snapshot is None:
        raise ClaimNotFoundError(order_id, "Claim not found")
    return ClaimOut.from_snapshot(snapshot)


@claims_router.post("/{order_id}/username", response_model=GameUsernameResponse)
async def set_game_username(
    order_id: str, body: GameUsernameRequest, services: Services
) -> GameUsernameResponse:
    await services.reconciler.require_verified(order_id)
    account = await _lookup_account(services, body.game_username)
    snapshot = services.reconciler.record_game_username(order_id, account.username)
    if snapshot is None:
        raise ClaimNotFoundError(order_id, "Claim not found")
    return GameUsernameResponse(
        claim=ClaimOut.from_snapshot(snapshot), account=AccountOut.from_account(account)
    )


@roblox_router.get("/avatar/{username}", response_model=AccountOut)
async def get_avatar(username: str, services: Services) -> AccountOut:
    account = await _lookup_account(services, username)
    return AccountOut.from_account(account)


@delivery_router.post("/join", response_model=DeliveryJoinResponse)
async def join_delivery(body: DeliveryJoinRequest, services: Services) -> DeliveryJoinResponse:
    snapshot = await services.reconciler.require_verified(body.order_id)
    result = await services.delivery.dispatch(snapshot, body.game_username)
    return DeliveryJoinResponse(
        success=result.success,
        message=result.message,
        game_join_url=result.game_join_url,
        trade_id=result.trade_id,
    )


@discord_router.post("/create-ticket", response_model=CreateTicketResponse)
async def create_ticket(body: CreateTicketRequest, services: Services) -> CreateTicketResponse:
    snapshot = await services.reconciler.require_verified(body.order_id)
    if snapshot.claim.email.casefold() != body.email.casefold():
        raise EmailMismatchError(body.order_id)
    if services.tickets is None:
        raise ApiError(503, "Discord ticketing is not available right now.")

    result = await open_delivery_ticket(
        reconciler=services.reconciler,
        gateway=services.tickets,
        snapshot=snapshot,
        game_username=body.game_username,
        discord_user_id=body.discord_user_id,
    )
    if not result.success:
        return CreateTicketResponse(success=False, message=result.message)
    return CreateTicketResponse(
        success=True,
        message=f"Discord ticket #{result.channel_name} created successfully!",
        invite_url=services.invite_url,
        channel_name=result.channel_name,
        channel_id=result.channel_id,
        user_added=result.user_added,
    )


async def _lookup_account(services: AppServices, username: str) -> GameAccount:
    try:
        account = await services.accounts.lookup(username)
    except RobloxAPIError as exc:
        log.warning("Roblox lookup for %s failed: %s", username, exc)
        raise ApiError(502, "Roblox is not responding. Please try again shortly.") from exc
    if account is None:
        raise ApiError(404, "User not found")
    return account


def _error_response(status_code: int, message: str, reason: str | None = None) -> JSONResponse:
    body = ErrorResponse(message=message, reason=reason)
    return JSONResponse(status_code=status_code, content=body.model_dump(by_alias=True))


async def _claim_rejected_handler(_request: Request, exc: ClaimRejectedError) -> JSONResponse:
    return _error_response(STATUS_BY_REASON[exc.reason], str(exc), exc.reason.value)


async def _api_error_handler(_request: Request, exc: ApiError) -> JSONResponse:
    return _error_response(exc.status_code, str(exc))


async def _validation_error_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    message = str(errors[0].get("msg", "Invalid input data")) if errors else "Invalid input data"
    return _error_response(400, message.removeprefix("Value error, "), "validation")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run the Discord bot alongside the API when one is configured, and close clients on exit."""

    services: AppServices = app.state.services
    bot_task: asyncio.Task[None] | None = None
    if services.bot is not None and services.discord is not None:
        bot_task = asyncio.create_task(services.bot.start(services.discord.token))
        bot_task.add_done_callback(_log_bot_exit)
    try:
        yield
    finally:
        if services.bot is not None and bot_task is not None:
            await services.bot.close()
            bot_task.cancel()
        await services.aclose()


def _log_bot_exit(task: asyncio.Task[None]) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        log.error("Discord bot stopped", exc_info=exc)


def create_app(services: AppServices, *, allowed_origins: Sequence[str] = ("*",)) -> FastAPI:
    app = FastAPI(
        lifespan=lifespan,
        title="ryftclaim",
        description="Order claim verification and delivery hand-off",
        version=__version__,
    )
    app.state.services = services
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(allowed_origins),
        allow_credentials="*" not in allowed_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(ClaimRejectedError, _claim_rejected_handler)
    app.add_exception_handler(ApiError, _api_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)

    app.include_router(claims_router)
    app.include_router(roblox_router)
    app.include_router(delivery_router)
    app.include_router(discord_router)

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        return {"status": "healthy", "version": __version__}

    return app
