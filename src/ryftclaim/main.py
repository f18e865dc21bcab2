#!/usr/bin/env python3

# ruff: noqa: T201

from __future__ import annotations

import argparse
import asyncio
import sys
from logging import getLogger
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from ryftclaim.app import build_services
from ryftclaim.config import ConfigurationError, configure_logging, get_server_config
from ryftclaim.domain.claim_codes import generate_claim_code, ticket_channel_name

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from ryftclaim.adapters.discord import ClaimBot
    from ryftclaim.app import AppServices
    from ryftclaim.domain.ports import OrderFetchResult

log = getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="ryftclaim", description="Storefront order claims for Roblox delivery"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the web API (and the Discord bot)")
    serve.add_argument("--host", help="Bind address (default: $HOST or 0.0.0.0)")
    serve.add_argument("--port", type=int, help="Bind port (default: $PORT or 5000)")
    serve.add_argument(
        "--no-discord",
        action="store_true",
        help="Serve the web API only; ticket creation answers 503",
    )

    subparsers.add_parser("bot", help="Run the Discord bot only")

    claim_code = subparsers.add_parser("claim-code", help="Print the claim code for an order id")
    claim_code.add_argument("order_id")

    fetch = subparsers.add_parser("fetch-order", help="Look an order up on SellAuth")
    fetch.add_argument("order_id")

    return parser.parse_args(list(argv))


def _serve(args: argparse.Namespace) -> None:
    import uvicorn  # noqa: PLC0415

    from ryftclaim.web import create_app  # noqa: PLC0415

    server = get_server_config()
    services = build_services(with_discord=not args.no_discord)
    app = create_app(services, allowed_origins=server.allowed_origins)
    uvicorn.run(
        app,
        host=args.host or server.host,
        port=args.port or server.port,
        log_config=None,
    )


def _run_bot() -> None:
    services = build_services(with_discord=True)
    if services.bot is None or services.discord is None:
        raise ConfigurationError("Discord is not configured")
    asyncio.run(_bot_session(services.bot, services.discord.token, services))


async def _bot_session(bot: ClaimBot, token: str, services: AppServices) -> None:
    try:
        async with bot:
            await bot.start(token)
    finally:
        await services.aclose()


def _print_claim_code(order_id: str) -> None:
    print(f"Claim code:     {generate_claim_code(order_id)}")
    print(f"Ticket channel: #{ticket_channel_name(order_id)}")


def _fetch_order(order_id: str) -> OrderFetchResult:
    from ryftclaim.adapters.sellauth import SellAuthOrderClient  # noqa: PLC0415
    from ryftclaim.config import get_sellauth_config  # noqa: PLC0415

    client = SellAuthOrderClient(config=get_sellauth_config())

    async def fetch() -> OrderFetchResult:
        try:
            return await client.fetch_order(order_id)
        finally:
            await client.aclose()

    return asyncio.run(fetch())


def _print_order(order_id: str) -> int:
    result = _fetch_order(order_id)
    print(f"Order {order_id}: {result.status}")
    if result.order is None:
        if result.detail:
            print(f"  {result.detail}")
        return 0 if result.status == "not_found" else 1
    order = result.order
    print(f"  Email:   {order.email}")
    print(f"  Created: {order.created_at.isoformat()}")
    for item in order.items:
        print(f"  - {item.name} [{item.category}] x{item.quantity} @ ${item.unit_price}")
    return 0


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args = _parse_args(sys.argv[1:] if argv is None else argv)
    configure_logging()

    try:
        if args.command == "serve":
            _serve(args)
        elif args.command == "bot":
            _run_bot()
        elif args.command == "claim-code":
            _print_claim_code(args.order_id)
        elif args.command == "fetch-order":
            sys.exit(_print_order(args.order_id))
    except ConfigurationError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        sys.exit(1)
    except Exception:
        log.exception("ryftclaim %s failed", args.command)
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    print("\nClosed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console script entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
