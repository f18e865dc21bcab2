"""HTTP client resolving Roblox usernames to accounts with avatars."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from ryftclaim.adapters.http_resilience import ResilienceConfig, ResilientClient
from ryftclaim.config.roblox import RobloxConfig, get_roblox_config
from ryftclaim.domain.ports.fetching import GameAccount, GameAccountLookup

from .schema import AvatarThumbnailResponse, UsernameLookupResponse, UsernameMatch

if TYPE_CHECKING:
    from collections.abc import Callable

log = getLogger(__name__)

AVATAR_SIZE = "150x150"
AVATAR_FORMAT = "Png"


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


class RobloxAPIError(RuntimeError):
    """Raised when Roblox cannot be reached or answers with a server error."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass(slots=True)
class RobloxAccountClient:
    config: RobloxConfig = field(default_factory=get_roblox_config)
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

    async def lookup(self, username: str) -> GameAccount | None:
        """Return the account and avatar for ``username``, or ``None`` if either is missing."""

        username = username.strip()
        if not username:
            return None

        client = self._http()
        match = await self._find_user(client, username)
        if match is None:
            log.info("Roblox user %s not found", username)
            return None
        avatar_url = await self._avatar_url(client, match.id)
        if avatar_url is None:
            log.info("No avatar thumbnail for Roblox user %s (%s)", username, match.id)
            return None

        return GameAccount(
            user_id=match.id,
            username=match.name,
            display_name=match.display_name,
            avatar_url=avatar_url,
            has_verified_badge=match.has_verified_badge,
        )

    async def _find_user(self, client: ResilientClient, username: str) -> UsernameMatch | None:
        url = f"{self.config.users_base_url}/usernames/users"
        payload = await self._request_json(
            client, "POST", url, json={"usernames": [username], "excludeBannedUsers": True}
        )
        if payload is None:
            return None
        try:
            response = UsernameLookupResponse.model_validate(payload)
        except ValidationError:
            log.warning("Unexpected Roblox username payload for %s", username)
            return None
        return response.data[0] if response.data else None

    async def _avatar_url(self, client: ResilientClient, user_id: int) -> str | None:
        url = f"{self.config.thumbnails_base_url}/users/avatar"
        params = httpx.QueryParams(
            {"userIds": user_id, "size": AVATAR_SIZE, "format": AVATAR_FORMAT}
        )
        payload = await self._request_json(client, "GET", url, params=params)
        if payload is None:
            return None
        try:
            response = AvatarThumbnailResponse.model_validate(payload)
        except ValidationError:
            log.warning("Unexpected Roblox thumbnail payload for %s", user_id)
            return None
        return response.data[0].image_url if response.data else None

    async def _request_json(
        self,
        client: ResilientClient,
        method: str,
        url: str,
        *,
        json: object = None,
        params: httpx.QueryParams | None = None,
    ) -> object | None:
        try:
            if method == "POST":
                response = await client.post(url, json=json)
            else:
                response = await client.get(url, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            if status < httpx.codes.INTERNAL_SERVER_ERROR:
                log.info("Roblox %s %s returned HTTP %s", method, url, status)
                return None
            raise RobloxAPIError(f"Roblox returned HTTP {status}", status_code=status) from exc
        except httpx.HTTPError as exc:
            raise RobloxAPIError(f"Roblox request failed: {type(exc).__name__}") from exc

        try:
            return response.json()
        except ValueError:
            log.warning("Roblox %s %s returned a non-JSON body", method, url)
            return None


if TYPE_CHECKING:
    _lookup_check: GameAccountLookup = RobloxAccountClient()
