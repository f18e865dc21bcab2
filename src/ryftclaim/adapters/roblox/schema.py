"""Pydantic models for the Roblox users and thumbnails APIs."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class RobloxBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class UsernameMatch(RobloxBaseModel):
    id: int
    name: str
    display_name: str | None = Field(default=None, alias="displayName")
    has_verified_badge: bool = Field(default=False, alias="hasVerifiedBadge")
    requested_username: str | None = Field(default=None, alias="requestedUsername")


class UsernameLookupResponse(RobloxBaseModel):
    data: list[UsernameMatch] = Field(default_factory=list)


class AvatarThumbnail(RobloxBaseModel):
    target_id: int | None = Field(default=None, alias="targetId")
    state: str | None = None
    image_url: str | None = Field(default=None, alias="imageUrl")


class AvatarThumbnailResponse(RobloxBaseModel):
    data: list[AvatarThumbnail] = Field(default_factory=list)
