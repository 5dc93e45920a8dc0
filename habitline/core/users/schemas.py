"""Typed schemas for profile IO."""

from __future__ import annotations

from datetime import datetime
from typing import Optional, TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from habitline.core.users.models import UserProfile


class ProfileUpdateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    first_name: Optional[str] = Field(default=None, max_length=128, alias="firstName")
    last_name: Optional[str] = Field(default=None, max_length=128, alias="lastName")
    # Stored as given; the frontend may use placeholder domains.
    email: Optional[str] = Field(default=None, max_length=255)
    timezone: Optional[str] = Field(default=None, max_length=64)
    language: Optional[str] = Field(default=None, max_length=64)
    profile_image: Optional[str] = Field(default=None, alias="profileImage")


class ProfileResponse(BaseModel):
    user_id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    timezone: Optional[str] = None
    language: Optional[str] = None
    profile_image: str = ""
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


def serialize_profile(profile: "UserProfile") -> dict:
    return ProfileResponse.model_validate(profile).model_dump(mode="json")
