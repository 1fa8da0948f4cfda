"""Pydantic schemas for the user profile endpoints."""

from typing import Optional

from pydantic import Field

from .common import PHONE_PATTERN, CamelModel


class UpdateUserProfileRequest(CamelModel):
    """Request schema for updating the caller's own profile."""

    first_name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    last_name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    phone_number: Optional[str] = Field(default=None, pattern=PHONE_PATTERN)
