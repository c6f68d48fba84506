"""User Schemas — profile read/update payloads.

Invariants:
    - UserUpdate fields are all optional; only provided fields are applied
    - username: 3-50 chars of letters, digits, '_' or '-'
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str | None = None
    username: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    bio: str | None = None
    profile_image_url: str | None = None
    role: str
    social_links: dict = {}
    created_at: datetime


class UserUpdate(BaseModel):
    username: str | None = Field(None, min_length=3, max_length=50, pattern=r"^[A-Za-z0-9_-]+$")
    first_name: str | None = Field(None, max_length=100)
    last_name: str | None = Field(None, max_length=100)
    bio: str | None = Field(None, max_length=2000)
    profile_image_url: str | None = None
    social_links: dict[str, str] | None = None
