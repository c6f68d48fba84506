"""Community Schemas — communities, memberships and invites.

Invariants:
    - slug: lowercase letters, digits and '-' only
    - Member roles limited to member/admin
    - Invite max_uses >= 1; expires_in_hours in 1..8760 when given
"""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CommunityCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    slug: str = Field(min_length=2, max_length=120, pattern=r"^[a-z0-9-]+$")
    description: str | None = Field(None, max_length=5000)
    image_url: str | None = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty or whitespace")
        return v


class CommunityResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    slug: str
    description: str | None = None
    image_url: str | None = None
    parent_community_id: UUID | None = None
    level: int | None = None
    path: str | None = None
    is_active: bool
    created_by: UUID | None = None
    created_at: datetime


class MembershipResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    community_id: UUID
    role: str
    status: str
    invited_by: UUID | None = None
    joined_at: datetime


class MemberRoleUpdate(BaseModel):
    role: Literal["member", "admin"]


class InviteCreate(BaseModel):
    max_uses: int = Field(1, ge=1, le=10_000)
    expires_in_hours: int | None = Field(None, ge=1, le=8760)
    role: Literal["member", "admin"] = "member"


class InviteResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    code: str
    community_id: UUID
    created_by: UUID
    role: str
    max_uses: int
    current_uses: int
    expires_at: datetime | None = None
    is_active: bool
    created_at: datetime
