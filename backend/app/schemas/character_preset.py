"""Character Preset Schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class CharacterPresetCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    gender: str | None = Field(None, max_length=30)
    role: str | None = Field(None, max_length=100)
    description: str | None = Field(None, max_length=5000)
    is_favorite: bool = False


class CharacterPresetUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=100)
    gender: str | None = Field(None, max_length=30)
    role: str | None = Field(None, max_length=100)
    description: str | None = Field(None, max_length=5000)
    is_favorite: bool | None = None


class CharacterPresetResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    name: str
    gender: str | None = None
    role: str | None = None
    description: str | None = None
    is_favorite: bool
    created_at: datetime
