"""Prompt Schemas — prompts and collections.

Invariants:
    - name and prompt_content stripped and non-empty
    - tags normalized: stripped, empties dropped, duplicates removed (order kept)
    - status limited to draft/published/archived
"""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _normalize_tags(tags: list[str] | None) -> list[str] | None:
    if tags is None:
        return None
    seen: list[str] = []
    for tag in tags:
        tag = tag.strip()
        if tag and tag not in seen:
            seen.append(tag)
    return seen


class PromptBase(BaseModel):
    description: str | None = Field(None, max_length=5000)
    negative_prompt: str | None = Field(None, max_length=10_000)
    category: str | None = Field(None, max_length=100)
    prompt_type: str | None = Field(None, max_length=50)
    intended_generator: str | None = Field(None, max_length=100)
    notes: str | None = None
    collection_id: UUID | None = None
    community_id: UUID | None = None


class PromptCreate(PromptBase):
    name: str = Field(min_length=1, max_length=200)
    prompt_content: str = Field(min_length=1, max_length=20_000)
    tags: list[str] = []
    recommended_models: list[str] = []
    example_images: list[str] = []
    is_public: bool = False
    is_nsfw: bool = False
    status: Literal["draft", "published", "archived"] = "draft"

    @field_validator("name", "prompt_content")
    @classmethod
    def strip_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty or whitespace")
        return v

    @field_validator("tags")
    @classmethod
    def normalize_tags(cls, v: list[str]) -> list[str]:
        return _normalize_tags(v)


class PromptUpdate(PromptBase):
    name: str | None = Field(None, min_length=1, max_length=200)
    prompt_content: str | None = Field(None, min_length=1, max_length=20_000)
    tags: list[str] | None = None
    recommended_models: list[str] | None = None
    example_images: list[str] | None = None
    is_public: bool | None = None
    is_nsfw: bool | None = None
    status: Literal["draft", "published", "archived"] | None = None

    @field_validator("tags")
    @classmethod
    def normalize_tags(cls, v: list[str] | None) -> list[str] | None:
        return _normalize_tags(v)


class PromptResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: str | None = None
    prompt_content: str
    negative_prompt: str | None = None
    tags: list[str] = []
    category: str | None = None
    prompt_type: str | None = None
    intended_generator: str | None = None
    recommended_models: list[str] = []
    example_images: list[str] = []
    notes: str | None = None
    is_public: bool
    is_nsfw: bool
    status: str
    likes: int
    usage_count: int
    fork_of: str | None = None
    user_id: UUID
    collection_id: UUID | None = None
    community_id: UUID | None = None
    created_at: datetime
    updated_at: datetime


class CollectionCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: str | None = Field(None, max_length=5000)
    type: Literal["user", "community", "global"] = "user"
    community_id: UUID | None = None
    is_public: bool = False

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty or whitespace")
        return v


class CollectionUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, max_length=5000)
    is_public: bool | None = None


class CollectionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    description: str | None = None
    user_id: UUID
    community_id: UUID | None = None
    type: str
    is_public: bool
    created_at: datetime
