"""Note Schemas.

Invariants:
    - color is '#rrggbb' when set
    - type limited to text/markdown/code/todo/html
"""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

NoteKind = Literal["text", "markdown", "code", "todo", "html"]
_COLOR = r"^#[0-9a-fA-F]{6}$"


class NoteCreate(BaseModel):
    title: str = Field(min_length=1, max_length=500)
    content: str | None = None
    type: NoteKind = "text"
    folder: str = Field("Unsorted", min_length=1, max_length=255)
    tags: list[str] = []
    color: str | None = Field(None, pattern=_COLOR)
    is_pinned: bool = False
    is_archived: bool = False


class NoteUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=500)
    content: str | None = None
    type: NoteKind | None = None
    folder: str | None = Field(None, min_length=1, max_length=255)
    tags: list[str] | None = None
    color: str | None = Field(None, pattern=_COLOR)
    is_pinned: bool | None = None
    is_archived: bool | None = None
    position: int | None = Field(None, ge=0)


class NoteResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    content: str | None = None
    type: str
    folder: str
    tags: list[str] = []
    color: str | None = None
    is_pinned: bool
    is_archived: bool
    position: int
    created_at: datetime
    last_modified: datetime
