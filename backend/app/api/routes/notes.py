"""Note Routes — owner-scoped notes CRUD and search."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import get_current_user
from app.infrastructure.database import get_db
from app.models.user import User
from app.schemas.note import NoteCreate, NoteResponse, NoteUpdate
from app.services.note_service import NoteService

router = APIRouter(prefix="/api/notes", tags=["notes"])


@router.get("")
async def list_notes(
    folder: str | None = None,
    tag: str | None = None,
    include_archived: bool = False,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    notes = await NoteService(db).list_notes(user.id, folder, tag, include_archived)
    return {"items": [NoteResponse.model_validate(n) for n in notes]}


@router.get("/search")
async def search_notes(
    q: str = Query(min_length=1, max_length=200),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    notes = await NoteService(db).search(user.id, q)
    return {"items": [NoteResponse.model_validate(n) for n in notes]}


@router.get("/folders")
async def list_folders(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return {"folders": await NoteService(db).folders(user.id)}


@router.post("", response_model=NoteResponse, status_code=status.HTTP_201_CREATED)
async def create_note(
    body: NoteCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return NoteResponse.model_validate(await NoteService(db).create(user.id, body))


@router.get("/{note_id}", response_model=NoteResponse)
async def get_note(
    note_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return NoteResponse.model_validate(await NoteService(db).get(user.id, note_id))


@router.patch("/{note_id}", response_model=NoteResponse)
async def update_note(
    note_id: UUID,
    body: NoteUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return NoteResponse.model_validate(await NoteService(db).update(user.id, note_id, body))


@router.delete("/{note_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_note(
    note_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await NoteService(db).delete(user.id, note_id)
