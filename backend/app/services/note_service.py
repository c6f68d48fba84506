"""Note Service — owner-scoped notes with folders, tags, pinning and soft delete.

Invariants:
    - Listing: pinned first, then last_modified desc; deleted always excluded,
      archived excluded unless include_archived
    - Other users' notes (and deleted ones) look like 404
    - Tag filter applied in Python: JSON containment differs between Postgres and SQLite
"""

import uuid

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import ResourceNotFoundError
from app.db.base import utcnow
from app.models.note import Note
from app.schemas.note import NoteCreate, NoteUpdate


class NoteService:
    def __init__(self, db: AsyncSession):
        self.db = db

    def _owned(self, user_id: uuid.UUID):
        return select(Note).where(Note.user_id == user_id, Note.deleted_at.is_(None))

    async def list_notes(
        self,
        user_id: uuid.UUID,
        folder: str | None = None,
        tag: str | None = None,
        include_archived: bool = False,
    ) -> list[Note]:
        query = self._owned(user_id)
        if not include_archived:
            query = query.where(Note.is_archived.is_(False))
        if folder:
            query = query.where(Note.folder == folder)
        query = query.order_by(Note.is_pinned.desc(), Note.last_modified.desc())
        notes = list((await self.db.execute(query)).scalars().all())
        if tag:
            notes = [n for n in notes if tag in (n.tags or [])]
        return notes

    async def search(self, user_id: uuid.UUID, q: str) -> list[Note]:
        pattern = f"%{q.lower()}%"
        query = (
            self._owned(user_id)
            .where(or_(
                func.lower(Note.title).like(pattern),
                func.lower(func.coalesce(Note.content, "")).like(pattern),
            ))
            .order_by(Note.is_pinned.desc(), Note.last_modified.desc())
        )
        return list((await self.db.execute(query)).scalars().all())

    async def get(self, user_id: uuid.UUID, note_id: uuid.UUID) -> Note:
        note = (await self.db.execute(
            self._owned(user_id).where(Note.id == note_id),
        )).scalar_one_or_none()
        if note is None:
            raise ResourceNotFoundError("Note", str(note_id))
        return note

    async def create(self, user_id: uuid.UUID, body: NoteCreate) -> Note:
        note = Note(user_id=user_id, **body.model_dump())
        self.db.add(note)
        await self.db.commit()
        await self.db.refresh(note)
        return note

    async def update(self, user_id: uuid.UUID, note_id: uuid.UUID, body: NoteUpdate) -> Note:
        note = await self.get(user_id, note_id)
        for key, value in body.model_dump(exclude_unset=True).items():
            setattr(note, key, value)
        note.last_modified = utcnow()
        await self.db.commit()
        await self.db.refresh(note)
        return note

    async def delete(self, user_id: uuid.UUID, note_id: uuid.UUID) -> None:
        note = await self.get(user_id, note_id)
        note.deleted_at = utcnow()
        await self.db.commit()

    async def folders(self, user_id: uuid.UUID) -> list[str]:
        result = await self.db.execute(
            select(Note.folder)
            .where(Note.user_id == user_id, Note.deleted_at.is_(None))
            .distinct()
            .order_by(Note.folder)
        )
        return list(result.scalars().all())
