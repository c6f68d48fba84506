"""Character Preset Service — owner-scoped CRUD.

Invariants:
    - Presets of other users are reported as missing (404), never 403
"""

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import ResourceNotFoundError
from app.models.character_preset import CharacterPreset
from app.models.user import User
from app.schemas.character_preset import CharacterPresetCreate, CharacterPresetUpdate


class CharacterPresetService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_presets(self, user: User) -> list[CharacterPreset]:
        result = await self.db.execute(
            select(CharacterPreset)
            .where(CharacterPreset.user_id == user.id)
            .order_by(CharacterPreset.is_favorite.desc(), CharacterPreset.name)
        )
        return list(result.scalars().all())

    async def get(self, user: User, preset_id: uuid.UUID) -> CharacterPreset:
        preset = await self.db.get(CharacterPreset, preset_id)
        if preset is None or preset.user_id != user.id:
            raise ResourceNotFoundError("Character preset", str(preset_id))
        return preset

    async def create(self, user: User, body: CharacterPresetCreate) -> CharacterPreset:
        preset = CharacterPreset(user_id=user.id, **body.model_dump())
        self.db.add(preset)
        await self.db.commit()
        return preset

    async def update(
        self, user: User, preset_id: uuid.UUID, body: CharacterPresetUpdate,
    ) -> CharacterPreset:
        preset = await self.get(user, preset_id)
        for key, value in body.model_dump(exclude_unset=True).items():
            setattr(preset, key, value)
        await self.db.commit()
        return preset

    async def delete(self, user: User, preset_id: uuid.UUID) -> None:
        preset = await self.get(user, preset_id)
        await self.db.delete(preset)
        await self.db.commit()
