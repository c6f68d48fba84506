"""Character Preset Routes — owner-scoped CRUD."""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import get_current_user
from app.infrastructure.database import get_db
from app.models.user import User
from app.schemas.character_preset import (
    CharacterPresetCreate, CharacterPresetResponse, CharacterPresetUpdate,
)
from app.services.character_preset_service import CharacterPresetService

router = APIRouter(prefix="/api/character-presets", tags=["character-presets"])


@router.get("")
async def list_presets(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    presets = await CharacterPresetService(db).list_presets(user)
    return {"items": [CharacterPresetResponse.model_validate(p) for p in presets]}


@router.post("", response_model=CharacterPresetResponse, status_code=status.HTTP_201_CREATED)
async def create_preset(
    body: CharacterPresetCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    preset = await CharacterPresetService(db).create(user, body)
    return CharacterPresetResponse.model_validate(preset)


@router.get("/{preset_id}", response_model=CharacterPresetResponse)
async def get_preset(
    preset_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    preset = await CharacterPresetService(db).get(user, preset_id)
    return CharacterPresetResponse.model_validate(preset)


@router.patch("/{preset_id}", response_model=CharacterPresetResponse)
async def update_preset(
    preset_id: UUID,
    body: CharacterPresetUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    preset = await CharacterPresetService(db).update(user, preset_id, body)
    return CharacterPresetResponse.model_validate(preset)


@router.delete("/{preset_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_preset(
    preset_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await CharacterPresetService(db).delete(user, preset_id)
