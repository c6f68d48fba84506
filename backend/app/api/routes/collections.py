"""Collection Routes — CRUD and prompt listing for accessible collections."""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import get_current_user, get_optional_user
from app.infrastructure.database import get_db
from app.models.user import User
from app.schemas.prompt import (
    CollectionCreate, CollectionResponse, CollectionUpdate, PromptResponse,
)
from app.services.collection_service import CollectionService

router = APIRouter(prefix="/api/collections", tags=["collections"])


@router.post("", response_model=CollectionResponse, status_code=status.HTTP_201_CREATED)
async def create_collection(
    body: CollectionCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return CollectionResponse.model_validate(await CollectionService(db).create(user, body))


@router.get("")
async def list_collections(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    collections = await CollectionService(db).list_for_user(user)
    return {"items": [CollectionResponse.model_validate(c) for c in collections]}


@router.get("/{collection_id}", response_model=CollectionResponse)
async def get_collection(
    collection_id: UUID,
    user: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    collection = await CollectionService(db).get_accessible(user, collection_id)
    return CollectionResponse.model_validate(collection)


@router.get("/{collection_id}/prompts")
async def list_collection_prompts(
    collection_id: UUID,
    user: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    prompts = await CollectionService(db).prompts(user, collection_id)
    return {"items": [PromptResponse.model_validate(p) for p in prompts]}


@router.patch("/{collection_id}", response_model=CollectionResponse)
async def update_collection(
    collection_id: UUID,
    body: CollectionUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    collection = await CollectionService(db).update(user, collection_id, body)
    return CollectionResponse.model_validate(collection)


@router.delete("/{collection_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_collection(
    collection_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await CollectionService(db).delete(user, collection_id)
