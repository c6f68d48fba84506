"""Prompt Routes — CRUD, likes, favorites and forks.

Invariants:
    - Public listing never includes private prompts
    - Private prompts look like 404 to everyone but owner and super admins
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import get_current_user, get_optional_user
from app.infrastructure.database import get_db
from app.models.user import User
from app.schemas.prompt import PromptCreate, PromptResponse, PromptUpdate
from app.services.prompt_service import PromptService

router = APIRouter(prefix="/api/prompts", tags=["prompts"])


@router.post("", response_model=PromptResponse, status_code=status.HTTP_201_CREATED)
async def create_prompt(
    body: PromptCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return PromptResponse.model_validate(await PromptService(db).create(user, body))


@router.get("")
async def list_prompts(
    tag: str | None = None,
    search: str | None = Query(None, max_length=200),
    user_id: UUID | None = None,
    collection_id: UUID | None = None,
    community_id: UUID | None = None,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    """List public prompts with filters and pagination."""
    prompts = await PromptService(db).list_public(
        tag=tag, search=search, user_id=user_id,
        collection_id=collection_id, community_id=community_id,
        limit=limit, offset=offset,
    )
    return {
        "items": [PromptResponse.model_validate(p) for p in prompts],
        "pagination": {"limit": limit, "offset": offset},
    }


@router.get("/{prompt_id}", response_model=PromptResponse)
async def get_prompt(
    prompt_id: str,
    user: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    return PromptResponse.model_validate(await PromptService(db).get_visible(prompt_id, user))


@router.patch("/{prompt_id}", response_model=PromptResponse)
async def update_prompt(
    prompt_id: str,
    body: PromptUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return PromptResponse.model_validate(await PromptService(db).update(user, prompt_id, body))


@router.delete("/{prompt_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_prompt(
    prompt_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await PromptService(db).delete(user, prompt_id)


@router.post("/{prompt_id}/like")
async def toggle_like(
    prompt_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await PromptService(db).toggle_like(user, prompt_id)


@router.post("/{prompt_id}/favorite")
async def toggle_favorite(
    prompt_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await PromptService(db).toggle_favorite(user, prompt_id)


@router.post(
    "/{prompt_id}/fork", response_model=PromptResponse, status_code=status.HTTP_201_CREATED,
)
async def fork_prompt(
    prompt_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return PromptResponse.model_validate(await PromptService(db).fork(user, prompt_id))
