"""Prompt Service — prompt CRUD, likes, favorites and forks.

Invariants:
    - Prompt ids are 10-char URL-safe strings, unique
    - Private prompts visible only to the owner and super admins
    - likes equals the number of PromptLike rows (toggled together in one commit)
    - The first prompt a user creates pays the first-prompt bonus once
    - Forks start private and bump the source's usage_count

Design Decisions:
    - Achievement progress ("prompts_created") recorded in the creating transaction
"""

import logging
import secrets
import string
import uuid

from sqlalchemy import func, or_, select, String, cast
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.core.domain_types import PromptId
from app.core.errors import PermissionDeniedError, ResourceNotFoundError
from app.core.membership_rules import can_modify_owned
from app.models.prompt import Collection, Prompt, PromptFavorite, PromptLike
from app.models.user import User
from app.schemas.prompt import PromptCreate, PromptUpdate
from app.services.access_control import require_community_member
from app.services.achievement_service import AchievementService
from app.services.credit_service import CreditService

logger = logging.getLogger(__name__)

PROMPT_ID_LENGTH = 10
_ID_ALPHABET = string.ascii_letters + string.digits + "-_"


def generate_prompt_id() -> PromptId:
    return PromptId("".join(secrets.choice(_ID_ALPHABET) for _ in range(PROMPT_ID_LENGTH)))


class PromptService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _new_id(self) -> str:
        while True:
            candidate = generate_prompt_id()
            if await self.db.get(Prompt, candidate) is None:
                return candidate

    async def get_or_404(self, prompt_id: str) -> Prompt:
        prompt = await self.db.get(Prompt, prompt_id)
        if prompt is None:
            raise ResourceNotFoundError("Prompt", prompt_id)
        return prompt

    async def get_visible(self, prompt_id: str, user: User | None) -> Prompt:
        prompt = await self.get_or_404(prompt_id)
        if prompt.is_public:
            return prompt
        if user and (user.is_super_admin or user.id == prompt.user_id):
            return prompt
        # Hidden prompts look missing to everyone else.
        raise ResourceNotFoundError("Prompt", prompt_id)

    async def _check_links(self, user: User, collection_id, community_id) -> None:
        if collection_id is not None:
            collection = await self.db.get(Collection, collection_id)
            if collection is None:
                raise ResourceNotFoundError("Collection", str(collection_id))
            if not can_modify_owned(
                user_id=str(user.id), user_role=user.role, owner_id=str(collection.user_id),
            ):
                raise PermissionDeniedError("Cannot add prompts to this collection")
        if community_id is not None:
            await require_community_member(self.db, user, community_id)

    async def create(self, user: User, body: PromptCreate) -> Prompt:
        await self._check_links(user, body.collection_id, body.community_id)
        is_first = not await self.db.scalar(
            select(func.count()).select_from(Prompt).where(Prompt.user_id == user.id)
        )
        prompt = Prompt(id=await self._new_id(), user_id=user.id, **body.model_dump())
        self.db.add(prompt)
        await self.db.flush()

        if is_first:
            await CreditService(self.db).award_once(
                user.id,
                get_settings().first_prompt_bonus,
                "first_prompt",
                "First prompt bonus",
            )
        await AchievementService(self.db).record_progress(user.id, "prompts_created")
        await self.db.commit()
        await self.db.refresh(prompt)
        logger.info(f"Prompt created: {prompt.id}", extra={"user_id": user.id})
        return prompt

    async def list_public(
        self,
        *,
        tag: str | None = None,
        search: str | None = None,
        user_id: uuid.UUID | None = None,
        collection_id: uuid.UUID | None = None,
        community_id: uuid.UUID | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> list[Prompt]:
        query = select(Prompt).where(Prompt.is_public.is_(True))
        if user_id:
            query = query.where(Prompt.user_id == user_id)
        if collection_id:
            query = query.where(Prompt.collection_id == collection_id)
        if community_id:
            query = query.where(Prompt.community_id == community_id)
        if search:
            pattern = f"%{search.lower()}%"
            query = query.where(or_(
                func.lower(Prompt.name).like(pattern),
                func.lower(Prompt.prompt_content).like(pattern),
                func.lower(Prompt.description).like(pattern),
            ))
        if tag:
            # JSON list stored as text; match the quoted element.
            query = query.where(cast(Prompt.tags, String).like(f'%"{tag}"%'))
        query = query.order_by(Prompt.created_at.desc()).limit(limit).offset(offset)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def _owned(self, user: User, prompt_id: str) -> Prompt:
        prompt = await self.get_or_404(prompt_id)
        if not can_modify_owned(
            user_id=str(user.id), user_role=user.role, owner_id=str(prompt.user_id),
        ):
            raise PermissionDeniedError("Only the owner can modify this prompt")
        return prompt

    async def update(self, user: User, prompt_id: str, body: PromptUpdate) -> Prompt:
        prompt = await self._owned(user, prompt_id)
        changes = body.model_dump(exclude_unset=True)
        if "collection_id" in changes or "community_id" in changes:
            await self._check_links(
                user, changes.get("collection_id"), changes.get("community_id"),
            )
        for key, value in changes.items():
            setattr(prompt, key, value)
        await self.db.commit()
        await self.db.refresh(prompt)
        return prompt

    async def delete(self, user: User, prompt_id: str) -> None:
        prompt = await self._owned(user, prompt_id)
        await self.db.delete(prompt)
        await self.db.commit()

    async def toggle_like(self, user: User, prompt_id: str) -> dict:
        prompt = await self.get_visible(prompt_id, user)
        existing = (await self.db.execute(
            select(PromptLike)
            .where(PromptLike.user_id == user.id)
            .where(PromptLike.prompt_id == prompt.id)
        )).scalar_one_or_none()
        if existing:
            await self.db.delete(existing)
            prompt.likes = max(0, prompt.likes - 1)
            liked = False
        else:
            self.db.add(PromptLike(user_id=user.id, prompt_id=prompt.id))
            prompt.likes += 1
            liked = True
        await self.db.commit()
        return {"liked": liked, "likes": prompt.likes}

    async def toggle_favorite(self, user: User, prompt_id: str) -> dict:
        prompt = await self.get_visible(prompt_id, user)
        existing = (await self.db.execute(
            select(PromptFavorite)
            .where(PromptFavorite.user_id == user.id)
            .where(PromptFavorite.prompt_id == prompt.id)
        )).scalar_one_or_none()
        if existing:
            await self.db.delete(existing)
            favorited = False
        else:
            self.db.add(PromptFavorite(user_id=user.id, prompt_id=prompt.id))
            favorited = True
        await self.db.commit()
        return {"favorited": favorited}

    async def fork(self, user: User, prompt_id: str) -> Prompt:
        source = await self.get_visible(prompt_id, user)
        fork = Prompt(
            id=await self._new_id(),
            name=f"{source.name} (fork)"[:200],
            description=source.description,
            prompt_content=source.prompt_content,
            negative_prompt=source.negative_prompt,
            tags=list(source.tags or []),
            category=source.category,
            prompt_type=source.prompt_type,
            intended_generator=source.intended_generator,
            recommended_models=list(source.recommended_models or []),
            example_images=list(source.example_images or []),
            is_public=False,
            is_nsfw=source.is_nsfw,
            status="draft",
            fork_of=source.id,
            user_id=user.id,
        )
        self.db.add(fork)
        source.usage_count += 1
        await self.db.commit()
        await self.db.refresh(fork)
        return fork

    async def list_for_owner(self, user_id: uuid.UUID) -> list[Prompt]:
        result = await self.db.execute(
            select(Prompt).where(Prompt.user_id == user_id).order_by(Prompt.created_at),
        )
        return list(result.scalars().all())
