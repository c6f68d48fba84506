"""Collection Service — collection CRUD and access-checked prompt listing.

Invariants:
    - Read access follows core.membership_rules.can_access_collection
    - global collections: super_admin only; community collections: admin of that community
    - Update/delete: owner or super_admin
"""

import uuid

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import InvalidRequestError, PermissionDeniedError, ResourceNotFoundError
from app.core.membership_rules import can_access_collection, can_modify_owned
from app.models.prompt import Collection, Prompt
from app.models.user import User
from app.schemas.prompt import CollectionCreate, CollectionUpdate
from app.services.access_control import is_community_member, require_community_admin


class CollectionService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _get(self, collection_id: uuid.UUID) -> Collection:
        collection = await self.db.get(Collection, collection_id)
        if collection is None:
            raise ResourceNotFoundError("Collection", str(collection_id))
        return collection

    async def create(self, user: User, body: CollectionCreate) -> Collection:
        if body.type == "global" and not user.is_super_admin:
            raise PermissionDeniedError("Only super admins can create global collections")
        if body.type == "community":
            if body.community_id is None:
                raise InvalidRequestError(
                    "community_id is required for community collections", field="community_id",
                )
            await require_community_admin(self.db, user, body.community_id)
        collection = Collection(
            name=body.name,
            description=body.description,
            type=body.type,
            community_id=body.community_id if body.type == "community" else None,
            is_public=body.is_public,
            user_id=user.id,
        )
        self.db.add(collection)
        await self.db.commit()
        return collection

    async def get_accessible(self, user: User | None, collection_id: uuid.UUID) -> Collection:
        collection = await self._get(collection_id)
        member = False
        if user and collection.type == "community" and collection.community_id:
            member = await is_community_member(self.db, user, collection.community_id)
        allowed = can_access_collection(
            user_id=str(user.id) if user else None,
            user_role=user.role if user else None,
            owner_id=str(collection.user_id),
            collection_type=collection.type,
            is_public=collection.is_public,
            is_community_member=member,
        )
        if not allowed:
            raise PermissionDeniedError("No access to this collection")
        return collection

    async def list_for_user(self, user: User) -> list[Collection]:
        result = await self.db.execute(
            select(Collection)
            .where(or_(Collection.user_id == user.id, Collection.is_public.is_(True)))
            .order_by(Collection.created_at.desc())
        )
        return list(result.scalars().all())

    async def prompts(self, user: User | None, collection_id: uuid.UUID) -> list[Prompt]:
        collection = await self.get_accessible(user, collection_id)
        query = select(Prompt).where(Prompt.collection_id == collection.id)
        is_owner = user is not None and (user.is_super_admin or user.id == collection.user_id)
        if not is_owner:
            query = query.where(Prompt.is_public.is_(True))
        result = await self.db.execute(query.order_by(Prompt.created_at.desc()))
        return list(result.scalars().all())

    async def _owned(self, user: User, collection_id: uuid.UUID) -> Collection:
        collection = await self._get(collection_id)
        if not can_modify_owned(
            user_id=str(user.id), user_role=user.role, owner_id=str(collection.user_id),
        ):
            raise PermissionDeniedError("Only the owner can modify this collection")
        return collection

    async def update(self, user: User, collection_id: uuid.UUID, body: CollectionUpdate) -> Collection:
        collection = await self._owned(user, collection_id)
        for key, value in body.model_dump(exclude_unset=True).items():
            setattr(collection, key, value)
        await self.db.commit()
        return collection

    async def delete(self, user: User, collection_id: uuid.UUID) -> None:
        collection = await self._owned(user, collection_id)
        await self.db.delete(collection)
        await self.db.commit()
