"""Community Service — communities, sub-communities and memberships.

Invariants:
    - Root: level 0, path "/{id}/", parent NULL
    - Child: level = parent.level + 1, path = parent.path + "{id}/", level <= 4
    - Creator becomes an active admin member and gets a community_admins row
    - At most one membership row per (user, community)

Design Decisions:
    - Node id generated before insert so the path can be written in the same flush
    - Hierarchy read with one LIKE query on the path prefix, nested in core.build_tree
"""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.community_paths import build_tree, child_path, root_path, validate_child_level
from app.core.domain_types import UserRole
from app.core.errors import BusinessRuleError, ConflictError, ResourceNotFoundError
from app.models.community import Community, CommunityAdmin, UserCommunity
from app.models.user import User
from app.schemas.community import CommunityCreate
from app.services.access_control import (
    get_membership, require_community_admin, require_community_member, require_role,
)

logger = logging.getLogger(__name__)


def _node(community: Community) -> dict:
    return {
        "id": str(community.id),
        "name": community.name,
        "slug": community.slug,
        "description": community.description,
        "level": community.level,
        "path": community.path,
        "parent_community_id": (
            str(community.parent_community_id) if community.parent_community_id else None
        ),
    }


class CommunityService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_or_404(self, community_id: uuid.UUID) -> Community:
        community = await self.db.get(Community, community_id)
        if community is None:
            raise ResourceNotFoundError("Community", str(community_id))
        return community

    async def _ensure_slug_free(self, slug: str) -> None:
        taken = await self.db.execute(select(Community.id).where(Community.slug == slug))
        if taken.scalar_one_or_none() is not None:
            raise ConflictError(f"Slug '{slug}' is already in use")

    async def _add_creator_as_admin(self, community: Community, user: User) -> None:
        self.db.add(UserCommunity(
            user_id=user.id, community_id=community.id, role="admin", status="active",
        ))
        self.db.add(CommunityAdmin(
            user_id=user.id, community_id=community.id, assigned_by=user.id,
        ))

    async def create_community(self, user: User, body: CommunityCreate) -> Community:
        require_role(user, UserRole.COMMUNITY_ADMIN)
        await self._ensure_slug_free(body.slug)
        community_id = uuid.uuid4()
        community = Community(
            id=community_id,
            name=body.name,
            slug=body.slug,
            description=body.description,
            image_url=body.image_url,
            parent_community_id=None,
            level=0,
            path=root_path(community_id),
            created_by=user.id,
        )
        self.db.add(community)
        await self.db.flush()
        await self._add_creator_as_admin(community, user)
        await self.db.commit()
        logger.info("Community created", extra={"community_id": community.id})
        return community

    async def create_sub_community(
        self, user: User, parent_id: uuid.UUID, body: CommunityCreate,
    ) -> Community:
        parent = await self.get_or_404(parent_id)
        await require_community_admin(self.db, user, parent.id)
        parent_level = parent.level or 0
        err = validate_child_level(parent_level)
        if err:
            raise BusinessRuleError(err["message"], err["error_code"])
        await self._ensure_slug_free(body.slug)

        child_id = uuid.uuid4()
        child = Community(
            id=child_id,
            name=body.name,
            slug=body.slug,
            description=body.description,
            image_url=body.image_url,
            parent_community_id=parent.id,
            level=parent_level + 1,
            path=child_path(parent.path or root_path(parent.id), child_id),
            created_by=user.id,
        )
        self.db.add(child)
        await self.db.flush()
        await self._add_creator_as_admin(child, user)
        await self.db.commit()
        logger.info(
            f"Sub-community created at level {child.level}",
            extra={"community_id": child.id},
        )
        return child

    async def list_active(self, limit: int = 50, offset: int = 0) -> list[Community]:
        result = await self.db.execute(
            select(Community)
            .where(Community.is_active.is_(True))
            .order_by(Community.level, Community.name)
            .limit(limit)
            .offset(offset)
        )
        return list(result.scalars().all())

    async def hierarchy(self, community_id: uuid.UUID) -> dict:
        root = await self.get_or_404(community_id)
        prefix = root.path or root_path(root.id)
        result = await self.db.execute(
            select(Community)
            .where(Community.path.like(f"{prefix}%"))
            .where(Community.id != root.id)
            .where(Community.is_active.is_(True))
        )
        return build_tree(_node(root), [_node(c) for c in result.scalars().all()])

    async def join(self, user: User, community_id: uuid.UUID) -> UserCommunity:
        community = await self.get_or_404(community_id)
        if not community.is_active:
            raise BusinessRuleError("Community is not active", "COMMUNITY_INACTIVE")
        if await get_membership(self.db, user.id, community.id):
            raise BusinessRuleError("Already a member of this community", "ALREADY_MEMBER")
        membership = UserCommunity(
            user_id=user.id, community_id=community.id, role="member", status="active",
        )
        self.db.add(membership)
        await self.db.commit()
        return membership

    async def leave(self, user: User, community_id: uuid.UUID) -> None:
        membership = await get_membership(self.db, user.id, community_id)
        if membership is None:
            raise ResourceNotFoundError("Membership", str(community_id))
        await self.db.delete(membership)
        await self.db.commit()

    async def members(self, user: User, community_id: uuid.UUID) -> list[dict]:
        await self.get_or_404(community_id)
        await require_community_member(self.db, user, community_id)
        result = await self.db.execute(
            select(UserCommunity, User)
            .join(User, User.id == UserCommunity.user_id)
            .where(UserCommunity.community_id == community_id)
            .order_by(UserCommunity.joined_at)
        )
        return [
            {
                "user_id": str(member.id),
                "username": member.username,
                "first_name": member.first_name,
                "last_name": member.last_name,
                "profile_image_url": member.profile_image_url,
                "role": membership.role,
                "status": membership.status,
                "joined_at": membership.joined_at.isoformat(),
            }
            for membership, member in result.all()
        ]

    async def set_member_role(
        self, user: User, community_id: uuid.UUID, member_id: uuid.UUID, role: str,
    ) -> UserCommunity:
        await require_community_admin(self.db, user, community_id)
        membership = await get_membership(self.db, member_id, community_id)
        if membership is None:
            raise ResourceNotFoundError("Membership", str(member_id))
        membership.role = role
        await self.db.commit()
        return membership
