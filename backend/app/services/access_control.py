"""Access Control — community admin / member checks shared by every service.

Invariants:
    - super_admin passes every check
    - Community admin = super_admin, a community_admins row, or an active admin membership
    - Only active memberships count

Design Decisions:
    - Plain async functions over a class: no state beyond the session
"""

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import PermissionDeniedError
from app.models.community import CommunityAdmin, UserCommunity
from app.models.user import User


async def get_membership(
    db: AsyncSession, user_id: uuid.UUID, community_id: uuid.UUID,
) -> UserCommunity | None:
    result = await db.execute(
        select(UserCommunity)
        .where(UserCommunity.user_id == user_id)
        .where(UserCommunity.community_id == community_id)
    )
    return result.scalar_one_or_none()


async def is_community_member(
    db: AsyncSession, user: User, community_id: uuid.UUID,
) -> bool:
    if user.is_super_admin:
        return True
    membership = await get_membership(db, user.id, community_id)
    return membership is not None and membership.status == "active"


async def is_community_admin(
    db: AsyncSession, user: User, community_id: uuid.UUID,
) -> bool:
    if user.is_super_admin:
        return True
    grant = await db.execute(
        select(CommunityAdmin.id)
        .where(CommunityAdmin.user_id == user.id)
        .where(CommunityAdmin.community_id == community_id)
    )
    if grant.scalar_one_or_none() is not None:
        return True
    membership = await get_membership(db, user.id, community_id)
    return (
        membership is not None
        and membership.status == "active"
        and membership.role == "admin"
    )


async def require_community_admin(
    db: AsyncSession, user: User, community_id: uuid.UUID,
) -> None:
    if not await is_community_admin(db, user, community_id):
        raise PermissionDeniedError("Community admin access required")


async def require_community_member(
    db: AsyncSession, user: User, community_id: uuid.UUID,
) -> None:
    if not await is_community_member(db, user, community_id):
        raise PermissionDeniedError("Community membership required")


def require_role(user: User, *roles: str) -> None:
    """Platform role check; super_admin always passes."""
    if user.is_super_admin or user.role in roles:
        return
    raise PermissionDeniedError()
