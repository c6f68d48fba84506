"""Invite Service — create, inspect, accept and revoke community invite codes.

Invariants:
    - Codes are unique, URL-safe and unguessable (secrets.token_urlsafe)
    - accept() creates exactly one membership and increments current_uses by one,
      in a single commit
    - Inactive, expired or exhausted invites are rejected with 400

Design Decisions:
    - Usability rules live in core.membership_rules so they are testable without a DB
    - Role granted by an accepted invite comes from the invite row
"""

import logging
import secrets
import uuid
from datetime import timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import BusinessRuleError, ResourceNotFoundError
from app.core.membership_rules import check_invite_usable
from app.db.base import as_utc, utcnow
from app.models.community import Community, CommunityInvite, UserCommunity
from app.models.user import User
from app.schemas.community import InviteCreate
from app.services.access_control import get_membership, require_community_admin

logger = logging.getLogger(__name__)

INVITE_CODE_BYTES = 12


class InviteService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _by_code(self, code: str) -> CommunityInvite:
        result = await self.db.execute(
            select(CommunityInvite).where(CommunityInvite.code == code),
        )
        invite = result.scalar_one_or_none()
        if invite is None:
            raise ResourceNotFoundError("Invite", code)
        return invite

    async def _unique_code(self) -> str:
        while True:
            code = secrets.token_urlsafe(INVITE_CODE_BYTES)
            taken = await self.db.execute(
                select(CommunityInvite.id).where(CommunityInvite.code == code),
            )
            if taken.scalar_one_or_none() is None:
                return code

    @staticmethod
    def _check_usable(invite: CommunityInvite) -> None:
        err = check_invite_usable(
            invite.is_active,
            as_utc(invite.expires_at),
            invite.current_uses,
            invite.max_uses,
        )
        if err:
            raise BusinessRuleError(err["message"], err["error_code"])

    async def create(
        self, user: User, community_id: uuid.UUID, body: InviteCreate,
    ) -> CommunityInvite:
        community = await self.db.get(Community, community_id)
        if community is None:
            raise ResourceNotFoundError("Community", str(community_id))
        await require_community_admin(self.db, user, community_id)
        invite = CommunityInvite(
            code=await self._unique_code(),
            community_id=community_id,
            created_by=user.id,
            role=body.role,
            max_uses=body.max_uses,
            current_uses=0,
            expires_at=(
                utcnow() + timedelta(hours=body.expires_in_hours)
                if body.expires_in_hours else None
            ),
            is_active=True,
        )
        self.db.add(invite)
        await self.db.commit()
        logger.info("Invite created", extra={"community_id": community_id, "user_id": user.id})
        return invite

    async def inspect(self, code: str) -> tuple[CommunityInvite, Community]:
        invite = await self._by_code(code)
        self._check_usable(invite)
        community = await self.db.get(Community, invite.community_id)
        return invite, community

    async def accept(self, user: User, code: str) -> UserCommunity:
        invite = await self._by_code(code)
        self._check_usable(invite)
        if await get_membership(self.db, user.id, invite.community_id):
            raise BusinessRuleError("Already a member of this community", "ALREADY_MEMBER")

        now = utcnow()
        membership = UserCommunity(
            user_id=user.id,
            community_id=invite.community_id,
            role=invite.role,
            status="active",
            invited_by=invite.created_by,
            joined_at=now,
            responded_at=now,
        )
        self.db.add(membership)
        invite.current_uses += 1
        await self.db.commit()
        logger.info(
            "Invite accepted",
            extra={"community_id": invite.community_id, "user_id": user.id},
        )
        return membership

    async def deactivate(self, user: User, code: str) -> CommunityInvite:
        invite = await self._by_code(code)
        await require_community_admin(self.db, user, invite.community_id)
        invite.is_active = False
        await self.db.commit()
        return invite
