"""Community Routes — communities, sub-communities, membership and invites.

Invariants:
    - Creation of top-level communities restricted to community_admin/super_admin
    - Sub-community creation and invites require admin of the target community
    - Member lists visible to members only
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import get_current_user
from app.infrastructure.database import get_db
from app.models.user import User
from app.schemas.community import (
    CommunityCreate, CommunityResponse, InviteCreate, InviteResponse,
    MemberRoleUpdate, MembershipResponse,
)
from app.services.community_service import CommunityService
from app.services.invite_service import InviteService

router = APIRouter(prefix="/api/communities", tags=["communities"])


@router.post("", response_model=CommunityResponse, status_code=status.HTTP_201_CREATED)
async def create_community(
    body: CommunityCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    community = await CommunityService(db).create_community(user, body)
    return CommunityResponse.model_validate(community)


@router.get("")
async def list_communities(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    communities = await CommunityService(db).list_active(limit, offset)
    return {
        "items": [CommunityResponse.model_validate(c) for c in communities],
        "pagination": {"limit": limit, "offset": offset},
    }


@router.get("/{community_id}", response_model=CommunityResponse)
async def get_community(community_id: UUID, db: AsyncSession = Depends(get_db)):
    return CommunityResponse.model_validate(
        await CommunityService(db).get_or_404(community_id),
    )


@router.post(
    "/{community_id}/sub-communities",
    response_model=CommunityResponse, status_code=status.HTTP_201_CREATED,
)
async def create_sub_community(
    community_id: UUID,
    body: CommunityCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    child = await CommunityService(db).create_sub_community(user, community_id, body)
    return CommunityResponse.model_validate(child)


@router.get("/{community_id}/hierarchy")
async def get_hierarchy(community_id: UUID, db: AsyncSession = Depends(get_db)):
    """Descendant tree resolved by materialized path prefix."""
    return await CommunityService(db).hierarchy(community_id)


@router.post(
    "/{community_id}/join",
    response_model=MembershipResponse, status_code=status.HTTP_201_CREATED,
)
async def join_community(
    community_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    membership = await CommunityService(db).join(user, community_id)
    return MembershipResponse.model_validate(membership)


@router.delete("/{community_id}/leave", status_code=status.HTTP_204_NO_CONTENT)
async def leave_community(
    community_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await CommunityService(db).leave(user, community_id)


@router.get("/{community_id}/members")
async def list_members(
    community_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return {"members": await CommunityService(db).members(user, community_id)}


@router.patch(
    "/{community_id}/members/{member_id}/role", response_model=MembershipResponse,
)
async def set_member_role(
    community_id: UUID,
    member_id: UUID,
    body: MemberRoleUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    membership = await CommunityService(db).set_member_role(
        user, community_id, member_id, body.role,
    )
    return MembershipResponse.model_validate(membership)


@router.post(
    "/{community_id}/invites",
    response_model=InviteResponse, status_code=status.HTTP_201_CREATED,
)
async def create_invite(
    community_id: UUID,
    body: InviteCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    invite = await InviteService(db).create(user, community_id, body)
    return InviteResponse.model_validate(invite)
