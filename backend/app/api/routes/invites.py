"""Invite Routes — inspect, accept and deactivate invite codes."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import get_current_user
from app.infrastructure.database import get_db
from app.models.user import User
from app.schemas.community import CommunityResponse, InviteResponse, MembershipResponse
from app.services.invite_service import InviteService

router = APIRouter(prefix="/api/invites", tags=["invites"])


@router.get("/{code}")
async def get_invite(code: str, db: AsyncSession = Depends(get_db)):
    invite, community = await InviteService(db).inspect(code)
    return {
        "invite": InviteResponse.model_validate(invite),
        "community": CommunityResponse.model_validate(community),
    }


@router.post("/{code}/accept", status_code=status.HTTP_201_CREATED)
async def accept_invite(
    code: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    membership = await InviteService(db).accept(user, code)
    return {
        "membership": MembershipResponse.model_validate(membership),
        "message": "Successfully joined community",
    }


@router.delete("/{code}", response_model=InviteResponse)
async def deactivate_invite(
    code: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return InviteResponse.model_validate(await InviteService(db).deactivate(user, code))
