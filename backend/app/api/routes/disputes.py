"""Dispute Routes — party endpoints plus the admin queue.

Invariants:
    - Party routes scoped to initiator/respondent (admins see all)
    - Resolution and admin listing require super_admin
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import get_current_user, get_stripe_gateway, require_super_admin
from app.infrastructure.database import get_db
from app.models.user import User
from app.schemas.dispute import (
    DisputeCreate, DisputeDetailResponse, DisputeMessageCreate,
    DisputeMessageResponse, DisputeResolve, DisputeResponse,
)
from app.services.dispute_service import DisputeService
from app.services.payment_service import PaymentService

router = APIRouter(prefix="/api/marketplace", tags=["disputes"])


@router.post(
    "/disputes", response_model=DisputeResponse, status_code=status.HTTP_201_CREATED,
)
async def open_dispute(
    body: DisputeCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return DisputeResponse.model_validate(await DisputeService(db).open(user, body))


@router.get("/disputes")
async def list_my_disputes(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    disputes = await DisputeService(db).list_for_user(user)
    return {"items": [DisputeResponse.model_validate(d) for d in disputes]}


@router.get("/disputes/{dispute_id}", response_model=DisputeDetailResponse)
async def get_dispute(
    dispute_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    dispute = await DisputeService(db).get_for_party(user, dispute_id)
    return DisputeDetailResponse.model_validate(dispute)


@router.post(
    "/disputes/{dispute_id}/messages",
    response_model=DisputeMessageResponse, status_code=status.HTTP_201_CREATED,
)
async def add_dispute_message(
    dispute_id: UUID,
    body: DisputeMessageCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    message = await DisputeService(db).add_message(user, dispute_id, body.message)
    return DisputeMessageResponse.model_validate(message)


@router.put("/disputes/{dispute_id}/close", response_model=DisputeResponse)
async def close_dispute(
    dispute_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return DisputeResponse.model_validate(await DisputeService(db).close(user, dispute_id))


@router.put("/disputes/{dispute_id}/escalate", response_model=DisputeResponse)
async def escalate_dispute(
    dispute_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return DisputeResponse.model_validate(await DisputeService(db).escalate(user, dispute_id))


@router.put("/disputes/{dispute_id}/resolve", response_model=DisputeResponse)
async def resolve_dispute(
    dispute_id: UUID,
    body: DisputeResolve,
    admin: User = Depends(require_super_admin),
    db: AsyncSession = Depends(get_db),
    stripe_gateway=Depends(get_stripe_gateway),
):
    """Resolve; a refund amount triggers the refund flow."""
    service = DisputeService(db, PaymentService(db, stripe_gateway))
    return DisputeResponse.model_validate(await service.resolve(admin, dispute_id, body))


@router.get("/admin/disputes")
async def admin_list_disputes(
    status_filter: str | None = Query(None, alias="status"),
    admin: User = Depends(require_super_admin),
    db: AsyncSession = Depends(get_db),
):
    disputes = await DisputeService(db).list_all(status_filter)
    return {"items": [DisputeResponse.model_validate(d) for d in disputes]}


@router.get("/admin/disputes/stats")
async def admin_dispute_stats(
    admin: User = Depends(require_super_admin),
    db: AsyncSession = Depends(get_db),
):
    return await DisputeService(db).stats()
