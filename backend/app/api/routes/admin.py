"""Admin Routes — scheduled payout runs."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import get_stripe_gateway, require_super_admin
from app.infrastructure.database import get_db
from app.models.user import User
from app.schemas.marketplace import PayoutRunRequest
from app.services.payment_service import PaymentService

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.post("/payouts/run")
async def run_payouts(
    body: PayoutRunRequest,
    admin: User = Depends(require_super_admin),
    db: AsyncSession = Depends(get_db),
    stripe_gateway=Depends(get_stripe_gateway),
):
    """Batch eligible seller earnings into payouts for one method."""
    return await PaymentService(db, stripe_gateway).process_scheduled_payouts(
        body.method, body.limit,
    )
