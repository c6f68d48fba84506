"""Credit Routes — balance, history and the daily reward claim."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import get_current_user
from app.infrastructure.database import get_db
from app.models.user import User
from app.schemas.credits import (
    CreditBalanceResponse, CreditTransactionResponse, DailyRewardResponse,
)
from app.services.credit_service import CreditService

router = APIRouter(prefix="/api/credits", tags=["credits"])


@router.get("/balance", response_model=CreditBalanceResponse)
async def get_balance(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Balance row created at zero on first access."""
    credits = await CreditService(db).get_or_create_balance(user.id)
    await db.commit()
    return CreditBalanceResponse(
        balance=credits.balance,
        lifetime_earned=credits.lifetime_earned,
        lifetime_spent=credits.lifetime_spent,
    )


@router.get("/history")
async def get_history(
    limit: int = Query(50, ge=1, le=200),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    rows = await CreditService(db).history(user.id, limit)
    return {"items": [CreditTransactionResponse.model_validate(r) for r in rows]}


@router.post("/claim-daily", response_model=DailyRewardResponse)
async def claim_daily(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return DailyRewardResponse(**await CreditService(db).claim_daily_reward(user.id))
