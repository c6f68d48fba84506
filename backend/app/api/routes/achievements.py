"""Achievement Routes — catalogue with progress, and reward claims."""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import get_current_user
from app.infrastructure.database import get_db
from app.models.user import User
from app.schemas.credits import AchievementResponse, UserAchievementResponse
from app.services.achievement_service import AchievementService

router = APIRouter(prefix="/api/achievements", tags=["achievements"])


@router.get("")
async def list_achievements(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    data = await AchievementService(db).list_for_user(user.id)
    return {
        "achievements": [AchievementResponse.model_validate(a) for a in data["achievements"]],
        "user_progress": [
            UserAchievementResponse.model_validate(p) for p in data["user_progress"]
        ],
    }


@router.post("/claim/{achievement_id}")
async def claim_achievement(
    achievement_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await AchievementService(db).claim(user.id, achievement_id)
