"""Achievement Service — progress tracking and credit claims.

Invariants:
    - record_progress touches every active achievement whose trigger matches
    - is_completed flips once, when progress reaches required_count; completed_at set then
    - Credits for an achievement are claimed at most once

Design Decisions:
    - record_progress flushes only: it runs inside the triggering operation's transaction
"""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import BusinessRuleError, ResourceNotFoundError
from app.db.base import utcnow
from app.models.achievement import Achievement, UserAchievement
from app.services.credit_service import CreditService

logger = logging.getLogger(__name__)


class AchievementService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_for_user(self, user_id: uuid.UUID) -> dict:
        achievements = await self.db.execute(
            select(Achievement)
            .where(Achievement.is_active.is_(True))
            .order_by(Achievement.category, Achievement.required_count)
        )
        progress = await self.db.execute(
            select(UserAchievement).where(UserAchievement.user_id == user_id),
        )
        return {
            "achievements": list(achievements.scalars().all()),
            "user_progress": list(progress.scalars().all()),
        }

    async def record_progress(
        self, user_id: uuid.UUID, trigger: str, increment: int = 1,
    ) -> list[UserAchievement]:
        """Advance progress on every active achievement with this trigger.

        Returns the rows that became complete on this call.
        """
        result = await self.db.execute(
            select(Achievement)
            .where(Achievement.trigger == trigger)
            .where(Achievement.is_active.is_(True))
        )
        newly_completed: list[UserAchievement] = []
        for achievement in result.scalars().all():
            row = (await self.db.execute(
                select(UserAchievement)
                .where(UserAchievement.user_id == user_id)
                .where(UserAchievement.achievement_id == achievement.id)
            )).scalar_one_or_none()
            if row is None:
                row = UserAchievement(
                    user_id=user_id, achievement_id=achievement.id,
                    progress=0, is_completed=False, credits_claimed=False,
                )
                self.db.add(row)
            if row.is_completed:
                continue
            row.progress += increment
            if row.progress >= achievement.required_count:
                row.is_completed = True
                row.completed_at = utcnow()
                newly_completed.append(row)
                logger.info(
                    f"Achievement completed: {achievement.code}",
                    extra={"user_id": user_id},
                )
        await self.db.flush()
        return newly_completed

    async def claim(self, user_id: uuid.UUID, achievement_id: uuid.UUID) -> dict:
        row = (await self.db.execute(
            select(UserAchievement)
            .where(UserAchievement.user_id == user_id)
            .where(UserAchievement.achievement_id == achievement_id)
        )).scalar_one_or_none()
        if row is None:
            raise ResourceNotFoundError("Achievement progress", str(achievement_id))
        if not row.is_completed:
            raise BusinessRuleError("Achievement not completed yet", "ACHIEVEMENT_INCOMPLETE")
        if row.credits_claimed:
            raise BusinessRuleError("Credits already claimed", "ALREADY_CLAIMED")

        achievement = await self.db.get(Achievement, achievement_id)
        credits = await CreditService(self.db).add_credits(
            user_id,
            achievement.credit_reward,
            "achievement",
            f"Achievement unlocked: {achievement.name}",
            reference_id=str(achievement.id),
            reference_type="achievement",
        )
        row.credits_claimed = True
        row.claimed_at = utcnow()
        await self.db.commit()
        return {"credits_awarded": achievement.credit_reward, "balance": credits.balance}
