"""Credit Service — balances, credit ledger and daily rewards.

Invariants:
    - Every balance change writes exactly one credit_transactions row
      with balance_before / balance_after
    - Balance never goes negative through spend_credits
    - One-time bonuses (first_prompt, profile_completion) are awarded at most once per user

Design Decisions:
    - Methods flush, callers commit: credit moves join the caller's transaction
      (order completion, achievement claims)
    - Balance row created lazily on first access
"""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.core.credit_rules import compute_daily_reward, transaction_type_for
from app.core.domain_types import CreditTransactionType
from app.core.errors import BusinessRuleError, InsufficientCreditsError
from app.db.base import utcnow
from app.models.credits import CreditTransaction, DailyReward, UserCredits

logger = logging.getLogger(__name__)


class CreditService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_or_create_balance(self, user_id: uuid.UUID) -> UserCredits:
        result = await self.db.execute(
            select(UserCredits).where(UserCredits.user_id == user_id),
        )
        credits = result.scalar_one_or_none()
        if credits is None:
            credits = UserCredits(
                user_id=user_id, balance=0, lifetime_earned=0, lifetime_spent=0,
            )
            self.db.add(credits)
            await self.db.flush()
        return credits

    async def add_credits(
        self,
        user_id: uuid.UUID,
        amount: int,
        source: str,
        description: str | None = None,
        reference_id: str | None = None,
        reference_type: str | None = None,
    ) -> UserCredits:
        """Credit (or debit, for negative adjustments) a user's balance."""
        credits = await self.get_or_create_balance(user_id)
        before = credits.balance
        credits.balance = before + amount
        if amount > 0:
            credits.lifetime_earned += amount
        credits.updated_at = utcnow()
        self.db.add(CreditTransaction(
            user_id=user_id,
            type=transaction_type_for(amount),
            amount=amount,
            balance_before=before,
            balance_after=credits.balance,
            source=source,
            description=description,
            reference_id=reference_id,
            reference_type=reference_type,
        ))
        await self.db.flush()
        logger.info(
            f"Credits added: {amount} ({source})",
            extra={"user_id": user_id},
        )
        return credits

    async def spend_credits(
        self,
        user_id: uuid.UUID,
        amount: int,
        source: str,
        description: str | None = None,
        reference_id: str | None = None,
        reference_type: str | None = None,
    ) -> UserCredits:
        credits = await self.get_or_create_balance(user_id)
        if credits.balance < amount:
            raise InsufficientCreditsError(credits.balance, amount)
        before = credits.balance
        credits.balance = before - amount
        credits.lifetime_spent += amount
        credits.updated_at = utcnow()
        self.db.add(CreditTransaction(
            user_id=user_id,
            type=CreditTransactionType.SPEND.value,
            amount=-amount,
            balance_before=before,
            balance_after=credits.balance,
            source=source,
            description=description,
            reference_id=reference_id,
            reference_type=reference_type,
        ))
        await self.db.flush()
        return credits

    async def history(self, user_id: uuid.UUID, limit: int = 50) -> list[CreditTransaction]:
        result = await self.db.execute(
            select(CreditTransaction)
            .where(CreditTransaction.user_id == user_id)
            .order_by(CreditTransaction.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def has_source(self, user_id: uuid.UUID, source: str) -> bool:
        result = await self.db.execute(
            select(CreditTransaction.id)
            .where(CreditTransaction.user_id == user_id)
            .where(CreditTransaction.source == source)
            .limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def award_once(
        self, user_id: uuid.UUID, amount: int, source: str, description: str,
    ) -> bool:
        """Award a one-time bonus; False when the source was already paid."""
        if await self.has_source(user_id, source):
            return False
        await self.add_credits(user_id, amount, source, description)
        return True

    async def claim_daily_reward(self, user_id: uuid.UUID) -> dict:
        """Claim today's login reward, extending or resetting the streak."""
        result = await self.db.execute(
            select(DailyReward).where(DailyReward.user_id == user_id),
        )
        record = result.scalar_one_or_none()
        today = utcnow().date()
        outcome = compute_daily_reward(
            record.last_claim_date if record else None,
            record.current_streak if record else 0,
            today,
            base=get_settings().daily_reward_base,
        )
        if outcome["status"] == "error":
            raise BusinessRuleError(outcome["message"], outcome["error_code"])

        if record is None:
            record = DailyReward(
                user_id=user_id, current_streak=0, longest_streak=0, total_claims=0,
            )
            self.db.add(record)
        record.last_claim_date = today
        record.current_streak = outcome["streak"]
        record.longest_streak = max(record.longest_streak, outcome["streak"])
        record.total_claims += 1

        description = f"Daily login reward (day {outcome['streak']})"
        if outcome["bonus"]:
            description += f" + {outcome['bonus']} streak bonus"
        credits = await self.add_credits(
            user_id, outcome["total"], "daily_login", description,
        )
        await self.db.commit()
        return {
            "reward": outcome["reward"],
            "streak": outcome["streak"],
            "bonus": outcome["bonus"],
            "balance": credits.balance,
        }
