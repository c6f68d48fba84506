"""Credit and Achievement Schemas — read models for balances, history and progress."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class CreditBalanceResponse(BaseModel):
    balance: int
    lifetime_earned: int
    lifetime_spent: int


class CreditTransactionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    type: str
    amount: int
    balance_before: int
    balance_after: int
    source: str
    description: str | None = None
    reference_id: str | None = None
    reference_type: str | None = None
    created_at: datetime


class DailyRewardResponse(BaseModel):
    reward: int
    streak: int
    bonus: int
    balance: int


class AchievementResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    code: str
    trigger: str
    name: str
    description: str | None = None
    category: str
    icon: str | None = None
    credit_reward: int
    required_count: int


class UserAchievementResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    achievement_id: UUID
    progress: int
    is_completed: bool
    completed_at: datetime | None = None
    credits_claimed: bool
    claimed_at: datetime | None = None
