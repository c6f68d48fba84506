"""Credit Rules — daily reward streak arithmetic and ledger entry shaping.

Invariants:
    - One daily claim per UTC calendar date
    - Streak continues only when the previous claim was exactly yesterday
    - Streak bonus: +500 at >= 30 days, else +100 at >= 7 days
    - Positive amounts are "earn", non-positive adjustments are "adjustment"

Design Decisions:
    - compute_daily_reward returns a descriptor; the shell applies it and
      writes the credit transaction
"""

from datetime import date, timedelta

from app.core.domain_types import CreditTransactionType


DAILY_REWARD_BASE: int = 10
WEEK_STREAK_DAYS: int = 7
WEEK_STREAK_BONUS: int = 100
MONTH_STREAK_DAYS: int = 30
MONTH_STREAK_BONUS: int = 500


def streak_bonus(streak: int) -> int:
    if streak >= MONTH_STREAK_DAYS:
        return MONTH_STREAK_BONUS
    if streak >= WEEK_STREAK_DAYS:
        return WEEK_STREAK_BONUS
    return 0


def compute_daily_reward(
    last_claim: date | None,
    current_streak: int,
    today: date,
    base: int = DAILY_REWARD_BASE,
) -> dict:
    """Work out the next daily claim, or an error when already claimed today."""
    if last_claim == today:
        return {
            "status": "error",
            "error_code": "ALREADY_CLAIMED",
            "message": "Daily reward already claimed today",
        }
    if last_claim is not None and last_claim == today - timedelta(days=1):
        streak = current_streak + 1
    else:
        streak = 1
    bonus = streak_bonus(streak)
    return {
        "status": "ok",
        "streak": streak,
        "reward": base,
        "bonus": bonus,
        "total": base + bonus,
    }


def transaction_type_for(amount: int) -> str:
    if amount > 0:
        return CreditTransactionType.EARN.value
    return CreditTransactionType.ADJUSTMENT.value
