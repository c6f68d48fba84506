"""Credit Rules — tests for daily reward streaks and transaction typing.

Tests cover:
    - First claim starts a streak of 1
    - Consecutive days extend the streak; gaps reset it
    - Same-day claim returns ALREADY_CLAIMED
    - Week and month streak bonuses
"""

from datetime import date

from app.core.credit_rules import (
    DAILY_REWARD_BASE,
    MONTH_STREAK_BONUS,
    WEEK_STREAK_BONUS,
    compute_daily_reward,
    streak_bonus,
    transaction_type_for,
)

TODAY = date(2024, 3, 15)


def test_first_claim_starts_streak():
    result = compute_daily_reward(None, 0, TODAY)
    assert result["status"] == "ok"
    assert result["streak"] == 1
    assert result["reward"] == DAILY_REWARD_BASE
    assert result["bonus"] == 0
    assert result["total"] == DAILY_REWARD_BASE


def test_yesterday_extends_streak():
    result = compute_daily_reward(date(2024, 3, 14), 3, TODAY)
    assert result["streak"] == 4


def test_gap_resets_streak():
    result = compute_daily_reward(date(2024, 3, 12), 12, TODAY)
    assert result["streak"] == 1
    assert result["bonus"] == 0


def test_same_day_is_rejected():
    result = compute_daily_reward(TODAY, 5, TODAY)
    assert result["status"] == "error"
    assert result["error_code"] == "ALREADY_CLAIMED"


def test_seventh_day_earns_week_bonus():
    result = compute_daily_reward(date(2024, 3, 14), 6, TODAY)
    assert result["streak"] == 7
    assert result["bonus"] == WEEK_STREAK_BONUS
    assert result["total"] == DAILY_REWARD_BASE + WEEK_STREAK_BONUS


def test_streak_bonus_thresholds():
    assert streak_bonus(6) == 0
    assert streak_bonus(7) == WEEK_STREAK_BONUS
    assert streak_bonus(29) == WEEK_STREAK_BONUS
    assert streak_bonus(30) == MONTH_STREAK_BONUS


def test_transaction_type_for():
    assert transaction_type_for(50) == "earn"
    assert transaction_type_for(0) == "adjustment"
    assert transaction_type_for(-20) == "adjustment"
