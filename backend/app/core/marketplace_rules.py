"""Marketplace Rules — pure money arithmetic, listing validation and preview cutting.

Invariants:
    - commission = floor(total * rate / 100); net = total - commission (no cent lost)
    - Commission rate resolution: seller override > platform setting > DEFAULT_COMMISSION_RATE
    - Listing must accept money or credits; each accepted currency has a floor price
    - Preview never exceeds preview_percentage of the content

Design Decisions:
    - Validators return error descriptors (dict | None) and never raise:
      the shell decides which domain error to raise
    - Batch final status derived from counts only, so it is testable without Stripe
"""

import secrets
import string
import time

from app.core.domain_types import Cents, CommissionRate, OnboardingStatus, PayoutBatchStatus


DEFAULT_COMMISSION_RATE: int = 15
DEFAULT_MIN_PAYOUT_CENTS: int = 1000
PREVIEW_BREAK_THRESHOLD: float = 0.8
# Priority order; the cut keeps punctuation but drops the space
_PREVIEW_BREAKS = ((".", True), (",", True), (" ", False))


def split_commission(total_cents: Cents, rate: CommissionRate) -> tuple[Cents, Cents]:
    """Return (commission_cents, net_cents) for an order total."""
    commission = (total_cents * rate) // 100
    return Cents(commission), Cents(total_cents - commission)


def resolve_commission_rate(
    seller_rate: int | None, platform_setting: str | None,
    default: int = DEFAULT_COMMISSION_RATE,
) -> CommissionRate:
    """Seller override wins, then the platform setting, then the default."""
    if seller_rate is not None:
        return CommissionRate(seller_rate)
    if platform_setting:
        try:
            return CommissionRate(int(platform_setting))
        except ValueError:
            return CommissionRate(default)
    return CommissionRate(default)


def resolve_int_setting(raw: str | None, default: int) -> int:
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def validate_listing_terms(
    accepts_money: bool,
    accepts_credits: bool,
    price_cents: int | None,
    credit_price: int | None,
    min_price_cents: int = 100,
    min_credit_price: int = 100,
) -> dict | None:
    """Check that a listing is purchasable with at least one valid price."""
    if not accepts_money and not accepts_credits:
        return {
            "status": "error",
            "error_code": "NO_PAYMENT_METHOD",
            "message": "Listing must accept either money or credits",
        }
    if accepts_money and (price_cents is None or price_cents < min_price_cents):
        return {
            "status": "error",
            "error_code": "PRICE_TOO_LOW",
            "message": f"Price must be at least {min_price_cents} cents",
        }
    if accepts_credits and (credit_price is None or credit_price < min_credit_price):
        return {
            "status": "error",
            "error_code": "CREDIT_PRICE_TOO_LOW",
            "message": f"Credit price must be at least {min_credit_price} credits",
        }
    return None


def listing_preview(content: str, preview_percentage: int) -> dict:
    """Cut the visible part of a listed prompt.

    Takes the first preview_percentage% of the content, then backs off to
    the last period, else the last comma, else the last space, using the
    first of those that falls in the final 20% of the slice.
    """
    full_length = len(content)
    cut = (full_length * preview_percentage) // 100
    preview = content[:cut]
    for ch, keep in _PREVIEW_BREAKS:
        pos = preview.rfind(ch)
        if pos > cut * PREVIEW_BREAK_THRESHOLD:
            preview = preview[:pos + 1] if keep else preview[:pos]
            break
    return {
        "preview": preview.rstrip(),
        "is_truncated": len(preview) < full_length,
        "full_length": full_length,
    }


def generate_order_number(now_ms: int | None = None) -> str:
    """ORD-{epoch ms}-{4 random uppercase alphanumerics}."""
    ms = now_ms if now_ms is not None else int(time.time() * 1000)
    suffix = "".join(
        secrets.choice(string.ascii_uppercase + string.digits) for _ in range(4)
    )
    return f"ORD-{ms}-{suffix}"


def generate_batch_number(method: str, now_ms: int | None = None) -> str:
    ms = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"BATCH-{ms}-{method.upper()}"


def batch_final_status(successful: int, failed: int) -> str:
    """completed (no failures), failed (no successes), else partial."""
    if failed == 0:
        return PayoutBatchStatus.COMPLETED.value
    if successful == 0:
        return PayoutBatchStatus.FAILED.value
    return PayoutBatchStatus.PARTIAL.value


def onboarding_status_from_account(
    charges_enabled: bool, payouts_enabled: bool, details_submitted: bool,
) -> str:
    """Map a Stripe connected-account snapshot to our onboarding status."""
    if charges_enabled and payouts_enabled:
        return OnboardingStatus.COMPLETED.value
    if details_submitted:
        return OnboardingStatus.PENDING.value
    return OnboardingStatus.NOT_STARTED.value
