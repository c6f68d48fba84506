"""Platform Settings — admin-tunable overrides read from the platform_settings table."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.core.marketplace_rules import resolve_commission_rate, resolve_int_setting
from app.models.ledger import PlatformSetting


async def get_platform_setting(db: AsyncSession, key: str) -> str | None:
    result = await db.execute(select(PlatformSetting.value).where(PlatformSetting.key == key))
    return result.scalar_one_or_none()


async def commission_rate_for(db: AsyncSession, seller_rate: int | None) -> int:
    """Seller override, then platform_settings row, then configured default."""
    return resolve_commission_rate(
        seller_rate,
        await get_platform_setting(db, "default_commission_rate"),
        get_settings().default_commission_rate,
    )


async def min_payout_cents(db: AsyncSession) -> int:
    return resolve_int_setting(
        await get_platform_setting(db, "min_payout_amount_cents"),
        get_settings().min_payout_amount_cents,
    )
