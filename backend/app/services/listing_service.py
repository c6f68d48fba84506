"""Listing Service — seller profiles and marketplace listings.

Invariants:
    - One listing per prompt; only the prompt owner may list it
    - A listing accepts money, credits or both, each above its price floor
    - Public listing views expose a preview, never the full prompt content

Design Decisions:
    - Price rules in core.marketplace_rules.validate_listing_terms, floors from settings
"""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.core.errors import (
    BusinessRuleError, PermissionDeniedError, ResourceNotFoundError,
)
from app.core.marketplace_rules import listing_preview, validate_listing_terms
from app.models.marketplace import MarketplaceListing, SellerProfile
from app.models.prompt import Prompt
from app.models.user import User
from app.schemas.marketplace import ListingCreate, ListingUpdate, SellerProfileUpsert

logger = logging.getLogger(__name__)


class ListingService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def seller_profile(self, user_id: uuid.UUID) -> SellerProfile | None:
        result = await self.db.execute(
            select(SellerProfile).where(SellerProfile.user_id == user_id),
        )
        return result.scalar_one_or_none()

    async def upsert_seller_profile(self, user: User, body: SellerProfileUpsert) -> SellerProfile:
        profile = await self.seller_profile(user.id)
        if profile is None:
            profile = SellerProfile(
                user_id=user.id, onboarding_status="not_started",
                total_sales=0, total_revenue_cents=0,
            )
            self.db.add(profile)
        profile.payout_method = body.payout_method
        profile.paypal_email = body.paypal_email
        if body.stripe_account_id is not None and body.stripe_account_id != profile.stripe_account_id:
            profile.stripe_account_id = body.stripe_account_id
            profile.onboarding_status = "pending"
        if body.payout_method == "paypal" and body.paypal_email:
            profile.onboarding_status = "completed"
        await self.db.commit()
        return profile

    def _check_terms(self, accepts_money, accepts_credits, price_cents, credit_price) -> None:
        settings = get_settings()
        err = validate_listing_terms(
            accepts_money, accepts_credits, price_cents, credit_price,
            min_price_cents=settings.min_listing_price_cents,
            min_credit_price=settings.min_listing_credit_price,
        )
        if err:
            raise BusinessRuleError(err["message"], err["error_code"])

    async def create_listing(self, user: User, body: ListingCreate) -> MarketplaceListing:
        prompt = await self.db.get(Prompt, body.prompt_id)
        if prompt is None:
            raise ResourceNotFoundError("Prompt", body.prompt_id)
        if prompt.user_id != user.id:
            raise PermissionDeniedError("You can only list your own prompts")
        existing = await self.db.execute(
            select(MarketplaceListing.id).where(MarketplaceListing.prompt_id == prompt.id),
        )
        if existing.scalar_one_or_none() is not None:
            raise BusinessRuleError("Prompt is already listed", "ALREADY_LISTED")
        self._check_terms(
            body.accepts_money, body.accepts_credits, body.price_cents, body.credit_price,
        )

        listing = MarketplaceListing(
            prompt_id=prompt.id,
            seller_id=user.id,
            title=body.title,
            description=body.description,
            price_cents=body.price_cents if body.accepts_money else None,
            credit_price=body.credit_price if body.accepts_credits else None,
            accepts_money=body.accepts_money,
            accepts_credits=body.accepts_credits,
            preview_percentage=body.preview_percentage,
            status="active" if body.publish else "draft",
            sales_count=0,
        )
        self.db.add(listing)
        await self.db.commit()
        logger.info(f"Listing created for prompt {prompt.id}", extra={"user_id": user.id})
        return listing

    async def list_active(self, limit: int = 20, offset: int = 0) -> list[MarketplaceListing]:
        result = await self.db.execute(
            select(MarketplaceListing)
            .where(MarketplaceListing.status == "active")
            .order_by(MarketplaceListing.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        return list(result.scalars().all())

    async def get_or_404(self, listing_id: uuid.UUID) -> MarketplaceListing:
        listing = await self.db.get(MarketplaceListing, listing_id)
        if listing is None:
            raise ResourceNotFoundError("Listing", str(listing_id))
        return listing

    async def preview(self, listing_id: uuid.UUID) -> dict:
        listing = await self.get_or_404(listing_id)
        return listing_preview(listing.prompt.prompt_content, listing.preview_percentage)

    async def update_listing(
        self, user: User, listing_id: uuid.UUID, body: ListingUpdate,
    ) -> MarketplaceListing:
        listing = await self.get_or_404(listing_id)
        if listing.seller_id != user.id and not user.is_super_admin:
            raise PermissionDeniedError("Only the seller can update this listing")
        for key, value in body.model_dump(exclude_unset=True).items():
            setattr(listing, key, value)
        self._check_terms(
            listing.accepts_money, listing.accepts_credits,
            listing.price_cents, listing.credit_price,
        )
        await self.db.commit()
        return listing
