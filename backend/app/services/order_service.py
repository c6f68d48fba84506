"""Order Service — checkout with Stripe or credits, and order lookups.

Invariants:
    - Only active listings can be bought; never your own
    - Stripe orders start pending with a PaymentIntent carrying metadata.orderId;
      completion happens on the webhook
    - Credit orders complete immediately: buyer pays credit_price, seller earns
      credit_price minus commission, in one commit
    - Order details visible to buyer, seller and super admins only

Design Decisions:
    - Credit orders stay off the money ledger: credit_transactions is their ledger
"""

import logging
import uuid

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import (
    BusinessRuleError, PermissionDeniedError, ResourceNotFoundError, StripeAPIError,
)
from app.core.marketplace_rules import generate_order_number, split_commission
from app.db.base import utcnow
from app.models.marketplace import MarketplaceListing, MarketplaceOrder, SellerProfile
from app.models.user import User
from app.schemas.marketplace import OrderCreate
from app.services.credit_service import CreditService
from app.services.platform_settings import commission_rate_for

logger = logging.getLogger(__name__)


class OrderService:
    def __init__(self, db: AsyncSession, stripe_gateway=None):
        self.db = db
        self.stripe = stripe_gateway

    async def create_order(
        self, user: User, body: OrderCreate,
    ) -> tuple[MarketplaceOrder, str | None]:
        """Returns (order, client_secret); client_secret only for Stripe checkouts."""
        listing = await self.db.get(MarketplaceListing, body.listing_id)
        if listing is None:
            raise ResourceNotFoundError("Listing", str(body.listing_id))
        if listing.status != "active":
            raise BusinessRuleError("Listing is not available", "LISTING_UNAVAILABLE")
        if listing.seller_id == user.id:
            raise BusinessRuleError("Cannot purchase your own listing", "SELF_PURCHASE")

        if body.payment_method == "stripe":
            return await self._stripe_checkout(user, listing)
        return await self._credit_checkout(user, listing), None

    async def _stripe_checkout(
        self, user: User, listing: MarketplaceListing,
    ) -> tuple[MarketplaceOrder, str]:
        if not listing.accepts_money or not listing.price_cents:
            raise BusinessRuleError(
                "Listing does not accept money payments", "PAYMENT_METHOD_NOT_ACCEPTED",
            )
        if self.stripe is None:
            raise StripeAPIError("Stripe is not configured", "not_configured")
        order = MarketplaceOrder(
            order_number=generate_order_number(),
            buyer_id=user.id,
            seller_id=listing.seller_id,
            listing_id=listing.id,
            payment_method="stripe",
            amount_cents=listing.price_cents,
            credit_amount=0,
            status="pending",
        )
        self.db.add(order)
        await self.db.flush()
        try:
            intent = await self.stripe.create_payment_intent(
                listing.price_cents,
                {
                    "orderId": str(order.id),
                    "orderNumber": order.order_number,
                    "listingId": str(listing.id),
                },
            )
        except StripeAPIError:
            await self.db.rollback()
            raise
        order.stripe_payment_intent_id = intent["id"]
        await self.db.commit()
        logger.info("Stripe order created", extra={"order_id": order.id, "user_id": user.id})
        return order, intent["client_secret"]

    async def _credit_checkout(
        self, user: User, listing: MarketplaceListing,
    ) -> MarketplaceOrder:
        if not listing.accepts_credits or not listing.credit_price:
            raise BusinessRuleError(
                "Listing does not accept credits", "PAYMENT_METHOD_NOT_ACCEPTED",
            )
        profile = (await self.db.execute(
            select(SellerProfile).where(SellerProfile.user_id == listing.seller_id),
        )).scalar_one_or_none()
        price = listing.credit_price
        rate = await commission_rate_for(self.db, profile.commission_rate if profile else None)
        _, seller_share = split_commission(price, rate)
        now = utcnow()

        order = MarketplaceOrder(
            order_number=generate_order_number(),
            buyer_id=user.id,
            seller_id=listing.seller_id,
            listing_id=listing.id,
            payment_method="credits",
            amount_cents=0,
            credit_amount=price,
            status="completed",
            delivered_at=now,
        )
        self.db.add(order)
        await self.db.flush()

        credits = CreditService(self.db)
        try:
            await credits.spend_credits(
                user.id, price, "marketplace_purchase",
                f"Purchase {order.order_number}",
                reference_id=str(order.id), reference_type="order",
            )
        except BusinessRuleError:
            await self.db.rollback()
            raise
        await credits.add_credits(
            listing.seller_id, seller_share, "marketplace_sale",
            f"Sale {order.order_number} ({rate}% commission)",
            reference_id=str(order.id), reference_type="order",
        )
        listing.sales_count += 1
        if profile is not None:
            profile.total_sales += 1
        await self.db.commit()
        logger.info("Credit order completed", extra={"order_id": order.id, "user_id": user.id})
        return order

    async def list_for_user(self, user: User) -> dict:
        result = await self.db.execute(
            select(MarketplaceOrder)
            .where(or_(
                MarketplaceOrder.buyer_id == user.id,
                MarketplaceOrder.seller_id == user.id,
            ))
            .order_by(MarketplaceOrder.created_at.desc())
        )
        orders = list(result.scalars().all())
        return {
            "purchases": [o for o in orders if o.buyer_id == user.id],
            "sales": [o for o in orders if o.seller_id == user.id],
        }

    async def get_for_party(self, user: User, order_id: uuid.UUID) -> MarketplaceOrder:
        order = await self.db.get(MarketplaceOrder, order_id)
        if order is None:
            raise ResourceNotFoundError("Order", str(order_id))
        if user.id not in (order.buyer_id, order.seller_id) and not user.is_super_admin:
            raise PermissionDeniedError("Not a party to this order")
        return order
