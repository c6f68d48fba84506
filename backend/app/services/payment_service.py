"""Payment Service — order completion, refunds and scheduled payouts over the transaction ledger.

Invariants:
    - Each public operation runs in one DB transaction (single commit, rollback on error)
    - process_order_completion is idempotent: a completed order returns success with no writes
    - Completion writes exactly one purchase row and one commission row per order
    - commission = floor(total * rate / 100); net = total - commission
    - A failed Stripe transfer never aborts completion: the purchase row stays
      pending with failure_reason set
    - Seller stats never go below zero on refund
    - A payout batch's final status is completed / partial / failed from its counts

Design Decisions:
    - PaymentResult dataclass over dicts: webhook and dispute callers branch on .success
    - Stripe is injected (StripeGateway or a test fake); None means "no Stripe calls"
    - Payout rows carry order_id NULL and list source ledger ids in metadata;
      source rows are stamped with payout_batch_id so they are never paid twice
"""

import logging
import uuid
from dataclasses import dataclass, field

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import BusinessRuleError, ResourceNotFoundError, StripeAPIError
from app.core.marketplace_rules import (
    batch_final_status, generate_batch_number, split_commission,
)
from app.db.base import utcnow
from app.models.ledger import PayoutBatch, TransactionLedger
from app.models.marketplace import MarketplaceListing, MarketplaceOrder, SellerProfile
from app.services.credit_service import CreditService
from app.services.platform_settings import commission_rate_for, min_payout_cents

logger = logging.getLogger(__name__)


@dataclass
class PaymentResult:
    success: bool
    order_id: str | None
    transaction_ids: list[str] = field(default_factory=list)
    error: str | None = None


def parse_uuid(value) -> uuid.UUID | None:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        return None


class PaymentService:
    def __init__(self, db: AsyncSession, stripe_gateway=None):
        self.db = db
        self.stripe = stripe_gateway

    async def _seller_profile(self, user_id: uuid.UUID) -> SellerProfile | None:
        result = await self.db.execute(
            select(SellerProfile).where(SellerProfile.user_id == user_id),
        )
        return result.scalar_one_or_none()

    # ─── Completion ─────────────────────────────────────────────

    async def process_order_completion(
        self, order_id, payment_intent_id: str | None = None,
    ) -> PaymentResult:
        """Settle a paid order: ledger rows, seller transfer, order and stats."""
        oid = parse_uuid(order_id)
        order = await self.db.get(MarketplaceOrder, oid) if oid else None
        if order is None:
            return PaymentResult(False, str(order_id), error="Order not found")
        if order.status == "completed":
            logger.info("Order already completed", extra={"order_id": order.id})
            return PaymentResult(True, str(order.id))

        profile = await self._seller_profile(order.seller_id)
        if profile is None:
            return PaymentResult(False, str(order.id), error="Seller profile not found")

        try:
            ids = await self._complete(order, profile, payment_intent_id)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
        logger.info("Order completed", extra={"order_id": order.id})
        return PaymentResult(True, str(order.id), ids)

    async def _complete(
        self, order: MarketplaceOrder, profile: SellerProfile, payment_intent_id: str | None,
    ) -> list[str]:
        now = utcnow()
        rate = await commission_rate_for(self.db, profile.commission_rate)
        total = order.amount_cents
        commission, net = split_commission(total, rate)
        intent_id = payment_intent_id or order.stripe_payment_intent_id

        purchase = TransactionLedger(
            order_id=order.id,
            transaction_type="purchase",
            status="completed",
            from_user_id=order.buyer_id,
            to_user_id=order.seller_id,
            amount_cents=total,
            commission_cents=commission,
            net_amount_cents=net,
            payment_method=order.payment_method,
            stripe_payment_intent_id=intent_id,
            description=f"Purchase {order.order_number}",
            extra_data={"commission_rate": rate},
            processed_at=now,
            completed_at=now,
        )
        fee = TransactionLedger(
            order_id=order.id,
            transaction_type="commission",
            status="completed",
            from_user_id=order.seller_id,
            to_user_id=None,
            amount_cents=commission,
            commission_cents=commission,
            net_amount_cents=commission,
            payment_method=order.payment_method,
            description=f"Platform commission ({rate}%) for {order.order_number}",
            extra_data={"commission_rate": rate},
            processed_at=now,
            completed_at=now,
        )

        if (
            self.stripe is not None
            and profile.stripe_account_id
            and order.payment_method == "stripe"
            and net > 0
        ):
            try:
                transfer = await self.stripe.create_transfer(
                    net,
                    profile.stripe_account_id,
                    order.order_number,
                    {"orderId": str(order.id), "sellerUserId": str(order.seller_id)},
                )
                purchase.stripe_transfer_id = transfer["id"]
            except StripeAPIError as e:
                logger.warning(
                    f"Seller transfer failed: {e.message}", extra={"order_id": order.id},
                )
                purchase.status = "pending"
                purchase.failure_reason = e.message
                purchase.completed_at = None

        self.db.add_all([purchase, fee])

        order.status = "completed"
        order.delivered_at = now
        order.platform_fee_cents = commission
        order.seller_payout_cents = net
        if intent_id:
            order.stripe_payment_intent_id = intent_id

        profile.total_sales += 1
        profile.total_revenue_cents += net
        listing = await self.db.get(MarketplaceListing, order.listing_id)
        if listing is not None:
            listing.sales_count += 1

        await self.db.flush()
        return [str(purchase.id), str(fee.id)]

    # ─── Refunds ────────────────────────────────────────────────

    async def process_refund(
        self,
        order_id,
        amount_cents: int | None = None,
        reason: str | None = None,
        *,
        credit_amount: int | None = None,
        issue_stripe_refund: bool = True,
    ) -> PaymentResult:
        """Refund an order to its buyer.

        issue_stripe_refund=False records a refund Stripe already performed
        (charge.refunded webhook).
        """
        oid = parse_uuid(order_id)
        order = await self.db.get(MarketplaceOrder, oid) if oid else None
        if order is None:
            raise ResourceNotFoundError("Order", str(order_id))
        if order.status == "refunded":
            raise BusinessRuleError("Order already refunded", "ALREADY_REFUNDED")
        if order.status not in ("completed", "disputed"):
            raise BusinessRuleError("Only completed orders can be refunded", "ORDER_NOT_REFUNDABLE")

        try:
            ids = await self._refund(
                order, amount_cents, reason, credit_amount, issue_stripe_refund,
            )
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
        logger.info("Order refunded", extra={"order_id": order.id})
        return PaymentResult(True, str(order.id), ids)

    async def _refund(
        self,
        order: MarketplaceOrder,
        amount_cents: int | None,
        reason: str | None,
        credit_amount: int | None,
        issue_stripe_refund: bool,
    ) -> list[str]:
        now = utcnow()
        profile = await self._seller_profile(order.seller_id)
        ids: list[str] = []
        revenue_back = 0

        if order.payment_method == "credits":
            await CreditService(self.db).add_credits(
                order.buyer_id,
                credit_amount if credit_amount is not None else order.credit_amount,
                "marketplace_refund",
                reason or f"Refund for {order.order_number}",
                reference_id=str(order.id),
                reference_type="order",
            )
        else:
            amount = amount_cents if amount_cents is not None else order.amount_cents
            refund_id = None
            if issue_stripe_refund and self.stripe is not None and order.stripe_payment_intent_id:
                refund = await self.stripe.create_refund(order.stripe_payment_intent_id, amount)
                refund_id = refund["id"]
            row = TransactionLedger(
                order_id=order.id,
                transaction_type="refund",
                status="completed",
                from_user_id=order.seller_id,
                to_user_id=order.buyer_id,
                amount_cents=amount,
                commission_cents=0,
                net_amount_cents=amount,
                payment_method=order.payment_method,
                stripe_payment_intent_id=order.stripe_payment_intent_id,
                description=reason or f"Refund for {order.order_number}",
                extra_data={"stripe_refund_id": refund_id, "reason": reason},
                processed_at=now,
                completed_at=now,
            )
            self.db.add(row)
            await self.db.flush()
            ids.append(str(row.id))
            revenue_back = min(amount, order.seller_payout_cents)

        order.status = "refunded"
        if profile is not None:
            profile.total_sales = max(0, profile.total_sales - 1)
            profile.total_revenue_cents = max(0, profile.total_revenue_cents - revenue_back)
        await self.db.flush()
        return ids

    # ─── Payouts ────────────────────────────────────────────────

    async def _eligible_sellers(self, method: str, limit: int) -> list[tuple]:
        minimum = await min_payout_cents(self.db)
        result = await self.db.execute(
            select(TransactionLedger, SellerProfile)
            .join(SellerProfile, SellerProfile.user_id == TransactionLedger.to_user_id)
            .where(TransactionLedger.transaction_type == "purchase")
            .where(TransactionLedger.status == "completed")
            .where(TransactionLedger.payout_batch_id.is_(None))
            .where(SellerProfile.payout_method == method)
            .where(SellerProfile.onboarding_status == "completed")
            .order_by(TransactionLedger.created_at)
        )
        grouped: dict[uuid.UUID, tuple[SellerProfile, list[TransactionLedger]]] = {}
        for row, profile in result.all():
            grouped.setdefault(profile.user_id, (profile, []))[1].append(row)
        eligible = [
            (profile, rows) for profile, rows in grouped.values()
            if sum(r.net_amount_cents for r in rows) >= minimum
        ]
        return eligible[:limit]

    async def process_scheduled_payouts(self, method: str = "stripe", limit: int = 100) -> dict:
        """Pay out every eligible seller in one batch."""
        eligible = await self._eligible_sellers(method, limit)
        if not eligible:
            return {"batch": None, "message": "No eligible payouts"}

        batch = PayoutBatch(
            batch_number=generate_batch_number(method),
            payout_method=method,
            status="processing",
            total_amount_cents=sum(
                r.net_amount_cents for _, rows in eligible for r in rows
            ),
            total_payouts=len(eligible),
            successful_payouts=0,
            failed_payouts=0,
            error_log=[],
        )
        self.db.add(batch)
        await self.db.flush()

        errors: list[dict] = []
        successful = 0
        try:
            for profile, rows in eligible:
                if await self._pay_seller(batch, profile, rows, method, errors):
                    successful += 1
            batch.successful_payouts = successful
            batch.failed_payouts = len(errors)
            batch.error_log = errors
            batch.status = batch_final_status(successful, len(errors))
            batch.completed_at = utcnow()
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(
            f"Payout batch {batch.status}: {successful} ok, {len(errors)} failed",
            extra={"batch_number": batch.batch_number},
        )
        return {
            "batch": {
                "id": str(batch.id),
                "batch_number": batch.batch_number,
                "payout_method": method,
                "status": batch.status,
                "total_amount_cents": batch.total_amount_cents,
                "total_payouts": batch.total_payouts,
                "successful_payouts": batch.successful_payouts,
                "failed_payouts": batch.failed_payouts,
                "error_log": batch.error_log,
            },
        }

    async def _pay_seller(
        self,
        batch: PayoutBatch,
        profile: SellerProfile,
        rows: list[TransactionLedger],
        method: str,
        errors: list[dict],
    ) -> bool:
        amount = sum(r.net_amount_cents for r in rows)
        payout_row = TransactionLedger(
            order_id=None,
            transaction_type="payout",
            status="processing",
            from_user_id=None,
            to_user_id=profile.user_id,
            amount_cents=amount,
            commission_cents=0,
            net_amount_cents=amount,
            payment_method=method,
            description=f"Payout {batch.batch_number}",
            extra_data={
                "batch_id": str(batch.id),
                "source_transaction_ids": [str(r.id) for r in rows],
            },
            processed_at=utcnow(),
        )
        if method == "stripe":
            if self.stripe is None or not profile.stripe_account_id:
                errors.append({
                    "seller_id": str(profile.user_id),
                    "error": "No connected Stripe account",
                })
                return False
            try:
                payout = await self.stripe.create_payout(
                    amount,
                    profile.stripe_account_id,
                    {"batchId": str(batch.id), "sellerUserId": str(profile.user_id)},
                )
            except StripeAPIError as e:
                errors.append({"seller_id": str(profile.user_id), "error": e.message})
                return False
            payout_row.stripe_payout_id = payout["id"]

        self.db.add(payout_row)
        for row in rows:
            row.payout_batch_id = batch.id
        await self.db.flush()
        return True
