"""Stripe Webhook Handler — applies verified Stripe events to orders, ledger and sellers.

Invariants:
    - One handler per event type, selected from an explicit dict (no getattr magic)
    - Each handler performs one conditional update and commits it
    - Re-delivered events are harmless: completion and refunds check existing state first
    - Unknown event types are logged and ignored

Design Decisions:
    - Signature verification stays in the route: this class only sees trusted events
    - Events arrive as plain dicts parsed from the verified payload
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.marketplace_rules import onboarding_status_from_account
from app.db.base import utcnow
from app.models.ledger import TransactionLedger
from app.models.marketplace import MarketplaceOrder, SellerProfile
from app.services.payment_service import PaymentService, parse_uuid

logger = logging.getLogger(__name__)


def _metadata(obj) -> dict:
    return dict(obj.get("metadata") or {})


class StripeWebhookHandler:
    """Dispatches Stripe events to ledger/order updates."""

    def __init__(self, db: AsyncSession, payments: PaymentService):
        self.db = db
        self.payments = payments
        self._handlers = {
            "payment_intent.succeeded": self._payment_succeeded,
            "payment_intent.payment_failed": self._payment_failed,
            "transfer.created": self._transfer_created,
            "transfer.failed": self._transfer_failed,
            "payout.paid": self._payout_paid,
            "payout.failed": self._payout_failed,
            "charge.refunded": self._charge_refunded,
            "account.updated": self._account_updated,
        }

    async def handle(self, event) -> None:
        event_type = event["type"]
        handler = self._handlers.get(event_type)
        if handler is None:
            logger.info(f"Unhandled Stripe event: {event_type}", extra={"event_type": event_type})
            return
        await handler(event["data"]["object"])

    async def _payment_succeeded(self, intent) -> None:
        order_id = _metadata(intent).get("orderId")
        if not order_id:
            logger.warning(
                "payment_intent.succeeded without orderId",
                extra={"event_type": "payment_intent.succeeded"},
            )
            return
        result = await self.payments.process_order_completion(order_id, intent["id"])
        if not result.success:
            logger.error(
                f"Order completion failed: {result.error}",
                extra={"order_id": order_id, "event_type": "payment_intent.succeeded"},
            )

    async def _payment_failed(self, intent) -> None:
        oid = parse_uuid(_metadata(intent).get("orderId"))
        if oid is None:
            return
        order = await self.db.get(MarketplaceOrder, oid)
        if order is not None and order.status == "pending":
            order.status = "failed"
            await self.db.commit()
            logger.info("Order payment failed", extra={"order_id": oid})

    async def _ledger_rows(self, *conditions) -> list[TransactionLedger]:
        result = await self.db.execute(select(TransactionLedger).where(*conditions))
        return list(result.scalars().all())

    async def _transfer_created(self, transfer) -> None:
        oid = parse_uuid(_metadata(transfer).get("orderId"))
        if oid is None:
            return
        now = utcnow()
        for row in await self._ledger_rows(
            TransactionLedger.order_id == oid,
            TransactionLedger.transaction_type == "purchase",
        ):
            row.stripe_transfer_id = transfer["id"]
            row.status = "processing"
            row.processed_at = now
        await self.db.commit()

    async def _transfer_failed(self, transfer) -> None:
        for row in await self._ledger_rows(
            TransactionLedger.stripe_transfer_id == transfer["id"],
        ):
            row.status = "failed"
            row.failure_reason = "Transfer failed"
        await self.db.commit()

    async def _payout_paid(self, payout) -> None:
        now = utcnow()
        for row in await self._ledger_rows(
            TransactionLedger.stripe_payout_id == payout["id"],
        ):
            row.status = "completed"
            row.completed_at = now
        await self.db.commit()

    async def _payout_failed(self, payout) -> None:
        reason = payout.get("failure_message") or "Payout failed"
        for row in await self._ledger_rows(
            TransactionLedger.stripe_payout_id == payout["id"],
        ):
            row.status = "failed"
            row.failure_reason = reason
        await self.db.commit()

    async def _charge_refunded(self, charge) -> None:
        order_id = _metadata(charge).get("orderId")
        if not order_id or not charge.get("refunded"):
            return
        oid = parse_uuid(order_id)
        if oid is None:
            return
        existing = await self._ledger_rows(
            TransactionLedger.order_id == oid,
            TransactionLedger.transaction_type == "refund",
        )
        if existing:
            logger.info("Refund already recorded", extra={"order_id": oid})
            return
        await self.payments.process_refund(
            oid,
            charge.get("amount_refunded"),
            "Refund processed via Stripe",
            issue_stripe_refund=False,
        )

    async def _account_updated(self, account) -> None:
        result = await self.db.execute(
            select(SellerProfile).where(SellerProfile.stripe_account_id == account["id"]),
        )
        profile = result.scalar_one_or_none()
        if profile is None:
            return
        profile.onboarding_status = onboarding_status_from_account(
            bool(account.get("charges_enabled")),
            bool(account.get("payouts_enabled")),
            bool(account.get("details_submitted")),
        )
        await self.db.commit()
