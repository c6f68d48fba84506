"""Dispute Service — buyer disputes, message threads and admin resolution.

Invariants:
    - Only the buyer of a completed order may open a dispute; one dispute per order
    - Closed or resolved disputes accept no messages
    - First respondent message moves open -> in_progress
    - Only the initiator closes; either party escalates an unresolved dispute
    - Only super admins resolve; a refund amount triggers PaymentService.process_refund

Design Decisions:
    - Parties see 404 for disputes they are not part of, like other owner-scoped rows
"""

import logging
import uuid

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.domain_types import DisputeStatus
from app.core.errors import (
    BusinessRuleError, ConflictError, PermissionDeniedError, ResourceNotFoundError,
)
from app.db.base import utcnow
from app.models.dispute import DisputeMessage, MarketplaceDispute
from app.models.marketplace import MarketplaceOrder
from app.models.user import User
from app.schemas.dispute import DisputeCreate, DisputeResolve
from app.services.payment_service import PaymentService

logger = logging.getLogger(__name__)

DISPUTE_STATUSES = tuple(s.value for s in DisputeStatus)
_FINISHED = (DisputeStatus.RESOLVED.value, DisputeStatus.CLOSED.value)


class DisputeService:
    def __init__(self, db: AsyncSession, payments: PaymentService | None = None):
        self.db = db
        self.payments = payments or PaymentService(db)

    async def open(self, user: User, body: DisputeCreate) -> MarketplaceDispute:
        order = await self.db.get(MarketplaceOrder, body.order_id)
        if order is None:
            raise ResourceNotFoundError("Order", str(body.order_id))
        if order.buyer_id != user.id:
            raise PermissionDeniedError("Only the buyer can open a dispute")
        if order.status != "completed":
            raise BusinessRuleError(
                "Disputes can only be opened on completed orders", "ORDER_NOT_COMPLETED",
            )
        existing = await self.db.execute(
            select(MarketplaceDispute.id).where(MarketplaceDispute.order_id == order.id),
        )
        if existing.scalar_one_or_none() is not None:
            raise ConflictError("A dispute already exists for this order")

        dispute = MarketplaceDispute(
            order_id=order.id,
            initiated_by="buyer",
            initiator_id=user.id,
            respondent_id=order.seller_id,
            status="open",
            reason=body.reason,
            description=body.description,
        )
        self.db.add(dispute)
        await self.db.commit()
        await self.db.refresh(dispute)
        logger.info("Dispute opened", extra={"order_id": order.id, "user_id": user.id})
        return dispute

    async def list_for_user(self, user: User) -> list[MarketplaceDispute]:
        result = await self.db.execute(
            select(MarketplaceDispute)
            .where(or_(
                MarketplaceDispute.initiator_id == user.id,
                MarketplaceDispute.respondent_id == user.id,
            ))
            .order_by(MarketplaceDispute.created_at.desc())
        )
        return list(result.scalars().all())

    async def _get(self, dispute_id: uuid.UUID) -> MarketplaceDispute:
        dispute = await self.db.get(MarketplaceDispute, dispute_id)
        if dispute is None:
            raise ResourceNotFoundError("Dispute", str(dispute_id))
        return dispute

    async def get_for_party(self, user: User, dispute_id: uuid.UUID) -> MarketplaceDispute:
        dispute = await self._get(dispute_id)
        if user.is_super_admin or user.id in (dispute.initiator_id, dispute.respondent_id):
            return dispute
        raise ResourceNotFoundError("Dispute", str(dispute_id))

    async def add_message(
        self, user: User, dispute_id: uuid.UUID, text: str,
    ) -> DisputeMessage:
        dispute = await self.get_for_party(user, dispute_id)
        if dispute.status in _FINISHED:
            raise BusinessRuleError(
                "Cannot add messages to a closed dispute", "DISPUTE_CLOSED",
            )
        message = DisputeMessage(
            dispute_id=dispute.id,
            sender_id=user.id,
            message=text,
            is_admin_message=user.is_super_admin,
        )
        self.db.add(message)
        if user.id == dispute.respondent_id and dispute.status == "open":
            dispute.status = "in_progress"
        await self.db.commit()
        return message

    async def close(self, user: User, dispute_id: uuid.UUID) -> MarketplaceDispute:
        dispute = await self.get_for_party(user, dispute_id)
        if dispute.initiator_id != user.id:
            raise PermissionDeniedError("Only the initiator can close a dispute")
        if dispute.status in _FINISHED:
            raise BusinessRuleError("Dispute is already finished", "DISPUTE_CLOSED")
        dispute.status = "closed"
        dispute.resolved_at = utcnow()
        await self.db.commit()
        return dispute

    async def escalate(self, user: User, dispute_id: uuid.UUID) -> MarketplaceDispute:
        dispute = await self.get_for_party(user, dispute_id)
        if user.id not in (dispute.initiator_id, dispute.respondent_id):
            raise PermissionDeniedError("Only a party can escalate a dispute")
        if dispute.status in _FINISHED:
            raise BusinessRuleError("Dispute is already finished", "DISPUTE_CLOSED")
        dispute.status = "escalated"
        dispute.escalated_at = utcnow()
        await self.db.commit()
        return dispute

    async def resolve(
        self, admin: User, dispute_id: uuid.UUID, body: DisputeResolve,
    ) -> MarketplaceDispute:
        if not admin.is_super_admin:
            raise PermissionDeniedError("Only admins can resolve disputes")
        dispute = await self._get(dispute_id)
        if dispute.status in _FINISHED:
            raise BusinessRuleError("Dispute is already finished", "DISPUTE_CLOSED")

        if body.refund_amount_cents or body.credit_refund_amount:
            await self.payments.process_refund(
                dispute.order_id,
                body.refund_amount_cents,
                body.resolution,
                credit_amount=body.credit_refund_amount,
            )
        dispute.status = "resolved"
        dispute.resolution = body.resolution
        dispute.resolved_by = admin.id
        dispute.resolved_at = utcnow()
        dispute.refund_amount_cents = body.refund_amount_cents
        dispute.credit_refund_amount = body.credit_refund_amount
        await self.db.commit()
        logger.info("Dispute resolved", extra={"order_id": dispute.order_id, "user_id": admin.id})
        return dispute

    async def list_all(self, status: str | None = None) -> list[MarketplaceDispute]:
        query = select(MarketplaceDispute).order_by(MarketplaceDispute.created_at.desc())
        if status:
            query = query.where(MarketplaceDispute.status == status)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def stats(self) -> dict:
        result = await self.db.execute(
            select(MarketplaceDispute.status, func.count())
            .group_by(MarketplaceDispute.status)
        )
        counts = {status: 0 for status in DISPUTE_STATUSES}
        for status, count in result.all():
            counts[status] = count
        return {**counts, "total": sum(counts.values())}
