"""Ledger ORM — append-only monetary movements, payout batches, platform settings.

Invariants:
    - purchase / commission / refund rows belong to exactly one order (order_id set)
    - payout rows have order_id NULL and list their source rows in metadata
    - purchase rows already paid out carry payout_batch_id
    - net_amount_cents = amount_cents - commission_cents on purchase rows
    - Rows are never deleted; status and Stripe ids are the only mutable fields

Design Decisions:
    - Python attribute extra_data maps to column "metadata" (name reserved by Declarative)
    - JSON metadata is replaced, never mutated in place (no MutableDict tracking)
    - PlatformSetting is a plain key/value table: admin-tunable without redeploys
"""

import uuid
from datetime import datetime

from sqlalchemy import String, Text, Integer, DateTime, JSON, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from app.db.base import Base, utcnow


class TransactionLedger(Base):
    __tablename__ = "transaction_ledger"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    order_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("marketplace_orders.id"), nullable=True, index=True,
    )
    transaction_type: Mapped[str] = mapped_column(String(20), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    from_user_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id"), nullable=True,
    )
    to_user_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id"), nullable=True,
    )
    amount_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    commission_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    net_amount_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    payment_method: Mapped[str | None] = mapped_column(String(20), nullable=True)
    stripe_payment_intent_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    stripe_transfer_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    stripe_payout_id: Mapped[str | None] = mapped_column(
        String(100), nullable=True, index=True,
    )
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    payout_batch_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("payout_batches.id"), nullable=True, index=True,
    )
    failure_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    extra_data: Mapped[dict] = mapped_column(
        "metadata", JSON, nullable=False, default=dict,
    )
    processed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )


class PayoutBatch(Base):
    __tablename__ = "payout_batches"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    batch_number: Mapped[str] = mapped_column(String(60), unique=True, nullable=False)
    payout_method: Mapped[str] = mapped_column(String(20), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="processing")
    total_amount_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_payouts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    successful_payouts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    failed_payouts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    error_log: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )


class PlatformSetting(Base):
    __tablename__ = "platform_settings"

    key: Mapped[str] = mapped_column(String(100), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow,
    )
