"""Marketplace ORM — seller profiles, listings and orders.

Invariants:
    - One SellerProfile per user; total_sales / total_revenue_cents never negative
    - One MarketplaceListing per prompt (prompt_id unique)
    - order_number unique; amounts are integer cents, credit_amount integer credits
    - Order status transitions: pending -> completed -> refunded | disputed; pending -> failed

Design Decisions:
    - commission_rate nullable on SellerProfile: NULL means "platform default"
    - listing/prompt eager-loaded (selectin): order and listing views always need them
"""

import uuid
from datetime import datetime

from sqlalchemy import String, Text, Integer, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from app.db.base import Base, utcnow


class SellerProfile(Base):
    __tablename__ = "seller_profiles"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"),
        unique=True, nullable=False,
    )
    stripe_account_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    onboarding_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="not_started",
    )
    payout_method: Mapped[str] = mapped_column(String(20), nullable=False, default="stripe")
    paypal_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    total_sales: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_revenue_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    commission_rate: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )


class MarketplaceListing(Base):
    __tablename__ = "marketplace_listings"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    prompt_id: Mapped[str] = mapped_column(
        String(10), ForeignKey("prompts.id", ondelete="CASCADE"),
        unique=True, nullable=False,
    )
    seller_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False,
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    price_cents: Mapped[int | None] = mapped_column(Integer, nullable=True)
    credit_price: Mapped[int | None] = mapped_column(Integer, nullable=True)
    accepts_money: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    accepts_credits: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    preview_percentage: Mapped[int] = mapped_column(Integer, nullable=False, default=20)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="draft")
    sales_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow,
    )

    prompt: Mapped["Prompt"] = relationship("Prompt", lazy="selectin")


class MarketplaceOrder(Base):
    __tablename__ = "marketplace_orders"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    order_number: Mapped[str] = mapped_column(String(40), unique=True, nullable=False)
    buyer_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id"), nullable=False,
    )
    seller_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id"), nullable=False,
    )
    listing_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("marketplace_listings.id"), nullable=False,
    )
    payment_method: Mapped[str] = mapped_column(String(20), nullable=False)
    stripe_payment_intent_id: Mapped[str | None] = mapped_column(
        String(100), nullable=True, index=True,
    )
    amount_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    credit_amount: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    platform_fee_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    seller_payout_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    delivered_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow,
    )

    listing: Mapped["MarketplaceListing"] = relationship(
        "MarketplaceListing", lazy="selectin",
    )
