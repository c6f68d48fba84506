"""Marketplace Schemas — seller profiles, listings, orders and payout runs.

Invariants:
    - paypal_email required when payout_method is paypal
    - preview_percentage in 1..100
    - Price floors (100 cents / 100 credits) are checked in the service against settings
"""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator


class SellerProfileUpsert(BaseModel):
    payout_method: Literal["stripe", "paypal"] = "stripe"
    paypal_email: str | None = Field(None, max_length=255, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    stripe_account_id: str | None = Field(None, max_length=100)

    @model_validator(mode="after")
    def paypal_needs_email(self):
        if self.payout_method == "paypal" and not self.paypal_email:
            raise ValueError("paypal_email is required for paypal payouts")
        return self


class SellerProfileResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    stripe_account_id: str | None = None
    onboarding_status: str
    payout_method: str
    paypal_email: str | None = None
    total_sales: int
    total_revenue_cents: int
    commission_rate: int | None = None


class ListingCreate(BaseModel):
    prompt_id: str = Field(min_length=1, max_length=10)
    title: str = Field(min_length=1, max_length=200)
    description: str | None = Field(None, max_length=5000)
    price_cents: int | None = Field(None, ge=0)
    credit_price: int | None = Field(None, ge=0)
    accepts_money: bool = True
    accepts_credits: bool = False
    preview_percentage: int = Field(20, ge=1, le=100)
    publish: bool = False


class ListingUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, max_length=5000)
    price_cents: int | None = Field(None, ge=0)
    credit_price: int | None = Field(None, ge=0)
    accepts_money: bool | None = None
    accepts_credits: bool | None = None
    preview_percentage: int | None = Field(None, ge=1, le=100)
    status: Literal["draft", "active", "paused", "sold_out"] | None = None


class ListingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    prompt_id: str
    seller_id: UUID
    title: str
    description: str | None = None
    price_cents: int | None = None
    credit_price: int | None = None
    accepts_money: bool
    accepts_credits: bool
    preview_percentage: int
    status: str
    sales_count: int
    created_at: datetime


class ListingPreview(BaseModel):
    preview: str
    is_truncated: bool
    full_length: int


class OrderCreate(BaseModel):
    listing_id: UUID
    payment_method: Literal["stripe", "credits"]


class OrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    order_number: str
    buyer_id: UUID
    seller_id: UUID
    listing_id: UUID
    payment_method: str
    stripe_payment_intent_id: str | None = None
    amount_cents: int
    credit_amount: int
    platform_fee_cents: int
    seller_payout_cents: int
    status: str
    delivered_at: datetime | None = None
    created_at: datetime


class PayoutRunRequest(BaseModel):
    method: Literal["stripe", "paypal"] = "stripe"
    limit: int = Field(100, ge=1, le=1000)
