"""Dispute Schemas — open, message, resolve.

Invariants:
    - DisputeCreate.description: stripped, at least 20 characters
    - reason limited to item_not_as_described / quality_issue / not_received / other
    - DisputeResolve refund amounts are non-negative
"""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

MIN_DESCRIPTION_CHARS = 20


class DisputeCreate(BaseModel):
    """Buyer opens a dispute on a completed order."""
    order_id: UUID
    reason: Literal["item_not_as_described", "quality_issue", "not_received", "other"]
    description: str = Field(max_length=5000)

    @field_validator("description")
    @classmethod
    def description_long_enough(cls, v: str) -> str:
        v = v.strip()
        if len(v) < MIN_DESCRIPTION_CHARS:
            raise ValueError(
                f"description must be at least {MIN_DESCRIPTION_CHARS} characters",
            )
        return v


class DisputeMessageCreate(BaseModel):
    message: str = Field(min_length=1, max_length=5000)

    @field_validator("message")
    @classmethod
    def strip_message(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("message cannot be empty or whitespace")
        return v


class DisputeResolve(BaseModel):
    resolution: str = Field(min_length=1, max_length=5000)
    refund_amount_cents: int | None = Field(None, ge=0)
    credit_refund_amount: int | None = Field(None, ge=0)


class DisputeMessageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    sender_id: UUID
    message: str
    is_admin_message: bool
    created_at: datetime


class DisputeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    order_id: UUID
    initiated_by: str
    initiator_id: UUID
    respondent_id: UUID
    status: str
    reason: str
    description: str
    resolution: str | None = None
    refund_amount_cents: int | None = None
    credit_refund_amount: int | None = None
    resolved_by: UUID | None = None
    escalated_at: datetime | None = None
    resolved_at: datetime | None = None
    created_at: datetime


class DisputeDetailResponse(DisputeResponse):
    messages: list[DisputeMessageResponse] = []
