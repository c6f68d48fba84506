"""Dispute schemas — description length and message whitespace validation.

Invariants:
    - description is stripped before the 20-character minimum is checked
    - message must contain non-whitespace text
    - refund amounts cannot be negative
"""

from uuid import uuid4

import pytest
from pydantic import ValidationError

from app.schemas.dispute import DisputeCreate, DisputeMessageCreate, DisputeResolve


# --- DisputeCreate ------------------------------------------------------------

def test_dispute_create_strips_description():
    dispute = DisputeCreate(
        order_id=uuid4(), reason="quality_issue",
        description="   The prompt output is nothing like the preview.   ",
    )
    assert dispute.description == "The prompt output is nothing like the preview."


def test_dispute_create_rejects_short_description_after_strip():
    with pytest.raises(ValidationError):
        DisputeCreate(order_id=uuid4(), reason="other", description="  too short   " + " " * 20)


def test_dispute_create_rejects_unknown_reason():
    with pytest.raises(ValidationError):
        DisputeCreate(
            order_id=uuid4(), reason="changed_my_mind",
            description="I no longer want this prompt at all.",
        )


# --- DisputeMessageCreate -----------------------------------------------------

def test_message_is_stripped():
    assert DisputeMessageCreate(message="  hello  ").message == "hello"


def test_whitespace_message_rejected():
    with pytest.raises(ValidationError):
        DisputeMessageCreate(message="    ")


# --- DisputeResolve -----------------------------------------------------------

def test_resolve_rejects_negative_refund():
    with pytest.raises(ValidationError):
        DisputeResolve(resolution="Partial refund", refund_amount_cents=-1)


def test_resolve_allows_no_refund():
    resolve = DisputeResolve(resolution="Seller delivered as described")
    assert resolve.refund_amount_cents is None
    assert resolve.credit_refund_amount is None
