"""Request schemas — cross-field rules on marketplace, tool and note payloads.

Invariants:
    - paypal payouts need a paypal_email
    - AspectRatioRequest accepts at most one resize target
    - Note colors are #rrggbb
"""

import pytest
from pydantic import ValidationError

from app.schemas.marketplace import ListingCreate, PayoutRunRequest, SellerProfileUpsert
from app.schemas.note import NoteCreate
from app.schemas.tools import AspectRatioRequest


# --- Marketplace --------------------------------------------------------------

def test_paypal_profile_requires_email():
    with pytest.raises(ValidationError):
        SellerProfileUpsert(payout_method="paypal")


def test_paypal_profile_with_email():
    profile = SellerProfileUpsert(payout_method="paypal", paypal_email="seller@example.com")
    assert profile.paypal_email == "seller@example.com"


def test_stripe_profile_defaults():
    assert SellerProfileUpsert().payout_method == "stripe"


def test_listing_preview_percentage_bounds():
    with pytest.raises(ValidationError):
        ListingCreate(prompt_id="PRMPT00001", title="Neon city", preview_percentage=0)


def test_payout_run_defaults():
    run = PayoutRunRequest()
    assert (run.method, run.limit) == ("stripe", 100)


# --- Tools --------------------------------------------------------------------

def test_aspect_ratio_single_target():
    req = AspectRatioRequest(width=1920, height=1080, target_width=1280)
    assert req.target_width == 1280


def test_aspect_ratio_rejects_two_targets():
    with pytest.raises(ValidationError):
        AspectRatioRequest(width=1920, height=1080, target_width=1280, megapixels=2)


def test_aspect_ratio_rejects_zero_dimension():
    with pytest.raises(ValidationError):
        AspectRatioRequest(width=0, height=1080)


# --- Notes --------------------------------------------------------------------

def test_note_defaults():
    note = NoteCreate(title="Ideas")
    assert note.folder == "Unsorted"
    assert note.type == "text"


def test_note_color_pattern():
    assert NoteCreate(title="Ideas", color="#A0b1C2").color == "#A0b1C2"
    with pytest.raises(ValidationError):
        NoteCreate(title="Ideas", color="red")
