"""Stripe webhook route — signature checks and event handling.

Tests cover:
    - Missing / invalid signatures are rejected with 400
    - payment_intent.succeeded completes the order (and re-delivery is harmless)
    - payment_intent.payment_failed marks pending orders failed
    - transfer.created/failed, payout.paid/failed and account.updated state updates
    - charge.refunded records one refund without calling Stripe again
    - Processing errors still answer 200 with an error field
    - Unknown event types are acknowledged
    - Real HMAC-signed payloads pass through StripeGateway as plain dicts
"""

import hashlib
import hmac
import json
import time

import pytest
import stripe
from sqlalchemy import select

from app.api.dependencies import get_stripe_gateway
from app.infrastructure.stripe_gateway import StripeGateway
from app.main import app
from app.models.ledger import TransactionLedger
from app.models.marketplace import SellerProfile
from app.services.payment_service import PaymentService
from tests.services.mock_clients import VALID_SIGNATURE


def _event(event_type: str, obj: dict) -> dict:
    return {"id": "evt_test", "type": event_type, "data": {"object": obj}}


async def _send(client, event: dict, signature: str = VALID_SIGNATURE):
    return await client.post(
        "/api/webhooks/stripe",
        content=json.dumps(event),
        headers={"stripe-signature": signature, "content-type": "application/json"},
    )


async def _ledger(test_db, **filters) -> list[TransactionLedger]:
    query = select(TransactionLedger).execution_options(populate_existing=True)
    for key, value in filters.items():
        query = query.where(getattr(TransactionLedger, key) == value)
    return list((await test_db.execute(query)).scalars().all())


# ─── Signature ───────────────────────────────────────────────────

async def test_missing_signature(client):
    response = await client.post("/api/webhooks/stripe", content=b"{}")
    assert response.status_code == 400
    assert response.json() == {"error": "No signature"}


async def test_invalid_signature(client):
    event = _event("payment_intent.succeeded", {"id": "pi_x", "metadata": {}})
    response = await _send(client, event, signature="t=1,v1=forged")
    assert response.status_code == 400
    assert response.json() == {"error": "Webhook signature verification failed"}


# ─── Payment intents ─────────────────────────────────────────────

async def test_payment_succeeded_completes_order(client, test_db, pending_order, stripe_gateway):
    event = _event("payment_intent.succeeded", {
        "id": "pi_existing", "metadata": {"orderId": str(pending_order.id)},
    })
    response = await _send(client, event)
    assert response.status_code == 200
    assert response.json() == {"received": True}

    await test_db.refresh(pending_order)
    assert pending_order.status == "completed"
    assert len(await _ledger(test_db, order_id=pending_order.id)) == 2

    redelivered = await _send(client, event)
    assert redelivered.json() == {"received": True}
    assert len(await _ledger(test_db, order_id=pending_order.id)) == 2
    assert len(stripe_gateway.of_kind("transfer")) == 1


async def test_payment_succeeded_without_order_id(client):
    event = _event("payment_intent.succeeded", {"id": "pi_orphan", "metadata": {}})
    response = await _send(client, event)
    assert response.json() == {"received": True}


async def test_payment_failed_marks_order(client, test_db, pending_order):
    event = _event("payment_intent.payment_failed", {
        "id": "pi_existing", "metadata": {"orderId": str(pending_order.id)},
    })
    await _send(client, event)
    await test_db.refresh(pending_order)
    assert pending_order.status == "failed"


# ─── Transfers / payouts / accounts ──────────────────────────────

async def test_transfer_created_marks_purchase_processing(
    client, test_db, pending_order, stripe_gateway,
):
    await PaymentService(test_db, stripe_gateway).process_order_completion(pending_order.id)
    event = _event("transfer.created", {
        "id": "tr_live", "metadata": {"orderId": str(pending_order.id)},
    })
    await _send(client, event)

    purchase = (await _ledger(
        test_db, order_id=pending_order.id, transaction_type="purchase",
    ))[0]
    assert purchase.status == "processing"
    assert purchase.stripe_transfer_id == "tr_live"


async def test_transfer_failed_marks_row_failed(client, test_db, seller):
    test_db.add(TransactionLedger(
        transaction_type="purchase", status="processing", to_user_id=seller.id,
        amount_cents=1000, net_amount_cents=850, payment_method="stripe",
        stripe_transfer_id="tr_bad", extra_data={},
    ))
    await test_db.commit()

    await _send(client, _event("transfer.failed", {"id": "tr_bad"}))

    row = (await _ledger(test_db, stripe_transfer_id="tr_bad"))[0]
    assert row.status == "failed"
    assert row.failure_reason == "Transfer failed"


async def test_payout_paid_completes_payout_row(client, test_db, seller):
    test_db.add(TransactionLedger(
        transaction_type="payout", status="processing", to_user_id=seller.id,
        amount_cents=850, net_amount_cents=850, payment_method="stripe",
        stripe_payout_id="po_live", extra_data={},
    ))
    await test_db.commit()

    await _send(client, _event("payout.paid", {"id": "po_live"}))

    row = (await _ledger(test_db, stripe_payout_id="po_live"))[0]
    assert row.status == "completed"
    assert row.completed_at is not None


async def test_payout_failed_records_reason(client, test_db, seller):
    test_db.add(TransactionLedger(
        transaction_type="payout", status="processing", to_user_id=seller.id,
        amount_cents=850, net_amount_cents=850, payment_method="stripe",
        stripe_payout_id="po_bad", extra_data={},
    ))
    await test_db.commit()

    await _send(client, _event("payout.failed", {
        "id": "po_bad", "failure_message": "Bank account closed",
    }))

    row = (await _ledger(test_db, stripe_payout_id="po_bad"))[0]
    assert row.status == "failed"
    assert row.failure_reason == "Bank account closed"


async def test_account_updated_sets_onboarding(client, test_db, seller):
    await _send(client, _event("account.updated", {
        "id": "acct_seller", "charges_enabled": False,
        "payouts_enabled": False, "details_submitted": True,
    }))
    profile = (await test_db.execute(
        select(SellerProfile)
        .where(SellerProfile.user_id == seller.id)
        .execution_options(populate_existing=True)
    )).scalar_one()
    assert profile.onboarding_status == "pending"


# ─── Refunds ─────────────────────────────────────────────────────

async def test_charge_refunded_recorded_once(client, test_db, pending_order, stripe_gateway):
    await PaymentService(test_db, stripe_gateway).process_order_completion(pending_order.id)
    event = _event("charge.refunded", {
        "id": "ch_1", "refunded": True, "amount_refunded": 1000,
        "metadata": {"orderId": str(pending_order.id)},
    })

    assert (await _send(client, event)).json() == {"received": True}
    assert (await _send(client, event)).json() == {"received": True}

    refunds = await _ledger(test_db, order_id=pending_order.id, transaction_type="refund")
    assert len(refunds) == 1
    assert refunds[0].amount_cents == 1000
    assert stripe_gateway.of_kind("refund") == []
    await test_db.refresh(pending_order)
    assert pending_order.status == "refunded"


async def test_processing_error_still_acknowledged(client, pending_order):
    # refunding an order that was never paid raises inside the handler
    event = _event("charge.refunded", {
        "id": "ch_2", "refunded": True, "amount_refunded": 1000,
        "metadata": {"orderId": str(pending_order.id)},
    })
    response = await _send(client, event)
    assert response.status_code == 200
    assert response.json() == {"received": True, "error": "Processing failed"}


async def test_unhandled_event_acknowledged(client):
    response = await _send(client, _event("customer.created", {"id": "cus_1"}))
    assert response.json() == {"received": True}


# ─── Real signature verification ─────────────────────────────────

WEBHOOK_SECRET = "whsec_test_secret"


def _signed(event: dict, secret: str = WEBHOOK_SECRET) -> tuple[bytes, str]:
    payload = json.dumps(event)
    timestamp = int(time.time())
    digest = hmac.new(
        secret.encode(), f"{timestamp}.{payload}".encode(), hashlib.sha256,
    ).hexdigest()
    return payload.encode(), f"t={timestamp},v1={digest}"


def test_gateway_returns_plain_dict_event():
    event = _event("charge.refunded", {"id": "ch_9", "metadata": {"orderId": "abc"}})
    payload, header = _signed(event)

    parsed = StripeGateway("sk_test", WEBHOOK_SECRET).construct_event(payload, header)

    assert type(parsed) is dict
    assert parsed["data"]["object"].get("metadata") == {"orderId": "abc"}


def test_gateway_rejects_wrong_secret():
    payload, header = _signed(_event("charge.refunded", {"id": "ch_9"}), secret="whsec_other")
    with pytest.raises(stripe.SignatureVerificationError):
        StripeGateway("sk_test", WEBHOOK_SECRET).construct_event(payload, header)


async def test_signed_events_processed_through_real_gateway(
    client, test_db, pending_order, seller, stripe_gateway,
):
    await PaymentService(test_db, stripe_gateway).process_order_completion(pending_order.id)
    app.dependency_overrides[get_stripe_gateway] = lambda: StripeGateway("", WEBHOOK_SECRET)

    for event in (
        _event("charge.refunded", {
            "id": "ch_real", "refunded": True, "amount_refunded": 1000,
            "metadata": {"orderId": str(pending_order.id)},
        }),
        _event("account.updated", {
            "id": "acct_seller", "charges_enabled": False,
            "payouts_enabled": False, "details_submitted": True,
        }),
    ):
        payload, header = _signed(event)
        response = await client.post(
            "/api/webhooks/stripe",
            content=payload,
            headers={"stripe-signature": header, "content-type": "application/json"},
        )
        assert response.json() == {"received": True}

    refunds = await _ledger(test_db, order_id=pending_order.id, transaction_type="refund")
    assert [r.amount_cents for r in refunds] == [1000]
    profile = (await test_db.execute(
        select(SellerProfile)
        .where(SellerProfile.user_id == seller.id)
        .execution_options(populate_existing=True)
    )).scalar_one()
    assert profile.onboarding_status == "pending"
