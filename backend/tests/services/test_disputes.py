"""Dispute routes — opening, messaging, closing, escalation and admin resolution.

Tests cover:
    - Only the buyer of a completed order opens a dispute, once
    - Respondent's first message moves open -> in_progress; detail lists messages
    - Non-parties see 404
    - Initiator-only close; finished disputes reject messages
    - Super-admin resolution with a refund runs the refund flow
    - Admin queue filtering and stats
"""

from app.models.marketplace import MarketplaceOrder
from app.services.payment_service import PaymentService

DESCRIPTION = "The delivered prompt does not match the preview at all."


async def _completed(test_db, stripe_gateway, order: MarketplaceOrder) -> MarketplaceOrder:
    await PaymentService(test_db, stripe_gateway).process_order_completion(order.id)
    return order


async def _open(client, headers, order_id):
    return await client.post(
        "/api/marketplace/disputes",
        json={"order_id": str(order_id), "reason": "item_not_as_described", "description": DESCRIPTION},
        headers=headers,
    )


# ─── Opening ─────────────────────────────────────────────────────

async def test_buyer_opens_dispute(client, test_db, stripe_gateway, pending_order, user, seller, auth):
    order = await _completed(test_db, stripe_gateway, pending_order)
    response = await _open(client, auth(user), order.id)
    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "open"
    assert body["initiated_by"] == "buyer"
    assert body["respondent_id"] == str(seller.id)

    duplicate = await _open(client, auth(user), order.id)
    assert duplicate.status_code == 409


async def test_only_buyer_opens(client, test_db, stripe_gateway, pending_order, other_user, auth):
    order = await _completed(test_db, stripe_gateway, pending_order)
    response = await _open(client, auth(other_user), order.id)
    assert response.status_code == 403


async def test_pending_order_cannot_be_disputed(client, pending_order, user, auth):
    response = await _open(client, auth(user), pending_order.id)
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "ORDER_NOT_COMPLETED"


async def test_short_description_rejected(client, pending_order, user, auth):
    response = await client.post(
        "/api/marketplace/disputes",
        json={"order_id": str(pending_order.id), "reason": "other", "description": "bad"},
        headers=auth(user),
    )
    assert response.status_code == 400


# ─── Messages ────────────────────────────────────────────────────

async def test_respondent_message_moves_to_in_progress(
    client, test_db, stripe_gateway, pending_order, user, seller, other_user, auth,
):
    order = await _completed(test_db, stripe_gateway, pending_order)
    dispute = (await _open(client, auth(user), order.id)).json()
    url = f"/api/marketplace/disputes/{dispute['id']}"

    buyer_msg = await client.post(f"{url}/messages", json={"message": "Please refund."}, headers=auth(user))
    assert buyer_msg.status_code == 201
    assert (await client.get(url, headers=auth(user))).json()["status"] == "open"

    seller_msg = await client.post(f"{url}/messages", json={"message": " Looking into it. "}, headers=auth(seller))
    assert seller_msg.json()["message"] == "Looking into it."

    detail = (await client.get(url, headers=auth(seller))).json()
    assert detail["status"] == "in_progress"
    assert [m["message"] for m in detail["messages"]] == ["Please refund.", "Looking into it."]

    assert (await client.get(url, headers=auth(other_user))).status_code == 404


async def test_list_my_disputes(client, test_db, stripe_gateway, pending_order, user, seller, auth):
    order = await _completed(test_db, stripe_gateway, pending_order)
    dispute = (await _open(client, auth(user), order.id)).json()
    for party in (user, seller):
        items = (await client.get("/api/marketplace/disputes", headers=auth(party))).json()["items"]
        assert [d["id"] for d in items] == [dispute["id"]]


# ─── Close / escalate ────────────────────────────────────────────

async def test_only_initiator_closes(client, test_db, stripe_gateway, pending_order, user, seller, auth):
    order = await _completed(test_db, stripe_gateway, pending_order)
    dispute = (await _open(client, auth(user), order.id)).json()
    url = f"/api/marketplace/disputes/{dispute['id']}"

    assert (await client.put(f"{url}/close", headers=auth(seller))).status_code == 403

    closed = await client.put(f"{url}/close", headers=auth(user))
    assert closed.json()["status"] == "closed"
    assert closed.json()["resolved_at"] is not None

    late = await client.post(f"{url}/messages", json={"message": "hello?"}, headers=auth(seller))
    assert late.status_code == 400
    assert late.json()["error"]["code"] == "DISPUTE_CLOSED"


async def test_party_escalates(client, test_db, stripe_gateway, pending_order, user, seller, auth):
    order = await _completed(test_db, stripe_gateway, pending_order)
    dispute = (await _open(client, auth(user), order.id)).json()
    response = await client.put(
        f"/api/marketplace/disputes/{dispute['id']}/escalate", headers=auth(seller),
    )
    assert response.json()["status"] == "escalated"
    assert response.json()["escalated_at"] is not None


# ─── Resolution ──────────────────────────────────────────────────

async def test_resolve_requires_super_admin(client, test_db, stripe_gateway, pending_order, user, auth):
    order = await _completed(test_db, stripe_gateway, pending_order)
    dispute = (await _open(client, auth(user), order.id)).json()
    response = await client.put(
        f"/api/marketplace/disputes/{dispute['id']}/resolve",
        json={"resolution": "Refund"}, headers=auth(user),
    )
    assert response.status_code == 403


async def test_resolve_with_refund(
    client, test_db, stripe_gateway, pending_order, user, super_admin, auth,
):
    order = await _completed(test_db, stripe_gateway, pending_order)
    dispute = (await _open(client, auth(user), order.id)).json()

    response = await client.put(
        f"/api/marketplace/disputes/{dispute['id']}/resolve",
        json={"resolution": "Full refund granted", "refund_amount_cents": 1000},
        headers=auth(super_admin),
    )
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "resolved"
    assert body["resolved_by"] == str(super_admin.id)
    assert body["refund_amount_cents"] == 1000

    assert stripe_gateway.of_kind("refund") == [
        {"payment_intent": "pi_existing", "amount": 1000},
    ]
    await test_db.refresh(order)
    assert order.status == "refunded"


async def test_resolve_without_refund(client, test_db, stripe_gateway, pending_order, user, super_admin, auth):
    order = await _completed(test_db, stripe_gateway, pending_order)
    dispute = (await _open(client, auth(user), order.id)).json()
    response = await client.put(
        f"/api/marketplace/disputes/{dispute['id']}/resolve",
        json={"resolution": "Seller delivered as described"}, headers=auth(super_admin),
    )
    assert response.json()["status"] == "resolved"
    assert stripe_gateway.of_kind("refund") == []


# ─── Admin queue ─────────────────────────────────────────────────

async def test_admin_queue_and_stats(
    client, test_db, stripe_gateway, pending_order, user, seller, super_admin, auth,
):
    order = await _completed(test_db, stripe_gateway, pending_order)
    dispute = (await _open(client, auth(user), order.id)).json()
    await client.put(f"/api/marketplace/disputes/{dispute['id']}/escalate", headers=auth(user))

    escalated = await client.get(
        "/api/marketplace/admin/disputes", params={"status": "escalated"}, headers=auth(super_admin),
    )
    assert [d["id"] for d in escalated.json()["items"]] == [dispute["id"]]
    open_only = await client.get(
        "/api/marketplace/admin/disputes", params={"status": "open"}, headers=auth(super_admin),
    )
    assert open_only.json()["items"] == []

    stats = (await client.get("/api/marketplace/admin/disputes/stats", headers=auth(super_admin))).json()
    assert stats["escalated"] == 1
    assert stats["open"] == 0
    assert stats["total"] == 1

    denied = await client.get("/api/marketplace/admin/disputes/stats", headers=auth(seller))
    assert denied.status_code == 403
