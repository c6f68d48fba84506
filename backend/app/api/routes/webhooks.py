"""Stripe Webhook Route — signature verification, then dispatch to StripeWebhookHandler.

Invariants:
    - Missing stripe-signature header -> 400 {"error": "No signature"}
    - Bad payload or signature -> 400; nothing is processed
    - Verified events always answer 200 so Stripe stops retrying; processing
      failures are logged and reported as {"received": true, "error": ...}
"""

import logging

import stripe
from fastapi import APIRouter, Depends, Header, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import get_stripe_gateway
from app.infrastructure.database import get_db
from app.services.payment_service import PaymentService
from app.services.stripe_webhook import StripeWebhookHandler

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/webhooks", tags=["webhooks"])


@router.post("/stripe")
async def stripe_webhook(
    request: Request,
    stripe_signature: str | None = Header(None),
    db: AsyncSession = Depends(get_db),
    stripe_gateway=Depends(get_stripe_gateway),
):
    if not stripe_signature:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST, content={"error": "No signature"},
        )
    payload = await request.body()
    try:
        event = stripe_gateway.construct_event(payload, stripe_signature)
    except (ValueError, stripe.SignatureVerificationError) as e:
        logger.warning(f"Webhook signature verification failed: {e}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Webhook signature verification failed"},
        )

    handler = StripeWebhookHandler(db, PaymentService(db, stripe_gateway))
    try:
        await handler.handle(event)
    except Exception as e:
        await db.rollback()
        logger.error(
            f"Webhook processing failed: {e}",
            exc_info=True, extra={"event_type": event["type"]},
        )
        return {"received": True, "error": "Processing failed"}
    return {"received": True}
