"""Stripe Gateway — async facade over the synchronous stripe SDK.

Invariants:
    - Every SDK call runs in a worker thread (asyncio.to_thread), never on the event loop
    - stripe.StripeError is mapped to StripeAPIError; signature problems are NOT mapped
      (the webhook route turns ValueError / SignatureVerificationError into 400)
    - Results are plain dicts with the fields services read (id, client_secret)
    - Webhook events are verified with WebhookSignature and parsed with json, so
      handlers get plain dicts whatever StripeObject looks like in the installed SDK

Design Decisions:
    - api_key passed per call instead of mutating the global stripe.api_key,
      so tests and multiple settings objects never leak into each other
    - Services depend on this class through a FastAPI dependency; tests inject a fake
"""

import asyncio
import json
import logging

import stripe

from app.core.errors import StripeAPIError

logger = logging.getLogger(__name__)


class StripeGateway:
    """Payment intents, transfers, payouts and refunds on one Stripe account."""

    def __init__(self, secret_key: str, webhook_secret: str = "", currency: str = "usd"):
        self.secret_key = secret_key
        self.webhook_secret = webhook_secret
        self.currency = currency

    def construct_event(self, payload: bytes, signature: str) -> dict:
        """Verify a webhook payload and return the event as plain JSON.

        Raises stripe.SignatureVerificationError on a bad signature and ValueError
        on a payload that is not UTF-8 JSON.
        """
        body = payload.decode("utf-8")
        stripe.WebhookSignature.verify_header(
            body, signature, self.webhook_secret, tolerance=stripe.Webhook.DEFAULT_TOLERANCE,
        )
        return json.loads(body)

    async def create_payment_intent(self, amount_cents: int, metadata: dict) -> dict:
        intent = await self._call(
            "payment_intent",
            stripe.PaymentIntent.create,
            amount=amount_cents,
            currency=self.currency,
            metadata=metadata,
            automatic_payment_methods={"enabled": True},
        )
        return {"id": intent["id"], "client_secret": intent["client_secret"]}

    async def create_transfer(
        self, amount_cents: int, destination: str, transfer_group: str, metadata: dict,
    ) -> dict:
        transfer = await self._call(
            "transfer",
            stripe.Transfer.create,
            amount=amount_cents,
            currency=self.currency,
            destination=destination,
            transfer_group=transfer_group,
            metadata=metadata,
        )
        return {"id": transfer["id"]}

    async def create_payout(
        self, amount_cents: int, connected_account: str, metadata: dict,
    ) -> dict:
        """Payout from a connected account balance to its bank."""
        payout = await self._call(
            "payout",
            stripe.Payout.create,
            amount=amount_cents,
            currency=self.currency,
            metadata=metadata,
            stripe_account=connected_account,
        )
        return {"id": payout["id"]}

    async def create_refund(self, payment_intent_id: str, amount_cents: int | None = None) -> dict:
        params: dict = {"payment_intent": payment_intent_id}
        if amount_cents is not None:
            params["amount"] = amount_cents
        refund = await self._call("refund", stripe.Refund.create, **params)
        return {"id": refund["id"]}

    async def _call(self, operation: str, fn, **params):
        if not self.secret_key:
            raise StripeAPIError("Stripe is not configured", "not_configured")
        try:
            return await asyncio.to_thread(fn, api_key=self.secret_key, **params)
        except stripe.StripeError as e:
            logger.error(
                f"Stripe {operation} failed: {e.user_message or e}",
                extra={"error_code": e.code},
            )
            raise StripeAPIError(str(e.user_message or e), e.code or "stripe_error")
