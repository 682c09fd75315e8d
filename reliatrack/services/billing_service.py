"""
Stripe billing: checkout sessions, provider subscriptions and webhook events.

Webhook handlers only ever overwrite fields with values taken from the
event, so replaying an event leaves the account in the same state.
"""

import json
from typing import Any

import stripe
from fastapi.concurrency import run_in_threadpool
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from reliatrack.config.settings import settings
from reliatrack.models.provider import Provider, ProviderTier
from reliatrack.models.user import SubscriptionTier, User
from reliatrack.services.exceptions import UpstreamError, ValidationFailed
from reliatrack.utils.logging import ServiceLogger, audit_logger
from reliatrack.utils.security import mask_email

CHECKOUT_COMPLETED = "checkout.session.completed"
TRIAL_WILL_END = "customer.subscription.trial_will_end"


def _configure_stripe() -> None:
    if settings.stripe.secret_key is not None:
        stripe.api_key = settings.stripe.secret_key.get_secret_value()


class BillingService:
    """
    Service wrapping the Stripe SDK.

    The SDK is synchronous, so its network calls run in the threadpool.
    """

    def __init__(self, session: AsyncSession | None = None):
        self.session = session
        self.logger = ServiceLogger("billing")
        _configure_stripe()

    # Checkout

    async def create_checkout_session(self, price_id: str, email: str, plan: str | None = None) -> str:
        """
        Create a subscription Checkout Session with a free trial.

        Returns:
            The hosted checkout URL

        Raises:
            UpstreamError: If Stripe rejects the request
        """
        self.logger.log_operation_start("create_checkout_session", email=mask_email(email))
        params: dict[str, Any] = {
            "mode": "subscription",
            "payment_method_types": ["card"],
            "line_items": [{"price": price_id, "quantity": 1}],
            "customer_email": email,
            "subscription_data": {
                "trial_period_days": settings.stripe.trial_period_days,
                "trial_settings": {
                    "end_behavior": {"missing_payment_method": "cancel"},
                },
            },
            "success_url": settings.stripe.success_url,
            "cancel_url": settings.stripe.cancel_url,
        }
        if plan:
            params["metadata"] = {"plan": plan}

        try:
            checkout = await run_in_threadpool(stripe.checkout.Session.create, **params)
        except stripe.StripeError as exc:
            self.logger.log_operation_failed("create_checkout_session", exc)
            raise UpstreamError(str(exc)) from exc

        self.logger.log_operation_complete("create_checkout_session", session_id=checkout.id)
        return checkout.url

    async def create_provider_subscription(
        self,
        provider: Provider,
        email: str,
        tier: ProviderTier,
    ) -> dict[str, Any]:
        """Create (or reuse) a Stripe customer and subscribe it to a listing tier."""
        price_id = settings.stripe.provider_prices.get(tier.value)
        if not price_id:
            raise ValidationFailed.for_field("tier", f"No price configured for tier '{tier.value}'")

        try:
            customer_id = provider.stripe_customer_id
            if not customer_id:
                customer = await run_in_threadpool(
                    stripe.Customer.create,
                    email=email,
                    name=provider.name,
                    metadata={"provider_id": provider.id},
                )
                customer_id = customer.id
            subscription = await run_in_threadpool(
                stripe.Subscription.create,
                customer=customer_id,
                items=[{"price": price_id}],
                payment_behavior="default_incomplete",
                metadata={"provider_id": provider.id, "tier": tier.value},
            )
        except stripe.StripeError as exc:
            self.logger.log_operation_failed("create_provider_subscription", exc)
            raise UpstreamError(str(exc)) from exc

        return {
            "customer_id": customer_id,
            "subscription_id": subscription.id,
            "status": subscription.status,
        }

    # Webhooks

    def verify_event(self, payload: bytes, signature: str | None) -> dict[str, Any]:
        """
        Check the Stripe-Signature header and parse the event.

        Raises:
            ValidationFailed: Missing/invalid signature or malformed body
        """
        secret = settings.stripe.webhook_secret
        if secret is None or not signature:
            raise ValidationFailed("Webhook Error: missing signature")

        try:
            body = payload.decode("utf-8")
            stripe.WebhookSignature.verify_header(
                body,
                signature,
                secret.get_secret_value(),
                tolerance=settings.stripe.webhook_tolerance_seconds,
            )
            event = json.loads(body)
        except stripe.SignatureVerificationError as exc:
            self.logger.log_warning("webhook_signature_invalid", error=str(exc))
            raise ValidationFailed(f"Webhook Error: {exc}") from exc
        except ValueError as exc:
            raise ValidationFailed("Webhook Error: invalid payload") from exc

        if not isinstance(event, dict) or "type" not in event:
            raise ValidationFailed("Webhook Error: invalid payload")
        return event

    async def handle_event(self, event: dict[str, Any]) -> bool:
        """
        Apply a verified event.

        Returns:
            True if the event type is handled, False if it was ignored
        """
        event_type = event["type"]
        envelope = event.get("data")
        data = envelope.get("object") if isinstance(envelope, dict) else None
        if not isinstance(data, dict):
            self.logger.log_warning(
                "webhook_event_without_object", event_id=event.get("id"), event_type=event_type
            )
            return False

        if event_type == CHECKOUT_COMPLETED:
            await self._checkout_completed(event.get("id"), data)
            return True
        if event_type == TRIAL_WILL_END:
            await self._trial_will_end(event.get("id"), data)
            return True

        self.logger.logger.debug("webhook_event_ignored", event_type=event_type)
        return False

    async def _checkout_completed(self, event_id: str | None, data: dict[str, Any]) -> None:
        email = data.get("customer_email") or (data.get("customer_details") or {}).get("email")
        if not email:
            self.logger.log_warning("checkout_without_email", event_id=event_id)
            return

        result = await self.session.execute(
            select(User).where(func.lower(User.email) == email.lower())
        )
        user = result.scalar_one_or_none()
        if user is None:
            self.logger.log_warning(
                "checkout_user_not_found", event_id=event_id, email=mask_email(email)
            )
            return

        plan = (data.get("metadata") or {}).get("plan") or SubscriptionTier.BASIC.value
        user.stripe_customer_id = data.get("customer")
        user.stripe_subscription_id = data.get("subscription")
        try:
            user.subscription_tier = SubscriptionTier(plan)
        except ValueError:
            self.logger.log_warning("checkout_unknown_plan", event_id=event_id, plan=plan)
        await self.session.flush()

        audit_logger.log_billing_event(
            CHECKOUT_COMPLETED,
            event_id,
            user_id=user.id,
            tier=user.subscription_tier.value,
        )

    async def _trial_will_end(self, event_id: str | None, data: dict[str, Any]) -> None:
        customer_id = data.get("customer")
        if not customer_id:
            return
        result = await self.session.execute(
            select(User).where(User.stripe_customer_id == customer_id)
        )
        users = result.scalars().all()
        for user in users:
            user.trial_ending = True
        await self.session.flush()

        audit_logger.log_billing_event(
            TRIAL_WILL_END,
            event_id,
            user_id=users[0].id if users else None,
            customer_id=customer_id,
        )
