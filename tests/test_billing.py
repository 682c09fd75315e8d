"""
Tests for Stripe checkout and webhook handling.
"""

import json
from unittest.mock import AsyncMock, Mock, patch

import pytest
import stripe

from tests.conftest import sign_webhook, signup, webhook_event


def post_webhook(client, payload, signature=None):
    return client.post(
        "/api/webhooks",
        content=payload,
        headers={
            "Content-Type": "application/json",
            "Stripe-Signature": signature if signature is not None else sign_webhook(payload),
        },
    )


def checkout_completed(email="owner@example.com", plan="professional", event_id="evt_1"):
    return webhook_event(
        "checkout.session.completed",
        {
            "id": "cs_test_1",
            "customer": "cus_test_1",
            "subscription": "sub_test_1",
            "customer_email": email,
            "metadata": {"plan": plan},
        },
        event_id=event_id,
    )


class TestCheckout:
    """Tests for POST /api/subscriptions/create-checkout-session."""

    def test_returns_checkout_url(self, client):
        session = Mock(id="cs_test_1", url="https://checkout.stripe.com/c/pay/cs_test_1")
        with patch("stripe.checkout.Session.create", return_value=session) as create:
            response = client.post(
                "/api/subscriptions/create-checkout-session",
                json={"price_id": "price_pro", "email": "buyer@example.com", "plan": "professional"},
            )

        assert response.status_code == 200
        assert response.json() == {"url": session.url}
        params = create.call_args.kwargs
        assert params["mode"] == "subscription"
        assert params["metadata"] == {"plan": "professional"}
        assert params["subscription_data"]["trial_period_days"] == 7
        assert params["subscription_data"]["trial_settings"]["end_behavior"] == {
            "missing_payment_method": "cancel"
        }

    def test_stripe_call_runs_off_the_event_loop(self, client):
        session = Mock(id="cs_test_2", url="https://checkout.stripe.com/c/pay/cs_test_2")
        offload = AsyncMock(return_value=session)
        with patch("reliatrack.services.billing_service.run_in_threadpool", new=offload):
            response = client.post(
                "/api/subscriptions/create-checkout-session",
                json={"price_id": "price_pro", "email": "buyer@example.com"},
            )

        assert response.json() == {"url": session.url}
        assert offload.await_args.args[0] == stripe.checkout.Session.create

    def test_stripe_error_is_server_error(self, client):
        with patch("stripe.checkout.Session.create", side_effect=stripe.StripeError("No such price")):
            response = client.post(
                "/api/subscriptions/create-checkout-session",
                json={"price_id": "price_missing", "email": "buyer@example.com"},
            )

        assert response.status_code == 500
        assert "No such price" in response.json()["detail"]


class TestWebhook:
    """Tests for POST /api/webhooks."""

    def test_invalid_signature_rejected_without_changes(self, client, owner):
        headers, _ = owner
        payload = checkout_completed()
        response = post_webhook(client, payload, signature=sign_webhook(payload, secret="whsec_wrong"))

        assert response.status_code == 400
        assert client.get("/api/auth/me", headers=headers).json()["subscription_tier"] == "basic"

    def test_missing_signature_rejected(self, client):
        response = client.post("/api/webhooks", content=checkout_completed())
        assert response.status_code == 400

    def test_tampered_body_rejected(self, client):
        payload = checkout_completed()
        signature = sign_webhook(payload)
        response = post_webhook(client, checkout_completed(plan="ai-powered"), signature=signature)
        assert response.status_code == 400

    def test_checkout_completed_sets_tier(self, client, owner):
        headers, _ = owner
        response = post_webhook(client, checkout_completed(email="OWNER@example.com"))

        assert response.status_code == 200
        assert response.json()["received"] is True
        me = client.get("/api/auth/me", headers=headers).json()
        assert me["subscription_tier"] == "professional"

    def test_replay_is_idempotent(self, client, owner):
        headers, _ = owner
        payload = checkout_completed(plan="ai-powered")

        post_webhook(client, payload)
        first = client.get("/api/auth/me", headers=headers).json()
        assert post_webhook(client, payload).status_code == 200
        second = client.get("/api/auth/me", headers=headers).json()

        assert first["subscription_tier"] == second["subscription_tier"] == "ai-powered"
        assert first == second

    def test_missing_plan_defaults_to_basic(self, client, owner):
        headers, _ = owner
        post_webhook(client, checkout_completed(plan="professional"))
        payload = webhook_event(
            "checkout.session.completed",
            {"customer": "cus_test_1", "subscription": "sub_test_2",
             "customer_email": "owner@example.com"},
        )
        post_webhook(client, payload)

        assert client.get("/api/auth/me", headers=headers).json()["subscription_tier"] == "basic"

    def test_trial_will_end_flags_user(self, client, owner):
        headers, _ = owner
        signup(client, email="bystander@example.com")
        post_webhook(client, checkout_completed())

        payload = webhook_event(
            "customer.subscription.trial_will_end",
            {"id": "sub_test_1", "customer": "cus_test_1"},
            event_id="evt_2",
        )
        assert post_webhook(client, payload).status_code == 200
        assert client.get("/api/auth/me", headers=headers).json()["trial_ending"] is True

    def test_unhandled_event_acknowledged(self, client):
        payload = webhook_event("invoice.paid", {"id": "in_1"})
        response = post_webhook(client, payload)

        assert response.status_code == 200
        assert response.json() == {"received": True, "handled": False}

    @pytest.mark.parametrize("data", [None, "oops", [1, 2], {"object": "cs_test_1"}])
    def test_event_without_object_acknowledged(self, client, owner, data):
        payload = json.dumps({"id": "evt_odd", "type": "checkout.session.completed", "data": data})
        response = post_webhook(client, payload)

        assert response.status_code == 200
        assert response.json() == {"received": True, "handled": False}
        headers, _ = owner
        assert client.get("/api/auth/me", headers=headers).json()["subscription_tier"] == "basic"
