"""
Shared fixtures for the API tests.

Settings are read when ``reliatrack`` is first imported, so the test
environment is configured here before any application import.
"""

import hashlib
import hmac
import json
import os
import time

os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["JWT_SECRET"] = "test-jwt-secret"
os.environ["STRIPE_SECRET_KEY"] = "sk_test_dummy"
os.environ["STRIPE_WEBHOOK_SECRET"] = "whsec_test_secret"
os.environ["XAI_API_KEY"] = "xai-test-key"
os.environ["LOG_FORMAT"] = "console"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from fastapi.testclient import TestClient

from reliatrack.main import app

WEBHOOK_SECRET = os.environ["STRIPE_WEBHOOK_SECRET"]


@pytest.fixture
def client():
    """Test client with a fresh in-memory database.

    The lifespan creates the tables on enter and disposes the engine on exit,
    which drops the in-memory database.
    """
    with TestClient(app) as test_client:
        yield test_client


def signup(client, email="owner@example.com", password="password123", **extra):
    """Create an account and return ``(headers, user)``."""
    response = client.post(
        "/api/auth/signup",
        json={
            "email": email,
            "password": password,
            "first_name": extra.pop("first_name", "Test"),
            "last_name": extra.pop("last_name", "User"),
            **extra,
        },
    )
    assert response.status_code == 201, response.text
    body = response.json()
    return {"Authorization": f"Bearer {body['token']}"}, body["user"]


def asset_payload(serial="SN-0001", **overrides):
    payload = {
        "name": "Air Compressor",
        "type": "Compressor",
        "manufacturer": "Atlas Copco",
        "model": "GA30",
        "serial_number": serial,
        "location": "Plant 1",
        "year_manufactured": 2018,
    }
    payload.update(overrides)
    return payload


def create_asset(client, headers, serial="SN-0001", **overrides):
    response = client.post("/api/assets", json=asset_payload(serial, **overrides), headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def sign_webhook(payload: str, secret: str = WEBHOOK_SECRET, timestamp: int | None = None) -> str:
    """Build a Stripe-Signature header the way Stripe does."""
    timestamp = timestamp or int(time.time())
    signed = f"{timestamp}.{payload}".encode("utf-8")
    signature = hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={signature}"


def webhook_event(event_type: str, data: dict, event_id: str = "evt_test_1") -> str:
    return json.dumps({
        "id": event_id,
        "object": "event",
        "type": event_type,
        "data": {"object": data},
    })


@pytest.fixture
def owner(client):
    """Signed-up basic user: ``(headers, user)``."""
    return signup(client)
