"""
Tests for signup, login and profile endpoints.
"""

from reliatrack.utils.security import create_access_token, decode_token
from tests.conftest import signup


class TestSignup:
    """Tests for POST /api/auth/signup."""

    def test_new_user_on_basic_plan(self, client):
        _, user = signup(client)
        assert user["subscription_tier"] == "basic"
        assert user["ai_credits"] == 10
        assert user["organization_id"] is None

    def test_duplicate_email(self, client):
        signup(client)
        response = client.post(
            "/api/auth/signup",
            json={"email": "OWNER@example.com", "password": "password123",
                  "first_name": "A", "last_name": "B"},
        )
        assert response.status_code == 400

    def test_short_password(self, client):
        response = client.post(
            "/api/auth/signup",
            json={"email": "x@example.com", "password": "short", "first_name": "A", "last_name": "B"},
        )
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "password"


class TestLogin:
    """Tests for POST /api/auth/login and token handling."""

    def test_login_returns_token(self, client):
        signup(client)
        response = client.post(
            "/api/auth/login", json={"email": "owner@example.com", "password": "password123"}
        )

        assert response.status_code == 200
        token = response.json()["token"]
        me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.json()["email"] == "owner@example.com"

    def test_wrong_password(self, client):
        signup(client)
        response = client.post(
            "/api/auth/login", json={"email": "owner@example.com", "password": "wrong-pass"}
        )
        assert response.status_code == 401

    def test_missing_token(self, client):
        assert client.get("/api/auth/me").status_code == 401

    def test_token_for_deleted_user(self, client):
        token = create_access_token("no-such-user", "ghost@example.com")
        response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_garbage_token(self):
        assert decode_token("not-a-jwt") is None


class TestProfile:
    def test_update_notifications(self, client, owner):
        headers, _ = owner
        response = client.put(
            "/api/users/profile",
            json={"company": "Acme", "notifications": {"email": False, "sms": True}},
            headers=headers,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["company"] == "Acme"
        assert body["notify_email"] is False
        assert body["notify_sms"] is True


class TestSystem:
    def test_health(self, client):
        assert client.get("/health").json()["status"] == "healthy"

    def test_request_id_echoed(self, client):
        response = client.get("/health", headers={"X-Request-ID": "req-42"})
        assert response.headers["X-Request-ID"] == "req-42"

    def test_request_id_generated(self, client):
        assert len(client.get("/health").headers["X-Request-ID"]) == 32
