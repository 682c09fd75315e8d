"""
Tests for organizations, team membership and invitations.
"""

from unittest.mock import patch

import pytest

from reliatrack.config.settings import settings
from tests.conftest import create_asset, signup


@pytest.fixture
def org_owner(client, owner):
    """Owner with an organization."""
    headers, user = owner
    response = client.post("/api/organization/create", json={"name": "Acme"}, headers=headers)
    assert response.status_code == 201
    return headers, user


def invite(client, headers, email="tech@example.com", role="technician"):
    return client.post("/api/team/invite", json={"email": email, "role": role}, headers=headers)


def invite_and_join(client, owner_headers, email="tech@example.com", role="technician"):
    token = invite(client, owner_headers, email, role).json()["invitation"]["token"]
    headers, user = signup(client, email=email, first_name="Tina")
    response = client.post(f"/api/team/invitation/{token}/accept", headers=headers)
    assert response.status_code == 200, response.text
    return headers, user


class TestOrganization:
    """Tests for /api/organization."""

    def test_create_upgrades_owner(self, client, org_owner):
        headers, _ = org_owner
        me = client.get("/api/auth/me", headers=headers).json()
        assert me["role"] == "owner"
        assert me["subscription_tier"] == "professional"

    def test_cannot_create_twice(self, client, org_owner):
        headers, _ = org_owner
        response = client.post("/api/organization/create", json={"name": "Again"}, headers=headers)
        assert response.status_code == 400

    def test_existing_assets_join_organization(self, client, owner):
        headers, _ = owner
        asset = create_asset(client, headers)
        client.post("/api/organization/create", json={"name": "Acme"}, headers=headers)

        fetched = client.get(f"/api/assets/{asset['id']}", headers=headers).json()
        assert fetched["organization_id"] is not None

    def test_info_counts(self, client, org_owner):
        headers, _ = org_owner
        invite_and_join(client, headers)
        create_asset(client, headers)

        info = client.get("/api/organization/info", headers=headers).json()
        assert info["member_count"] == 2
        assert info["asset_count"] == 1

    def test_assets_paginated(self, client, org_owner):
        headers, _ = org_owner
        for n in range(3):
            create_asset(client, headers, serial=f"SN-{n}")

        page = client.get(
            "/api/organization/assets", params={"page": 2, "page_size": 2}, headers=headers
        ).json()

        assert page["total"] == 3
        assert page["total_pages"] == 2
        assert page["page"] == 2
        assert len(page["items"]) == 1

    def test_settings_owner_only(self, client, org_owner):
        headers, _ = org_owner
        tech_headers, _ = invite_and_join(client, headers)

        denied = client.put(
            "/api/organization/settings", json={"name": "Hijacked"}, headers=tech_headers
        )
        assert denied.status_code == 403

        updated = client.put(
            "/api/organization/settings",
            json={"name": "Acme Works", "data_sharing": {"assets": False}},
            headers=headers,
        ).json()
        assert updated["name"] == "Acme Works"
        assert updated["settings"]["data_sharing"]["assets"] is False

    def test_last_owner_cannot_leave(self, client, org_owner):
        headers, _ = org_owner
        assert client.delete("/api/organization/leave", headers=headers).status_code == 400

    def test_member_leaves_and_is_downgraded(self, client, org_owner):
        headers, _ = org_owner
        tech_headers, _ = invite_and_join(client, headers)

        assert client.delete("/api/organization/leave", headers=tech_headers).status_code == 200
        me = client.get("/api/auth/me", headers=tech_headers).json()
        assert me["organization_id"] is None
        assert me["subscription_tier"] == "basic"

    def test_delete_detaches_everyone(self, client, org_owner):
        headers, _ = org_owner
        tech_headers, _ = invite_and_join(client, headers)
        asset = create_asset(client, headers)

        assert client.delete("/api/organization/delete", headers=headers).status_code == 200

        assert client.get(f"/api/assets/{asset['id']}", headers=tech_headers).status_code == 404
        assert client.get(f"/api/assets/{asset['id']}", headers=headers).json()["organization_id"] is None


class TestInvitations:
    """Tests for /api/team invitations."""

    def test_invite_returns_link(self, client, org_owner):
        headers, _ = org_owner
        response = invite(client, headers)

        assert response.status_code == 201
        body = response.json()
        assert body["is_new"] is True
        assert body["invitation"]["invite_url"].endswith(body["invitation"]["token"])

    def test_reinvite_returns_existing(self, client, org_owner):
        headers, _ = org_owner
        first = invite(client, headers).json()
        second = invite(client, headers)

        assert second.status_code == 200
        assert second.json()["is_new"] is False
        assert second.json()["invitation"]["id"] == first["invitation"]["id"]

    def test_technician_cannot_invite(self, client, org_owner):
        headers, _ = org_owner
        tech_headers, _ = invite_and_join(client, headers)
        assert invite(client, tech_headers, "other@example.com").status_code == 403

    def test_validate_is_public(self, client, org_owner):
        headers, _ = org_owner
        token = invite(client, headers).json()["invitation"]["token"]

        body = client.get(f"/api/team/invitation/{token}/validate").json()
        assert body["valid"] is True
        assert body["organization_name"] == "Acme"
        assert body["email"] == "tech@example.com"

    def test_expired_invitation_not_found(self, client, org_owner):
        headers, _ = org_owner
        with patch.object(settings, "invitation_expiry_days", -1):
            token = invite(client, headers).json()["invitation"]["token"]

        assert client.get(f"/api/team/invitation/{token}/validate").status_code == 404
        assert client.get("/api/team/invitations", headers=headers).json() == []

    def test_email_mismatch_forbidden(self, client, org_owner):
        headers, _ = org_owner
        token = invite(client, headers).json()["invitation"]["token"]
        other_headers, _ = signup(client, email="someone-else@example.com")

        response = client.post("/api/team/join", json={"token": token}, headers=other_headers)
        assert response.status_code == 403

    def test_accept_grants_role_and_plan(self, client, org_owner):
        headers, _ = org_owner
        tech_headers, tech = invite_and_join(client, headers)

        me = client.get("/api/auth/me", headers=tech_headers).json()
        assert me["role"] == "technician"
        assert me["subscription_tier"] == "professional"

        pending = client.get("/api/team/invitations", headers=headers).json()
        assert pending == []

    def test_cancel_invitation(self, client, org_owner):
        headers, _ = org_owner
        created = invite(client, headers).json()["invitation"]

        response = client.delete(f"/api/team/invitations/{created['id']}", headers=headers)
        assert response.status_code == 204
        assert client.get(
            f"/api/team/invitation/{created['token']}/validate"
        ).status_code == 404


class TestMembers:
    """Tests for member listing, roles and removal."""

    def test_owners_listed_first(self, client, org_owner):
        headers, _ = org_owner
        invite_and_join(client, headers, email="aaron@example.com")

        members = client.get("/api/team/members", headers=headers).json()
        assert [m["role"] for m in members] == ["owner", "technician"]

    def test_last_owner_cannot_be_demoted(self, client, org_owner):
        headers, user = org_owner
        response = client.put(
            f"/api/team/members/{user['id']}/role", json={"role": "technician"}, headers=headers
        )
        assert response.status_code == 400

    def test_promote_then_demote(self, client, org_owner):
        headers, user = org_owner
        _, tech = invite_and_join(client, headers)

        promoted = client.put(
            f"/api/team/members/{tech['id']}/role", json={"role": "owner"}, headers=headers
        )
        assert promoted.json()["role"] == "owner"

        demoted = client.put(
            f"/api/team/members/{user['id']}/role", json={"role": "technician"}, headers=headers
        )
        assert demoted.status_code == 200

    def test_cannot_remove_self(self, client, org_owner):
        headers, user = org_owner
        assert client.delete(f"/api/team/members/{user['id']}", headers=headers).status_code == 400

    def test_removed_member_downgraded(self, client, org_owner):
        headers, _ = org_owner
        tech_headers, tech = invite_and_join(client, headers)

        assert client.delete(f"/api/team/members/{tech['id']}", headers=headers).status_code == 204
        me = client.get("/api/auth/me", headers=tech_headers).json()
        assert me["organization_id"] is None
        assert me["subscription_tier"] == "basic"
