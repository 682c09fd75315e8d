"""
Tests for asset CRUD, tier limits and organization scoping.
"""

from datetime import date

import pytest

from tests.conftest import asset_payload, create_asset, signup


def join_organization(client, owner_headers, email="tech@example.com"):
    """Create an organization for the owner and bring in a technician."""
    response = client.post(
        "/api/organization/create", json={"name": "Acme Plant"}, headers=owner_headers
    )
    assert response.status_code == 201, response.text
    invite = client.post("/api/team/invite", json={"email": email}, headers=owner_headers)
    assert invite.status_code == 201, invite.text
    token = invite.json()["invitation"]["token"]

    tech_headers, tech = signup(client, email=email, first_name="Tina")
    joined = client.post("/api/team/join", json={"token": token}, headers=tech_headers)
    assert joined.status_code == 200, joined.text
    return tech_headers, tech


class TestCreateAsset:
    """Tests for POST /api/assets."""

    def test_create_returns_derived_fields(self, client, owner):
        headers, user = owner
        asset = create_asset(client, headers)

        assert asset["user_id"] == user["id"]
        assert asset["status"] == "operational"
        assert asset["age"] == date.today().year - 2018
        assert asset["next_due_date"] is not None

    def test_basic_tier_limited_to_five(self, client, owner):
        """The sixth asset on the basic plan is refused and not stored."""
        headers, _ = owner
        for i in range(5):
            create_asset(client, headers, serial=f"SN-{i}")

        response = client.post("/api/assets", json=asset_payload("SN-5"), headers=headers)
        assert response.status_code == 403

        listing = client.get("/api/assets", headers=headers).json()
        assert listing["total"] == 5
        assert "SN-5" not in {a["serial_number"] for a in listing["items"]}

    def test_professional_tier_not_limited(self, client, owner):
        headers, _ = owner
        client.post("/api/organization/create", json={"name": "Big Co"}, headers=headers)
        for i in range(6):
            create_asset(client, headers, serial=f"SN-{i}")
        assert client.get("/api/assets", headers=headers).json()["total"] == 6

    def test_duplicate_serial_rejected(self, client, owner):
        headers, _ = owner
        create_asset(client, headers, serial="DUP-1")
        response = client.post("/api/assets", json=asset_payload("DUP-1"), headers=headers)

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "serial_number"

    def test_missing_fields_reported_per_field(self, client, owner):
        headers, _ = owner
        response = client.post("/api/assets", json={"name": "Pump"}, headers=headers)

        assert response.status_code == 400
        body = response.json()
        assert body["detail"] == "Validation error"
        fields = {error["field"] for error in body["errors"]}
        assert {"type", "manufacturer", "model", "serial_number", "location"} <= fields

    def test_future_year_rejected(self, client, owner):
        headers, _ = owner
        payload = asset_payload(year_manufactured=date.today().year + 1)
        response = client.post("/api/assets", json=payload, headers=headers)
        assert response.status_code == 400

    def test_requires_authentication(self, client):
        assert client.post("/api/assets", json=asset_payload()).status_code == 401


class TestReadAndUpdate:
    """Tests for listing, fetching and updating assets."""

    def test_list_filters(self, client, owner):
        headers, _ = owner
        create_asset(client, headers, serial="A", location="Plant 1")
        create_asset(client, headers, serial="B", location="Plant 2", type="Pump")

        by_location = client.get("/api/assets", params={"location": "Plant 2"}, headers=headers)
        assert [a["serial_number"] for a in by_location.json()["items"]] == ["B"]

        by_type = client.get("/api/assets", params={"type": "Compressor"}, headers=headers)
        assert [a["serial_number"] for a in by_type.json()["items"]] == ["A"]

    def test_other_users_assets_hidden(self, client, owner):
        headers, _ = owner
        asset = create_asset(client, headers)
        stranger, _ = signup(client, email="stranger@example.com")

        assert client.get(f"/api/assets/{asset['id']}", headers=stranger).status_code == 404
        assert client.get("/api/assets", headers=stranger).json()["total"] == 0

    def test_partial_update(self, client, owner):
        headers, _ = owner
        asset = create_asset(client, headers)
        response = client.put(
            f"/api/assets/{asset['id']}", json={"location": "Plant 9"}, headers=headers
        )

        assert response.status_code == 200
        assert response.json()["location"] == "Plant 9"
        assert response.json()["name"] == asset["name"]

    @pytest.mark.parametrize("field", ["name", "serial_number", "status"])
    def test_null_for_required_field_rejected(self, client, owner, field):
        headers, _ = owner
        asset = create_asset(client, headers)
        response = client.put(f"/api/assets/{asset['id']}", json={field: None}, headers=headers)

        assert response.status_code == 400
        assert response.json()["errors"] == [{"field": field, "message": "may not be null"}]
        assert client.get(f"/api/assets/{asset['id']}", headers=headers).json()[field] == asset[field]

    def test_null_clears_optional_field(self, client, owner):
        headers, _ = owner
        asset = create_asset(client, headers, notes="Loud")
        response = client.put(f"/api/assets/{asset['id']}", json={"notes": None}, headers=headers)

        assert response.status_code == 200
        assert response.json()["notes"] is None

    def test_status_update(self, client, owner):
        headers, _ = owner
        asset = create_asset(client, headers)
        response = client.put(
            f"/api/assets/{asset['id']}/status", json={"status": "down"}, headers=headers
        )
        assert response.json()["status"] == "down"

    def test_invalid_status_rejected(self, client, owner):
        headers, _ = owner
        asset = create_asset(client, headers)
        response = client.put(
            f"/api/assets/{asset['id']}/status", json={"status": "broken"}, headers=headers
        )
        assert response.status_code == 400


class TestDeleteAsset:
    """Only the owner may delete; everyone else gets 404."""

    def test_owner_deletes(self, client, owner):
        headers, _ = owner
        asset = create_asset(client, headers)

        assert client.delete(f"/api/assets/{asset['id']}", headers=headers).status_code == 204
        assert client.get(f"/api/assets/{asset['id']}", headers=headers).status_code == 404

    def test_non_owner_delete_is_not_found(self, client, owner):
        headers, _ = owner
        asset = create_asset(client, headers)
        stranger, _ = signup(client, email="stranger@example.com")

        assert client.delete(f"/api/assets/{asset['id']}", headers=stranger).status_code == 404

        still_there = client.get(f"/api/assets/{asset['id']}", headers=headers)
        assert still_there.status_code == 200
        assert still_there.json()["updated_at"] == asset["updated_at"]

    def test_org_member_sees_but_cannot_delete(self, client, owner):
        headers, _ = owner
        tech_headers, _ = join_organization(client, headers)
        asset = create_asset(client, headers)

        assert client.get(f"/api/assets/{asset['id']}", headers=tech_headers).status_code == 200
        assert client.delete(f"/api/assets/{asset['id']}", headers=tech_headers).status_code == 404
        assert client.get(f"/api/assets/{asset['id']}", headers=headers).status_code == 200

    def test_delete_removes_attached_records(self, client, owner):
        headers, _ = owner
        asset = create_asset(client, headers)
        client.post(
            f"/api/assets/{asset['id']}/tasks",
            json={"description": "Change oil"},
            headers=headers,
        )
        client.delete(f"/api/assets/{asset['id']}", headers=headers)

        assert client.get("/api/assets/all/tasks", headers=headers).json() == []
