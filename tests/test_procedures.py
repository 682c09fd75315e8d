"""
Tests for maintenance procedures.
"""

import pytest

from tests.conftest import create_asset, signup


@pytest.fixture
def asset(client, owner):
    headers, _ = owner
    return create_asset(client, headers)


def add_procedure(client, headers, asset_id, **overrides):
    payload = {
        "asset_id": asset_id,
        "title": "Replace drive belt",
        "steps": [{"step": 1, "title": "Isolate", "instruction": "Lock out the motor."}],
    }
    payload.update(overrides)
    response = client.post("/api/procedures", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def add_fmea(client, headers, asset_id, **overrides):
    payload = {
        "asset_id": asset_id,
        "component": "Gearbox",
        "failure_mode": "Tooth wear",
        "effects": "Vibration",
        "severity": 10,
        "occurrence": 5,
        "detection": 5,
    }
    payload.update(overrides)
    response = client.post("/api/assets/fmea", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


class TestProcedureCrud:
    """Tests for /api/procedures."""

    def test_create_and_list(self, client, owner, asset):
        headers, _ = owner
        created = add_procedure(client, headers, asset["id"], tools=["Torque wrench"])

        listed = client.get(f"/api/procedures/asset/{asset['id']}", headers=headers).json()
        assert [p["id"] for p in listed] == [created["id"]]
        assert listed[0]["tools"] == ["Torque wrench"]
        assert listed[0]["steps"][0]["instruction"] == "Lock out the motor."

    def test_update_and_delete(self, client, owner, asset):
        headers, _ = owner
        procedure = add_procedure(client, headers, asset["id"])

        updated = client.put(
            f"/api/procedures/{procedure['id']}", json={"priority": "urgent"}, headers=headers
        )
        assert updated.json()["priority"] == "urgent"
        assert updated.json()["title"] == "Replace drive belt"

        assert client.delete(f"/api/procedures/{procedure['id']}", headers=headers).status_code == 204
        assert client.get(f"/api/procedures/asset/{asset['id']}", headers=headers).json() == []

    @pytest.mark.parametrize("field", ["title", "priority", "steps"])
    def test_null_for_required_field_rejected(self, client, owner, asset, field):
        headers, _ = owner
        procedure = add_procedure(client, headers, asset["id"])
        response = client.put(
            f"/api/procedures/{procedure['id']}", json={field: None}, headers=headers
        )

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == field

    def test_other_users_procedure_not_found(self, client, owner, asset):
        headers, _ = owner
        procedure = add_procedure(client, headers, asset["id"])
        stranger, _ = signup(client, email="stranger@example.com")

        response = client.put(
            f"/api/procedures/{procedure['id']}", json={"title": "Mine now"}, headers=stranger
        )
        assert response.status_code == 404


class TestGenerateFromFMEA:
    """Tests for POST /api/procedures/generate/{asset_id}."""

    def test_one_draft_per_high_risk_component(self, client, owner, asset):
        headers, _ = owner
        add_fmea(client, headers, asset["id"])
        add_fmea(client, headers, asset["id"], component="Seal", severity=2)

        response = client.post(f"/api/procedures/generate/{asset['id']}", headers=headers)

        assert response.status_code == 201
        drafts = response.json()
        assert [d["component"] for d in drafts] == ["Gearbox"]
        assert drafts[0]["rpn_triggered"] is True
        assert drafts[0]["rpn_score"] == 250
        assert drafts[0]["title"] == "Gearbox: Tooth wear"

        again = client.post(f"/api/procedures/generate/{asset['id']}", headers=headers)
        assert again.json() == []

    def test_long_failure_mode_fits_title_column(self, client, owner, asset):
        headers, _ = owner
        add_fmea(client, headers, asset["id"], component="C" * 255, failure_mode="F" * 500)

        drafts = client.post(f"/api/procedures/generate/{asset['id']}", headers=headers).json()

        assert len(drafts) == 1
        assert len(drafts[0]["title"]) == 255
        assert drafts[0]["title"].startswith("C" * 255)
