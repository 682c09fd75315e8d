"""
Tests for bulk asset import.
"""

from tests.conftest import asset_payload, create_asset


class TestImport:
    """Tests for POST /api/assets/import."""

    def test_all_rows_inserted(self, client, owner):
        headers, _ = owner
        rows = [asset_payload(f"IMP-{i}") for i in range(3)]
        response = client.post("/api/assets/import", json={"assets": rows}, headers=headers)

        assert response.status_code == 201
        body = response.json()
        assert body["inserted_count"] == 3
        assert body["failed_count"] == 0
        assert client.get("/api/assets", headers=headers).json()["total"] == 3

    def test_partial_success_is_multi_status(self, client, owner):
        headers, _ = owner
        bad = asset_payload("IMP-BAD")
        del bad["name"]
        rows = [asset_payload("IMP-1"), bad, asset_payload("IMP-2", year_manufactured=1800)]

        response = client.post("/api/assets/import", json={"assets": rows}, headers=headers)

        assert response.status_code == 207
        body = response.json()
        assert body["inserted_count"] == 1
        assert [row["row"] for row in body["failed"]] == [2, 3]
        assert body["failed"][0]["errors"][0]["field"] == "name"
        assert client.get("/api/assets", headers=headers).json()["total"] == 1

    def test_serial_numbers_generated_and_deduplicated(self, client, owner):
        headers, _ = owner
        create_asset(client, headers, serial="TAKEN")
        missing = asset_payload()
        del missing["serial_number"]
        rows = [missing, asset_payload("TAKEN")]

        body = client.post("/api/assets/import", json={"assets": rows}, headers=headers).json()

        serials = [asset["serial_number"] for asset in body["assets"]]
        assert serials[0].startswith("GEN-")
        assert serials[1].startswith("TAKEN-GEN-")
        assert len(body["warnings"]) == 2

    def test_basic_tier_limit_counts_batch(self, client, owner):
        headers, _ = owner
        create_asset(client, headers, serial="EXISTING")
        rows = [asset_payload(f"IMP-{i}") for i in range(5)]

        response = client.post("/api/assets/import", json={"assets": rows}, headers=headers)

        assert response.status_code == 403
        assert client.get("/api/assets", headers=headers).json()["total"] == 1

    def test_nothing_imported_is_bad_request(self, client, owner):
        headers, _ = owner
        response = client.post(
            "/api/assets/import", json={"assets": [{"name": "Only a name"}]}, headers=headers
        )
        assert response.status_code == 400
        assert response.json()["errors"]

    def test_template(self, client, owner):
        headers, _ = owner
        body = client.get("/api/assets/import/template", headers=headers).json()
        assert "serial_number" in body["columns"]
        assert set(body["required"]) <= set(body["sample"])
