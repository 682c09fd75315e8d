"""
Tests for maintenance tasks and dashboards.
"""

from datetime import date, timedelta

import pytest

from tests.conftest import create_asset, signup


@pytest.fixture
def asset(client, owner):
    headers, _ = owner
    return create_asset(client, headers)


def add_task(client, headers, asset_id, **overrides):
    payload = {"asset_id": asset_id, "description": "Inspect belts"}
    payload.update(overrides)
    response = client.post("/api/maintenance/tasks", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


class TestEffectiveStatus:
    """Overdue is derived at read time from the due date."""

    def test_past_due_reads_as_overdue(self, client, owner, asset):
        headers, _ = owner
        yesterday = (date.today() - timedelta(days=1)).isoformat()
        task = add_task(client, headers, asset["id"], next_due=yesterday)

        fetched = client.get(f"/api/maintenance/tasks/{task['id']}", headers=headers).json()
        assert fetched["status"] == "overdue"
        assert fetched["is_overdue"] is True
        assert fetched["asset_name"] == asset["name"]

    def test_future_due_stays_scheduled(self, client, owner, asset):
        headers, _ = owner
        tomorrow = (date.today() + timedelta(days=1)).isoformat()
        task = add_task(client, headers, asset["id"], next_due=tomorrow)

        fetched = client.get(f"/api/maintenance/tasks/{task['id']}", headers=headers).json()
        assert fetched["status"] == "scheduled"

    def test_completed_task_never_overdue(self, client, owner, asset):
        headers, _ = owner
        yesterday = (date.today() - timedelta(days=1)).isoformat()
        task = add_task(client, headers, asset["id"], next_due=yesterday)

        response = client.put(
            f"/api/maintenance/tasks/{task['id']}/complete",
            json={"completed_by": "Sam", "completion_notes": "Replaced belt"},
            headers=headers,
        )
        body = response.json()
        assert body["status"] == "completed"
        assert body["completed_by"] == "Sam"
        assert body["completed_at"] is not None
        assert body["is_overdue"] is False

    def test_status_filter_uses_effective_status(self, client, owner, asset):
        headers, _ = owner
        add_task(client, headers, asset["id"], next_due=(date.today() - timedelta(days=3)).isoformat())
        add_task(client, headers, asset["id"], next_due=(date.today() + timedelta(days=3)).isoformat())

        overdue = client.get(
            "/api/maintenance/tasks", params={"status": "overdue"}, headers=headers
        ).json()
        assert len(overdue) == 1


class TestTaskLists:
    def test_all_tasks_overdue_first(self, client, owner, asset):
        headers, _ = owner
        later = add_task(client, headers, asset["id"], description="Later",
                         next_due=(date.today() + timedelta(days=2)).isoformat())
        late = add_task(client, headers, asset["id"], description="Late",
                        next_due=(date.today() - timedelta(days=10)).isoformat())

        tasks = client.get("/api/assets/all/tasks", headers=headers).json()
        assert [t["id"] for t in tasks] == [late["id"], later["id"]]

    def test_due_soon_window(self, client, owner, asset):
        headers, _ = owner
        soon = add_task(client, headers, asset["id"],
                        next_due=(date.today() + timedelta(days=3)).isoformat())
        add_task(client, headers, asset["id"],
                 next_due=(date.today() + timedelta(days=30)).isoformat())

        tasks = client.get("/api/maintenance/tasks/due-soon", headers=headers).json()
        assert [t["id"] for t in tasks] == [soon["id"]]

    def test_nested_asset_task_crud(self, client, owner, asset):
        headers, _ = owner
        created = client.post(
            f"/api/assets/{asset['id']}/tasks",
            json={"description": "Lubricate chain", "priority": "high"},
            headers=headers,
        ).json()

        updated = client.put(
            f"/api/assets/{asset['id']}/tasks/{created['id']}",
            json={"priority": "critical"},
            headers=headers,
        )
        assert updated.json()["priority"] == "critical"

        deleted = client.delete(f"/api/assets/{asset['id']}/tasks/{created['id']}", headers=headers)
        assert deleted.status_code == 204
        assert client.get(f"/api/assets/{asset['id']}/tasks", headers=headers).json() == []

    @pytest.mark.parametrize("field", ["description", "priority", "status"])
    def test_null_for_required_field_rejected(self, client, owner, asset, field):
        headers, _ = owner
        task = add_task(client, headers, asset["id"])
        response = client.put(
            f"/api/maintenance/tasks/{task['id']}", json={field: None}, headers=headers
        )

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == field
        stored = client.get(f"/api/maintenance/tasks/{task['id']}", headers=headers).json()
        assert stored["description"] == "Inspect belts"

    def test_null_clears_due_date(self, client, owner, asset):
        headers, _ = owner
        task = add_task(client, headers, asset["id"], next_due=date.today().isoformat())
        response = client.put(
            f"/api/maintenance/tasks/{task['id']}", json={"next_due": None}, headers=headers
        )
        assert response.json()["next_due"] is None

    def test_task_on_foreign_asset_not_found(self, client, asset):
        stranger, _ = signup(client, email="stranger@example.com")
        response = client.post(
            "/api/maintenance/tasks",
            json={"asset_id": asset["id"], "description": "Sneaky"},
            headers=stranger,
        )
        assert response.status_code == 404


class TestDashboards:
    def test_maintenance_dashboard_counts(self, client, owner, asset):
        headers, _ = owner
        add_task(client, headers, asset["id"], next_due=(date.today() - timedelta(days=1)).isoformat())
        add_task(client, headers, asset["id"], next_due=(date.today() + timedelta(days=2)).isoformat())

        body = client.get("/api/maintenance/dashboard", headers=headers).json()
        assert body["total_tasks"] == 2
        assert body["overdue"] == 1
        assert body["due_this_week"] == 1

    def test_asset_dashboard(self, client, owner, asset):
        headers, _ = owner
        create_asset(client, headers, serial="SN-2", condition="poor", status="down")
        add_task(client, headers, asset["id"], next_due=(date.today() - timedelta(days=1)).isoformat())

        body = client.get("/api/assets/dashboard", headers=headers).json()
        assert body["total_assets"] == 2
        assert body["overdue_tasks"] == 1
        assert body["condition_distribution"]["poor"] == 1
        assert body["status_distribution"]["down"] == 1
