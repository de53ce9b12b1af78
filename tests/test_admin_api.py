"""
Tests for the password-gated admin dashboard endpoints
"""
import csv
import io

import pytest

from perception_survey.api.deps import USER_ID_HEADER


ALICE = "user_1700000000000_alice0000"
BOB = "user_1700000000001_bob000000"


def _rate(client, user_id, activity_id, rating):
    return client.put(
        f"/survey/ratings/{activity_id}",
        json={"rating": rating},
        headers={USER_ID_HEADER: user_id},
    )


def _visible_names(client, user_id):
    activities = client.get("/survey/activities", headers={USER_ID_HEADER: user_id}).json()
    return [a["name"] for a in activities]


@pytest.fixture
def small_survey(store, small_catalog):
    store.replace_custom_activities(small_catalog)
    return small_catalog


class TestLogin:
    def test_correct_password(self, client):
        response = client.post("/admin/login", json={"password": "admin123"})

        assert response.status_code == 200
        assert response.json()["token_type"] == "bearer"
        assert response.json()["access_token"]

    def test_wrong_password(self, client):
        response = client.post("/admin/login", json={"password": "letmein"})

        assert response.status_code == 401
        assert response.json()["detail"] == "Incorrect password"

    def test_dashboard_requires_token(self, client):
        assert client.get("/admin/clients").status_code in (401, 403)

    def test_garbage_token_is_rejected(self, client):
        response = client.get("/admin/clients", headers={"Authorization": "Bearer not-a-token"})
        assert response.status_code == 401


class TestClientResponses:
    def test_overview(self, client, admin_headers, small_survey):
        _rate(client, ALICE, 1, "love")
        _rate(client, ALICE, 2, "love")
        _rate(client, ALICE, 3, "hate")
        _rate(client, BOB, 1, "neutral")

        data = client.get("/admin/clients", headers=admin_headers).json()

        assert data["total_clients"] == 2
        assert data["completed"] == 1
        assert data["in_progress"] == 1
        assert data["catalog_size"] == 3

        clients = {c["user_id"]: c for c in data["clients"]}
        assert clients[ALICE]["total_responses"] == 3
        assert clients[ALICE]["response_percentage"] == 100
        assert clients[ALICE]["completed_at"] is not None
        assert {s["activity_name"] for s in clients[ALICE]["top_services"]} == {"A", "B"}
        assert clients[BOB]["response_percentage"] == 33
        assert clients[BOB]["top_services"] == []

    def test_analytics(self, client, admin_headers, small_survey):
        _rate(client, ALICE, 1, "love")
        _rate(client, BOB, 1, "hate")

        data = client.get("/admin/analytics", headers=admin_headers).json()

        assert len(data["rows"]) == 2
        activity = data["activities"][0]
        assert activity["activity_name"] == "A"
        assert activity["total_responses"] == 2
        assert activity["ratings"]["love"]["percentage"] == 50.0
        assert activity["ratings"]["hate"]["response_count"] == 1

    def test_export_all(self, client, admin_headers, small_survey):
        _rate(client, ALICE, 1, "love")
        _rate(client, BOB, 3, "neutral")

        response = client.get("/admin/export", headers=admin_headers)

        assert response.status_code == 200
        assert 'filename="all-survey-responses-' in response.headers["content-disposition"]
        rows = list(csv.reader(io.StringIO(response.text)))
        assert rows[0] == ["User ID", "Activity ID", "Activity Name", "Rating", "Comment", "Timestamp"]
        assert sorted((r[0], r[2], r[3]) for r in rows[1:]) == [(ALICE, "A", "love"), (BOB, "C", "neutral")]


class TestActivityManagement:
    def test_add_edit_delete_reset(self, client, admin_headers):
        created = client.post(
            "/admin/activities",
            json={"pillar": 2, "name": "Open House Recap", "description": "Summary after each open house"},
            headers=admin_headers,
        )
        assert created.status_code == 201
        assert created.json()["id"] == 25
        assert created.json()["pillar_name"] == "Marketing & Promotion"

        edited = client.patch("/admin/activities/25", json={"pillar": 3}, headers=admin_headers)
        assert edited.json()["pillar_name"] == "Proactive Outreach"
        assert edited.json()["name"] == "Open House Recap"

        # Clients see the new activity too
        names = [a["name"] for a in client.get("/survey/activities", headers={USER_ID_HEADER: ALICE}).json()]
        assert "Open House Recap" in names

        remaining = client.delete("/admin/activities/1", headers=admin_headers).json()
        assert len(remaining) == 24
        assert 1 not in [a["id"] for a in remaining]

        reset = client.post("/admin/activities/reset", headers=admin_headers).json()
        assert [a["id"] for a in reset] == list(range(1, 25))

    def test_blank_fields_are_rejected(self, client, admin_headers):
        response = client.post(
            "/admin/activities",
            json={"pillar": 1, "name": "   ", "description": "Something"},
            headers=admin_headers,
        )
        assert response.status_code == 422

    def test_edit_unknown_activity(self, client, admin_headers):
        response = client.patch("/admin/activities/999", json={"name": "X"}, headers=admin_headers)
        assert response.status_code == 404


class TestVisibility:
    def test_default_and_client_overrides(self, client, admin_headers, small_survey):
        hidden = client.put(
            "/admin/visibility/default/2", json={"hidden": True}, headers=admin_headers
        )
        assert hidden.json()["visible_count"] == 2

        assert _visible_names(client, ALICE) == ["A", "C"]

        client.put(f"/admin/visibility/{ALICE}/2", json={"hidden": False}, headers=admin_headers)
        assert _visible_names(client, ALICE) == ["A", "B", "C"]

        settings = client.get("/admin/visibility", headers=admin_headers).json()["settings"]
        assert settings == {"default": {"2": True}, ALICE: {"2": False}}

    def test_toggle(self, client, admin_headers, small_survey):
        first = client.post(f"/admin/visibility/{ALICE}/1/toggle", headers=admin_headers).json()
        assert first["activities"][0]["hidden"] is True
        assert first["activities"][0]["source"] == "client"

        second = client.post(f"/admin/visibility/{ALICE}/1/toggle", headers=admin_headers).json()
        assert second["activities"][0]["hidden"] is False

    def test_client_view(self, client, admin_headers, small_survey):
        data = client.get(f"/admin/visibility/{BOB}", headers=admin_headers).json()

        assert data["client_id"] == BOB
        assert data["total"] == 3
        assert all(a["source"] is None for a in data["activities"])

    def test_unknown_activity(self, client, admin_headers, small_survey):
        response = client.put(
            f"/admin/visibility/{ALICE}/999", json={"hidden": True}, headers=admin_headers
        )
        assert response.status_code == 404
