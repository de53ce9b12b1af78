"""
Tests for the client-facing survey endpoints

Each client is identified by the X-Survey-User header, the same way a
browser would carry its survey_user_id cookie.
"""
import csv
import io

import pytest
from fastapi.testclient import TestClient

from main import app
from perception_survey.api.deps import USER_ID_HEADER, get_store
from perception_survey.storage import LocalKeyValueStore, LocalSurveyStore


USER = "user_1700000000000_abcdefghi"
HEADERS = {USER_ID_HEADER: USER}


@pytest.fixture
def small_survey(store, small_catalog):
    """Catalog of A(1), B(1), C(2) in the store behind `client`."""
    store.replace_custom_activities(small_catalog)
    return small_catalog


def _rate(client, activity_id, rating, comment=None, headers=HEADERS):
    body = {"rating": rating}
    if comment is not None:
        body["comment"] = comment
    return client.put(f"/survey/ratings/{activity_id}", json=body, headers=headers)


def test_health(client):
    assert client.get("/health").json()["status"] == "healthy"


class TestClientIdentity:
    def test_first_visit_gets_an_id_cookie(self, client):
        response = client.get("/survey/stats")

        assert response.status_code == 200
        user_id = response.cookies.get("survey_user_id")
        assert user_id is not None
        assert user_id.startswith("user_")

    def test_header_id_is_kept(self, client):
        response = client.get("/survey", headers=HEADERS)
        assert response.json()["user_id"] == USER

    def test_malformed_id_is_replaced(self, client):
        response = client.get("/survey", headers={USER_ID_HEADER: "not a valid id!"})
        assert response.json()["user_id"] != "not a valid id!"

    @pytest.mark.parametrize("reserved", ["__shared__", "default"])
    def test_storage_scope_names_are_not_client_ids(self, client, reserved):
        response = client.get("/survey", headers={USER_ID_HEADER: reserved})
        assert response.json()["user_id"] != reserved

    def test_first_visit_export_gets_an_id_cookie(self, client):
        response = client.get("/survey/export")

        assert response.status_code == 200
        assert response.cookies.get("survey_user_id", "").startswith("user_")


class TestSurveyView:
    def test_fresh_survey(self, client):
        data = client.get("/survey", headers=HEADERS).json()

        assert data["stats"] == {"love": 0, "neutral": 0, "hate": 0, "total_rated": 0, "progress": 0}
        assert data["is_complete"] is False
        assert [p["pillar"] for p in data["pillars"]] == [1, 2, 3, 4]
        assert sum(p["total"] for p in data["pillars"]) == 24
        assert data["loved_activities"] == []

    def test_activities_and_ratings_map(self, client, small_survey):
        assert [a["name"] for a in client.get("/survey/activities", headers=HEADERS).json()] == ["A", "B", "C"]

        _rate(client, 2, "hate")

        assert client.get("/survey/ratings", headers=HEADERS).json() == {"1": None, "2": "hate", "3": None}


class TestRatings:
    def test_rate_and_progress(self, client, small_survey):
        _rate(client, 1, "love")
        response = _rate(client, 2, "hate")

        assert response.status_code == 200
        data = response.json()
        assert data["rating"] == "hate"
        assert data["stats"] == {"love": 1, "neutral": 0, "hate": 1, "total_rated": 2, "progress": 67}
        assert data["is_complete"] is False

    def test_comment_is_stored(self, client, small_survey):
        _rate(client, 1, "neutral", comment="Useful but infrequent")

        data = client.get("/survey/ratings/1", headers=HEADERS).json()

        assert data["rating"] == "neutral"
        assert data["comment"] == "Useful but infrequent"
        assert data["rated_at"] is not None

    def test_rating_change_without_comment_keeps_it(self, client, small_survey):
        _rate(client, 1, "love", comment="great")

        response = _rate(client, 1, "hate")

        assert response.json()["comment"] == "great"
        assert client.get("/survey/ratings/1", headers=HEADERS).json()["comment"] == "great"

    def test_explicit_null_comment_removes_it(self, client, small_survey):
        _rate(client, 1, "love", comment="great")

        client.put("/survey/ratings/1", json={"rating": "love", "comment": None}, headers=HEADERS)

        assert client.get("/survey/ratings/1", headers=HEADERS).json()["comment"] is None

    def test_clear_rating(self, client, small_survey):
        _rate(client, 1, "love", comment="great")

        response = client.delete("/survey/ratings/1", headers=HEADERS)

        assert response.json()["stats"]["total_rated"] == 0
        data = client.get("/survey/ratings/1", headers=HEADERS).json()
        assert data["rating"] is None
        assert data["comment"] is None

    def test_toggle_same_rating_clears(self, client, small_survey):
        first = client.post("/survey/ratings/1/toggle", json={"rating": "love"}, headers=HEADERS)
        assert first.json()["rating"] == "love"

        second = client.post("/survey/ratings/1/toggle", json={"rating": "love"}, headers=HEADERS)
        assert second.json()["rating"] is None
        assert second.json()["stats"]["progress"] == 0

    def test_toggle_other_rating_switches(self, client, small_survey):
        client.post("/survey/ratings/1/toggle", json={"rating": "love"}, headers=HEADERS)
        response = client.post("/survey/ratings/1/toggle", json={"rating": "hate"}, headers=HEADERS)

        assert response.json()["rating"] == "hate"
        assert response.json()["stats"]["love"] == 0

    def test_unknown_activity(self, client):
        assert _rate(client, 999, "love").status_code == 404
        assert client.get("/survey/ratings/999", headers=HEADERS).status_code == 404

    def test_hidden_activity_cannot_be_rated(self, client, store, small_survey):
        store.set_visibility(USER, 3, True)
        assert _rate(client, 3, "love").status_code == 404

    def test_invalid_rating_value(self, client, small_survey):
        assert _rate(client, 1, "adore").status_code == 422

    def test_clients_do_not_see_each_other(self, client, small_survey):
        _rate(client, 1, "love")

        other = client.get("/survey/ratings", headers={USER_ID_HEADER: "user_other"}).json()

        assert other == {"1": None, "2": None, "3": None}


class TestCompletion:
    def test_completing_stamps_the_session(self, client, small_survey):
        _rate(client, 1, "love")
        _rate(client, 2, "neutral")
        assert client.get("/survey/session", headers=HEADERS).json()["completed_at"] is None

        response = _rate(client, 3, "love")

        assert response.json()["is_complete"] is True
        assert response.json()["stats"]["progress"] == 100
        session = client.get("/survey/session", headers=HEADERS).json()
        assert session["user_id"] == USER
        assert session["completed_at"] is not None

        view = client.get("/survey", headers=HEADERS).json()
        assert view["is_complete"] is True
        assert [a["name"] for a in view["loved_activities"]] == ["A", "C"]

    def test_reset_reopens_the_session(self, client, small_survey):
        for activity_id in (1, 2, 3):
            _rate(client, activity_id, "love")
        assert client.get("/survey/session", headers=HEADERS).json()["completed_at"] is not None

        client.delete("/survey/responses", headers=HEADERS)
        assert client.get("/survey/session", headers=HEADERS).json()["completed_at"] is None

        for activity_id in (1, 2, 3):
            _rate(client, activity_id, "hate")
        assert client.get("/survey/session", headers=HEADERS).json()["completed_at"] is not None

    def test_completing_again_restamps(self, client, store, small_survey):
        for activity_id in (1, 2, 3):
            _rate(client, activity_id, "love")
        first = store.get_session(USER).completed_at

        client.delete("/survey/ratings/3", headers=HEADERS)
        _rate(client, 3, "neutral")

        assert store.get_session(USER).completed_at >= first

    def test_no_session_before_first_rating(self, client):
        assert client.get("/survey/session", headers=HEADERS).status_code == 404

    def test_hiding_the_last_unrated_activity_completes(self, client, store, small_survey):
        _rate(client, 1, "love")
        _rate(client, 2, "love")
        store.set_visibility("default", 3, True)

        view = client.get("/survey", headers=HEADERS).json()

        assert view["stats"]["progress"] == 100
        assert view["is_complete"] is True


class TestReset:
    def test_reset_clears_everything(self, client, small_survey):
        _rate(client, 1, "love")
        _rate(client, 3, "hate")

        response = client.delete("/survey/responses", headers=HEADERS)

        assert response.status_code == 200
        assert response.json()["stats"]["total_rated"] == 0
        assert client.get("/survey/ratings", headers=HEADERS).json() == {"1": None, "2": None, "3": None}


class TestExport:
    def test_csv_rows_follow_visible_order(self, client, small_survey):
        _rate(client, 2, "hate")

        response = client.get("/survey/export", headers=HEADERS)

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert 'filename="client-perception-survey-' in response.headers["content-disposition"]

        lines = response.text.strip().split("\n")
        assert lines[0] == "Service Category,Service Name,Client Rating,Timestamp"
        assert lines[1] == '"Content & Communication","A","Not Rated",""'
        assert lines[3] == '"Marketing & Promotion","C","Not Rated",""'

        rows = list(csv.reader(io.StringIO(response.text)))
        assert len(rows) == 4
        assert rows[2][:3] == ["Content & Communication", "B", "hate"]
        assert rows[2][3] != ""

    def test_hidden_activities_are_not_exported(self, client, store, small_survey):
        store.set_visibility(USER, 1, True)

        rows = list(csv.reader(io.StringIO(client.get("/survey/export", headers=HEADERS).text)))

        assert [row[1] for row in rows[1:]] == ["B", "C"]


class TestOfflineFallback:
    def test_ratings_survive_a_reload_in_local_storage(self, offline_client, local_store):
        response = _rate(offline_client, 1, "neutral")
        assert response.status_code == 200
        assert response.json()["rating"] == "neutral"

        ratings = offline_client.get("/survey/ratings", headers=HEADERS).json()

        assert ratings["1"] == "neutral"
        assert local_store.get_response(USER, 1) is not None

    def test_session_is_local(self, offline_client):
        _rate(offline_client, 1, "love")

        session = offline_client.get("/survey/session", headers=HEADERS).json()

        assert session["id"] == "local-session"


class TestUnwritableLocalStorage:
    @pytest.fixture
    def broken_client(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory", encoding="utf-8")
        broken = LocalSurveyStore(LocalKeyValueStore(str(blocker / "local_storage.json")))

        app.dependency_overrides[get_store] = lambda: broken
        yield TestClient(app)
        app.dependency_overrides.clear()

    def test_write_failure_is_a_server_error(self, broken_client):
        response = _rate(broken_client, 1, "love")

        assert response.status_code == 500
        assert response.json()["detail"] == "Internal server error"

    def test_reads_still_work(self, broken_client):
        assert broken_client.get("/survey", headers=HEADERS).status_code == 200
