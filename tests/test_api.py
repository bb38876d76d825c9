"""
Tests for the chronology HTTP API.
"""

import pytest
from fastapi.testclient import TestClient

from chronos.api import main
from chronos.api.main import ChronologySession, get_session
from chronos.core.csv_codec import BOM
from chronos.core.storage import InMemoryStorage
from chronos.core.store import RecordStore


@pytest.fixture
def session():
    return ChronologySession(RecordStore(InMemoryStorage()))


@pytest.fixture
def client(session):
    main.app.dependency_overrides[get_session] = lambda: session
    with TestClient(main.app) as test_client:
        yield test_client
    main.app.dependency_overrides.clear()


def record_payload(**overrides):
    payload = {
        "date": "2024-03-01",
        "regNo": "ВХ-1",
        "name": "Ходатайство",
        "correspondent": "Суд",
        "status": "sent",
        "note": ""
    }
    payload.update(overrides)
    return payload


class TestRecordsAPI:
    """Test record endpoints."""

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["record_count"] == 0

    def test_create_and_get(self, client):
        response = client.post("/records", json=record_payload())
        assert response.status_code == 201
        body = response.json()
        assert body["regNo"] == "ВХ-1"
        assert body["status_label"] == "Отправлено"

        fetched = client.get(f"/records/{body['id']}")
        assert fetched.status_code == 200
        assert fetched.json() == body

    @pytest.mark.parametrize("field,value", [
        ("name", "   "),
        ("correspondent", ""),
        ("date", "01.03.2024"),
        ("status", "archived"),
    ])
    def test_form_validation(self, client, field, value):
        response = client.post("/records", json=record_payload(**{field: value}))
        assert response.status_code == 422

    @pytest.mark.parametrize("value", ["20240301", "2024-W09-5", "2024-02-30", "2024-3-1"])
    def test_date_must_be_calendar_yyyy_mm_dd(self, client, value):
        response = client.post("/records", json=record_payload(date=value))
        assert response.status_code == 422

    def test_date_is_stored_trimmed(self, client):
        response = client.post("/records", json=record_payload(date=" 2024-03-01 "))
        assert response.status_code == 201
        assert response.json()["date"] == "2024-03-01"

    def test_update(self, client):
        record_id = client.post("/records", json=record_payload()).json()["id"]
        response = client.put(f"/records/{record_id}", json=record_payload(name="Жалоба", status="rejected"))

        assert response.status_code == 200
        assert response.json()["id"] == record_id
        assert response.json()["name"] == "Жалоба"

    def test_unknown_record(self, client):
        assert client.get("/records/_missing").status_code == 404
        assert client.put("/records/_missing", json=record_payload()).status_code == 404

    def test_list_with_search_and_sort(self, client):
        client.post("/records", json=record_payload(date="2024-01-01", correspondent="Иванова"))
        client.post("/records", json=record_payload(date="2024-02-01", correspondent="Петров"))

        response = client.get("/records", params={"q": "ивано"})
        assert [r["correspondent"] for r in response.json()["records"]] == ["Иванова"]

        response = client.get("/records", params={"sort": "date"})
        body = response.json()
        assert body["sort_direction"] == "asc"
        assert [r["date"] for r in body["records"]] == ["2024-01-01", "2024-02-01"]

    def test_list_uses_view_defaults(self, client):
        client.post("/records", json=record_payload(date="2024-01-01"))
        client.post("/records", json=record_payload(date="2024-02-01"))

        body = client.get("/records").json()
        assert (body["sort_key"], body["sort_direction"]) == ("date", "desc")
        assert [r["date"] for r in body["records"]] == ["2024-02-01", "2024-01-01"]

    def test_invalid_sort_key(self, client):
        assert client.get("/records", params={"sort": "priority"}).status_code == 400


class TestViewAPI:
    """Test sort toggling and search state."""

    def test_toggle_sort(self, client):
        assert client.post("/view/sort/date").json()["sort_direction"] == "asc"
        assert client.post("/view/sort/date").json()["sort_direction"] == "desc"

        body = client.post("/view/sort/name").json()
        assert (body["sort_key"], body["sort_direction"]) == ("name", "asc")

    def test_search_state(self, client):
        client.post("/records", json=record_payload(name="Запрос"))
        client.post("/records", json=record_payload(name="Жалоба"))

        client.put("/view/search", json={"search": "жало"})
        body = client.get("/records").json()
        assert [r["name"] for r in body["records"]] == ["Жалоба"]

    def test_invalid_toggle(self, client):
        assert client.post("/view/sort/priority").status_code == 400


class TestMetaAndStatsAPI:
    """Test metadata, stats and warning endpoints."""

    def test_meta(self, client):
        response = client.put("/meta", json={"title": "Дело", "caseId": "А40"})
        assert response.json() == {"title": "Дело", "applicant": "", "addressee": "", "caseId": "А40"}

        response = client.put("/meta", json={"applicant": "Иванов"})
        assert response.json()["title"] == "Дело"
        assert response.json()["applicant"] == "Иванов"

    def test_stats(self, client):
        for status in ["satisfied", "satisfied", "satisfied", "ignored"]:
            client.post("/records", json=record_payload(status=status))

        stats = client.get("/stats").json()
        assert stats == {"total": 4, "final_success": 3, "fail": 1, "closed": 4, "efficiency": 75}

    def test_warning(self, client):
        assert client.get("/warning").json() == {"dismissed": False}
        assert client.post("/warning/dismiss").json() == {"dismissed": True}
        assert client.get("/warning").json() == {"dismissed": True}


class TestConfirmationAPI:
    """Test the two-step delete and reset endpoints."""

    def test_delete_requires_confirmation(self, client):
        record_id = client.post("/records", json=record_payload()).json()["id"]

        pending = client.post(f"/records/{record_id}/delete-request").json()
        assert pending["kind"] == "delete_one"
        assert client.get(f"/records/{record_id}").status_code == 200
        assert client.get("/pending").json()["target_id"] == record_id

        confirmed = client.post("/pending/confirm").json()
        assert confirmed["executed"] is True
        assert client.get(f"/records/{record_id}").status_code == 404
        assert client.get("/pending").json() is None

    def test_cancel_reset(self, client):
        client.post("/records", json=record_payload())
        client.post("/reset-request")

        cancelled = client.post("/pending/cancel").json()
        assert cancelled["executed"] is False
        assert cancelled["action"]["kind"] == "clear_all"
        assert client.get("/health").json()["record_count"] == 1

    def test_confirm_reset(self, client):
        client.post("/records", json=record_payload())
        client.put("/meta", json={"title": "Дело"})
        client.post("/reset-request")
        client.post("/pending/confirm")

        assert client.get("/health").json()["record_count"] == 0
        assert client.get("/meta").json()["title"] == ""


class TestCsvAPI:
    """Test export download and import upload."""

    def test_export_and_reimport(self, client, session):
        client.put("/meta", json={"title": "Дело", "caseId": "А40"})
        client.post("/records", json=record_payload(note='с "кавычками"; и точкой с запятой'))

        response = client.get("/export")
        assert response.status_code == 200
        assert "attachment" in response.headers["content-disposition"]
        text = response.content.decode("utf-8")
        assert text.startswith(BOM)

        again = client.post("/import", content=response.content).json()
        assert again == {"added": 0, "malformed": 0, "duplicates": 1, "meta_applied": True}

        other = ChronologySession(RecordStore(InMemoryStorage()))
        main.app.dependency_overrides[get_session] = lambda: other
        report = client.post("/import", content=response.content).json()
        assert report["added"] == 1
        assert other.store.list_records() == session.store.list_records()
        assert other.store.meta == session.store.meta
