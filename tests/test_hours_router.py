import pytest
from fastapi.testclient import TestClient

from internhours.main import app


@pytest.fixture
def client():
    return TestClient(app)


def log(id, time_in, time_out=None, **fields):
    return {"id": id, "user_id": 7, "time_in": time_in, "time_out": time_out, **fields}


def test_index(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json() == {"message": "Hello Intern Hours"}


def test_sessions_are_split_per_day(client, at):
    payload = {
        "logs": [log(1, at("09:00"), at("12:00")), log(2, at("12:00"), at("18:30"))],
        "as_of": at("20:00"),
    }

    response = client.post("/hours/sessions", json=payload)

    assert response.status_code == 200
    days = response.json()["days"]
    assert len(days) == 1
    session = days[0]["sessions"][0]
    assert session["session"]["is_continuous_session"] is True
    assert session["accurate"]["regular_hours"] == 9.0
    assert session["raw"]["overtime_hours"] == 0.5
    assert session["raw"]["overtime_status"] == "pending"


def test_live_session_is_frozen(client, at):
    payload = {"logs": [log(1, at("09:00"))], "as_of": at("19:00"), "freeze_at": at("18:00")}

    session = client.post("/hours/sessions", json=payload).json()["days"][0]["sessions"][0]

    assert session["session"]["is_active"] is True
    assert session["accurate"]["regular_hours"] == 9.0
    assert session["raw"]["overtime_hours"] == 0.0


def test_progress_with_approved_edit(client, at):
    payload = {
        "owner_id": "7",
        "required_hours": 520,
        "include_edit_requests": True,
        "logs": [log(1, at("09:00"), at("17:00"))],
        "edit_requests": [
            {"id": 3, "log_id": 1, "requested_time_in": at("09:00"),
             "requested_time_out": at("18:00"), "status": "approved"}
        ],
    }

    response = client.post("/hours/progress", json=payload)

    assert response.status_code == 200
    body = response.json()
    assert body["internship_progress"] == 9.0
    assert body["progress_percentage"] == pytest.approx(9.0 / 520 * 100)


def test_progress_for_owner_without_logs_is_zero(client):
    response = client.post("/hours/progress", json={"owner_id": "8", "required_hours": 520, "logs": []})

    assert response.status_code == 200
    assert response.json() == {"internship_progress": 0.0, "progress_percentage": 0.0}


def test_negative_required_hours_are_rejected(client):
    response = client.post("/hours/progress", json={"owner_id": "7", "required_hours": -1, "logs": []})

    assert response.status_code == 400


def test_statistics(client, at):
    payload = {
        "owner_id": "7",
        "required_hours": 520,
        "logs": [
            log(1, at("09:00"), at("18:00")),
            log(2, at("18:00"), at("20:00"), log_type="overtime", overtime_status="rejected"),
        ],
    }

    response = client.post("/hours/statistics", json=payload)

    assert response.status_code == 200
    body = response.json()
    assert body["internship_progress"] == 9.0
    assert body["overtime_hours"]["rejected"] == 2.0
    assert body["days_worked"] == 1


def test_statistics_for_unknown_owner(client, at):
    payload = {"owner_id": "8", "required_hours": 520, "logs": [log(1, at("09:00"), at("18:00"))]}

    assert client.post("/hours/statistics", json=payload).status_code == 404


def test_invalid_payload_is_unprocessable(client):
    assert client.post("/hours/progress", json={"logs": []}).status_code == 422


def test_long_logs(client, at):
    payload = {"logs": [log(1, at("08:00"), at("18:00")), log(2, at("09:00"), at("17:00"))]}

    response = client.post("/hours/long-logs", json=payload)

    assert response.json() == {"has_long_logs": True, "count": 1, "log_ids": ["1"]}


def test_progress_accepts_numeric_owner_id(client, at):
    payload = {"owner_id": 7, "required_hours": 520, "logs": [log(1, at("09:00"), at("17:00"))]}

    response = client.post("/hours/progress", json=payload)

    assert response.status_code == 200
    assert response.json()["internship_progress"] == 8.0
    assert client.post("/hours/statistics", json=payload).status_code == 200


def test_progress_and_statistics_agree_on_future_dated_logs(client, at):
    payload = {
        "owner_id": "7",
        "required_hours": 520,
        "logs": [log(1, at("09:00"), at("17:00")), log(2, at("09:00", "2099-01-01"), at("17:00", "2099-01-01"))],
    }

    progress = client.post("/hours/progress", json=payload).json()
    statistics = client.post("/hours/statistics", json=payload).json()

    assert progress["internship_progress"] == statistics["internship_progress"] == 16.0
    assert progress["progress_percentage"] == statistics["progress_percentage"]


def test_split_long_logs(client, at):
    payload = {"logs": [log(1, at("08:00"), at("20:00")), log(2, at("09:00", "2025-03-04"), at("17:00", "2025-03-04"))]}

    response = client.post("/hours/long-logs/split", json=payload)

    assert response.status_code == 200
    body = response.json()
    assert body["split_log_ids"] == ["1"]
    assert [(record["id"], record["log_type"]) for record in body["logs"]] == [
        ("1", "regular"), ("1-overtime", "overtime"), ("2", "regular"),
    ]
    assert body["logs"][1]["overtime_status"] == "pending"
