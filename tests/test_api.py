from datetime import timezone

import pytest
from fastapi.testclient import TestClient

import api
from runcal_engine.runner import CalorieRunner
from runcal_engine.store import MemoryStore


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setattr(api, "runner", CalorieRunner(MemoryStore(), tz=timezone.utc))
    return TestClient(api.app)


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200 and r.json() == {"status": "ok"}


def test_example_payloads_are_accepted(client):
    ex = client.get("/example").json()
    assert client.post("/settings", json=ex["settings"]).status_code == 200
    assert client.post("/runs", json=ex["run"]).status_code == 200
    assert client.post("/estimate", json=ex["estimate"]).json()["calories_rounded"] == 770


def test_app_data(client):
    r = client.get("/app-data")
    assert r.status_code == 200
    body = r.json()
    assert body["settings"]["activity_level"] == "medium"
    assert body["today_summary"]["date"] == body["today"]


def test_save_run_and_summaries(client):
    r = client.post("/runs", json={"date": "2024-06-01", "distance_km": 10, "duration_min": 60, "weight_kg": 70})
    assert r.status_code == 200
    assert r.json()["calories"] == 770
    assert r.json()["summary"] == {"date": "2024-06-01", "total_calories": 770, "count": 1}

    client.post("/runs", json={"date": "2024-06-01", "distance_km": "5", "weight_kg": "70"})
    daily = client.get("/summary/daily", params={"date": "2024-06-01"}).json()
    assert daily == {"date": "2024-06-01", "total_calories": 1133, "count": 2}

    monthly = client.get("/summary/monthly", params={"date": "2024-06-15"}).json()
    assert monthly["month_key"] == "2024-06"
    assert monthly["days_elapsed"] == 15
    assert monthly["running_total"] == 1133

    records = client.get("/runs").json()["records"]
    assert len(records) == 2
    assert records[0]["date"].startswith("2024-06-01")


def test_save_settings(client):
    r = client.post("/settings", json={"gender": "male", "age": "abc", "monthly_goal_kg": -2})
    assert r.status_code == 200
    body = r.json()
    assert body["settings"]["age"] == 0
    assert body["monthly_summary"]["bmr_per_day"] == 0
    assert body["monthly_summary"]["goal_type"] == "deficit"


def test_bad_date_parameter(client):
    assert client.get("/summary/daily", params={"date": "June 1"}).status_code == 400
    assert client.get("/summary/monthly", params={"date": "2024-02-30"}).status_code == 400


def test_default_daily_is_today(client):
    r = client.get("/summary/daily")
    assert r.status_code == 200
    assert r.json()["count"] == 0


def test_estimate_insufficient_input(client):
    r = client.post("/estimate", json={"distance_km": 5})
    assert r.json() == {"calories": 0, "calories_rounded": 0}
