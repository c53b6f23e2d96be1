import time

import pytest
from fastapi.testclient import TestClient

from services.studio_service.main import app


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setenv("STORY_CLIENT", "mock")
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    with TestClient(app) as c:
        yield c


def _wait_for_settlement(client, attempts=50):
    for _ in range(attempts):
        session = client.get("/api/session").json()
        if session["status"] not in ("idle", "in_flight"):
            return session
        time.sleep(0.01)
    raise AssertionError("generation did not settle")


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert response.json()["session_status"] == "idle"


def test_metrics_endpoint(client):
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "generation_submissions_total" in response.text


def test_get_parameters_defaults(client):
    data = client.get("/api/parameters").json()
    assert data["values"] == {
        "prompt": "",
        "type": "story",
        "temperature": 0.8,
        "top_k": 50,
        "top_p": 0.95,
        "max_new_tokens": 150,
    }
    assert data["submittable"] is False
    assert data["ranges"]["temperature"]["maximum"] == 1.5
    assert "your story" in data["placeholder"]


def test_patch_parameters_clamps_numbers(client):
    response = client.patch(
        "/api/parameters",
        json={"prompt": "A rainy day in Tokyo", "type": "poem", "temperature": 9, "top_k": 0},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["values"]["type"] == "poem"
    assert data["values"]["temperature"] == 1.5
    assert data["values"]["top_k"] == 1
    assert data["submittable"] is True
    assert "your poem" in data["placeholder"]


@pytest.mark.parametrize(
    "body",
    [
        {"temperature": "hot"},
        {"top_k": 3.5},
        {"type": "limerick"},
        {"max_new_tokens": 500},
    ],
)
def test_patch_parameters_rejects_bad_edits(client, body):
    response = client.patch("/api/parameters", json=body)
    assert response.status_code == 400
    assert "error" in response.json()
    assert client.get("/api/parameters").json()["values"]["temperature"] == 0.8


def test_generate_with_blank_prompt_is_ignored(client):
    client.patch("/api/parameters", json={"prompt": "   "})

    response = client.post("/api/generate")

    assert response.status_code == 200
    assert response.json()["accepted"] is False
    assert response.json()["session"]["status"] == "idle"


def test_generate_runs_to_success(client):
    client.patch("/api/parameters", json={"prompt": "A rainy day in Tokyo"})

    response = client.post("/api/generate")

    assert response.status_code == 202
    body = response.json()
    assert body["accepted"] is True
    assert body["session"]["request"]["type"] == "story"

    session = _wait_for_settlement(client)
    assert session["status"] == "succeeded"
    assert session["result_text"].startswith("[MOCK] Once upon a time")
    assert session["error_message"] is None


def test_websocket_streams_session_transitions(client):
    client.patch("/api/parameters", json={"prompt": "Autumn leaves", "type": "poem"})

    with client.websocket_connect("/ws") as ws:
        first = ws.receive_json()
        assert first["type"] == "session"
        assert first["session"]["status"] == "idle"

        assert client.post("/api/generate").status_code == 202

        statuses = [ws.receive_json()["session"]["status"] for _ in range(2)]
        assert statuses == ["in_flight", "succeeded"]


def test_websocket_connecting_after_settlement_gets_latest_session(client):
    client.patch("/api/parameters", json={"prompt": "A rainy day in Tokyo"})
    assert client.post("/api/generate").status_code == 202
    settled = _wait_for_settlement(client)

    with client.websocket_connect("/ws") as ws:
        first = ws.receive_json()["session"]

    assert first["status"] == "succeeded"
    assert first["result_text"] == settled["result_text"]
