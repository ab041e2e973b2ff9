"""HTTP surface (FastAPI TestClient, default engine swapped for a local one)."""

import pytest
from fastapi.testclient import TestClient

from app_fastapi import app
from mt_brain import mt_engine


@pytest.fixture
def client(engine, monkeypatch):
    monkeypatch.setattr(mt_engine, "_default_engine", engine)
    return TestClient(app)


def test_health(client):
    res = client.get("/")
    assert res.status_code == 200
    assert res.json() == {"message": "MT classification assistant is running"}


class TestMessage:

    def test_new_session_is_issued(self, client):
        res = client.post("/api/mt/message", json={"text": "We need to replace a pump"})
        assert res.status_code == 200
        data = res.json()
        assert data["session_id"]
        assert data["stage"] == "collecting_original_mfg"
        assert data["next_question"] == "original_manufacturer"
        assert data["classification"] is None

    def test_turns_share_a_session(self, client):
        first = client.post("/api/mt/message", json={"text": "We need to replace a pump"}).json()
        sid = first["session_id"]
        client.post("/api/mt/message", json={"session_id": sid, "text": "The current one is from Westinghouse"})
        client.post("/api/mt/message", json={"session_id": sid, "text": "ABB"})
        data = client.post("/api/mt/message", json={"session_id": sid, "text": "no"}).json()
        assert data["session_id"] == sid
        assert data["classification"]["design_type"] == "III"
        assert data["assessment"]["band"] in ("needs_review", "moderate", "high")
        assert data["updated_attributes"]["replacement_manufacturer"] == "abb"

    def test_missing_text(self, client):
        assert client.post("/api/mt/message", json={"session_id": "x"}).status_code == 422


class TestSessionEndpoints:

    def test_reset(self, client):
        client.post("/api/mt/message", json={"session_id": "api-reset", "text": "Replace the Fisher valve with a Fisher valve"})
        data = client.post("/api/mt/reset", json={"session_id": "api-reset"}).json()
        assert data["scenario_number"] == 2
        assert data["scenario_history"][0]["title"] == "Valve Replacement"

    def test_finalize(self, client):
        client.post("/api/mt/message", json={"session_id": "api-fin", "text": "Replace the Fisher valve with a Fisher valve"})
        data = client.post("/api/mt/finalize", json={"session_id": "api-fin"}).json()
        assert data["stage"] == "archived"
        assert data["scenario_history"][0]["classification"]["design_type"] == "V"

    def test_finalize_unknown_session(self, client):
        res = client.post("/api/mt/finalize", json={"session_id": "never-seen"})
        assert res.status_code == 404


class TestStateless:

    def test_classify_record(self, client):
        res = client.post(
            "/api/mt/classify",
            json={
                "equipment_type": "pump",
                "original_manufacturer": "westinghouse",
                "replacement_manufacturer": "abb",
                "has_equivalency_docs": False,
                "safety_marker": "SC",
            },
        )
        assert res.status_code == 200
        data = res.json()
        assert data["classification"]["design_type"] == "III"
        assert data["classification"]["confidence"] == pytest.approx(0.3)
        assert "Safety Analysis" in [o["type"] for o in data["expected_outputs"]]

    def test_classify_rejects_unknown_safety_class(self, client):
        res = client.post("/api/mt/classify", json={"equipment_type": "pump", "safety_marker": "XX"})
        assert res.status_code == 422

    def test_questionnaire(self, client):
        res = client.post("/api/mt/questionnaire", json={"is_temporary": True})
        assert res.status_code == 200
        assert res.json()["classification"]["design_type"] == "IV"


def test_every_route_is_reachable_by_path():
    paths = {getattr(r, "path", None) for r in app.routes}
    assert {"/", "/api/mt/message", "/api/mt/reset", "/api/mt/finalize"} <= paths
