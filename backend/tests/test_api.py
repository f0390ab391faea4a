"""HTTP tests for app/main.py via FastAPI's TestClient."""

import pytest
from fastapi.testclient import TestClient

from app.llm import ModelCallError
from app.main import app, get_language_model, get_pipeline, get_session_log
from app.moderation import ModerationGate, StrikeTracker
from app.pipeline import DebatePipeline
from tests.conftest import FakeModel, FixedRandom, model_json

ARGUMENT = "Longer recess lets kids move around so they can focus better in class afterwards."


@pytest.fixture
def model() -> FakeModel:
    return FakeModel(reply=model_json())


@pytest.fixture
def client(model, session_log):
    pipeline = DebatePipeline(
        model=model, gate=ModerationGate(StrikeTracker(), threshold=2), round_limit=5, rng=FixedRandom()
    )
    app.dependency_overrides[get_pipeline] = lambda: pipeline
    app.dependency_overrides[get_session_log] = lambda: session_log
    app.dependency_overrides[get_language_model] = lambda: model
    yield TestClient(app)
    app.dependency_overrides.clear()


def _post_turn(client, **fields):
    body = {"message": ARGUMENT, "difficulty": "Normal", "round": 1, "studentKey": "amy-b"}
    body.update(fields)
    return client.post("/api/debate", json=body)


def test_debate_turn_camel_case_response(client):
    resp = _post_turn(client, topic="Longer recess", studentSide="pro")
    assert resp.status_code == 200
    data = resp.json()
    assert data["reply"] == "Uniforms can also save families money."
    assert data["round"] == 1
    assert data["nextRound"] == 2
    assert data["endDebate"] is False
    assert set(data["hud"]) == {"meter", "leader", "label"}
    assert data["hud"]["meter"] == int(data["score"] * 100 + 0.5)
    assert data["hint"] is None


def test_turn_is_recorded(client, session_log):
    _post_turn(client)
    assert session_log.turns_path.exists()


def test_missing_message_is_400(client, model):
    resp = client.post("/api/debate", json={"difficulty": "Normal", "round": 1})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Missing message"
    assert model.prompts == []


def test_bad_round_is_friendly_422(client):
    resp = _post_turn(client, round=0)
    assert resp.status_code == 422
    assert resp.json()["error"] == "Round must be a whole number starting at 1."


def test_too_long_message_is_422(client):
    resp = _post_turn(client, message="a" * 10001)
    assert resp.status_code == 422
    assert "too long" in resp.json()["detail"]


def test_violation_response_shape(client):
    first = _post_turn(client, message="Go kill yourself").json()
    assert first == {
        "violation": True,
        "category": "sensitive",
        "allowRetry": True,
        "endDebate": False,
        "instructions": first["instructions"],
        "round": 1,
    }
    second = _post_turn(client, message="kill yourself now").json()
    assert second["endDebate"] is True
    assert second["allowRetry"] is False


def test_model_failure_is_generic_502(client, model):
    model.error = ModelCallError("upstream 500: secret details")
    resp = _post_turn(client)
    assert resp.status_code == 502
    body = resp.json()
    assert body["error"] == "Failed to get a response, please try again."
    assert "secret" not in resp.text


def test_no_model_configured_is_503(client, session_log):
    app.dependency_overrides[get_pipeline] = lambda: DebatePipeline(
        model=None, gate=ModerationGate(StrikeTracker())
    )
    resp = _post_turn(client)
    assert resp.status_code == 503


def test_explain(client, model):
    model.reply = '{"extracted_claim": "Recess helps focus", "stance": "disagree", "strategy": "counter", "steps": ["🔍 one"]}'
    resp = client.post("/api/explain", json={"student": ARGUMENT, "reply": "But class time matters."})
    assert resp.status_code == 200
    assert resp.json()["steps"] == ["🔍 one"]


def test_explain_requires_both_fields(client):
    resp = client.post("/api/explain", json={"student": ARGUMENT})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Missing student or reply"


def test_explain_model_failure(client, model):
    model.error = ModelCallError("nope")
    resp = client.post("/api/explain", json={"student": ARGUMENT, "reply": "x"})
    assert resp.status_code == 502


def test_finish_session_summary(client):
    _post_turn(client, round=1)
    _post_turn(client, round=2)
    _post_turn(client, round=3, message="Go kill yourself")
    resp = client.post("/api/session/finish", json={"studentKey": "amy-b"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["roundsPlayed"] == 2
    assert data["violationCount"] == 1
    assert data["finalWinner"] in ("ai", "student", "tie")
    assert data["avgReadability"] is not None


def test_health(client):
    resp = client.get("/v1/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"
