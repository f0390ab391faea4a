"""Shared pytest fixtures."""

import json
import os

# Keep imports of app.main from touching the real network or disk.
os.environ.setdefault("SESSION_LOG_ENABLED", "0")
os.environ.pop("OPENAI_API_KEY", None)

import pytest

from app.moderation import ModerationGate, StrikeTracker
from app.pipeline import DebatePipeline
from app.profiles import get_profile
from app.session_log import SessionLog


class FixedRandom:
    """Random source with pinned jitter and upset rolls."""

    def __init__(self, jitter: float = 0.0, roll: float = 1.0):
        self.jitter = jitter
        self.roll = roll

    def uniform(self, a: float, b: float) -> float:
        return max(a, min(b, self.jitter))

    def random(self) -> float:
        return self.roll


class FakeModel:
    """Language model double that returns canned text and remembers prompts."""

    def __init__(self, reply="", error=None):
        self.reply = reply
        self.error = error
        self.prompts = []

    def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.reply


def model_json(**fields) -> str:
    payload = {
        "reply": "Uniforms can also save families money.",
        "stance": "disagree",
        "outcome": "ai",
        "score": 0.6,
        "concession": 0.1,
        "student_strength": 0.4,
    }
    payload.update(fields)
    return "Here you go:\n" + json.dumps(payload) + "\nGood luck!"


@pytest.fixture
def fixed_rng() -> FixedRandom:
    return FixedRandom()


@pytest.fixture
def normal_profile():
    return get_profile("Normal")


@pytest.fixture
def strikes() -> StrikeTracker:
    return StrikeTracker()


@pytest.fixture
def gate(strikes) -> ModerationGate:
    return ModerationGate(strikes, threshold=2)


@pytest.fixture
def fake_model() -> FakeModel:
    return FakeModel(reply=model_json())


@pytest.fixture
def pipeline(fake_model, gate, fixed_rng) -> DebatePipeline:
    return DebatePipeline(model=fake_model, gate=gate, round_limit=5, rng=fixed_rng)


@pytest.fixture
def session_log(tmp_path) -> SessionLog:
    return SessionLog(str(tmp_path / "sessions"), enabled=True)
