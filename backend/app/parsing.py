# app/parsing.py
"""
Parsing boundary for model output.

The model is asked for JSON but may wrap it in prose or return nothing usable.
Everything past this module works with a ModelTurnResult and never looks at
the raw text again.
"""
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

from app.profiles import DifficultyProfile

logger = logging.getLogger(__name__)

STANCES = ("agree", "disagree", "mixed")
OUTCOMES = ("student", "ai", "mixed")

FALLBACK_REPLY = "That's an interesting point! Here's another way to think about it."
EMPTY_REPLY = "Interesting point! Here's something to consider..."

DEFAULT_EXPLAIN_STEPS = [
    "🔍 Find the main idea",
    "🎯 Give one counterpoint",
    "🧩 Add an example",
    "🤝 Suggest compromise",
]
DEFAULT_STRATEGY = "give a polite counterpoint and reflection"


@dataclass(frozen=True)
class ModelTurnResult:
    reply: str
    stance: str
    outcome: str
    raw_score: float
    concession: float
    student_strength: float


@dataclass(frozen=True)
class ParsedReply:
    result: ModelTurnResult


@dataclass(frozen=True)
class FallbackReply:
    result: ModelTurnResult
    reason: str


TurnParse = Union[ParsedReply, FallbackReply]


def extract_json_object(text: str) -> Optional[Dict[str, Any]]:
    """Parse the span from the first '{' to the last '}' as a JSON object."""
    if not text:
        return None
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        return None
    try:
        parsed = json.loads(text[start:end + 1])
    except (ValueError, RecursionError):
        return None
    return parsed if isinstance(parsed, dict) else None


def _get_float(data: Dict[str, Any], key: str, default: float) -> float:
    value = data.get(key)
    if isinstance(value, bool) or value is None:
        return default
    if not isinstance(value, (int, float, str)):
        return default
    try:
        result = float(value.strip() if isinstance(value, str) else value)
    except (OverflowError, ValueError):
        logger.debug("[PARSE] Could not convert %r value %.40r to float", key, value)
        return default
    if result != result:  # NaN
        return default
    return result


def _unit(value: float) -> float:
    return max(0.0, min(1.0, value))


def _choice(data: Dict[str, Any], key: str, allowed, default: str) -> str:
    value = data.get(key)
    if isinstance(value, str) and value.strip().lower() in allowed:
        return value.strip().lower()
    return default


def _fallback(profile: DifficultyProfile, reason: str) -> FallbackReply:
    logger.warning("[PARSE] Model output unusable (%s); using neutral turn", reason)
    return FallbackReply(
        result=ModelTurnResult(
            reply=FALLBACK_REPLY,
            stance="mixed",
            outcome="mixed",
            raw_score=profile.bias_score,
            concession=0.0,
            student_strength=0.5,
        ),
        reason=reason,
    )


def parse_model_output(text: str, profile: DifficultyProfile) -> TurnParse:
    if not text or "{" not in text or "}" not in text:
        return _fallback(profile, "no JSON object found")
    data = extract_json_object(text)
    if data is None:
        return _fallback(profile, "invalid JSON")

    reply = data.get("reply")
    reply = reply.strip() if isinstance(reply, str) else ""

    return ParsedReply(
        result=ModelTurnResult(
            reply=reply or EMPTY_REPLY,
            stance=_choice(data, "stance", STANCES, "mixed"),
            outcome=_choice(data, "outcome", OUTCOMES, "mixed"),
            raw_score=_get_float(data, "score", profile.bias_score),
            concession=_unit(_get_float(data, "concession", 0.0)),
            student_strength=_unit(_get_float(data, "student_strength", 0.5)),
        )
    )


def parse_explain_output(text: str, student: str) -> Dict[str, Any]:
    data = extract_json_object(text)
    if data is None:
        return {
            "extracted_claim": student[:140],
            "stance": "mixed",
            "strategy": DEFAULT_STRATEGY,
            "steps": list(DEFAULT_EXPLAIN_STEPS),
        }

    raw_steps = data.get("steps")
    steps: List[str] = []
    if isinstance(raw_steps, list):
        steps = [str(s).strip() for s in raw_steps if str(s).strip()]
    claim = data.get("extracted_claim")
    strategy = data.get("strategy")
    return {
        "extracted_claim": claim if isinstance(claim, str) and claim.strip() else student[:140],
        "stance": _choice(data, "stance", STANCES, "mixed"),
        "strategy": strategy if isinstance(strategy, str) and strategy.strip() else DEFAULT_STRATEGY,
        "steps": steps or list(DEFAULT_EXPLAIN_STEPS),
    }
