# app/scoring.py
"""
Turn scoring: reshape the model's self-reported score into the HUD score.

Scores run from 0 (student fully ahead) to 1 (AI fully ahead). The model's own
number is noisy, so it is damped toward the tier's bias, nudged by stance and
concession, pulled up for very short answers, jittered slightly, and finally
passed through per-tier guardrails. The order of these steps matters.
"""
import math
import random
from dataclasses import dataclass
from typing import Optional, Protocol, Tuple

from app.profiles import DifficultyProfile

AI_THRESHOLD = 0.52
STUDENT_THRESHOLD = 0.48

JITTER = 0.02
STRONG_STUDENT = 0.6
STRONG_STUDENT_CREDIT = 0.03
VERY_LOW_EFFORT_WORDS = 4
LOW_EFFORT_WORDS = 8

BEGINNER_CEILING = 0.40
UPSET_STRENGTH = 0.9
UPSET_CHANCE = 0.10
UPSET_CEILING = 0.45


class RandomSource(Protocol):
    def uniform(self, a: float, b: float) -> float: ...

    def random(self) -> float: ...


_default_rng = random.Random()


def clamp(value: float, lo: float = 0.0, hi: float = 1.0) -> float:
    return max(lo, min(hi, value))


def count_words(text: str) -> int:
    return len(text.split()) if text else 0


def _as_unit_score(raw: Optional[float], fallback: float) -> float:
    if isinstance(raw, bool) or not isinstance(raw, (int, float)) or math.isnan(raw):
        return fallback
    return clamp(float(raw))


def damp(raw_score: float, profile: DifficultyProfile) -> float:
    d = profile.damping
    return raw_score * (1 - d) + profile.bias_score * d


def stance_adjustment(
    stance: str,
    concession: float,
    student_strength: float,
    profile: DifficultyProfile,
) -> float:
    tune = profile.tuning
    if profile.is_beginner or tune is None:
        return 0.0
    concession = clamp(concession)
    if stance == "agree":
        delta = tune.agree * (0.6 + 0.4 * concession)
    elif stance == "mixed":
        delta = tune.mixed * (0.5 + 0.5 * concession)
    else:
        delta = tune.counter_push * (0.3 + 0.7 * (1 - concession))
    if student_strength >= STRONG_STUDENT:
        delta -= STRONG_STUDENT_CREDIT
    return delta


def low_effort_pull(score: float, word_count: int, profile: DifficultyProfile) -> float:
    if profile.is_beginner:
        return score
    if word_count <= VERY_LOW_EFFORT_WORDS:
        weight = profile.tilt_strength
    elif word_count <= LOW_EFFORT_WORDS:
        weight = profile.tilt_strength / 2
    else:
        return score
    return score * (1 - weight) + profile.tilt_target * weight


def apply_guardrails(
    score: float,
    profile: DifficultyProfile,
    student_strength: float,
    said_something: bool,
    rng: RandomSource,
) -> float:
    if profile.is_beginner and said_something:
        score = min(score, BEGINNER_CEILING)
    elif profile.name == "Extreme" and student_strength >= UPSET_STRENGTH:
        if rng.random() < UPSET_CHANCE:
            score = min(score, UPSET_CEILING)
    return score


def shape_score(
    raw_score: Optional[float],
    stance: str,
    concession: float,
    student_strength: float,
    profile: DifficultyProfile,
    word_count: int,
    rng: Optional[RandomSource] = None,
) -> float:
    """Run the full shaping sequence and return a score in [0, 1]."""
    rng = rng or _default_rng
    score = _as_unit_score(raw_score, profile.bias_score)
    score = damp(score, profile)
    score += stance_adjustment(stance, concession, student_strength, profile)
    score = low_effort_pull(score, word_count, profile)
    score = clamp(score)
    score = clamp(score + rng.uniform(-JITTER, JITTER))
    score = apply_guardrails(score, profile, student_strength, word_count > 0, rng)
    return clamp(score)


def derive_outcome(score: float) -> str:
    if score > AI_THRESHOLD:
        return "ai"
    if score < STUDENT_THRESHOLD:
        return "student"
    return "mixed"


@dataclass(frozen=True)
class Hud:
    meter: int
    leader: str
    label: str


def to_meter(score: float) -> int:
    # half-up, not banker's rounding
    return int(math.floor(clamp(score) * 100 + 0.5))


def hud_label(meter: int, leader: str) -> str:
    if leader == "ai":
        if meter < 65:
            return "AI slightly ahead"
        if meter < 80:
            return "AI clearly ahead"
        return "AI far ahead"
    if leader == "student":
        if meter > 35:
            return "Student slightly ahead"
        if meter > 20:
            return "Student clearly ahead"
        return "Student far ahead"
    return "Neck and neck"


_LEADERS = {"ai": "ai", "student": "student", "mixed": "tied"}


def build_hud(score: float) -> Hud:
    # leader follows the unrounded score so it always agrees with the outcome
    meter = to_meter(score)
    leader = _LEADERS[derive_outcome(clamp(score))]
    return Hud(meter=meter, leader=leader, label=hud_label(meter, leader))


def round_progress(round_no: int, round_limit: int) -> Tuple[int, bool]:
    next_round = round_no + 1
    return next_round, next_round > round_limit
