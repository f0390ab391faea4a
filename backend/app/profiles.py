# app/profiles.py
"""
Difficulty profiles for the AI opponent.

Each tier bundles the persona text embedded in the model prompt with the
numeric constants the scorer uses to reshape the model's self-reported score.
The table is checked once at import time so a bad edit fails fast.
"""
from dataclasses import dataclass
from typing import Dict, Optional

DIFFICULTIES = ("Beginner", "Intermediate", "Normal", "Hard", "Extreme")
DEFAULT_DIFFICULTY = "Normal"


@dataclass(frozen=True)
class Tuning:
    agree: float          # negative: agreement moves the score toward the student
    mixed: float          # negative, smaller than agree
    counter_push: float   # positive: a firm counterargument moves it toward the AI


@dataclass(frozen=True)
class DifficultyProfile:
    name: str
    style: str
    bias_score: float
    damping: float
    tilt_target: float
    tilt_strength: float
    max_words: int
    tuning: Optional[Tuning] = None

    @property
    def is_beginner(self) -> bool:
        return self.name == "Beginner"


PROFILES: Dict[str, DifficultyProfile] = {
    "Beginner": DifficultyProfile(
        name="Beginner",
        style=(
            "Gentle, supportive coach. Offer 1 kind counterpoint with familiar examples.\n"
            "Concede easily when the student sounds reasonable."
        ),
        bias_score=0.35,
        damping=0.25,
        tilt_target=0.5,
        tilt_strength=0.0,
        max_words=90,
        tuning=None,
    ),
    "Intermediate": DifficultyProfile(
        name="Intermediate",
        style="Helpful and fair. Give 1-2 clear counterpoints and sometimes agree.",
        bias_score=0.45,
        damping=0.35,
        tilt_target=0.62,
        tilt_strength=0.40,
        max_words=90,
        tuning=Tuning(agree=-0.08, mixed=-0.04, counter_push=0.03),
    ),
    "Normal": DifficultyProfile(
        name="Normal",
        style=(
            "Balanced and logical. Provide 1 clear counterpoint with an example; "
            "concede only for strong reasoning."
        ),
        bias_score=0.50,
        damping=0.50,
        tilt_target=0.68,
        tilt_strength=0.55,
        max_words=90,
        tuning=Tuning(agree=-0.10, mixed=-0.05, counter_push=0.04),
    ),
    "Hard": DifficultyProfile(
        name="Hard",
        style="Analytical but kind. Address multiple aspects logically. Rarely concede.",
        bias_score=0.60,
        damping=0.65,
        tilt_target=0.72,
        tilt_strength=0.60,
        max_words=110,
        tuning=Tuning(agree=-0.13, mixed=-0.07, counter_push=0.06),
    ),
    "Extreme": DifficultyProfile(
        name="Extreme",
        style="Rigorous yet polite. Challenge assumptions logically and rarely concede.",
        bias_score=0.70,
        damping=0.75,
        tilt_target=0.76,
        tilt_strength=0.65,
        max_words=130,
        tuning=Tuning(agree=-0.17, mixed=-0.09, counter_push=0.08),
    ),
}


def get_profile(difficulty: Optional[str]) -> DifficultyProfile:
    """Look up a tier by name; anything unknown gets the Normal profile."""
    if difficulty:
        key = difficulty.strip()
        if key in PROFILES:
            return PROFILES[key]
        for name, profile in PROFILES.items():
            if name.lower() == key.lower():
                return profile
    return PROFILES[DEFAULT_DIFFICULTY]


def validate_profiles(profiles: Dict[str, DifficultyProfile]) -> None:
    missing = [d for d in DIFFICULTIES if d not in profiles]
    if missing:
        raise ValueError(f"Missing difficulty profiles: {missing}")
    for name, p in profiles.items():
        if p.name != name:
            raise ValueError(f"Profile key {name!r} does not match profile name {p.name!r}")
        for field_name in ("bias_score", "damping", "tilt_target", "tilt_strength"):
            value = getattr(p, field_name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name}.{field_name} must be in [0, 1], got {value}")
        if p.max_words < 1:
            raise ValueError(f"{name}.max_words must be positive")
        if p.tuning is None and not p.is_beginner:
            raise ValueError(f"{name} needs stance tuning constants")
        if p.tuning is not None:
            if p.tuning.agree > 0 or p.tuning.mixed > 0 or p.tuning.counter_push < 0:
                raise ValueError(f"{name} tuning has the wrong sign")


validate_profiles(PROFILES)
