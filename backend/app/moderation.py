# app/moderation.py
"""
Moderation gate for student messages.

A message is checked against the hard-ban and profanity pattern lists (and,
when configured, an external classifier). Violations add a strike for the
student; reaching the strike threshold ends the debate. A clean message wipes
earlier strikes.
"""
import logging
import re
import threading
from dataclasses import dataclass
from typing import Dict, Optional, Protocol, Sequence

from app.wordlists import HARD_BAN_PATTERNS, PROFANITY_PATTERNS

logger = logging.getLogger(__name__)

WARNING_INSTRUCTIONS = (
    "Let's keep this school-safe! That message included words or topics we can't use here. "
    "Please rephrase your argument respectfully and try again."
)
STOP_INSTRUCTIONS = (
    "This debate has ended because inappropriate language came up more than once. "
    "Please talk with your teacher before starting a new debate."
)


class ModerationClassifier(Protocol):
    def is_flagged(self, text: str) -> bool: ...


def _compile(patterns: Sequence[str]) -> tuple:
    return tuple(re.compile(p, re.IGNORECASE) for p in patterns)


class StrikeTracker:
    """Per-student strike counts for the lifetime of the process."""

    def __init__(self):
        self._strikes: Dict[str, int] = {}
        self._lock = threading.Lock()

    def get(self, student_key: str) -> int:
        with self._lock:
            return self._strikes.get(student_key, 0)

    def add_strike(self, student_key: str) -> int:
        with self._lock:
            count = self._strikes.get(student_key, 0) + 1
            self._strikes[student_key] = count
            return count

    def clear(self, student_key: str) -> bool:
        """Reset a student's strikes. Returns True if there was anything to reset."""
        with self._lock:
            if self._strikes.get(student_key, 0) > 0:
                self._strikes[student_key] = 0
                return True
            return False


@dataclass(frozen=True)
class ModerationVerdict:
    violation: bool
    category: Optional[str] = None
    allow_retry: bool = True
    end_debate: bool = False
    instructions: Optional[str] = None
    strikes: int = 0
    reason: Optional[str] = None  # "hard_ban" | "language" | "classifier"

    @classmethod
    def clear(cls) -> "ModerationVerdict":
        return cls(violation=False)


class ModerationGate:
    def __init__(
        self,
        strikes: StrikeTracker,
        threshold: int = 2,
        classifier: Optional[ModerationClassifier] = None,
        hard_ban_patterns: Sequence[str] = HARD_BAN_PATTERNS,
        profanity_patterns: Sequence[str] = PROFANITY_PATTERNS,
    ):
        if threshold < 1:
            raise ValueError("threshold must be >= 1")
        self.strikes = strikes
        self.threshold = threshold
        self.classifier = classifier
        self._hard_ban = _compile(hard_ban_patterns)
        self._profanity = _compile(profanity_patterns)

    @staticmethod
    def _matches(patterns: Sequence[re.Pattern], text: str) -> bool:
        return any(p.search(text) for p in patterns)

    def _classifier_flags(self, message: str) -> bool:
        if self.classifier is None:
            return False
        try:
            return bool(self.classifier.is_flagged(message))
        except Exception as exc:
            # fail open
            logger.warning("[MODERATION] Classifier call failed, treating as not flagged: %s", exc)
            return False

    def classify(self, message: str) -> Optional[str]:
        """Return the violation reason for a message, or None when it is clean."""
        if self._matches(self._hard_ban, message):
            return "hard_ban"
        if self._classifier_flags(message):
            return "classifier"
        if self._matches(self._profanity, message):
            return "language"
        return None

    def check(self, message: str, student_key: str) -> ModerationVerdict:
        reason = self.classify(message)

        if reason is None:
            if self.strikes.clear(student_key):
                logger.info("[MODERATION] Clean turn, strikes reset for %s", student_key)
            return ModerationVerdict.clear()

        count = self.strikes.add_strike(student_key)
        logger.info(
            "[MODERATION] Violation (%s) for %s: strike %d/%d",
            reason, student_key, count, self.threshold,
        )
        if count >= self.threshold:
            return ModerationVerdict(
                violation=True,
                category="sensitive",
                allow_retry=False,
                end_debate=True,
                instructions=STOP_INSTRUCTIONS,
                strikes=count,
                reason=reason,
            )
        return ModerationVerdict(
            violation=True,
            category="sensitive",
            allow_retry=True,
            end_debate=False,
            instructions=WARNING_INSTRUCTIONS,
            strikes=count,
            reason=reason,
        )
