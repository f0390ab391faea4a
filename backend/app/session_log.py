# app/session_log.py
"""
Per-turn and per-session records for teachers.

Turns go to turns.csv, one row each; a finished session appends one JSON line
to sessions.jsonl. Write errors are logged, never raised.
"""
import csv
import json
import logging
import re
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

TURN_FIELDS = [
    "timestamp", "student_key", "round", "student_text", "ai_reply", "word_count",
    "readability", "meter", "leader", "latency_ms", "status", "category",
]

_VOWEL_GROUPS = re.compile(r"[aeiouy]+")
_SENTENCE_END = re.compile(r"[.!?]+")
_WORD = re.compile(r"[A-Za-z']+")


def count_syllables(word: str) -> int:
    word = word.lower().strip("'")
    if not word:
        return 0
    groups = len(_VOWEL_GROUPS.findall(word))
    if word.endswith("e") and not word.endswith(("le", "ee")) and groups > 1:
        groups -= 1
    return max(1, groups)


def readability(text: str) -> Optional[float]:
    """Flesch reading ease, clamped to [0, 100]. None for text without words."""
    words = _WORD.findall(text or "")
    if not words:
        return None
    sentences = max(1, len([s for s in _SENTENCE_END.split(text) if s.strip()]))
    syllables = sum(count_syllables(w) for w in words)
    score = 206.835 - 1.015 * (len(words) / sentences) - 84.6 * (syllables / len(words))
    return round(max(0.0, min(100.0, score)), 1)


@dataclass
class TurnRecord:
    student_key: str
    round: int
    student_text: str
    ai_reply: str
    word_count: int
    readability: Optional[float]
    meter: Optional[int]
    leader: Optional[str]
    latency_ms: int
    status: str          # "ok" | "violation" | "closed"
    category: str = ""


@dataclass
class _SessionStats:
    rounds: int = 0
    violations: int = 0
    readability: List[float] = field(default_factory=list)
    last_leader: Optional[str] = None


class SessionLog:
    def __init__(self, directory: str, enabled: bool = True):
        self.directory = Path(directory)
        self.enabled = enabled
        # Entries leave only via write_summary; abandoned sessions stay until restart.
        self._stats: Dict[str, _SessionStats] = {}
        self._lock = threading.Lock()

    @property
    def turns_path(self) -> Path:
        return self.directory / "turns.csv"

    @property
    def sessions_path(self) -> Path:
        return self.directory / "sessions.jsonl"

    def record_turn(self, record: TurnRecord) -> None:
        with self._lock:
            stats = self._stats.setdefault(record.student_key, _SessionStats())
            if record.status == "ok":
                stats.rounds += 1
                stats.last_leader = record.leader
                if record.readability is not None:
                    stats.readability.append(record.readability)
            elif record.status == "violation":
                stats.violations += 1

            if not self.enabled:
                return
            row = {"timestamp": _now(), **{k: getattr(record, k) for k in TURN_FIELDS[1:]}}
            try:
                self.directory.mkdir(parents=True, exist_ok=True)
                new_file = not self.turns_path.exists()
                with self.turns_path.open("a", newline="", encoding="utf-8") as f:
                    writer = csv.DictWriter(f, fieldnames=TURN_FIELDS)
                    if new_file:
                        writer.writeheader()
                    writer.writerow(row)
            except OSError as exc:
                logger.error("[SESSION] Could not write turn for %s: %s", record.student_key, exc)

    def write_summary(self, student_key: str, final_winner: Optional[str] = None) -> dict:
        with self._lock:
            stats = self._stats.pop(student_key, _SessionStats())
            avg = round(sum(stats.readability) / len(stats.readability), 1) if stats.readability else None
            summary = {
                "timestamp": _now(),
                "student_key": student_key,
                "rounds_played": stats.rounds,
                "final_winner": final_winner or _winner_from_leader(stats.last_leader),
                "violation_count": stats.violations,
                "avg_readability": avg,
            }
            if self.enabled:
                try:
                    self.directory.mkdir(parents=True, exist_ok=True)
                    with self.sessions_path.open("a", encoding="utf-8") as f:
                        f.write(json.dumps(summary) + "\n")
                except OSError as exc:
                    logger.error("[SESSION] Could not write summary for %s: %s", student_key, exc)
            logger.info("[SESSION] Summary for %s: %s", student_key, summary)
            return summary


def _winner_from_leader(leader: Optional[str]) -> str:
    if leader == "ai":
        return "ai"
    if leader == "student":
        return "student"
    return "tie"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")
