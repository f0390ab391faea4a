# app/settings.py
"""Environment-driven configuration for the debate backend."""
import logging
import os
from dataclasses import dataclass
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    openai_api_key: Optional[str] = None
    model: str = "gpt-4o-mini"
    temperature: float = 0.7
    timeout_sec: float = 30.0
    round_limit: int = 5
    strike_threshold: int = 2
    moderation_classifier: bool = False
    session_log_dir: str = "./sessions"
    session_log_enabled: bool = True
    cors_origins: tuple = ("*",)
    log_level: str = "INFO"

    def __post_init__(self):
        if self.round_limit < 1:
            raise ValueError(f"ROUND_LIMIT must be >= 1, got {self.round_limit}")
        if self.strike_threshold < 1:
            raise ValueError(f"STRIKE_THRESHOLD must be >= 1, got {self.strike_threshold}")
        if self.timeout_sec <= 0:
            raise ValueError(f"MODEL_TIMEOUT_SEC must be positive, got {self.timeout_sec}")

    @classmethod
    def from_env(cls) -> "Settings":
        cors_env = os.getenv("CORS_ORIGINS", "*")
        cors: List[str] = ["*"] if cors_env == "*" else [o.strip() for o in cors_env.split(",") if o.strip()]
        return cls(
            openai_api_key=os.getenv("OPENAI_API_KEY") or None,
            model=os.getenv("DEBATE_MODEL", "gpt-4o-mini"),
            temperature=float(os.getenv("MODEL_TEMPERATURE", "0.7")),
            timeout_sec=float(os.getenv("MODEL_TIMEOUT_SEC", "30")),
            round_limit=int(os.getenv("ROUND_LIMIT", "5")),
            strike_threshold=int(os.getenv("STRIKE_THRESHOLD", "2")),
            moderation_classifier=_env_flag("MODERATION_CLASSIFIER", False),
            session_log_dir=os.getenv("SESSION_LOG_DIR", "./sessions"),
            session_log_enabled=_env_flag("SESSION_LOG_ENABLED", True),
            cors_origins=tuple(cors),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
