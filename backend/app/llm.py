# app/llm.py
"""OpenAI-backed language model and moderation classifier."""
import logging
import time
from typing import Optional, Protocol

from app.settings import Settings

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a friendly debate partner for school students. You argue respectfully, "
    "keep everything age-appropriate, and always answer in the JSON shape you are given."
)


class ModelCallError(Exception):
    """Raised when the language model call fails or returns nothing usable."""


class LanguageModel(Protocol):
    def complete(self, prompt: str) -> str: ...


class OpenAIChatModel:
    def __init__(self, client, model: str = "gpt-4o-mini", temperature: float = 0.7):
        self.client = client
        self.model = model
        self.temperature = temperature

    def complete(self, prompt: str) -> str:
        start = time.monotonic()
        try:
            resp = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                temperature=self.temperature,
            )
        except Exception as exc:
            logger.error("[LLM] Chat completion failed: %s", exc)
            raise ModelCallError("chat completion failed") from exc

        choice = resp.choices[0] if resp.choices else None
        content = choice.message.content if choice and choice.message else None
        if not content or not content.strip():
            logger.error("[LLM] Empty response content from %s", self.model)
            raise ModelCallError("empty response content")

        usage = getattr(resp, "usage", None)
        logger.info(
            "[LLM] %s responded in %.2fs, tokens=%s",
            self.model,
            time.monotonic() - start,
            usage.total_tokens if usage else None,
        )
        return content.strip()


class OpenAIModerationClassifier:
    def __init__(self, client):
        self.client = client

    def is_flagged(self, text: str) -> bool:
        resp = self.client.moderations.create(input=text)
        return any(r.flagged for r in resp.results)


def create_client(settings: Settings):
    """Build an OpenAI client, or None when no API key is configured."""
    if not settings.openai_api_key:
        logger.warning("[LLM] OPENAI_API_KEY not set; AI opponent disabled")
        return None
    from openai import OpenAI  # OpenAI Python SDK >= 1.0

    return OpenAI(api_key=settings.openai_api_key, timeout=settings.timeout_sec, max_retries=0)


def build_model(settings: Settings, client=None) -> Optional[OpenAIChatModel]:
    client = client if client is not None else create_client(settings)
    if client is None:
        return None
    return OpenAIChatModel(client, model=settings.model, temperature=settings.temperature)


def build_classifier(settings: Settings, client=None) -> Optional[OpenAIModerationClassifier]:
    if not settings.moderation_classifier:
        return None
    client = client if client is not None else create_client(settings)
    if client is None:
        return None
    return OpenAIModerationClassifier(client)
