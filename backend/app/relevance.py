# app/relevance.py
"""Soft on-topic check: attaches a nudge, never blocks a turn."""
from typing import Dict, Optional, Tuple

from app.profiles import DifficultyProfile

TOPIC_KEYWORDS: Dict[str, Tuple[str, ...]] = {
    "school uniforms": ("uniform", "dress code", "clothes", "clothing", "wear", "outfit"),
    "homework": ("homework", "assignment", "worksheet", "study", "practice", "after school"),
    "social media": ("social media", "instagram", "tiktok", "snapchat", "online", "app", "post", "followers"),
    "video games": ("game", "gaming", "video game", "console", "play", "screen"),
    "longer recess": ("recess", "break", "playground", "outside", "play time"),
    "school lunch": ("lunch", "cafeteria", "food", "meal", "healthy", "menu"),
    "phones in school": ("phone", "cell", "smartphone", "device", "text", "screen"),
    "four-day school week": ("four-day", "4-day", "four day", "week", "friday", "schedule"),
    "zoos": ("zoo", "animal", "cage", "habitat", "wildlife", "conservation"),
    "year-round school": ("year-round", "summer", "vacation", "break", "calendar"),
}


def _normalize_topic(topic: str) -> str:
    return " ".join(topic.lower().split())


def keywords_for(topic: Optional[str]) -> Optional[Tuple[str, ...]]:
    if not topic:
        return None
    return TOPIC_KEYWORDS.get(_normalize_topic(topic))


def topic_hint(topic: Optional[str], message: str) -> Optional[str]:
    """Return a nudge when a known topic's keywords are all missing from the message."""
    keywords = keywords_for(topic)
    if not keywords:
        return None
    lowered = message.lower()
    if any(k in lowered for k in keywords):
        return None
    return (
        f"Tip: try connecting your point to the topic \"{topic.strip()}\" "
        f"so your argument hits the target."
    )


def length_hint(word_count: int, profile: DifficultyProfile) -> Optional[str]:
    """Nudge toward the tier's word budget; long answers are still scored."""
    if word_count <= profile.max_words:
        return None
    return (
        f"Tip: {profile.name} debates work best under {profile.max_words} words. "
        f"Try picking your strongest point."
    )
