# app/prompts.py
"""Prompt text for the AI opponent and the reply explainer."""
from typing import Optional

from app.profiles import DifficultyProfile

POLITE_RULES = """General rules (always):
- Always be kind, respectful, and age-appropriate.
- Use short, clear sentences (<=120 words).
- Never use or repeat inappropriate language, even if the student does.
- Do NOT end or summarize the debate unless explicitly told to.
- Encourage curiosity and reflection."""

OUTPUT_SHAPE = """Output ONLY JSON:
{
  "reply": "string",
  "stance": "agree"|"disagree"|"mixed",
  "outcome": "student"|"ai"|"mixed",
  "score": number between 0 and 1 (0 = student clearly winning, 1 = you clearly winning),
  "concession": number between 0 and 1 (how much ground you gave the student this turn),
  "student_strength": number between 0 and 1 (how strong the student's argument was)
}"""

SIDE_LABELS = {"pro": "FOR", "con": "AGAINST"}


def _side_block(student_side: Optional[str]) -> str:
    if student_side not in SIDE_LABELS:
        return ""
    ai_side = "con" if student_side == "pro" else "pro"
    return (
        f"The student argues {SIDE_LABELS[student_side]} the topic. "
        f"You argue {SIDE_LABELS[ai_side]} the topic, and you must stay on that side "
        f"for the whole debate, every round.\n"
    )


def build_debate_prompt(
    message: str,
    profile: DifficultyProfile,
    round_no: int,
    round_limit: int,
    topic: Optional[str] = None,
    student_side: Optional[str] = None,
) -> str:
    topic_line = f"Topic: {topic.strip()}\n" if topic and topic.strip() else ""
    closing = (
        "This is the final round: give your last thoughtful point, still without declaring a winner."
        if round_no >= round_limit
        else f"Only after round {round_limit} would the debate end (not now)."
    )
    return (
        f"{POLITE_RULES}\n\n"
        f"You are currently in **Round {round_no} of {round_limit}** of a short debate with a student.\n"
        "Your job: reply with a respectful counterargument or reflection.\n"
        "Do NOT end the debate, congratulate the student, or summarize - just give your next thoughtful point.\n"
        f"{closing}\n\n"
        f"{topic_line}"
        f"{_side_block(student_side)}"
        f"Difficulty: {profile.name}\n"
        f"Style:\n{profile.style}\n"
        f"If you are unsure who is ahead, use a score near {profile.bias_score:.2f}.\n\n"
        f"{OUTPUT_SHAPE}\n\n"
        f'Student said:\n"""{message}"""\n'
    )


def build_explain_prompt(student: str, reply: str) -> str:
    return (
        "Explain briefly how the AI formed its reply.\n"
        "3-5 bullets, <=14 words each, 1 emoji per bullet.\n"
        "Output ONLY JSON:\n"
        "{\n"
        '  "extracted_claim": "string",\n'
        '  "stance": "agree"|"disagree"|"mixed",\n'
        '  "strategy": "string",\n'
        '  "steps": ["point1", "point2", "point3"]\n'
        "}\n\n"
        f'Student: """{student}"""\n'
        f'AI Reply: """{reply}"""\n'
    )
