# app/schemas.py
# Request/response models. Field names are snake_case in Python and camelCase
# on the wire, which is what the browser client sends and reads.
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Stance = Literal["agree", "disagree", "mixed"]
Outcome = Literal["student", "ai", "mixed"]
Leader = Literal["ai", "student", "tied"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TurnIn(CamelModel):
    message: Optional[str] = Field(default=None, max_length=10000)  # Max 10,000 characters per argument
    difficulty: Optional[str] = "Normal"
    round: int = Field(default=1, ge=1)
    topic: Optional[str] = Field(default=None, max_length=500)
    student_side: Optional[Literal["pro", "con"]] = None
    student_key: str = Field(default="anonymous", min_length=1, max_length=200)


class HudOut(CamelModel):
    meter: int = Field(ge=0, le=100)
    leader: Leader
    label: str


class TurnOut(CamelModel):
    reply: str
    stance: Stance
    outcome: Outcome
    score: float = Field(ge=0.0, le=1.0)
    round: int
    next_round: int
    end_debate: bool
    hud: HudOut
    hint: Optional[str] = None


class ViolationOut(CamelModel):
    violation: bool = True
    category: Literal["sensitive", "offtopic"]
    allow_retry: bool
    end_debate: bool = False
    instructions: str
    round: int


class ExplainIn(CamelModel):
    student: Optional[str] = Field(default=None, max_length=10000)
    reply: Optional[str] = Field(default=None, max_length=10000)


class ExplainOut(BaseModel):
    extracted_claim: str
    stance: Stance
    strategy: str
    steps: List[str]


class SessionFinishIn(CamelModel):
    student_key: str = Field(min_length=1, max_length=200)
    final_winner: Optional[Literal["ai", "student", "tie"]] = None


class SessionSummaryOut(CamelModel):
    student_key: str
    rounds_played: int
    final_winner: str
    violation_count: int
    avg_readability: Optional[float] = None
