# app/pipeline.py
"""
One debate turn, end to end.

    validate -> moderation gate -> round-over check -> length/topic hint
             -> prompt -> language model -> parse -> shape score -> HUD

The gate runs before the model call, so a failed model call never touches
strike counts. Model failures propagate as ModelCallError; parse failures
degrade to a neutral turn inside parse_model_output.
"""
import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, Union

from app.llm import LanguageModel, ModelCallError
from app.moderation import ModerationGate
from app.parsing import FallbackReply, parse_model_output
from app.profiles import get_profile
from app.prompts import build_debate_prompt
from app.relevance import length_hint, topic_hint
from app.schemas import HudOut, TurnIn, TurnOut, ViolationOut
from app.scoring import RandomSource, build_hud, count_words, derive_outcome, round_progress, shape_score
from app.session_log import TurnRecord, readability

logger = logging.getLogger(__name__)


class TurnRejected(ValueError):
    """The request is not a valid turn; nothing was checked or mutated."""


class ModelUnavailable(ModelCallError):
    """No language model is configured."""


@dataclass
class TurnResult:
    response: Union[TurnOut, ViolationOut]
    record: TurnRecord


class DebatePipeline:
    def __init__(
        self,
        model: Optional[LanguageModel],
        gate: ModerationGate,
        round_limit: int = 5,
        rng: Optional[RandomSource] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.model = model
        self.gate = gate
        self.round_limit = round_limit
        self.rng = rng
        self.clock = clock

    def _closing_turn(self, req: TurnIn, message: str, word_count: int) -> TurnResult:
        profile = get_profile(req.difficulty)
        score = profile.bias_score
        hud = build_hud(score)
        next_round, end_debate = round_progress(req.round, self.round_limit)
        response = TurnOut(
            reply="",
            stance="mixed",
            outcome=derive_outcome(score),
            score=score,
            round=req.round,
            next_round=next_round,
            end_debate=end_debate,
            hud=HudOut(meter=hud.meter, leader=hud.leader, label=hud.label),
        )
        record = TurnRecord(
            student_key=req.student_key, round=req.round, student_text=message, ai_reply="",
            word_count=word_count, readability=None, meter=hud.meter,
            leader=hud.leader, latency_ms=0, status="closed",
        )
        return TurnResult(response=response, record=record)

    def run_turn(self, req: TurnIn) -> TurnResult:
        message = (req.message or "").strip()
        if not message:
            raise TurnRejected("Missing message")

        profile = get_profile(req.difficulty)
        word_count = count_words(message)

        start = self.clock()
        verdict = self.gate.check(message, req.student_key)
        if verdict.violation:
            response = ViolationOut(
                category=verdict.category or "sensitive",
                allow_retry=verdict.allow_retry,
                end_debate=verdict.end_debate,
                instructions=verdict.instructions or "",
                round=req.round,
            )
            record = TurnRecord(
                student_key=req.student_key, round=req.round, student_text=message, ai_reply="",
                word_count=word_count, readability=readability(message), meter=None, leader=None,
                latency_ms=int((self.clock() - start) * 1000), status="violation",
                category=response.category,
            )
            return TurnResult(response=response, record=record)

        if req.round > self.round_limit:
            logger.info("[DEBATE] %s sent round %d past limit %d", req.student_key, req.round, self.round_limit)
            return self._closing_turn(req, message, word_count)

        if self.model is None:
            raise ModelUnavailable("no language model configured")

        hint = length_hint(word_count, profile) or topic_hint(req.topic, message)
        prompt = build_debate_prompt(
            message,
            profile,
            round_no=req.round,
            round_limit=self.round_limit,
            topic=req.topic,
            student_side=req.student_side,
        )
        text = self.model.complete(prompt)

        parsed = parse_model_output(text, profile)
        result = parsed.result
        if isinstance(parsed, FallbackReply):
            logger.info("[DEBATE] Fallback turn for %s: %s", req.student_key, parsed.reason)

        score = shape_score(
            result.raw_score,
            result.stance,
            result.concession,
            result.student_strength,
            profile,
            word_count,
            rng=self.rng,
        )
        hud = build_hud(score)
        next_round, end_debate = round_progress(req.round, self.round_limit)
        latency_ms = int((self.clock() - start) * 1000)

        logger.info(
            "[DEBATE] %s round %d (%s): raw=%.2f stance=%s score=%.3f meter=%d leader=%s",
            req.student_key, req.round, profile.name, result.raw_score, result.stance,
            score, hud.meter, hud.leader,
        )

        response = TurnOut(
            reply=result.reply,
            stance=result.stance,
            outcome=derive_outcome(score),
            score=score,
            round=req.round,
            next_round=next_round,
            end_debate=end_debate,
            hud=HudOut(meter=hud.meter, leader=hud.leader, label=hud.label),
            hint=hint,
        )
        record = TurnRecord(
            student_key=req.student_key, round=req.round, student_text=message,
            ai_reply=result.reply, word_count=word_count, readability=readability(message),
            meter=hud.meter, leader=hud.leader, latency_ms=latency_ms, status="ok",
        )
        return TurnResult(response=response, record=record)
