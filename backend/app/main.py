# app/main.py
# uvicorn app.main:app --host 0.0.0.0 --port 3001 --reload  (run from backend/)

import logging
from typing import Optional, Union

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.llm import LanguageModel, ModelCallError, build_classifier, build_model, create_client
from app.moderation import ModerationGate, StrikeTracker
from app.parsing import parse_explain_output
from app.pipeline import DebatePipeline, ModelUnavailable, TurnRejected
from app.prompts import build_explain_prompt
from app.schemas import (
    ExplainIn,
    ExplainOut,
    SessionFinishIn,
    SessionSummaryOut,
    TurnIn,
    TurnOut,
    ViolationOut,
)
from app.session_log import SessionLog
from app.settings import Settings, configure_logging

settings = Settings.from_env()
configure_logging(settings.log_level)
logger = logging.getLogger(__name__)

MODEL_FAILURE_MESSAGE = "Failed to get a response, please try again."
NOT_CONFIGURED_MESSAGE = "AI opponent is not configured."

app = FastAPI(
    title="Debate Practice",
    description="Practice debating against an AI opponent, one round at a time",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)


# Custom error handler for validation errors - show user-friendly messages
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Return user-friendly validation error messages instead of raw Pydantic errors"""
    error_messages = []
    for error in exc.errors():
        field_path = ".".join(str(loc) for loc in error["loc"] if loc != "body")
        error_type = error.get("type", "")

        if error_type == "string_too_long":
            if "topic" in field_path.lower():
                error_messages.append("Topic is too long. Maximum length is 500 characters.")
            elif "key" in field_path.lower():
                error_messages.append("Student name is too long.")
            else:
                error_messages.append("Your response is too long. Maximum length is 10,000 characters.")
        elif error_type == "string_too_short":
            error_messages.append("This field cannot be empty.")
        elif field_path == "round":
            error_messages.append("Round must be a whole number starting at 1.")
        elif field_path == "studentSide":
            error_messages.append("Side must be either 'pro' or 'con'.")
        elif "json" in error_type:
            error_messages.append("Request body must be valid JSON.")
        else:
            error_messages.append(f"Invalid value for {field_path or 'request'}")

    message = error_messages[0] if error_messages else "Invalid input"
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": message, "error": message},
    )


# Error bodies carry both `detail` and `error`.
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------- Process-wide services ----------
# Single-instance state: strike counts and session stats live in memory.
_client = create_client(settings)
strike_tracker = StrikeTracker()
session_log = SessionLog(settings.session_log_dir, enabled=settings.session_log_enabled)
language_model: Optional[LanguageModel] = build_model(settings, client=_client)
pipeline = DebatePipeline(
    model=language_model,
    gate=ModerationGate(
        strike_tracker,
        threshold=settings.strike_threshold,
        classifier=build_classifier(settings, client=_client),
    ),
    round_limit=settings.round_limit,
)


def get_pipeline() -> DebatePipeline:
    return pipeline


def get_session_log() -> SessionLog:
    return session_log


def get_language_model() -> Optional[LanguageModel]:
    return language_model


# ---------- Debate turn ----------
@app.post("/api/debate", response_model=Union[TurnOut, ViolationOut])
def debate_turn(
    body: TurnIn,
    turns: DebatePipeline = Depends(get_pipeline),
    log: SessionLog = Depends(get_session_log),
):
    try:
        result = turns.run_turn(body)
    except TurnRejected as e:
        raise HTTPException(400, str(e))
    except ModelUnavailable:
        raise HTTPException(503, NOT_CONFIGURED_MESSAGE)
    except ModelCallError as e:
        # Log internally but never expose to user
        logger.error("[DEBATE] Model call failed for %s: %s", body.student_key, e)
        raise HTTPException(502, MODEL_FAILURE_MESSAGE)

    log.record_turn(result.record)
    return result.response


# ---------- Explain the AI's reply ----------
@app.post("/api/explain", response_model=ExplainOut)
def explain_reply(body: ExplainIn, model: Optional[LanguageModel] = Depends(get_language_model)):
    student = (body.student or "").strip()
    reply = (body.reply or "").strip()
    if not student or not reply:
        raise HTTPException(400, "Missing student or reply")
    if model is None:
        raise HTTPException(503, NOT_CONFIGURED_MESSAGE)

    try:
        text = model.complete(build_explain_prompt(student, reply))
    except ModelCallError as e:
        logger.error("[EXPLAIN] Model call failed: %s", e)
        raise HTTPException(502, "Failed to build explanation.")

    return ExplainOut(**parse_explain_output(text, student))


# ---------- Finish a session ----------
@app.post("/api/session/finish", response_model=SessionSummaryOut)
def finish_session(body: SessionFinishIn, log: SessionLog = Depends(get_session_log)):
    summary = log.write_summary(body.student_key, body.final_winner)
    return SessionSummaryOut(
        student_key=summary["student_key"],
        rounds_played=summary["rounds_played"],
        final_winner=summary["final_winner"],
        violation_count=summary["violation_count"],
        avg_readability=summary["avg_readability"],
    )


# ---------- Health ----------
@app.get("/v1/health")
def health():
    return {"status": "ok", "model_configured": language_model is not None}
