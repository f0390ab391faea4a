"""Tests for app/parsing.py."""

import pytest

from app.parsing import (
    DEFAULT_EXPLAIN_STEPS,
    EMPTY_REPLY,
    FALLBACK_REPLY,
    FallbackReply,
    ParsedReply,
    extract_json_object,
    parse_explain_output,
    parse_model_output,
)
from tests.conftest import model_json


def test_parses_json_wrapped_in_prose(normal_profile):
    parsed = parse_model_output(model_json(score=0.7, stance="agree"), normal_profile)
    assert isinstance(parsed, ParsedReply)
    assert parsed.result.raw_score == 0.7
    assert parsed.result.stance == "agree"
    assert parsed.result.reply.startswith("Uniforms")


def test_missing_fields_get_defaults(normal_profile):
    parsed = parse_model_output('{"reply": "Fair point."}', normal_profile)
    assert isinstance(parsed, ParsedReply)
    result = parsed.result
    assert result.stance == "mixed"
    assert result.outcome == "mixed"
    assert result.raw_score == normal_profile.bias_score
    assert result.concession == 0.0
    assert result.student_strength == 0.5


def test_invalid_enum_and_number_values_are_defaulted(normal_profile):
    text = '{"reply": "", "stance": "furious", "score": "high", "concession": 4, "student_strength": -1}'
    result = parse_model_output(text, normal_profile).result
    assert result.reply == EMPTY_REPLY
    assert result.stance == "mixed"
    assert result.raw_score == normal_profile.bias_score
    assert result.concession == 1.0
    assert result.student_strength == 0.0


def test_numeric_strings_are_accepted(normal_profile):
    result = parse_model_output('{"reply": "ok", "score": "0.8"}', normal_profile).result
    assert result.raw_score == 0.8


@pytest.mark.parametrize(
    "text",
    [
        "",
        "I think you make a great point about recess!",
        "{not json at all}",
        "} backwards {",
        '["a", "list"]',
    ],
)
def test_unusable_output_falls_back(text, normal_profile):
    parsed = parse_model_output(text, normal_profile)
    assert isinstance(parsed, FallbackReply)
    assert parsed.result.reply == FALLBACK_REPLY
    assert parsed.result.stance == "mixed"
    assert parsed.result.raw_score == normal_profile.bias_score
    assert parsed.result.concession == 0.0
    assert parsed.result.student_strength == 0.5


def test_extract_json_object_uses_outermost_braces():
    assert extract_json_object('x {"a": {"b": 1}} y') == {"a": {"b": 1}}
    assert extract_json_object("no braces") is None


def test_explain_output_defaults_on_garbage():
    out = parse_explain_output("sorry, I can't", "Recess should be longer because kids need exercise")
    assert out["extracted_claim"].startswith("Recess should be longer")
    assert out["steps"] == DEFAULT_EXPLAIN_STEPS
    assert out["stance"] == "mixed"


def test_explain_output_keeps_model_steps():
    text = '{"extracted_claim": "Recess helps focus", "stance": "agree", "strategy": "concede", "steps": ["🔍 a", "🎯 b"]}'
    out = parse_explain_output(text, "student text")
    assert out == {
        "extracted_claim": "Recess helps focus",
        "stance": "agree",
        "strategy": "concede",
        "steps": ["🔍 a", "🎯 b"],
    }


def test_explain_output_empty_steps_use_defaults():
    out = parse_explain_output('{"extracted_claim": "x", "steps": []}', "student text")
    assert out["steps"] == DEFAULT_EXPLAIN_STEPS


def test_huge_integer_score_uses_bias(normal_profile):
    text = '{"reply": "ok", "score": 1' + "0" * 400 + ', "concession": "1e999"}'
    parsed = parse_model_output(text, normal_profile)
    assert isinstance(parsed, ParsedReply)
    assert parsed.result.raw_score == normal_profile.bias_score
    assert parsed.result.concession == 1.0


@pytest.mark.parametrize(
    "text",
    [
        '{"score": 1' + "0" * 5000 + "}",
        '{"score": ' + "[" * 100000 + "]" * 100000 + "}",
    ],
)
def test_pathological_json_never_raises(text, normal_profile):
    parsed = parse_model_output(text, normal_profile)
    assert parsed.result.raw_score == normal_profile.bias_score
