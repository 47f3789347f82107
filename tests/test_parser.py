"""Tests for JSON extraction and schema validation of model output."""

import pytest
from pydantic import BaseModel, Field

from deep_research.llm.errors import ParseError
from deep_research.llm.parser import (
    JSONExtractionError,
    extract_json,
    find_json_candidate,
    repair_and_parse,
)
from deep_research.schemas import LearningsOutput, SerpQueriesOutput


class Numbered(BaseModel):
    a: float


class Listed(BaseModel):
    a: list[int]


class Indexed(BaseModel):
    first: str = Field(alias="0")
    second: str = Field(alias="1")


def test_fenced_json_round_trip(tmp_path):
    result = repair_and_parse('```json\n{"a":1}\n```', Numbered, error_path=tmp_path / "e.json")
    assert result.a == 1


def test_bare_array_becomes_queries(tmp_path):
    result = repair_and_parse('["x","y"]', SerpQueriesOutput, error_path=tmp_path / "e.json")
    assert result.queries == ["x", "y"]


def test_missing_follow_up_questions_defaults_to_empty(tmp_path):
    result = repair_and_parse('{"learnings":["x"]}', LearningsOutput, error_path=tmp_path / "e.json")
    assert result.learnings == ["x"]
    assert result.followUpQuestions == []


def test_missing_follow_up_questions_with_trailing_chatter(tmp_path):
    raw = '{"learnings":["x"]}\nHope this helps.'
    result = repair_and_parse(raw, LearningsOutput, error_path=tmp_path / "e.json")
    assert result.learnings == ["x"]
    assert result.followUpQuestions == []


def test_trailing_commas_tolerated(tmp_path):
    result = repair_and_parse('{"a":[1,2,],}', Listed, error_path=tmp_path / "e.json")
    assert result.a == [1, 2]


def test_preamble_and_trailing_chatter_ignored(tmp_path):
    raw = 'Sure! Here is the JSON: {"a": 3} Let me know if you need more.'
    assert repair_and_parse(raw, Numbered, error_path=tmp_path / "e.json").a == 3


def test_unparseable_input_raises_and_writes_artifact(tmp_path):
    artifact = tmp_path / "error.json"

    with pytest.raises(ParseError) as exc_info:
        repair_and_parse("not json at all", Numbered, error_path=artifact)

    err = exc_info.value
    assert "Full response: not json at all" in str(err)
    assert "Cleaned response: not json at all" in str(err)
    assert err.raw_output == "not json at all"
    assert err.cleaned_output == "not json at all"
    assert '"a"' in err.schema_description
    assert artifact.read_text(encoding="utf-8") == "not json at all"


def test_schema_violation_raises_parse_error(tmp_path):
    artifact = tmp_path / "error.json"
    with pytest.raises(ParseError) as exc_info:
        repair_and_parse('```json\n{"b": 1}\n```', Numbered, error_path=artifact)

    assert exc_info.value.cleaned_output == '{"b": 1}'
    assert artifact.read_text(encoding="utf-8") == '{"b": 1}'


def test_embedded_array_is_coerced_to_index_keyed_object(tmp_path):
    raw = 'Answer: ["p", "q"] done'
    result = repair_and_parse(raw, Indexed, error_path=tmp_path / "e.json")
    assert (result.first, result.second) == ("p", "q")


def test_extract_json_uses_bracket_depth_not_greedy_match():
    text = 'first {"a": {"b": "}"}} then {"c": 2}'
    assert extract_json(text) == {"a": {"b": "}"}}


def test_find_json_candidate_skips_unbalanced_stray_bracket():
    assert find_json_candidate('note [draft {"a": [1, 2]}') == '{"a": [1, 2]}'


def test_extract_json_skips_balanced_but_invalid_candidate():
    assert extract_json('Result {see below}: {"a": 1}') == {"a": 1}


def test_bracketed_aside_does_not_hide_object(tmp_path):
    raw = 'Result {see below}: {"a": 1}'
    assert repair_and_parse(raw, Numbered, error_path=tmp_path / "e.json").a == 1


def test_extract_json_reports_invalid_embedded_json():
    with pytest.raises(JSONExtractionError, match="Embedded JSON is invalid"):
        extract_json("only {not json} here")


def test_find_json_candidate_handles_escaped_quotes():
    text = r'x {"q": "say \"}\" now"} y'
    assert find_json_candidate(text) == r'{"q": "say \"}\" now"}'


def test_extract_json_raises_when_nothing_found():
    with pytest.raises(JSONExtractionError):
        extract_json("no brackets here")
