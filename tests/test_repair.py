"""Tests for the individual repair rules and the cleaning pipeline."""

from deep_research.llm import repair
from deep_research.llm.repair import clean_response


def test_strip_code_fences_one_and_two_layers():
    assert repair.strip_code_fences('```json\n{"a":1}\n```') == '{"a":1}'
    assert repair.strip_code_fences('```JSON {"a":1} ```') == '{"a":1}'
    nested = '```\n```json\n{"a":1}\n```\n```'
    assert "```" not in repair.strip_code_fences(nested)


def test_strip_backticks():
    assert repair.strip_backticks('`{"a":1}`') == '{"a":1}'


def test_unescape_dollars():
    assert repair.unescape_dollars(r'{"price":"\$5"}') == '{"price":"$5"}'
    assert repair.unescape_dollars(r'{"price":"\\$5"}') == '{"price":"$5"}'


def test_strip_trailing_commas():
    assert repair.strip_trailing_commas('{"a":[1,2,],}') == '{"a":[1,2]}'
    assert repair.strip_trailing_commas('{"a":1,\n  }') == '{"a":1}'
    assert repair.strip_trailing_commas('{"a":"x,y"}') == '{"a":"x,y"}'


def test_unescape_underscores():
    assert repair.unescape_underscores(r"a\_b") == "a/b"
    assert repair.unescape_underscores("a_b") == "a/b"


def test_strip_line_separators():
    raw = "{\"a\":\r\n1\u2028}\u2029 \f"
    assert repair.strip_line_separators(raw) == "{\"a\":\n1}"


def test_wrap_bare_array():
    assert repair.wrap_bare_array('["x","y"]') == '{"queries":["x","y"]}'
    assert repair.wrap_bare_array('{"queries":[]}') == '{"queries":[]}'


def test_inject_follow_up_questions():
    assert (
        repair.inject_follow_up_questions('{"learnings":["x"]}')
        == '{"learnings":["x"],"followUpQuestions":[]}'
    )
    present = '{"learnings":["x"],"followUpQuestions":["y"]}'
    assert repair.inject_follow_up_questions(present) == present
    assert repair.inject_follow_up_questions('{"queries":[]}') == '{"queries":[]}'


def test_inject_follow_up_questions_before_trailing_chatter():
    raw = '{"learnings":["x"]}\nHope this helps.'
    assert (
        repair.inject_follow_up_questions(raw)
        == '{"learnings":["x"],"followUpQuestions":[]}\nHope this helps.'
    )
    assert repair.inject_follow_up_questions('"learnings": none') == '"learnings": none'


def test_escape_inner_quotes_keeps_first_three_and_last():
    raw = '{"reportMarkdown": "He said "hi" today"}'
    assert repair.escape_inner_quotes(raw) == '{"reportMarkdown": "He said \'hi\' today"}'


def test_escape_inner_quotes_short_text_untouched():
    assert repair.escape_inner_quotes('{"a": 1}') == '{"a": 1}'


def test_clean_response_runs_rules_in_order():
    raw = '```json\n["first query", "second query",]\n```'
    assert clean_response(raw) == '{"queries":["first query", "second query"]}'


def test_quote_rule_only_when_requested():
    raw = '{"reportMarkdown": "He said "hi" today"}'
    assert clean_response(raw) == raw
    assert "'hi'" in clean_response(raw, replace_quotes=True)


def test_rules_are_individually_named():
    names = [rule.name for rule in repair.DEFAULT_RULES]
    assert len(names) == len(set(names))
    assert "escape_inner_quotes" not in names


def test_custom_rule_pipeline():
    upper = repair.RepairRule("upper", str.upper)
    assert clean_response("abc", rules=(upper,)) == "ABC"
