"""Repair rules for noisy model output.

Models asked for "ONLY pure JSON" still wrap it in markdown fences, escape
characters that need no escaping, leave trailing commas, or return a bare
array where an object was asked for. Each fix here is a named rule: a pure
text -> text function applied in a fixed order by `clean_response`.

Rules are independent so one can be added, removed or tested without
touching the others. Two of them (`wrap_bare_array`,
`inject_follow_up_questions`) only make sense for the research schemas in
`deep_research.schemas`; `escape_inner_quotes` is lossy and only runs when
the caller opts in.
"""

import re
from dataclasses import dataclass
from typing import Callable

from deep_research.utils.logging import log, get_logger

MODULE = "llm.repair"
logger = get_logger()

_CODE_FENCE = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```", re.IGNORECASE)
_TRAILING_COMMA = re.compile(r",\s*([\]}])")
_LINE_SEPARATORS = re.compile(r"[\r\v\f\u2028\u2029]+")


@dataclass(frozen=True)
class RepairRule:
    """A named, deterministic text transformation."""
    name: str
    apply: Callable[[str], str]

    def __call__(self, text: str) -> str:
        return self.apply(text)


def strip_code_fences(text: str) -> str:
    """Keep only the content of ```json fences, up to two layers deep."""
    for _ in range(2):
        text = _CODE_FENCE.sub(r"\1", text)
    return text


def strip_backticks(text: str) -> str:
    return text.replace("`", "")


def strip_whitespace(text: str) -> str:
    return text.strip()


def unescape_dollars(text: str) -> str:
    r"""`\\$` and `\$` → `$`."""
    return text.replace("\\\\$", "$").replace("\\$", "$")


def strip_trailing_commas(text: str) -> str:
    """Drop commas that directly precede a closing bracket or brace."""
    return _TRAILING_COMMA.sub(r"\1", text)


def unescape_underscores(text: str) -> str:
    r"""`\_` and `_` → `/`.

    Some models emit markdown-escaped path separators as underscores.
    Schemas used with this pipeline therefore never use snake_case keys.
    """
    return text.replace("\\_", "/").replace("_", "/")


def strip_line_separators(text: str) -> str:
    return _LINE_SEPARATORS.sub("", text).strip()


def wrap_bare_array(text: str) -> str:
    """`[...]` → `{"queries": [...]}` for the SERP query schema."""
    if text.startswith("[") and text.endswith("]"):
        return '{"queries":' + text + "}"
    return text


def inject_follow_up_questions(text: str) -> str:
    """Add an empty `followUpQuestions` to learnings objects that lack one.

    The key goes before the last `}`, so trailing chatter after the
    object is left where it is.
    """
    if '"learnings":' not in text or '"followUpQuestions"' in text:
        return text
    close = text.rfind("}")
    if close < 0:
        return text
    return text[:close] + ',"followUpQuestions":[]' + text[close:]


def escape_inner_quotes(text: str) -> str:
    """Turn every `"` from the 4th on, except the last, into `'`.

    HEURISTIC: recovers single-string-value objects like
    {"reportMarkdown": "He said "hi""} where the model did not escape
    inner quotes. It corrupts anything with more than one string value,
    so it never runs unless the caller asks for it.
    """
    last = text.rfind('"')
    out = []
    count = 0
    for i, char in enumerate(text):
        if char == '"':
            count += 1
            if count >= 4 and i != last:
                out.append("'")
                continue
        out.append(char)
    return "".join(out)


DEFAULT_RULES: tuple[RepairRule, ...] = (
    RepairRule("strip_code_fences", strip_code_fences),
    RepairRule("strip_backticks", strip_backticks),
    RepairRule("strip_whitespace", strip_whitespace),
    RepairRule("unescape_dollars", unescape_dollars),
    RepairRule("strip_trailing_commas", strip_trailing_commas),
    RepairRule("unescape_underscores", unescape_underscores),
    RepairRule("strip_line_separators", strip_line_separators),
    RepairRule("wrap_bare_array", wrap_bare_array),
    RepairRule("inject_follow_up_questions", inject_follow_up_questions),
)

QUOTE_RULE = RepairRule("escape_inner_quotes", escape_inner_quotes)


def clean_response(
    raw: str,
    *,
    replace_quotes: bool = False,
    rules: tuple[RepairRule, ...] = DEFAULT_RULES,
) -> str:
    """Run `raw` through the repair rules in order.

    Args:
        raw: Text extracted from the model's reply.
        replace_quotes: Also apply the lossy `escape_inner_quotes` rule.
        rules: Rule pipeline, for callers that need a different set.

    Returns:
        The cleaned text. Not guaranteed to be valid JSON.
    """
    pipeline = rules + (QUOTE_RULE,) if replace_quotes else rules
    text = raw
    applied = []
    for rule in pipeline:
        repaired = rule(text)
        if repaired != text:
            applied.append(rule.name)
        text = repaired

    if applied:
        log.debug(logger, MODULE, "repaired", "Applied repair rules to response",
                  rules=",".join(applied), raw_length=len(raw),
                  cleaned_length=len(text))
    return text
