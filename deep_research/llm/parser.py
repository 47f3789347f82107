"""Turn repaired model text into a schema-valid object.

Two parse attempts are made on the cleaned text:

  1. Strict: the whole text is JSON.
  2. Extraction: the first balanced {...} or [...] inside the text that
     parses, found with a string-aware bracket-depth scan (preamble and
     trailing chatter are ignored).

A parsed array is turned into an index-keyed object before validation.
When nothing validates, the cleaned text is written to a diagnostic file
and a ParseError carrying the raw and cleaned text is raised.
"""

import json
from pathlib import Path
from typing import Any, Iterator, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from deep_research.config import ERROR_ARTIFACT_PATH
from deep_research.llm.errors import ParseError
from deep_research.llm.repair import clean_response
from deep_research.utils.logging import log, get_logger

MODULE = "llm.parser"
logger = get_logger()

T = TypeVar("T", bound=BaseModel)

_CLOSERS = {"{": "}", "[": "]"}


class JSONExtractionError(Exception):
    """Raised when no JSON value can be found in model output."""

    def __init__(self, message: str, raw_output: str):
        super().__init__(message)
        self.raw_output = raw_output


def describe_schema(schema: Type[BaseModel]) -> str:
    """Serialize a schema for prompts and error messages."""
    return json.dumps(schema.model_json_schema(), indent=2)


def _extract_balanced(text: str) -> Optional[str]:
    """Extract the balanced bracket expression that `text` starts with.

    Brackets inside string literals (and escaped quotes inside those
    strings) are skipped. Only the opening bracket's own kind is counted;
    the other kind is validated later by the JSON parser.

    Args:
        text: Text starting with '{' or '['

    Returns:
        The balanced expression including brackets, or None if unbalanced
    """
    if not text or text[0] not in _CLOSERS:
        return None

    open_char = text[0]
    close_char = _CLOSERS[open_char]
    depth = 0
    in_string = False
    escape_next = False

    for i, char in enumerate(text):
        if escape_next:
            escape_next = False
            continue

        if char == "\\" and in_string:
            escape_next = True
            continue

        if char == '"':
            in_string = not in_string
            continue

        if in_string:
            continue

        if char == open_char:
            depth += 1
        elif char == close_char:
            depth -= 1
            if depth == 0:
                return text[:i + 1]

    return None  # Unbalanced


def iter_json_candidates(text: str) -> Iterator[str]:
    """Yield every balanced JSON-looking substring in `text`, left to right.

    Every opening bracket is tried in order, so an unbalanced stray
    bracket in preamble text does not hide a value after it.
    """
    for start, char in enumerate(text):
        if char in _CLOSERS:
            candidate = _extract_balanced(text[start:])
            if candidate:
                yield candidate


def find_json_candidate(text: str) -> Optional[str]:
    """Find the first balanced JSON-looking substring in `text`."""
    return next(iter_json_candidates(text), None)


def extract_json(text: str) -> Any:
    """Parse `text` as JSON, falling back to the first embedded value.

    Balanced candidates that are not valid JSON (a bracketed aside such as
    "{see below}") are skipped in favour of the next one.

    Args:
        text: Cleaned model output

    Returns:
        Parsed JSON (dict or list)

    Raises:
        JSONExtractionError: If no valid JSON can be extracted
    """
    # Try 1: Direct parse (ideal case)
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        first_error = e

    # Try 2: First balanced {...} or [...] that parses
    last_error = None
    for candidate in iter_json_candidates(text):
        log.debug(logger, MODULE, "extract_fallback",
                  "Direct parse failed, parsing embedded JSON",
                  text_length=len(text), candidate_length=len(candidate))
        try:
            return json.loads(candidate)
        except json.JSONDecodeError as e:
            last_error = e

    if last_error is None:
        raise JSONExtractionError(
            f"No JSON found in response ({first_error})", raw_output=text,
        )
    raise JSONExtractionError(
        f"Embedded JSON is invalid: {last_error}", raw_output=text,
    ) from last_error


def coerce_to_object(value: Any) -> Any:
    """Arrays become {"0": item0, "1": item1, ...}; anything else is unchanged."""
    if isinstance(value, list):
        return {str(i): item for i, item in enumerate(value)}
    return value


def write_error_artifact(cleaned: str, path: Union[str, Path]) -> None:
    """Persist unparseable text for offline inspection (overwrites)."""
    try:
        Path(path).write_text(cleaned, encoding="utf-8")
    except OSError as e:
        log.warning(logger, MODULE, "artifact_failed",
                    "Could not write parse error artifact",
                    path=str(path), error=str(e))


def repair_and_parse(
    raw: str,
    schema: Type[T],
    *,
    replace_quotes: bool = False,
    error_path: Union[str, Path] = ERROR_ARTIFACT_PATH,
) -> T:
    """Clean, parse and validate model output.

    Args:
        raw: Text extracted from the model's reply
        schema: Pydantic model class to validate against
        replace_quotes: Enable the lossy inner-quote repair
        error_path: Where the cleaned text is written on failure

    Returns:
        Validated instance of the schema type

    Raises:
        ParseError: If parsing or validation fails
    """
    cleaned = clean_response(raw, replace_quotes=replace_quotes)

    try:
        parsed = coerce_to_object(extract_json(cleaned))
        return schema.model_validate(parsed)
    except (JSONExtractionError, ValidationError) as e:
        schema_description = describe_schema(schema)
        write_error_artifact(cleaned, error_path)
        log.error(logger, MODULE, "parse_failed",
                  "Failed to parse response as JSON",
                  error=str(e), error_type=type(e).__name__,
                  schema=schema.__name__, raw_length=len(raw),
                  cleaned_length=len(cleaned), artifact=str(error_path))
        raise ParseError(
            f"Failed to parse response as JSON: {e}\n"
            f"Expected schema: {schema_description}\n"
            f"Full response: {raw}\n"
            f"Cleaned response: {cleaned}",
            schema_description=schema_description,
            raw_output=raw,
            cleaned_output=cleaned,
        ) from e
