"""Exceptions raised by the LLM invocation pipeline.

  LLMInvocationError
    ├── RateLimiterInternalError  — call window invariant broken (never expected)
    ├── ProviderCallError         — completion provider failed after all retries
    ├── ResponseShapeError        — provider reply had no text where expected
    └── ParseError                — cleaning, parsing or schema validation failed
"""

from typing import Optional


class LLMInvocationError(Exception):
    """Base class for every failure surfaced by the pipeline."""


class RateLimiterInternalError(LLMInvocationError):
    """Raised when the call window holds more live calls than allowed."""


class ProviderCallError(LLMInvocationError):
    """Raised when the completion provider fails after all retries."""

    def __init__(self, message: str, attempts: int = 0):
        super().__init__(message)
        self.attempts = attempts


class ResponseShapeError(LLMInvocationError):
    """Raised when the response envelope has no extractable text."""


class ParseError(LLMInvocationError):
    """Raised when model output cannot be turned into a schema-valid value.

    Carries everything needed to diagnose the failure offline: the schema
    the model was asked for, the text it actually returned, and the text
    after the repair rules ran.
    """

    def __init__(
        self,
        message: str,
        schema_description: str = "",
        raw_output: str = "",
        cleaned_output: Optional[str] = None,
    ):
        super().__init__(message)
        self.schema_description = schema_description
        self.raw_output = raw_output
        self.cleaned_output = cleaned_output
