"""Pydantic schemas for structured data validation.

All LLM outputs are validated against Pydantic models BEFORE being used
by the rest of the system. This provides a clear contract and catches
malformed outputs early.
"""

from deep_research.schemas.llm_outputs import (
    FeedbackOutput,
    SerpQueriesOutput,
    LearningsOutput,
    ReportOutput,
)

__all__ = [
    "FeedbackOutput",
    "SerpQueriesOutput",
    "LearningsOutput",
    "ReportOutput",
]
