"""Pydantic schemas for LLM outputs.

These schemas define the EXACT structure expected from each research step.
Every response is validated against one of them before it is used, and
their JSON schema is what the model is shown in the prompt.

Keys are camelCase: the repair rules rewrite underscores in model output,
so snake_case keys would never survive the round trip.
"""

from pydantic import BaseModel, Field, field_validator


def _drop_blank(values: list[str]) -> list[str]:
    return [v.strip() for v in values if v and v.strip()]


# =============================================================================
# FEEDBACK
# =============================================================================

class FeedbackOutput(BaseModel):
    """Follow-up questions that clarify the research direction."""
    questions: list[str] = Field(
        ...,
        description="Follow up questions to clarify the research direction"
    )

    @field_validator("questions")
    @classmethod
    def strip_questions(cls, v: list[str]) -> list[str]:
        return _drop_blank(v)


# =============================================================================
# SERP QUERIES
# =============================================================================

class SerpQueriesOutput(BaseModel):
    """Search engine queries to research a topic.

    Models often answer with a bare JSON array here; the repair pipeline
    wraps it as {"queries": [...]}.
    """
    queries: list[str] = Field(
        ...,
        description="List of unique SERP queries"
    )

    @field_validator("queries")
    @classmethod
    def strip_queries(cls, v: list[str]) -> list[str]:
        return _drop_blank(v)


# =============================================================================
# LEARNINGS
# =============================================================================

class LearningsOutput(BaseModel):
    """Learnings extracted from search results.

    `followUpQuestions` is required; responses that omit it get an empty
    list injected by the repair pipeline.
    """
    learnings: list[str] = Field(
        ...,
        description="Detailed, information-dense learnings from the contents"
    )
    followUpQuestions: list[str] = Field(
        ...,
        description="Follow-up questions to research the topic further"
    )


# =============================================================================
# FINAL REPORT
# =============================================================================

class ReportOutput(BaseModel):
    """Final report as a single markdown string."""
    reportMarkdown: str = Field(
        ...,
        min_length=1,
        description="Final report on the topic in Markdown"
    )
