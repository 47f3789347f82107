"""Research steps built on the invocation pipeline.

Each step is one structured LLM call:

  generate_feedback    — follow-up questions that clarify a query
  generate_serp_queries — search queries for a topic
  process_serp_result  — learnings + follow-up questions from search results
  write_final_report   — markdown report from accumulated learnings

Steps accept the same `llm` / `limiter` overrides as `invoke_llm` so a
caller can route them to a different model or quota.
"""

from typing import Any, Optional

from deep_research.llm.invoker import invoke_llm
from deep_research.llm.trimmer import trim_prompt
from deep_research.prompts.research import (
    final_report_prompt,
    follow_up_questions_prompt,
    process_search_result_prompt,
    serp_queries_prompt,
    system_prompt,
)
from deep_research.schemas.llm_outputs import (
    FeedbackOutput,
    LearningsOutput,
    ReportOutput,
    SerpQueriesOutput,
)
from deep_research.tools.brave import SearchResult
from deep_research.utils.logging import log, get_logger

MODULE = "research"
logger = get_logger()

# Per-result budget when feeding search contents back to the model
RESULT_CONTEXT_SIZE = 25_000


async def generate_feedback(
    query: str,
    num_questions: int = 3,
    **invoke_kwargs: Any,
) -> list[str]:
    """Ask follow-up questions to clarify the research direction."""
    output = await invoke_llm(
        follow_up_questions_prompt(num_questions, query),
        FeedbackOutput,
        system=system_prompt(),
        activity_name="feedback",
        **invoke_kwargs,
    )
    questions = output.questions[:num_questions]
    log.info(logger, MODULE, "feedback_done", "Generated follow-up questions",
             question_count=len(questions))
    return questions


async def generate_serp_queries(
    query: str,
    num_queries: int = 3,
    learnings: Optional[list[str]] = None,
    **invoke_kwargs: Any,
) -> list[str]:
    """Generate search queries for a topic, informed by earlier learnings."""
    output = await invoke_llm(
        serp_queries_prompt(num_queries, query, learnings),
        SerpQueriesOutput,
        system=system_prompt(),
        activity_name="serp_queries",
        **invoke_kwargs,
    )
    queries = output.queries[:num_queries]
    log.info(logger, MODULE, "serp_queries_done", "Generated SERP queries",
             query_count=len(queries))
    return queries


async def process_serp_result(
    query: str,
    results: list[SearchResult],
    num_learnings: int = 3,
    **invoke_kwargs: Any,
) -> LearningsOutput:
    """Extract learnings from search results.

    Each result's description is trimmed to RESULT_CONTEXT_SIZE tokens
    before it goes into the prompt. Empty descriptions are skipped.
    """
    contents = [
        trim_prompt(r["description"], RESULT_CONTEXT_SIZE)
        for r in results
        if r.get("description")
    ]
    log.debug(logger, MODULE, "process_start", "Processing SERP results",
              result_count=len(results), content_count=len(contents))

    output = await invoke_llm(
        process_search_result_prompt(query, num_learnings, contents),
        LearningsOutput,
        system=system_prompt(),
        activity_name="process_serp_result",
        **invoke_kwargs,
    )
    output.learnings = output.learnings[:num_learnings]
    log.info(logger, MODULE, "process_done", "Extracted learnings",
             learning_count=len(output.learnings),
             follow_up_count=len(output.followUpQuestions))
    return output


async def write_final_report(
    prompt: str,
    learnings: list[str],
    **invoke_kwargs: Any,
) -> str:
    """Write the final markdown report.

    The report is a single long string value, the one shape the inner-quote
    repair is safe for, so it is enabled here.
    """
    output = await invoke_llm(
        trim_prompt(final_report_prompt(prompt, learnings)),
        ReportOutput,
        system=system_prompt(),
        replace_quotes=True,
        activity_name="final_report",
        **invoke_kwargs,
    )
    log.info(logger, MODULE, "report_done", "Final report written",
             report_chars=len(output.reportMarkdown))
    return output.reportMarkdown
