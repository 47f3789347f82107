"""Tests for the research steps built on the invocation pipeline."""

import pytest
from langchain_core.language_models import FakeListChatModel

from deep_research.llm.rate_limiter import SlidingWindowRateLimiter
from deep_research.research import (
    generate_feedback,
    generate_serp_queries,
    process_serp_result,
    write_final_report,
)


@pytest.fixture
def invoke_kwargs(fake_clock, tmp_path):
    limiter = SlidingWindowRateLimiter(10, 1000, clock=fake_clock, sleep=fake_clock.sleep)
    return {"limiter": limiter, "retry_delay": 0, "error_path": tmp_path / "error.json"}


@pytest.mark.asyncio
async def test_generate_feedback_caps_questions(invoke_kwargs):
    llm = FakeListChatModel(responses=['{"questions": ["One?", "Two?", "Three?", "Four?"]}'])

    questions = await generate_feedback("EV battery supply", num_questions=2, llm=llm,
                                        **invoke_kwargs)

    assert questions == ["One?", "Two?"]


@pytest.mark.asyncio
async def test_generate_serp_queries_accepts_bare_array(invoke_kwargs):
    llm = FakeListChatModel(responses=['```json\n["lithium prices 2025", "sodium-ion cells"]\n```'])

    queries = await generate_serp_queries("EV battery supply", llm=llm, **invoke_kwargs)

    assert queries == ["lithium prices 2025", "sodium-ion cells"]


@pytest.mark.asyncio
async def test_process_serp_result_defaults_follow_up_questions(invoke_kwargs, word_tokenizer):
    llm = FakeListChatModel(responses=['{"learnings": ["A", "B", "C", "D"]}'])
    results = [
        {"url": "https://a.example", "title": "A", "description": "Cell costs fell 20%."},
        {"url": "https://b.example", "title": "B", "description": ""},
    ]

    output = await process_serp_result("battery costs", results, num_learnings=3, llm=llm,
                                       **invoke_kwargs)

    assert output.learnings == ["A", "B", "C"]
    assert output.followUpQuestions == []


@pytest.mark.asyncio
async def test_write_final_report_recovers_inner_quotes(invoke_kwargs, word_tokenizer):
    llm = FakeListChatModel(responses=['{"reportMarkdown": "# Report\\nAnalysts called it "transformative"."}'])

    report = await write_final_report("EV battery supply", ["A", "B"], llm=llm, **invoke_kwargs)

    assert report == "# Report\nAnalysts called it 'transformative'."
