"""LLM invocation package.

This package provides a unified interface for all LLM calls:

  from deep_research.llm import invoke_llm, trim_prompt

  # Validated invocation (preferred)
  result = await invoke_llm(
      prompt=trim_prompt(follow_up_questions_prompt(3, query)),
      system=system_prompt(),
      schema=FeedbackOutput,
  )

  # Raw client access
  llm = get_llm()
  await check_rate_limit()
  response = await llm.ainvoke(prompt)

Architecture:
  rate_limiter.py → Sliding-window limiter guarding the endpoint
  trimmer.py      → Token-aware prompt trimming to the context size
  repair.py       → Named text repair rules for noisy output
  parser.py       → JSON extraction + schema validation
  client.py       → LLM client configuration (ChatOpenAI)
  invoker.py      → limit → invoke → extract → repair → parse → validate
  errors.py       → Exception taxonomy
"""

# Client access
from deep_research.llm.client import CompletionProvider, extract_response_text, get_llm

# Errors
from deep_research.llm.errors import (
    LLMInvocationError,
    ParseError,
    ProviderCallError,
    RateLimiterInternalError,
    ResponseShapeError,
)

# Unified invocation
from deep_research.llm.invoker import build_prompt, check_rate_limit, invoke_llm

# Parsing utilities
from deep_research.llm.parser import (
    JSONExtractionError,
    describe_schema,
    extract_json,
    repair_and_parse,
)

# Rate limiting
from deep_research.llm.rate_limiter import SlidingWindowRateLimiter, get_default_limiter

# Repair rules
from deep_research.llm.repair import DEFAULT_RULES, RepairRule, clean_response

# Trimming
from deep_research.llm.trimmer import count_tokens, trim_prompt

__all__ = [
    # Client
    "CompletionProvider",
    "extract_response_text",
    "get_llm",
    # Errors
    "LLMInvocationError",
    "ParseError",
    "ProviderCallError",
    "RateLimiterInternalError",
    "ResponseShapeError",
    # Invoker
    "build_prompt",
    "check_rate_limit",
    "invoke_llm",
    # Parser
    "JSONExtractionError",
    "describe_schema",
    "extract_json",
    "repair_and_parse",
    # Rate limiter
    "SlidingWindowRateLimiter",
    "get_default_limiter",
    # Repair
    "DEFAULT_RULES",
    "RepairRule",
    "clean_response",
    # Trimmer
    "count_tokens",
    "trim_prompt",
]
