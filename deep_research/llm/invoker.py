"""Rate-limited, schema-validated LLM invocation.

This module provides a single entry point for structured LLM calls. It
handles the full lifecycle, strictly in order:

  1. PROMPT: system preamble + prompt + JSON schema instruction block
  2. LIMIT: claim a slot on the sliding-window rate limiter
  3. INVOKE: call the provider, bounded by a timeout and a retry count
  4. EXTRACT: pull the first text segment out of the reply
  5. REPAIR + PARSE + VALIDATE: see parser.repair_and_parse

Only step 3 is retried. Every failure reaches the caller.
"""

import asyncio
import time
from pathlib import Path
from typing import Any, Optional, Type, TypeVar, Union

from pydantic import BaseModel

from deep_research.config import ERROR_ARTIFACT_PATH, REQUEST_MAX_RETRIES, REQUEST_TIMEOUT_S
from deep_research.llm.client import CompletionProvider, extract_response_text, get_llm
from deep_research.llm.errors import ProviderCallError, ResponseShapeError
from deep_research.llm.parser import describe_schema, repair_and_parse
from deep_research.llm.rate_limiter import SlidingWindowRateLimiter, get_default_limiter
from deep_research.prompts.research import get_schema_prompt
from deep_research.utils.logging import log, get_logger

MODULE = "llm.invoker"
logger = get_logger()

T = TypeVar("T", bound=BaseModel)


def build_prompt(prompt: str, schema: Type[BaseModel], system: str = "") -> str:
    """Assemble the full prompt sent to the provider."""
    preamble = f"{system}\n\n" if system else ""
    return f"{preamble}{prompt}{get_schema_prompt(describe_schema(schema))}"


async def check_rate_limit(limiter: Optional[SlidingWindowRateLimiter] = None) -> None:
    """Wait for a call slot, for callers that talk to the provider directly."""
    await (limiter or get_default_limiter()).acquire()


async def _send(
    llm: CompletionProvider,
    prompt: str,
    *,
    max_retries: int,
    timeout: float,
    retry_delay: float,
    activity_name: str,
) -> Any:
    """Call the provider, retrying failures and timeouts."""
    last_error: Optional[BaseException] = None
    attempts = max_retries + 1

    for attempt in range(attempts):
        log.debug(logger, MODULE, "send_start", "Sending request to API",
                  activity=activity_name, attempt=attempt + 1,
                  prompt_chars=len(prompt))
        _t0 = time.monotonic()
        try:
            response = await asyncio.wait_for(llm.ainvoke(prompt), timeout=timeout)
        except Exception as e:
            last_error = e
            log.error(logger, MODULE, "send_failed", "API call failed",
                      error=str(e) or f"timed out after {timeout}s",
                      error_type=type(e).__name__,
                      activity=activity_name, attempt=attempt + 1)
            if attempt < max_retries:
                await asyncio.sleep(retry_delay)
            continue

        latency_ms = int((time.monotonic() - _t0) * 1000)
        log.info(logger, MODULE, "send_done", "API request successful",
                 activity=activity_name, attempt=attempt + 1,
                 latency_ms=latency_ms)
        return response

    raise ProviderCallError(
        f"LLM call failed for {activity_name} after {attempts} attempts: "
        f"{type(last_error).__name__}: {last_error}",
        attempts=attempts,
    ) from last_error


async def invoke_llm(
    prompt: str,
    schema: Type[T],
    *,
    system: str = "",
    replace_quotes: bool = False,
    llm: Optional[CompletionProvider] = None,
    limiter: Optional[SlidingWindowRateLimiter] = None,
    max_retries: int = REQUEST_MAX_RETRIES,
    timeout: float = REQUEST_TIMEOUT_S,
    retry_delay: float = 1.0,
    error_path: Union[str, Path] = ERROR_ARTIFACT_PATH,
    activity_name: str = "invoke",
) -> T:
    """Invoke the LLM and return validated, typed output.

    Args:
        prompt: Task prompt (already trimmed to the context size)
        schema: Pydantic model class to validate against
        system: Optional system preamble, prepended to the prompt
        replace_quotes: Enable the lossy inner-quote repair rule
        llm: Completion provider (default: get_llm())
        limiter: Rate limiter (default: the process-wide limiter)
        max_retries: Retries after the first failed provider call
        timeout: Seconds allowed per provider call
        retry_delay: Seconds between provider attempts
        error_path: Diagnostic file for unparseable output
        activity_name: Name for logging context

    Returns:
        Validated instance of the schema type

    Raises:
        ProviderCallError: The provider failed on every attempt
        ResponseShapeError: The reply had no text to parse
        ParseError: The text could not be repaired into the schema
    """
    full_prompt = build_prompt(prompt, schema, system)

    await check_rate_limit(limiter)

    response = await _send(
        llm or get_llm(),
        full_prompt,
        max_retries=max_retries,
        timeout=timeout,
        retry_delay=retry_delay,
        activity_name=activity_name,
    )

    try:
        text = extract_response_text(response)
    except ResponseShapeError as e:
        log.error(logger, MODULE, "extract_failed", "Failed to extract response text",
                  error=str(e), activity=activity_name)
        raise
    log.debug(logger, MODULE, "extract_done", "Successfully extracted response text",
              activity=activity_name, raw_length=len(text))

    result = repair_and_parse(
        text, schema, replace_quotes=replace_quotes, error_path=error_path,
    )
    log.info(logger, MODULE, "invoke_success",
             f"LLM invocation successful for {activity_name}",
             schema=schema.__name__)
    return result
