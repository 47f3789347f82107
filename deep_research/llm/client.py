"""Completion provider configuration.

All completions go through an OpenAI-compatible endpoint (OpenRouter by
default) via LangChain's ChatOpenAI:

  get_llm()  → configured chat model for OPENROUTER_MODEL

Any object with an async `ainvoke(prompt)` returning a chat message can be
used in its place (tests use LangChain's fake chat models).

Retries and timeouts are owned by the invoker, so the client itself is
created with retries disabled and no request timeout.
"""

from typing import Any, Optional, Protocol

from langchain_openai import ChatOpenAI

from deep_research.config import OPENROUTER_ENDPOINT, OPENROUTER_KEY, OPENROUTER_MODEL
from deep_research.llm.errors import ResponseShapeError
from deep_research.utils.logging import log, get_logger

MODULE = "llm"
logger = get_logger()


class CompletionProvider(Protocol):
    """Anything that turns a prompt into a chat message."""

    async def ainvoke(self, input: Any, **kwargs: Any) -> Any:
        ...


def get_llm(model: Optional[str] = None) -> ChatOpenAI:
    """Get the chat model client.

    Args:
        model: Model name on the endpoint. Defaults to OPENROUTER_MODEL.
            OpenAI reasoning models (o1, o3-mini, ...) get medium
            reasoning effort.
    """
    model = model or OPENROUTER_MODEL
    reasoning_effort = "medium" if model.startswith("o") else None

    client = ChatOpenAI(
        base_url=OPENROUTER_ENDPOINT,
        api_key=OPENROUTER_KEY or "not-configured",
        model=model,
        max_retries=0,
        reasoning_effort=reasoning_effort,
    )
    log.debug(logger, MODULE, "llm_init", "LLM client created",
              base_url=OPENROUTER_ENDPOINT, model=model,
              reasoning_effort=reasoning_effort)
    return client


def extract_response_text(message: Any) -> str:
    """Get the first text segment of a chat message.

    Handles plain string content and content-block lists, where a block is
    either a string or a dict with a "text" key.

    Raises:
        ResponseShapeError: If there is no text where one is expected
    """
    content = getattr(message, "content", None)

    if isinstance(content, str):
        return content

    if isinstance(content, list) and content:
        first = content[0]
        if isinstance(first, str):
            return first
        if isinstance(first, dict) and isinstance(first.get("text"), str):
            return first["text"]

    raise ResponseShapeError(
        f"Unexpected response shape: no text in {type(message).__name__} content "
        f"({type(content).__name__})"
    )
