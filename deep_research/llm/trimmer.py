"""Fit arbitrary text into the model's context window.

Text is shortened by taking the first chunk a boundary-aware splitter
produces, so the kept prefix ends on a paragraph, line, sentence or word
break whenever one exists. Token counts are only estimated when picking
the chunk size (~3 characters per token); every iteration re-measures the
real count.
"""

from functools import lru_cache
from typing import Callable, Optional

import tiktoken
from langchain_text_splitters import RecursiveCharacterTextSplitter

from deep_research.config import CONTEXT_SIZE, MIN_CHUNK_SIZE
from deep_research.utils.logging import log, get_logger

MODULE = "llm.trimmer"
logger = get_logger()

ENCODING_NAME = "o200k_base"
CHARS_PER_TOKEN = 3

# Paragraph, line, sentence, word, character
SEPARATORS = ["\n\n", "\n", ". ", " ", ""]


@lru_cache(maxsize=1)
def _get_encoding() -> tiktoken.Encoding:
    """Lazy-load the tokenizer. The first call may download the BPE ranks."""
    return tiktoken.get_encoding(ENCODING_NAME)


def count_tokens(text: str) -> int:
    """Count tokens the way the completion endpoint does."""
    return len(_get_encoding().encode(text, disallowed_special=()))


def _first_chunk(text: str, chunk_size: int) -> str:
    splitter = RecursiveCharacterTextSplitter(
        chunk_size=chunk_size,
        chunk_overlap=0,
        separators=SEPARATORS,
    )
    chunks = splitter.split_text(text)
    return chunks[0] if chunks else ""


def trim_prompt(
    prompt: str,
    context_size: int = CONTEXT_SIZE,
    *,
    tokenizer: Optional[Callable[[str], int]] = None,
    min_chunk_size: int = MIN_CHUNK_SIZE,
) -> str:
    """Trim `prompt` until it fits in `context_size` tokens.

    Args:
        prompt: Text to trim.
        context_size: Token budget.
        tokenizer: Token counter override; defaults to `count_tokens`.
        min_chunk_size: Below this many characters the text is hard-cut
            instead of split.

    Returns:
        A prefix of `prompt` that fits the budget, or the first
        `min_chunk_size` characters when the budget is smaller than that.
    """
    counter = tokenizer or count_tokens
    text = prompt
    original_length = len(prompt)

    while text:
        length = counter(text)
        if length <= context_size:
            break

        overflow = length - context_size
        chunk_size = len(text) - overflow * CHARS_PER_TOKEN
        if chunk_size < min_chunk_size:
            text = text[:min_chunk_size]
            break

        trimmed = _first_chunk(text, chunk_size)

        # The splitter can hand back the whole text (how tokens fall vs.
        # separators); hard-cut so every pass shrinks the text.
        if len(trimmed) >= len(text):
            trimmed = text[:chunk_size]

        text = trimmed

    if len(text) != original_length:
        log.debug(logger, MODULE, "trimmed", "Prompt trimmed to context size",
                  original_chars=original_length, trimmed_chars=len(text),
                  context_size=context_size)
    return text
