"""Shared fixtures: a controllable clock for the rate limiter and a
network-free tokenizer for the trimmer."""

import asyncio

import pytest

from deep_research.llm import trimmer


class FakeClock:
    """Millisecond clock that only moves when a sleeper wakes.

    Concurrent sleepers that target the same instant wake together, so
    the clock never runs ahead of the latest deadline.
    """

    def __init__(self, start: float = 0.0):
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        target = self.now + seconds * 1000
        await asyncio.sleep(0)
        self.now = max(self.now, target)


def word_count(text: str) -> int:
    return len(text.split())


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def word_tokenizer(monkeypatch):
    """Count one token per whitespace-separated word everywhere."""
    monkeypatch.setattr(trimmer, "count_tokens", word_count)
    return word_count
