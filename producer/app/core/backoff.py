"""Backoff utilities.

`exponential_backoff` yields ``(attempt, delay)`` pairs, 1-based. The first
attempt is yielded immediately with a delay of 0; before every later attempt it
sleeps for the current delay, which grows by ``multiplier`` up to ``max_delay``.
The caller breaks out of the loop on success.
"""
import asyncio
from typing import AsyncIterator


async def exponential_backoff(
    initial_delay: float,
    max_delay: float,
    multiplier: float,
    max_attempts: int,
) -> AsyncIterator[tuple[int, float]]:
    delay = max(0.0, initial_delay)
    for attempt in range(1, max_attempts + 1):
        if attempt == 1:
            yield attempt, 0.0
            continue
        await asyncio.sleep(delay)
        yield attempt, delay
        delay = min(delay * multiplier, max_delay)
