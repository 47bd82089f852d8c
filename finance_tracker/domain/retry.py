"""Outcome types for LLM calls and the sequential backoff driver"""

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Union


@dataclass(frozen=True)
class LLMOk:
    text: str


@dataclass(frozen=True)
class RateLimited:
    retry_after: Optional[float] = None


@dataclass(frozen=True)
class QuotaExhausted:
    detail: str = ""


@dataclass(frozen=True)
class LLMFailure:
    detail: str = ""


LLMOutcome = Union[LLMOk, RateLimited, QuotaExhausted, LLMFailure]


def backoff_delay(attempt: int, base_delay: float, retry_after: Optional[float] = None) -> float:
    """base_delay * 2^attempt, but never shorter than the server's Retry-After"""
    delay = base_delay * (2 ** attempt)
    if retry_after is not None:
        delay = max(delay, retry_after)
    return delay


async def call_with_backoff(
    call: Callable[[], Awaitable[LLMOutcome]],
    max_retries: int,
    base_delay: float,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    on_retry: Optional[Callable[[int, float], None]] = None,
) -> LLMOutcome:
    """
    Run `call` until it returns something other than RateLimited.

    Retry strategy:
    - Only RateLimited is retried; quota exhaustion and failures return at once
    - Exponential backoff: base, 2*base, 4*base, ... (attempts run sequentially)
    - After max_retries retries the last RateLimited outcome is returned
    """
    attempt = 0
    while True:
        outcome = await call()
        if not isinstance(outcome, RateLimited) or attempt >= max_retries:
            return outcome

        delay = backoff_delay(attempt, base_delay, outcome.retry_after)
        if on_retry is not None:
            on_retry(attempt + 1, delay)
        await sleep(delay)
        attempt += 1
