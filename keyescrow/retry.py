"""Bounded retry with linear backoff, built on tenacity."""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import TypeVar

from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_incrementing

T = TypeVar("T")


def linear_backoff(step: float) -> wait_incrementing:
    """Wait ``step * attempt`` seconds after each failed attempt."""
    return wait_incrementing(start=step, increment=step)


def bounded_retry(
    func: Callable[[], T],
    *,
    attempts: int = 5,
    wait=None,
    retry_on: type[BaseException] | tuple[type[BaseException], ...] = Exception,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Call ``func`` until it succeeds or ``attempts`` is exhausted.

    The last exception is re-raised unchanged. ``sleep`` is injectable so
    callers can test the policy without real delays.
    """
    retrying = Retrying(
        stop=stop_after_attempt(attempts),
        wait=wait if wait is not None else linear_backoff(0.15),
        retry=retry_if_exception_type(retry_on),
        sleep=sleep,
        reraise=True,
    )
    return retrying(func)
