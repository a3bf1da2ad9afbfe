"""
Retry policy shared by the HTTP and browser fetchers.

Bounded attempts with exponential backoff: the first wait equals
``initial_backoff`` and every following wait doubles it.
"""

import asyncio
from typing import Awaitable, Callable

import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

logger = structlog.get_logger(__name__)

SleepFn = Callable[[float], Awaitable[None]]


def _log_retry(retry_state: RetryCallState) -> None:
    """Log before sleeping between attempts."""
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    delay = retry_state.next_action.sleep if retry_state.next_action else 0
    logger.warning(
        "fetch_retry",
        attempt=retry_state.attempt_number,
        delay=delay,
        error=str(exc),
    )


def build_retrying(
    max_attempts: int = 3,
    initial_backoff: float = 2.0,
    retry_on: tuple = (Exception,),
    sleep: SleepFn = asyncio.sleep,
    max_backoff: float = 60.0,
) -> AsyncRetrying:
    """
    Create a tenacity controller for one fetch.

    Args:
        max_attempts: Total attempts including the first one
        initial_backoff: Seconds to wait after the first failure
        retry_on: Exception types that are worth another attempt
        sleep: Awaitable sleep used between attempts
        max_backoff: Upper bound for a single wait

    Returns:
        AsyncRetrying that re-raises the last error once attempts run out
    """
    return AsyncRetrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=initial_backoff, exp_base=2, max=max_backoff),
        retry=retry_if_exception_type(retry_on),
        sleep=sleep,
        before_sleep=_log_retry,
        reraise=True,
    )
