"""Bounded exponential backoff shared by the HTTP collaborators."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

import httpx

from timeline_pro.config import settings

_T = TypeVar("_T")

RETRYABLE_STATUS_CODES = frozenset({408, 425, 429, 500, 502, 503, 504})


def is_transient_error(error: Exception) -> bool:
    if isinstance(error, httpx.UnsupportedProtocol):
        return False
    if isinstance(error, (TimeoutError, asyncio.TimeoutError, httpx.TransportError)):
        return True
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code in RETRYABLE_STATUS_CODES
    return False


def backoff_delay(attempt: int, base_delay: float, max_delay: float) -> float:
    """Delay before retrying after the 1-based ``attempt`` failed."""
    return min(base_delay * (2 ** (attempt - 1)), max_delay)


async def run_with_retry(
    operation_name: str,
    operation: Callable[[], Awaitable[_T]],
    logger: logging.Logger,
    max_attempts: int | None = None,
    base_delay: float | None = None,
    max_delay: float | None = None,
    is_retryable: Callable[[Exception], bool] = is_transient_error,
) -> _T:
    """
    Await ``operation`` until it succeeds or attempts run out.

    Non-retryable errors and the error of the final attempt propagate.
    """
    total_attempts = max(int(max_attempts if max_attempts is not None else settings.FETCH_MAX_ATTEMPTS), 1)
    base = max(float(base_delay if base_delay is not None else settings.FETCH_RETRY_BASE_SECONDS), 0.0)
    ceiling = max(float(max_delay if max_delay is not None else settings.FETCH_RETRY_MAX_SECONDS), base)

    attempt = 1
    while True:
        try:
            return await operation()
        except Exception as error:
            if attempt >= total_attempts or not is_retryable(error):
                raise

            delay = backoff_delay(attempt, base, ceiling)
            logger.warning(
                "%s failed (attempt %d/%d): %s. Retrying in %.2fs",
                operation_name,
                attempt,
                total_attempts,
                error,
                delay,
            )
            if delay > 0:
                await asyncio.sleep(delay)
            attempt += 1
