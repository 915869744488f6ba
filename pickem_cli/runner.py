"""Shared options and batch execution for CLI commands."""

from collections.abc import Awaitable, Callable
from typing import TypeVar

import structlog
import typer
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.wait import wait_base

logger = structlog.get_logger()

T = TypeVar("T")

MIN_YEAR = 2000
MAX_YEAR = 2030
MIN_WEEK = 1
MAX_WEEK = 18


def year_option(prompt: bool = False):
    return typer.Option(
        ...,
        "--year",
        "-y",
        min=MIN_YEAR,
        max=MAX_YEAR,
        prompt="Season year" if prompt else False,
        help=f"Season year ({MIN_YEAR}-{MAX_YEAR})",
    )


def week_option(prompt: bool = False):
    return typer.Option(
        ...,
        "--week",
        "-w",
        min=MIN_WEEK,
        max=MAX_WEEK,
        prompt="Week" if prompt else False,
        help=f"Regular season week ({MIN_WEEK}-{MAX_WEEK})",
    )


def retries_option():
    return typer.Option(
        0,
        "--retries",
        "-r",
        min=0,
        max=5,
        help="Re-run the whole batch this many times on transient upstream failures",
    )


def _is_retryable(exc: BaseException) -> bool:
    return bool(getattr(exc, "retryable", False))


def _log_retry(retry_state: RetryCallState) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        "batch_retrying",
        attempt=retry_state.attempt_number,
        error=str(exc),
        error_type=type(exc).__name__,
    )


async def run_with_retries(
    operation: Callable[[], Awaitable[T]],
    retries: int,
    wait: wait_base | None = None,
) -> T:
    """
    Run a batch, re-running it from the start on retryable failures.

    Batches are idempotent, so a re-run after a transport failure converges
    to the same state. Non-retryable errors propagate on the first attempt.

    The operation may be any callable returning an awaitable, including a
    plain lambda around a coroutine method.
    """
    async for attempt in AsyncRetrying(
        retry=retry_if_exception(_is_retryable),
        stop=stop_after_attempt(retries + 1),
        wait=wait or wait_exponential(multiplier=1, min=2, max=10),
        before_sleep=_log_retry,
        reraise=True,
    ):
        with attempt:
            result = await operation()
    return result
