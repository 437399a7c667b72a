"""
Ready-made failure hooks.

A failure hook is called synchronously by the Dispatcher whenever a request
fails with a recoverable error (connection failure, timeout, 5xx). It gets a
FailedRequest and returns a FailureDecision. These factories cover the usual
policies; any callable with the same signature can be used instead.

Usage:
    config = ClientConfig(
        api_key=...,
        api_secret=...,
        failure_hook=retry_with_backoff(max_retries=4, base_delay=0.5),
    )
"""

from __future__ import annotations

import logging
import random
from enum import Enum
from typing import Callable

from cloudscore.dispatcher import FailedRequest, FailureDecision

logger = logging.getLogger(__name__)


class RetryStrategy(str, Enum):
    """Delay progression between attempts."""

    EXPONENTIAL = "exponential"
    LINEAR = "linear"
    CONSTANT = "constant"


def calculate_backoff_delay(
    attempt: int,
    base_delay: float,
    max_delay: float,
    strategy: RetryStrategy = RetryStrategy.EXPONENTIAL,
    jitter: float = 0.0,
) -> float:
    """Delay before the retry following failed ``attempt`` (1-based).

    Args:
        attempt: Number of the attempt that just failed.
        base_delay: Delay after the first failure.
        max_delay: Upper bound, applied before jitter.
        strategy: How the delay grows.
        jitter: Fraction of the delay added at random (0.0 to 1.0).
    """
    step = max(attempt - 1, 0)
    if strategy == RetryStrategy.EXPONENTIAL:
        delay = base_delay * (2**step)
    elif strategy == RetryStrategy.LINEAR:
        delay = base_delay * (step + 1)
    else:
        delay = base_delay
    delay = min(delay, max_delay)
    if jitter > 0:
        delay += random.uniform(0, delay * jitter)
    return delay


def abort_on_failure() -> Callable[[FailedRequest], FailureDecision]:
    """Hook that never retries. Same outcome as configuring no hook."""

    def hook(failure: FailedRequest) -> FailureDecision:
        return failure.abort()

    return hook


def retry_always(delay: float = 1.0) -> Callable[[FailedRequest], FailureDecision]:
    """Hook that retries every recoverable failure after ``delay`` seconds.

    Combine with TimeoutPolicy.SHARED_DEADLINE to bound the total time.
    """
    if delay < 0:
        raise ValueError("delay must not be negative")

    def hook(failure: FailedRequest) -> FailureDecision:
        return failure.retry_in(delay)

    return hook


def retry_with_backoff(
    max_retries: int = 3,
    base_delay: float = 0.5,
    max_delay: float = 30.0,
    strategy: RetryStrategy = RetryStrategy.EXPONENTIAL,
    jitter: float = 0.1,
    idempotent_only: bool = False,
) -> Callable[[FailedRequest], FailureDecision]:
    """Hook that retries up to ``max_retries`` times with growing delays.

    With ``idempotent_only`` a failed POST is never re-sent: a score whose
    answer was lost may already be recorded.
    """
    if max_retries < 0:
        raise ValueError("max_retries must not be negative")
    if base_delay < 0 or max_delay < 0:
        raise ValueError("delays must not be negative")

    def hook(failure: FailedRequest) -> FailureDecision:
        if idempotent_only and not failure.descriptor.idempotent:
            return failure.abort()
        if failure.attempt > max_retries:
            logger.info(
                f"Giving up on {failure.descriptor.describe()} after {failure.attempt} attempts"
            )
            return failure.abort()
        delay = calculate_backoff_delay(failure.attempt, base_delay, max_delay, strategy, jitter)
        return failure.retry_in(delay)

    return hook


__all__ = [
    "RetryStrategy",
    "calculate_backoff_delay",
    "abort_on_failure",
    "retry_always",
    "retry_with_backoff",
]
