"""Tests for the ready-made failure hooks."""

from unittest.mock import patch

import pytest

from cloudscore.dispatcher import FailedRequest, RawResponse
from cloudscore.request import RequestDescriptor
from cloudscore.resilience import (
    RetryStrategy,
    abort_on_failure,
    calculate_backoff_delay,
    retry_always,
    retry_with_backoff,
)


def _failure(attempt):
    return FailedRequest(
        descriptor=RequestDescriptor(path="/v1/ping", url="https://api.test/v1/ping"),
        attempt=attempt,
        response=RawResponse(status=503),
    )


class TestCalculateBackoffDelay:
    """Tests for delay progression."""

    def test_exponential(self):
        delays = [calculate_backoff_delay(n, 1.0, 60.0) for n in range(1, 5)]
        assert delays == [1.0, 2.0, 4.0, 8.0]

    def test_linear(self):
        delays = [
            calculate_backoff_delay(n, 0.5, 60.0, RetryStrategy.LINEAR) for n in range(1, 4)
        ]
        assert delays == [0.5, 1.0, 1.5]

    def test_constant(self):
        assert calculate_backoff_delay(7, 2.0, 60.0, RetryStrategy.CONSTANT) == 2.0

    def test_capped_at_max_delay(self):
        assert calculate_backoff_delay(20, 1.0, 30.0) == 30.0

    def test_jitter_adds_at_most_fraction(self):
        with patch("cloudscore.resilience.random.uniform", return_value=0.4) as uniform:
            assert calculate_backoff_delay(2, 1.0, 60.0, jitter=0.2) == pytest.approx(2.4)
        uniform.assert_called_once_with(0, pytest.approx(0.4))


class TestHooks:
    """Tests for hook factories."""

    def test_abort_on_failure(self):
        assert abort_on_failure()(_failure(1)).should_retry is False

    def test_retry_always(self):
        decision = retry_always(0.25)(_failure(50))
        assert decision.should_retry is True
        assert decision.delay == 0.25

    def test_retry_always_rejects_negative_delay(self):
        with pytest.raises(ValueError):
            retry_always(-1)

    def test_retry_with_backoff_gives_up(self):
        hook = retry_with_backoff(max_retries=2, base_delay=0.1, jitter=0)
        assert hook(_failure(1)).delay == pytest.approx(0.1)
        assert hook(_failure(2)).delay == pytest.approx(0.2)
        assert hook(_failure(3)).should_retry is False

    def test_retry_with_backoff_zero_retries(self):
        assert retry_with_backoff(max_retries=0)(_failure(1)).should_retry is False

    def test_retry_with_backoff_validates(self):
        with pytest.raises(ValueError):
            retry_with_backoff(max_retries=-1)
        with pytest.raises(ValueError):
            retry_with_backoff(base_delay=-0.5)

    def test_retry_with_backoff_idempotent_only(self):
        hook = retry_with_backoff(max_retries=3, idempotent_only=True)
        post = FailedRequest(
            descriptor=RequestDescriptor(path="/v2.6/gamer/scores/private/arena", method="POST"),
            attempt=1,
            error=ConnectionResetError("reset"),
        )
        assert hook(post).should_retry is False
        assert hook(_failure(1)).should_retry is True
