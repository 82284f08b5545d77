"""Tests for RetryPolicy and with_retry: bounded exponential backoff."""

from __future__ import annotations

import pytest

from deployguard.core.retry import RetryPolicy, with_retry


class TestRetryPolicy:
    def test_default_delay_sequence(self):
        policy = RetryPolicy(retries=3, base_delay_ms=5000)
        assert policy.delays() == [5000, 10000, 20000]

    def test_zero_retries_has_no_delays(self):
        assert RetryPolicy(retries=0).delays() == []

    def test_max_attempts(self):
        assert RetryPolicy(retries=3).max_attempts == 4

    def test_negative_attempt_rejected(self):
        with pytest.raises(ValueError):
            RetryPolicy().delay_ms(-1)

    def test_policy_is_frozen(self):
        policy = RetryPolicy()
        with pytest.raises(Exception):
            policy.retries = 10  # type: ignore[misc]


class TestWithRetry:
    @pytest.mark.anyio
    async def test_returns_first_success(self, fake_sleep):
        async def op():
            return "ok"

        assert await with_retry(op, RetryPolicy(), fake_sleep) == "ok"
        assert fake_sleep.calls == []

    @pytest.mark.anyio
    async def test_recovers_after_failures(self, fake_sleep):
        attempts = []

        async def op():
            attempts.append(1)
            if len(attempts) < 3:
                raise RuntimeError("flaky")
            return "ok"

        result = await with_retry(op, RetryPolicy(retries=3, base_delay_ms=5000), fake_sleep)
        assert result == "ok"
        assert len(attempts) == 3
        assert fake_sleep.calls == [5.0, 10.0]

    @pytest.mark.anyio
    async def test_exhaustion_reraises_last_error(self, fake_sleep):
        attempts = []

        async def op():
            attempts.append(1)
            raise RuntimeError(f"failure {len(attempts)}")

        with pytest.raises(RuntimeError, match="failure 4"):
            await with_retry(op, RetryPolicy(retries=3, base_delay_ms=5000), fake_sleep)

        assert len(attempts) == 4
        # Sleeps only happen between attempts: [5000, 10000, 20000] ms.
        assert fake_sleep.calls == [5.0, 10.0, 20.0]

    @pytest.mark.anyio
    async def test_zero_retries_single_attempt(self, fake_sleep):
        attempts = []

        async def op():
            attempts.append(1)
            raise ConnectionError("refused")

        with pytest.raises(ConnectionError, match="refused"):
            await with_retry(op, RetryPolicy(retries=0), fake_sleep)

        assert len(attempts) == 1
        assert fake_sleep.calls == []
