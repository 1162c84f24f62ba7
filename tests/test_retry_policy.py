"""Tests for RetryPolicy — attempt ceiling and capped exponential backoff."""

from unittest.mock import AsyncMock, patch

import pytest

from realyield.services.retry_policy import RetryExhaustedError, RetryPolicy


def _flaky(failures: int, result="ok", exc_type=RuntimeError):
    """Operation that raises ``failures`` times, then returns ``result``."""
    calls = {"count": 0}

    async def _op():
        calls["count"] += 1
        if calls["count"] <= failures:
            raise exc_type(f"failure {calls['count']}")
        return result

    return _op, calls


# ---------------------------------------------------------------------------
# Backoff schedule
# ---------------------------------------------------------------------------

class TestBackoff:
    @pytest.mark.parametrize("attempt,expected", [(1, 1000), (2, 2000), (3, 4000), (4, 5000), (10, 5000)])
    def test_default_schedule(self, attempt, expected):
        assert RetryPolicy().backoff_ms(attempt) == expected


# ---------------------------------------------------------------------------
# run()
# ---------------------------------------------------------------------------

class TestRun:
    async def test_first_attempt_succeeds_without_waiting(self):
        op, calls = _flaky(0)
        with patch("realyield.services.retry_policy.asyncio.sleep", new_callable=AsyncMock) as sleep:
            assert await RetryPolicy().run(op) == "ok"
        assert calls["count"] == 1
        sleep.assert_not_called()

    async def test_recovers_after_two_failures(self):
        op, calls = _flaky(2)
        with patch("realyield.services.retry_policy.asyncio.sleep", new_callable=AsyncMock) as sleep:
            assert await RetryPolicy().run(op, label="detail") == "ok"
        assert calls["count"] == 3
        assert [c.args[0] for c in sleep.await_args_list] == [1.0, 2.0]

    async def test_exhausted_after_ceiling(self):
        op, calls = _flaky(5)
        with patch("realyield.services.retry_policy.asyncio.sleep", new_callable=AsyncMock) as sleep:
            with pytest.raises(RetryExhaustedError) as excinfo:
                await RetryPolicy(max_attempts=3).run(op, label="detail")
        assert calls["count"] == 3
        # No wait after the final attempt
        assert sleep.await_count == 2
        assert excinfo.value.attempts == 3
        assert isinstance(excinfo.value.last_error, RuntimeError)

    async def test_unlisted_exception_propagates_immediately(self):
        op, calls = _flaky(1, exc_type=KeyError)
        policy = RetryPolicy(retry_on=(ValueError,))
        with patch("realyield.services.retry_policy.asyncio.sleep", new_callable=AsyncMock):
            with pytest.raises(KeyError):
                await policy.run(op)
        assert calls["count"] == 1
