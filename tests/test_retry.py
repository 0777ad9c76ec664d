"""Tests for the exponential-backoff executor."""
from unittest.mock import AsyncMock

import pytest

from mastery_hub.config import Settings
from mastery_hub.exceptions import ParseError
from mastery_hub.retry import RetryingRequestExecutor


class TestExecute:
    async def test_returns_first_success_without_waiting(self, sleep):
        operation = AsyncMock(return_value="ok")
        executor = RetryingRequestExecutor(sleep=sleep)

        assert await executor.execute(operation) == "ok"
        assert operation.await_count == 1
        assert sleep.calls == []

    async def test_two_failures_then_success(self, sleep):
        """Fails twice, succeeds on the third call after 1000ms and 2000ms waits."""
        operation = AsyncMock(side_effect=[ConnectionError("down"), ParseError("bad json"), 42])
        executor = RetryingRequestExecutor(sleep=sleep)

        result = await executor.execute(operation, max_retries=3, initial_delay_ms=1000)

        assert result == 42
        assert operation.await_count == 3
        assert sleep.calls == [1.0, 2.0]

    async def test_exhausted_budget_reraises_last_error(self, sleep):
        errors = [TimeoutError("1"), TimeoutError("2"), TimeoutError("3"), ValueError("last")]
        operation = AsyncMock(side_effect=errors)
        executor = RetryingRequestExecutor(max_retries=3, initial_delay_ms=1000, sleep=sleep)

        with pytest.raises(ValueError, match="last"):
            await executor.execute(operation)

        assert operation.await_count == 4
        assert sleep.calls == [1.0, 2.0, 4.0]

    async def test_zero_retries_fails_immediately(self, sleep):
        operation = AsyncMock(side_effect=RuntimeError("boom"))
        executor = RetryingRequestExecutor(max_retries=0, sleep=sleep)

        with pytest.raises(RuntimeError):
            await executor.execute(operation)

        assert operation.await_count == 1
        assert sleep.calls == []

    async def test_call_arguments_override_defaults(self, sleep):
        operation = AsyncMock(side_effect=[RuntimeError("a"), RuntimeError("b"), "done"])
        executor = RetryingRequestExecutor(max_retries=0, initial_delay_ms=1000, sleep=sleep)

        assert await executor.execute(operation, max_retries=2, initial_delay_ms=10) == "done"
        assert sleep.calls == [0.01, 0.02]


class TestFromSettings:
    def test_uses_configured_policy(self, sleep):
        executor = RetryingRequestExecutor.from_settings(
            Settings(max_retries=5, initial_delay_ms=250), sleep=sleep,
        )

        assert executor.max_retries == 5
        assert executor.initial_delay_ms == 250
