"""Tests for the rate-limit retry engine."""

from unittest.mock import AsyncMock

import pytest

from chat_driver_sdk.providers.errors import ProviderError
from chat_driver_sdk.reliability import FailureClass
from chat_driver_sdk.reliability.retry import RetryConfig, RetryManager, run_with_retry
from tests.helpers.mock_exceptions import (
    MockAuthenticationError,
    MockContentFilterError,
    MockInternalServerError,
    MockPermissionDeniedError,
    MockRateLimitError,
    MockStructuredError,
)


@pytest.mark.asyncio
class TestRetryManager:

    async def test_success_first_attempt(self, recording_sleep):
        operation = AsyncMock(return_value="ok")
        manager = RetryManager("OpenAI", sleep=recording_sleep)

        assert await manager.run(operation) == "ok"
        assert operation.await_count == 1
        assert recording_sleep.delays == []

    async def test_recovers_after_rate_limits(self, recording_sleep):
        operation = AsyncMock(side_effect=[
            MockRateLimitError(),
            MockRateLimitError(),
            MockRateLimitError(),
            "recovered",
        ])
        manager = RetryManager("OpenAI", sleep=recording_sleep)

        assert await manager.run(operation) == "recovered"
        assert operation.await_count == 4
        assert recording_sleep.delays == [1.0, 2.0, 4.0]

    async def test_exhaustion(self, recording_sleep):
        operation = AsyncMock(side_effect=MockRateLimitError("Too many requests"))
        manager = RetryManager("OpenAI", sleep=recording_sleep)

        with pytest.raises(ProviderError) as exc_info:
            await manager.run(operation)

        assert operation.await_count == 6
        assert recording_sleep.delays == [1.0, 2.0, 4.0, 8.0, 16.0]
        error = exc_info.value
        assert "OpenAI" in str(error)
        assert "retries exhausted after 6 attempts" in str(error)
        assert "rate_limited" in str(error)
        assert "Too many requests" in str(error)
        assert error.classification == FailureClass.RATE_LIMITED
        assert error.retry_state.attempts == 6
        assert error.retry_state.total_delay == 31.0

    @pytest.mark.parametrize("error,failure_class", [
        (MockAuthenticationError(), FailureClass.UNAUTHORIZED),
        (MockPermissionDeniedError(), FailureClass.FORBIDDEN),
        (MockContentFilterError(), FailureClass.CONTENT_FILTERED),
        (MockStructuredError("safety", "unsafe"), FailureClass.SAFETY_TRIGGERED),
        (MockInternalServerError(), FailureClass.OTHER),
    ])
    async def test_non_rate_limit_errors_fail_immediately(self, recording_sleep, error, failure_class):
        operation = AsyncMock(side_effect=error)
        manager = RetryManager("Gemini", sleep=recording_sleep)

        with pytest.raises(ProviderError) as exc_info:
            await manager.run(operation)

        assert operation.await_count == 1
        assert recording_sleep.delays == []
        assert exc_info.value.classification == failure_class
        assert exc_info.value.original_error is error
        assert exc_info.value.__cause__ is error

    async def test_content_filter_message(self, recording_sleep):
        operation = AsyncMock(side_effect=MockContentFilterError("Prompt flagged"))
        manager = RetryManager("Azure OpenAI", sleep=recording_sleep)

        with pytest.raises(ProviderError, match="Azure OpenAI content filter triggered: Prompt flagged"):
            await manager.run(operation)

    async def test_custom_schedule(self, recording_sleep):
        operation = AsyncMock(side_effect=MockRateLimitError())
        config = RetryConfig(max_retries=3, initial_delay=0.5, max_delay=1.0)
        manager = RetryManager("OpenAI", config=config, sleep=recording_sleep)

        with pytest.raises(ProviderError):
            await manager.run(operation)

        assert operation.await_count == 4
        assert recording_sleep.delays == [0.5, 1.0, 1.0]

    async def test_zero_retries(self, recording_sleep):
        operation = AsyncMock(side_effect=MockRateLimitError())
        manager = RetryManager("OpenAI", config=RetryConfig(max_retries=0), sleep=recording_sleep)

        with pytest.raises(ProviderError, match="retries exhausted after 1 attempts"):
            await manager.run(operation)
        assert recording_sleep.delays == []

    async def test_respect_retry_after(self, recording_sleep):
        operation = AsyncMock(side_effect=[MockRateLimitError(retry_after=3), "ok"])
        config = RetryConfig(respect_retry_after=True)
        manager = RetryManager("OpenAI", config=config, sleep=recording_sleep)

        assert await manager.run(operation) == "ok"
        assert recording_sleep.delays == [3.0]

    async def test_module_helper(self, recording_sleep):
        operation = AsyncMock(side_effect=[MockRateLimitError(), 42])
        assert await run_with_retry(operation, "OpenAI", sleep=recording_sleep) == 42
        assert recording_sleep.delays == [1.0]


class TestCalculateDelay:

    def test_default_schedule(self):
        manager = RetryManager("OpenAI")
        assert [manager.calculate_delay(i) for i in range(5)] == [1.0, 2.0, 4.0, 8.0, 16.0]

    def test_capped(self):
        manager = RetryManager("OpenAI", config=RetryConfig(max_delay=5.0))
        assert manager.calculate_delay(10) == 5.0
