from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Generic, List, Optional, TypeVar

from ..config.constants import INITIAL_RETRY_DELAY, MAX_RETRIES, MAX_RETRY_DELAY
from ..observability.logging import record_provider_call
from ..providers.errors import ErrorMapper
from .error_classifier import ErrorClassification, ErrorClassifier, FailureClass

logger = logging.getLogger(__name__)

T = TypeVar("T")


class AttemptStatus(Enum):
    SUCCESS = "success"
    RETRYABLE = "retryable"
    FATAL = "fatal"


@dataclass
class AttemptOutcome(Generic[T]):
    """Result of a single attempt; exceptions never escape an attempt."""
    status: AttemptStatus
    value: Optional[T] = None
    error: Optional[Exception] = None
    classification: Optional[ErrorClassification] = None


@dataclass
class RetryConfig:
    max_retries: int = MAX_RETRIES
    initial_delay: float = INITIAL_RETRY_DELAY
    backoff_factor: float = 2.0
    max_delay: float = MAX_RETRY_DELAY
    respect_retry_after: bool = False


@dataclass
class RetryState:
    """Per-call retry bookkeeping, discarded once the call finishes."""
    attempts: int = 0
    last_classification: Optional[FailureClass] = None
    total_delay: float = 0.0
    delays: List[float] = field(default_factory=list)

    def record_delay(self, delay: float) -> None:
        self.delays.append(delay)
        self.total_delay += delay


class RetryManager:
    """
    Runs one provider operation with rate-limit backoff.

    Only RATE_LIMITED failures are retried. The delay before retry ``n``
    (0-based) is ``initial_delay * backoff_factor ** n`` capped at
    ``max_delay``, which gives 1, 2, 4, 8 and 16 seconds with the defaults.
    Every other classification raises on first occurrence.

    The operation must be the call that produces the first byte of a
    response; anything the caller does with the result is outside the retry.
    """

    def __init__(
        self,
        provider: str,
        config: Optional[RetryConfig] = None,
        sleep: Optional[Callable[[float], Awaitable[Any]]] = None,
    ):
        self.provider = provider
        self.config = config or RetryConfig()
        self._sleep = sleep or asyncio.sleep

    async def run(self, operation: Callable[[], Awaitable[T]]) -> T:
        """
        Execute ``operation`` until it succeeds or fails terminally.

        Args:
            operation: Zero-argument coroutine function calling the provider

        Returns:
            The operation's result

        Raises:
            ProviderError: On a fatal classification or when retries run out
        """
        state = RetryState()
        try:
            return await self._run(operation, state)
        finally:
            record_provider_call(state.attempts)

    async def _run(self, operation: Callable[[], Awaitable[T]], state: RetryState) -> T:
        while True:
            outcome = await self._attempt(operation)
            state.attempts += 1

            if outcome.status is AttemptStatus.SUCCESS:
                if state.attempts > 1:
                    logger.info(
                        "%s call succeeded after %d attempts", self.provider, state.attempts,
                        extra={"provider": self.provider, "attempts": state.attempts,
                               "total_delay": state.total_delay},
                    )
                return outcome.value

            classification = outcome.classification
            state.last_classification = classification.failure_class

            if outcome.status is AttemptStatus.FATAL:
                error = ErrorMapper.map_error(outcome.error, self.provider, classification)
                error.retry_state = state
                logger.error(
                    "%s call failed (%s): %s", self.provider,
                    classification.failure_class.value, classification.message,
                    extra={"provider": self.provider, "classification": classification.failure_class.value},
                )
                self._raise(error, outcome.error)

            retry_index = state.attempts - 1
            if retry_index >= self.config.max_retries:
                error = ErrorMapper.exhausted(outcome.error, self.provider, classification, state.attempts)
                error.retry_state = state
                logger.error(
                    "%s retries exhausted after %d attempts", self.provider, state.attempts,
                    extra={"provider": self.provider, "attempts": state.attempts,
                           "total_delay": state.total_delay},
                )
                self._raise(error, outcome.error)

            delay = self.calculate_delay(retry_index, classification)
            logger.warning(
                "%s rate limited, retrying in %.1fs (retry %d/%d)",
                self.provider, delay, retry_index + 1, self.config.max_retries,
                extra={"provider": self.provider, "delay": delay, "attempt": state.attempts},
            )
            await self._sleep(delay)
            state.record_delay(delay)

    run_with_retry = run

    def calculate_delay(self, retry_index: int, classification: Optional[ErrorClassification] = None) -> float:
        if self.config.respect_retry_after and classification and classification.retry_after:
            return min(classification.retry_after, self.config.max_delay)
        delay = self.config.initial_delay * (self.config.backoff_factor ** retry_index)
        return min(delay, self.config.max_delay)

    async def _attempt(self, operation: Callable[[], Awaitable[T]]) -> AttemptOutcome[T]:
        try:
            value = await operation()
        except Exception as e:  # noqa: BLE001
            classification = ErrorClassifier.classify(e)
            status = AttemptStatus.RETRYABLE if classification.is_retryable else AttemptStatus.FATAL
            return AttemptOutcome(status=status, error=e, classification=classification)
        return AttemptOutcome(status=AttemptStatus.SUCCESS, value=value)

    @staticmethod
    def _raise(error: Exception, cause: Exception) -> None:
        if error is cause:
            raise error
        raise error from cause


async def run_with_retry(
    operation: Callable[[], Awaitable[T]],
    provider: str,
    config: Optional[RetryConfig] = None,
    sleep: Optional[Callable[[float], Awaitable[Any]]] = None,
) -> T:
    """Convenience wrapper: ``RetryManager(provider, config, sleep).run(operation)``."""
    return await RetryManager(provider, config, sleep).run(operation)
