"""
Provider error types and mapping.

Every failure that leaves a driver is a ProviderError (or a subclass) whose
message names the provider and repeats the provider's own error text, so an
operator can tell a provider policy decision apart from a local bug.
"""

from typing import Any, Optional

from ..reliability.error_classifier import (
    ErrorClassification,
    ErrorClassifier,
    FailureClass,
)


class ProviderError(Exception):
    """Error raised by a chat or embedding driver."""

    def __init__(
        self,
        message: str,
        provider: str,
        status_code: Optional[int] = None,
        classification: Optional[FailureClass] = None,
    ):
        super().__init__(message)
        self.message = message
        self.provider = provider
        self.status_code = status_code
        self.classification = classification or FailureClass.OTHER
        self.is_retryable = self.classification.is_retryable
        self.original_error: Optional[Exception] = None
        self.retry_state: Optional[Any] = None


class EmptyOutputError(ProviderError):
    """The provider replied, but no textual payload could be found."""

    def __init__(self, provider: str, detail: Optional[str] = None):
        message = f"{provider} returned empty output"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message, provider)


class InvalidOperationError(Exception):
    """A driver method was called with arguments it cannot act on."""


class ErrorMapper:
    """Maps raw SDK exceptions to provider-qualified ProviderErrors."""

    TEMPLATES = {
        FailureClass.CONTENT_FILTERED: "{provider} content filter triggered: {message}",
        FailureClass.SAFETY_TRIGGERED: "{provider} safety system triggered: {message}",
        FailureClass.FORBIDDEN: "{provider} refused request (403): {message}",
        FailureClass.REFUSED: "{provider} refused request: {message}",
        FailureClass.UNAUTHORIZED: "{provider} API error (401 unauthorized): {message}",
        FailureClass.RATE_LIMITED: "{provider} API error (429 rate limited): {message}",
        FailureClass.OTHER: "{provider} API error: {message}",
    }

    @staticmethod
    def describe(provider: str, classification: ErrorClassification) -> str:
        template = ErrorMapper.TEMPLATES[classification.failure_class]
        return template.format(provider=provider, message=classification.message)

    @staticmethod
    def map_error(
        error: Exception,
        provider: str,
        classification: Optional[ErrorClassification] = None,
    ) -> ProviderError:
        """
        Convert an exception into a ProviderError.

        ProviderErrors pass through unchanged.

        Args:
            error: Exception raised by the provider SDK or transport
            provider: Display name of the provider (e.g. "OpenAI")
            classification: Pre-computed classification, if the caller has one

        Returns:
            ProviderError carrying the classification and original error
        """
        if isinstance(error, ProviderError):
            return error

        if classification is None:
            classification = ErrorClassifier.classify(error)

        mapped = ProviderError(
            ErrorMapper.describe(provider, classification),
            provider=provider,
            status_code=classification.status_code,
            classification=classification.failure_class,
        )
        mapped.original_error = error
        return mapped

    @staticmethod
    def exhausted(
        error: Exception,
        provider: str,
        classification: ErrorClassification,
        attempts: int,
    ) -> ProviderError:
        """Build the terminal error raised once the retry budget is spent."""
        mapped = ProviderError(
            f"{provider} API error: retries exhausted after {attempts} attempts "
            f"(last classification: {classification.failure_class.value}): {classification.message}",
            provider=provider,
            status_code=classification.status_code,
            classification=classification.failure_class,
        )
        mapped.original_error = error
        return mapped
