"""
Classification of provider transport failures.

Maps any exception raised by a provider SDK (or by httpx underneath it) to a
FailureClass. Classification is pure: it reads attributes off the error and
never logs or mutates anything.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class FailureClass(Enum):
    """Failure taxonomy shared by all providers."""
    RATE_LIMITED = "rate_limited"
    UNAUTHORIZED = "unauthorized"
    CONTENT_FILTERED = "content_filtered"
    SAFETY_TRIGGERED = "safety_triggered"
    REFUSED = "refused"
    FORBIDDEN = "forbidden"
    OTHER = "other"

    @property
    def is_retryable(self) -> bool:
        return self is FailureClass.RATE_LIMITED


@dataclass
class ErrorClassification:
    """Result of classifying one failure."""
    failure_class: FailureClass
    message: str
    status_code: Optional[int] = None
    error_type: Optional[str] = None
    retry_after: Optional[float] = None

    @property
    def is_retryable(self) -> bool:
        return self.failure_class.is_retryable


class ErrorClassifier:
    """Classifies raw transport failures.

    Rules are applied in priority order:

    1. HTTP 429 -> RATE_LIMITED
    2. structured ``type == "content_filter"`` -> CONTENT_FILTERED
    3. structured ``type == "safety"`` -> SAFETY_TRIGGERED
    4. HTTP 403 -> FORBIDDEN
    5. any other structured ``type`` -> REFUSED
    6. HTTP 401 -> UNAUTHORIZED, anything else -> OTHER
    """

    STATUS_ATTRIBUTES = ("status_code", "status", "code")
    BODY_ATTRIBUTES = ("error", "body", "details")

    @classmethod
    def classify(cls, error: Exception) -> ErrorClassification:
        status = cls.extract_status(error)
        structured = cls.extract_structured_error(error)
        error_type = cls._structured_type(structured)
        message = cls.extract_message(error, structured)

        if status == 429:
            failure_class = FailureClass.RATE_LIMITED
        elif error_type == "content_filter":
            failure_class = FailureClass.CONTENT_FILTERED
        elif error_type == "safety":
            failure_class = FailureClass.SAFETY_TRIGGERED
        elif status == 403:
            failure_class = FailureClass.FORBIDDEN
        elif error_type:
            failure_class = FailureClass.REFUSED
        elif status == 401:
            failure_class = FailureClass.UNAUTHORIZED
        else:
            failure_class = FailureClass.OTHER

        retry_after = cls.extract_retry_after(error) if status == 429 else None

        return ErrorClassification(
            failure_class=failure_class,
            message=message,
            status_code=status,
            error_type=error_type,
            retry_after=retry_after,
        )

    @classmethod
    def extract_status(cls, error: Exception) -> Optional[int]:
        """Find an HTTP status code on the error or its response."""
        for attr in cls.STATUS_ATTRIBUTES:
            value = cls._as_status(getattr(error, attr, None))
            if value is not None:
                return value

        response = getattr(error, "response", None)
        if response is not None:
            for attr in ("status_code", "status"):
                value = cls._as_status(getattr(response, attr, None))
                if value is not None:
                    return value
        return None

    @classmethod
    def extract_structured_error(cls, error: Exception) -> Optional[Dict[str, Any]]:
        """Find the structured error body, unwrapping a nested ``error`` key."""
        for attr in cls.BODY_ATTRIBUTES:
            value = getattr(error, attr, None)
            if isinstance(value, dict):
                nested = value.get("error")
                if isinstance(nested, dict):
                    return nested
                return value
        return None

    @staticmethod
    def extract_message(error: Exception, structured: Optional[Dict[str, Any]] = None) -> str:
        if structured and isinstance(structured.get("message"), str) and structured["message"]:
            return structured["message"]
        message = getattr(error, "message", None)
        if isinstance(message, str) and message:
            return message
        return str(error) or type(error).__name__

    @staticmethod
    def extract_retry_after(error: Exception) -> Optional[float]:
        """Read a numeric Retry-After header in seconds, if any."""
        for holder in (error, getattr(error, "response", None)):
            headers = getattr(holder, "headers", None)
            if not headers:
                continue
            value = headers.get("retry-after") or headers.get("Retry-After")
            if value is None:
                continue
            try:
                seconds = float(value)
            except (TypeError, ValueError):
                return None
            return seconds if seconds > 0 else None
        return None

    @staticmethod
    def _structured_type(structured: Optional[Dict[str, Any]]) -> Optional[str]:
        if not structured:
            return None
        for key in ("type", "code"):
            value = structured.get(key)
            if isinstance(value, str) and value:
                return value
        return None

    @staticmethod
    def _as_status(value: Any) -> Optional[int]:
        if isinstance(value, bool):
            return None
        if isinstance(value, int):
            return value
        if isinstance(value, str) and value.isdigit():
            return int(value)
        return None
