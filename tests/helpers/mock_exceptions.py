"""Mock exception classes shaped like provider SDK errors."""

from typing import Any, Dict, Optional


class MockHTTPResponse:
    """Mock HTTP response for exception testing."""

    def __init__(self, status_code: int, headers: Optional[Dict[str, str]] = None):
        self.status_code = status_code
        self.headers = headers or {}


class MockAPIStatusError(Exception):
    """Shaped like openai.APIStatusError: status_code, response and a JSON body."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.body = body
        self.response = MockHTTPResponse(status_code, headers) if status_code is not None else None


class MockRateLimitError(MockAPIStatusError):
    def __init__(self, message: str = "Rate limit exceeded", retry_after: Optional[int] = None):
        headers = {"retry-after": str(retry_after)} if retry_after is not None else None
        super().__init__(message, 429, headers=headers)


class MockAuthenticationError(MockAPIStatusError):
    def __init__(self, message: str = "Invalid API key"):
        super().__init__(message, 401)


class MockPermissionDeniedError(MockAPIStatusError):
    def __init__(self, message: str = "Forbidden"):
        super().__init__(message, 403)


class MockInternalServerError(MockAPIStatusError):
    def __init__(self, message: str = "Internal server error", status_code: int = 500):
        super().__init__(message, status_code)


class MockContentFilterError(MockAPIStatusError):
    """Azure-style content filter rejection (400 with ``code: content_filter``)."""

    def __init__(self, message: str = "The response was filtered"):
        super().__init__(
            message,
            400,
            body={"error": {"code": "content_filter", "message": message}},
        )


class MockStructuredError(Exception):
    """Error carrying a structured ``error`` dict with a ``type``."""

    def __init__(self, error_type: str, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.error = {"type": error_type, "message": message}
        self.status_code = status_code


class MockGeminiAPIError(Exception):
    """Shaped like google.genai.errors.APIError: numeric ``code`` and ``details``."""

    def __init__(self, code: int, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(f"{code} {message}")
        self.code = code
        self.message = message
        self.details = details
