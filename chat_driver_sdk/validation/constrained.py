"""
Schema-constrained responses.

The driver asks its provider for output matching a JSON schema; this module
turns the reply into a value. Anything short of a valid, schema-conforming
reply degrades to the caller's default instead of raising.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Dict, Generic, Optional, TypeVar

from jsonschema import Draft202012Validator

from ..observability.logging import ProviderLogger
from ..providers.errors import ProviderError
from ..reliability.error_classifier import FailureClass
from .json_schema import parse_json_reply, schema_errors

T = TypeVar("T")

_PROMPT_CAPTURE_CLASSES = (FailureClass.CONTENT_FILTERED, FailureClass.SAFETY_TRIGGERED)


class ConstrainedResponseValidator(Generic[T]):
    """Resolves one constrained call to a schema-valid value or ``default_value``."""

    def __init__(
        self,
        provider: str,
        json_schema: Dict[str, Any],
        default_value: T,
        logger: Optional[ProviderLogger] = None,
    ):
        Draft202012Validator.check_schema(json_schema)
        self.provider = provider
        self.json_schema = json_schema
        self.default_value = default_value
        self.logger = logger or ProviderLogger(provider.lower().replace(" ", "_"))

    async def resolve(
        self,
        call: Callable[[], Awaitable[str]],
        system_prompt: Optional[str],
        user_prompt: str,
    ) -> T:
        """
        Run ``call`` and validate its text.

        Args:
            call: Coroutine function returning the raw model text
            system_prompt: System prompt used for the call (for diagnostics)
            user_prompt: User prompt used for the call (for diagnostics)

        Returns:
            The parsed value, or ``default_value`` on any failure
        """
        try:
            text = await call()
        except ProviderError as e:
            if e.classification in _PROMPT_CAPTURE_CLASSES:
                self.capture_prompts(e, system_prompt, user_prompt)
            else:
                self.logger.warning(
                    "Constrained request failed, using default value",
                    classification=e.classification.value,
                    error_msg=str(e),
                )
            return self.default_value

        return self.parse(text)

    def parse(self, text: str) -> T:
        try:
            data = parse_json_reply(text)
        except ValueError as e:
            self.logger.warning("Constrained reply is not valid JSON, using default value", error_msg=str(e))
            return self.default_value

        errors = schema_errors(data, self.json_schema)
        if errors:
            self.logger.warning(
                "Constrained reply does not match schema, using default value",
                errors="; ".join(errors),
            )
            return self.default_value
        return data

    def capture_prompts(self, error: ProviderError, system_prompt: Optional[str], user_prompt: str) -> None:
        """Log the prompt pair that tripped a content or safety filter."""
        self.logger.error(
            "[ContentFilter] constrained request blocked, using default value\n"
            f"systemPrompt: {system_prompt or ''}\n"
            f"userPrompt: {user_prompt}",
            classification=error.classification.value,
            error=error,
        )
