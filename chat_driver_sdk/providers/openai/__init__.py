"""OpenAI Responses API driver."""

from .adapter import GenericOpenAIDriver, OpenAIChatDriver

__all__ = ["GenericOpenAIDriver", "OpenAIChatDriver"]
