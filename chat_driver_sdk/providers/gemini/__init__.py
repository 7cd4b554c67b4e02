"""Google Gemini driver."""

from .adapter import GeminiChatDriver

__all__ = ["GeminiChatDriver"]
