"""
Chat Driver SDK - provider-agnostic chat drivers with tool calling.

This package provides one interface over several LLM backends:
- OpenAI (Responses API)
- Azure OpenAI
- Google Gemini

Features:
- Single-shot, streamed and schema-constrained responses
- Multi-round function calling with a bounded tool loop
- Rate-limit retry with exponential backoff
- Provider-qualified error messages
- Text embeddings and cosine similarity
"""

__version__ = "0.1.0"

from .config.settings import ConfigurationError, ProviderSettings
from .embeddings import (
    AzureOpenAIEmbeddingDriver,
    EmbeddingDriver,
    EmbeddingDriverFactory,
    OpenAIEmbeddingDriver,
    cosine_similarity,
)
from .models import (
    AttachmentStore,
    ChatMessage,
    ChatRole,
    FileReference,
    FunctionDescriptor,
    InputFile,
    InputText,
    ModelProvider,
    ModelTier,
    ToolCallRequest,
    ToolCallResult,
    Verbosity,
    render_chat_message,
)
from .providers.azure import AzureOpenAIChatDriver
from .providers.base import ChatDriver
from .providers.errors import EmptyOutputError, InvalidOperationError, ProviderError
from .providers.factory import ChatDriverFactory, create_chat_driver
from .providers.gemini import GeminiChatDriver
from .providers.openai import OpenAIChatDriver
from .reliability import FailureClass
from .reliability.retry import RetryConfig

__all__ = [
    # Drivers
    "ChatDriver",
    "ChatDriverFactory",
    "create_chat_driver",
    "OpenAIChatDriver",
    "AzureOpenAIChatDriver",
    "GeminiChatDriver",

    # Embeddings
    "EmbeddingDriver",
    "EmbeddingDriverFactory",
    "OpenAIEmbeddingDriver",
    "AzureOpenAIEmbeddingDriver",
    "cosine_similarity",

    # Models
    "AttachmentStore",
    "ChatMessage",
    "ChatRole",
    "FileReference",
    "FunctionDescriptor",
    "InputFile",
    "InputText",
    "ModelProvider",
    "ModelTier",
    "ToolCallRequest",
    "ToolCallResult",
    "Verbosity",
    "render_chat_message",

    # Configuration
    "ConfigurationError",
    "ProviderSettings",
    "RetryConfig",

    # Errors
    "EmptyOutputError",
    "FailureClass",
    "InvalidOperationError",
    "ProviderError",
]
