"""Canonical data models shared by every provider driver."""

from .attachments import AttachmentStore, FileReference
from .enums import ChatRole, ModelProvider, ModelTier, Verbosity
from .formatting import format_chat_timestamp, render_chat_message
from .functions import FunctionArgumentError, FunctionDescriptor, index_functions
from .messages import (
    ChatMessage,
    ContentPart,
    FunctionCall,
    InputFile,
    InputText,
    ToolCallRequest,
    ToolCallResult,
)

__all__ = [
    "AttachmentStore",
    "ChatMessage",
    "ChatRole",
    "ContentPart",
    "FileReference",
    "FunctionArgumentError",
    "FunctionCall",
    "FunctionDescriptor",
    "InputFile",
    "InputText",
    "ModelProvider",
    "ModelTier",
    "ToolCallRequest",
    "ToolCallResult",
    "Verbosity",
    "format_chat_timestamp",
    "index_functions",
    "render_chat_message",
]
