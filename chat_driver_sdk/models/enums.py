from enum import Enum


class ChatRole(str, Enum):
    """Transcript roles."""
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    FUNCTION = "function"
    TOOL = "tool"


class Verbosity(str, Enum):
    """Coarse length/detail control, mapped per provider."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ModelTier(str, Enum):
    LARGE = "large"
    MINI = "mini"


class ModelProvider(str, Enum):
    OPENAI = "openai"
    AZURE_OPENAI = "azure_openai"
    GOOGLE_GEMINI = "google_gemini"
