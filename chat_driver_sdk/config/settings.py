"""
Credential settings for provider drivers.

Values come from the process environment; a local ``.env`` file is loaded
first when present. Drivers resolve what they need at construction time so a
missing key fails before any request is made.
"""

import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from .constants import (
    AZURE_OPENAI_API_KEY_ENV,
    AZURE_OPENAI_API_VERSION,
    AZURE_OPENAI_ENDPOINT_ENV,
    GOOGLE_GEMINI_API_KEY_ENV,
    OPENAI_API_KEY_ENV,
)

load_dotenv()


class ConfigurationError(Exception):
    """Raised when a driver is constructed without its required settings."""

    def __init__(self, message: str, missing: Optional[str] = None):
        super().__init__(message)
        self.missing = missing


_ENV_NAMES = {
    "openai_api_key": OPENAI_API_KEY_ENV,
    "azure_openai_api_key": AZURE_OPENAI_API_KEY_ENV,
    "azure_openai_endpoint": AZURE_OPENAI_ENDPOINT_ENV,
    "google_gemini_api_key": GOOGLE_GEMINI_API_KEY_ENV,
}


class ProviderSettings(BaseModel):
    """Snapshot of provider credentials."""

    openai_api_key: Optional[str] = Field(default=None, description="OpenAI API key")
    azure_openai_api_key: Optional[str] = Field(default=None, description="Azure OpenAI API key")
    azure_openai_endpoint: Optional[str] = Field(default=None, description="Azure OpenAI resource endpoint")
    azure_openai_api_version: str = Field(default=AZURE_OPENAI_API_VERSION, description="Azure OpenAI API version")
    google_gemini_api_key: Optional[str] = Field(default=None, description="Google Gemini API key")

    @classmethod
    def from_env(cls) -> "ProviderSettings":
        """Read every known credential from the environment."""
        return cls(**{field: os.getenv(env_name) for field, env_name in _ENV_NAMES.items()})

    def require(self, field_name: str, provider: str) -> str:
        """Return a credential or raise ConfigurationError naming its variable."""
        value = getattr(self, field_name)
        if not value:
            env_name = _ENV_NAMES[field_name]
            raise ConfigurationError(
                f"{provider} driver requires the {env_name} environment variable to be set",
                missing=env_name,
            )
        return value
