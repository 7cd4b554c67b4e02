"""Configuration module for chat drivers."""

from .constants import *  # noqa: F401,F403
from .settings import ConfigurationError, ProviderSettings

__all__ = [
    "ConfigurationError",
    "ProviderSettings",
]
