"""Observability helpers for chat drivers."""

from .logging import (
    ProviderLogger,
    RequestTrace,
    current_trace,
    record_provider_call,
    record_tool_round,
)

__all__ = [
    "ProviderLogger",
    "RequestTrace",
    "current_trace",
    "record_provider_call",
    "record_tool_round",
]
