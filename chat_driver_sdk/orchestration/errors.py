"""Orchestration-specific error definitions."""

from typing import Optional


class OrchestratorError(Exception):
    """Base exception for orchestration errors."""
    pass


class ToolExecutionError(OrchestratorError):
    """A requested tool call could not be completed.

    Never escapes the orchestrator: it is turned into an error-shaped tool
    result that the model sees in the next round.
    """

    def __init__(
        self,
        tool_name: str,
        message: str,
        stage: str,
        original_error: Optional[Exception] = None,
    ):
        self.tool_name = tool_name
        self.stage = stage  # "lookup", "arguments", "validation", "execution"
        self.original_error = original_error
        super().__init__(message)


class InvalidStateTransition(OrchestratorError):
    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__(f"Invalid orchestrator transition: {current} -> {target}")
