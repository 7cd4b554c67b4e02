"""Tool-calling orchestration shared by all chat drivers."""

from .errors import InvalidStateTransition, OrchestratorError, ToolExecutionError
from .tool_executor import ToolExecutor
from .tool_loop import (
    ModelReply,
    ModelTurn,
    OrchestratorState,
    ToolCallOrchestrator,
    ToolCallRecord,
    TurnRequest,
)

__all__ = [
    "InvalidStateTransition",
    "ModelReply",
    "ModelTurn",
    "OrchestratorError",
    "OrchestratorState",
    "ToolCallOrchestrator",
    "ToolCallRecord",
    "ToolExecutionError",
    "ToolExecutor",
    "TurnRequest",
]
