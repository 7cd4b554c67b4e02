"""
Multi-round tool-calling loop.

The orchestrator owns a private copy of the transcript and alternates
between asking the model for a reply and executing the tool calls in that
reply, until the model answers with plain text:

    AWAITING_MODEL -> MODEL_REPLIED -> HAS_TOOL_CALLS -> EXECUTING_TOOLS -> AWAITING_MODEL
    MODEL_REPLIED -> FINAL_TEXT

Provider specifics live in the ``ModelTurn`` callable supplied by a driver;
the loop itself only sees canonical messages.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, AsyncGenerator, Awaitable, Callable, List, Optional, Sequence, Tuple

from ..config.constants import DEFAULT_MAX_TOOL_ROUNDS
from ..models.functions import FunctionDescriptor, index_functions
from ..models.messages import ChatMessage, ToolCallRequest, ToolCallResult
from ..observability.logging import ProviderLogger, record_tool_round
from ..providers.errors import EmptyOutputError
from ..streaming.normalizer import StreamNormalizer
from ..streaming.text_chunker import iter_text_fragments
from .errors import InvalidStateTransition
from .tool_executor import ToolExecutor


class OrchestratorState(Enum):
    AWAITING_MODEL = "awaiting_model"
    MODEL_REPLIED = "model_replied"
    HAS_TOOL_CALLS = "has_tool_calls"
    EXECUTING_TOOLS = "executing_tools"
    FINAL_TEXT = "final_text"


_TRANSITIONS = {
    OrchestratorState.AWAITING_MODEL: {OrchestratorState.MODEL_REPLIED},
    OrchestratorState.MODEL_REPLIED: {OrchestratorState.HAS_TOOL_CALLS, OrchestratorState.FINAL_TEXT},
    OrchestratorState.HAS_TOOL_CALLS: {OrchestratorState.EXECUTING_TOOLS},
    OrchestratorState.EXECUTING_TOOLS: {OrchestratorState.AWAITING_MODEL},
    OrchestratorState.FINAL_TEXT: set(),
}


@dataclass
class ModelReply:
    """Canonical view of one model reply."""
    text: Optional[str] = None
    tool_calls: List[ToolCallRequest] = field(default_factory=list)
    raw: Any = None


@dataclass
class TurnRequest:
    """What a driver needs to produce the next model reply."""
    transcript: Tuple[ChatMessage, ...]
    round_index: int
    tools_enabled: bool
    force_tools: bool = False


@dataclass
class ToolCallRecord:
    round_index: int
    request: ToolCallRequest
    result: ToolCallResult


ModelTurn = Callable[[TurnRequest], Awaitable[ModelReply]]


class ToolCallOrchestrator:
    """
    Runs the tool-calling conversation for one top-level request.

    Args:
        provider: Provider display name, used in logs and errors
        functions: Functions the model may call
        max_rounds: Tool rounds allowed before the model is asked for a
            final answer with tools withheld
        force_first_round: Require a tool call in the first round
        logger: Optional ProviderLogger
    """

    def __init__(
        self,
        provider: str,
        functions: Optional[Sequence[FunctionDescriptor]],
        max_rounds: int = DEFAULT_MAX_TOOL_ROUNDS,
        force_first_round: bool = False,
        logger: Optional[ProviderLogger] = None,
    ):
        if max_rounds < 0:
            raise ValueError("max_rounds must be >= 0")
        self.provider = provider
        self.functions = index_functions(functions)
        self.max_rounds = max_rounds
        self.force_first_round = force_first_round
        self.logger = logger or ProviderLogger(provider.lower().replace(" ", "_"))
        self.executor = ToolExecutor(self.functions, self.logger)

        self.state = OrchestratorState.AWAITING_MODEL
        self.transcript: List[ChatMessage] = []
        self.history: List[ToolCallRecord] = []
        self.rounds_completed = 0

    async def run(self, turn: ModelTurn, transcript: Sequence[ChatMessage]) -> str:
        """
        Drive the loop to a final text answer.

        Args:
            turn: Coroutine function producing a ModelReply for a TurnRequest
            transcript: Starting transcript (copied, never modified)

        Returns:
            The model's final text

        Raises:
            ProviderError: Transport failures from ``turn`` propagate unchanged
        """
        self.transcript = list(transcript)
        self.history = []
        self.rounds_completed = 0
        self.state = OrchestratorState.AWAITING_MODEL

        while True:
            tools_enabled = bool(self.functions) and self.rounds_completed < self.max_rounds
            request = TurnRequest(
                transcript=tuple(self.transcript),
                round_index=self.rounds_completed,
                tools_enabled=tools_enabled,
                force_tools=tools_enabled and self.force_first_round and self.rounds_completed == 0,
            )
            reply = await turn(request)
            self._transition(OrchestratorState.MODEL_REPLIED)

            if not reply.tool_calls or not tools_enabled:
                if reply.tool_calls:
                    self.logger.warning(
                        "Ignoring tool calls requested after the round limit",
                        rounds=self.rounds_completed,
                        calls=len(reply.tool_calls),
                    )
                if not reply.text:
                    raise EmptyOutputError(self.provider, "no text in final reply")
                self._transition(OrchestratorState.FINAL_TEXT)
                return reply.text

            self._transition(OrchestratorState.HAS_TOOL_CALLS)
            await self._execute_round(reply)
            self._transition(OrchestratorState.AWAITING_MODEL)

            if self.rounds_completed >= self.max_rounds:
                self.logger.warning(
                    "Tool round limit reached, requesting final answer without tools",
                    rounds=self.rounds_completed,
                )

    async def run_streamed(self, turn: ModelTurn, transcript: Sequence[ChatMessage]) -> AsyncGenerator[str, None]:
        """Resolve all tool rounds, then stream the final answer as fragments."""
        text = await self.run(turn, transcript)
        normalizer = StreamNormalizer(self.provider, iter_text_fragments(text), logger=self.logger)
        try:
            async for fragment in normalizer:
                yield fragment
        finally:
            await normalizer.aclose()

    @property
    def tool_call_sequence(self) -> List[Tuple[str, str]]:
        """(name, arguments_json) of every executed call, in transcript order."""
        return [(record.request.name, record.request.arguments_json) for record in self.history]

    async def _execute_round(self, reply: ModelReply) -> None:
        self._transition(OrchestratorState.EXECUTING_TOOLS)
        round_index = self.rounds_completed
        self.logger.info(
            "Executing tool round",
            round=round_index + 1,
            calls=",".join(call.name for call in reply.tool_calls),
        )

        results = await self.executor.execute_round(reply.tool_calls)

        if reply.text:
            self.transcript.append(ChatMessage.assistant(reply.text))
        for request, result in zip(reply.tool_calls, results):
            self.transcript.append(ChatMessage.function_call_message(request))
            self.transcript.append(ChatMessage.function_output(result))
            self.history.append(ToolCallRecord(round_index, request, result))

        self.rounds_completed += 1
        record_tool_round()

    def _transition(self, target: OrchestratorState) -> None:
        if target not in _TRANSITIONS[self.state]:
            raise InvalidStateTransition(self.state.value, target.value)
        self.state = target
