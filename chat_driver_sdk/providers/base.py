"""
Base Chat Driver Interface

Defines the canonical chat driver contract shared by every provider. The
public methods (plain, streamed, constrained and forced-tool responses) are
implemented here once, on top of a small set of provider hooks:

- ``_request_reply``: one non-streaming model turn, wrapped in the retry
  engine and parsed into a ModelReply
- ``_open_stream``: open a streaming call, wrapped in the retry engine
- ``_stream_text``: extract text from one provider stream event
"""

from abc import ABC, abstractmethod
from typing import (
    Any,
    AsyncGenerator,
    AsyncIterable,
    Awaitable,
    Callable,
    Dict,
    List,
    Optional,
    Sequence,
    TypeVar,
)

from ..config.constants import DEFAULT_MAX_TOOL_ROUNDS
from ..models.enums import ModelTier, Verbosity
from ..models.functions import FunctionDescriptor
from ..models.messages import ChatMessage
from ..observability.logging import ProviderLogger
from ..orchestration.tool_loop import ModelReply, ModelTurn, ToolCallOrchestrator, TurnRequest
from ..reliability.retry import RetryConfig, RetryManager
from ..streaming.normalizer import StreamNormalizer
from ..validation.constrained import ConstrainedResponseValidator
from .errors import InvalidOperationError

T = TypeVar("T")


class ChatDriver(ABC):
    """
    Abstract base class for provider chat drivers.

    Subclasses translate canonical requests to their wire format and parse
    replies back; everything else (retry, tool rounds, stream
    normalization, constrained output) is shared.

    Args:
        model_tier: Large or mini model
        model_name: Provider model id or deployment name
        max_tool_rounds: Round limit for forced-tool orchestration
        retry_config: Override of the default rate-limit retry schedule
        sleep: Awaitable sleep used between retries (injectable for tests)
    """

    provider_name: str = "Provider"
    provider_key: str = "provider"

    def __init__(
        self,
        model_tier: ModelTier,
        model_name: str,
        max_tool_rounds: int = DEFAULT_MAX_TOOL_ROUNDS,
        retry_config: Optional[RetryConfig] = None,
        sleep: Optional[Callable[[float], Awaitable[Any]]] = None,
    ):
        self.model_tier = model_tier
        self.model_name = model_name
        self.max_tool_rounds = max_tool_rounds
        self.logger = ProviderLogger(self.provider_key)
        self.retry = RetryManager(self.provider_name, retry_config, sleep)

    # ------------------------------------------------------------------
    # Provider hooks
    # ------------------------------------------------------------------

    @abstractmethod
    async def _request_reply(
        self,
        system_prompt: Optional[str],
        request: TurnRequest,
        verbosity: Verbosity,
        functions: Optional[Sequence[FunctionDescriptor]],
        json_schema: Optional[Dict[str, Any]] = None,
    ) -> ModelReply:
        """
        Make one non-streaming model call.

        Args:
            system_prompt: Optional system instructions
            request: Transcript plus the tool mode for this round
            verbosity: Requested verbosity
            functions: Functions declared to the model, if any
            json_schema: Output schema for constrained calls

        Returns:
            ModelReply with text and/or tool calls

        Raises:
            ProviderError: Classified transport failure
            EmptyOutputError: Neither text nor tool calls in the reply
        """
        pass

    @abstractmethod
    async def _open_stream(
        self,
        system_prompt: Optional[str],
        transcript: Sequence[ChatMessage],
        verbosity: Verbosity,
    ) -> AsyncIterable[Any]:
        """Open a streaming call and return the provider's event stream."""
        pass

    @abstractmethod
    def _stream_text(self, event: Any) -> Optional[str]:
        """Text carried by one stream event, or None."""
        pass

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def get_model_response(
        self,
        system_prompt: Optional[str],
        user_prompt: str,
        verbosity: Verbosity = Verbosity.MEDIUM,
        message_history: Optional[Sequence[ChatMessage]] = None,
        functions: Optional[Sequence[FunctionDescriptor]] = None,
    ) -> str:
        """
        Single-shot response.

        With ``functions``, at most one round of tool calls is executed
        before the model is asked for its final answer.
        """
        orchestrator = self._orchestrator(functions, max_rounds=1)
        transcript = self.build_transcript(message_history, user_prompt)
        with self.logger.track_request("get_model_response", self.model_name):
            return await orchestrator.run(self._turn(system_prompt, verbosity, functions), transcript)

    async def get_streamed_model_response(
        self,
        system_prompt: Optional[str],
        user_prompt: str,
        verbosity: Verbosity = Verbosity.MEDIUM,
        message_history: Optional[Sequence[ChatMessage]] = None,
        functions: Optional[Sequence[FunctionDescriptor]] = None,
    ) -> AsyncGenerator[str, None]:
        """
        Stream the response as text fragments.

        A transport failure after streaming has begun ends the sequence
        with an interruption notice instead of raising.
        """
        transcript = self.build_transcript(message_history, user_prompt)
        if functions:
            orchestrator = self._orchestrator(functions, max_rounds=1)
            stream = orchestrator.run_streamed(self._turn(system_prompt, verbosity, functions), transcript)
        else:
            stream = self._stream_transcript(system_prompt, transcript, verbosity)

        try:
            async for fragment in stream:
                yield fragment
        finally:
            await stream.aclose()

    async def get_constrained_model_response(
        self,
        system_prompt: Optional[str],
        user_prompt: str,
        verbosity: Verbosity,
        json_schema: Dict[str, Any],
        default_value: T,
        message_history: Optional[Sequence[ChatMessage]] = None,
        functions: Optional[Sequence[FunctionDescriptor]] = None,
    ) -> T:
        """
        Response constrained to ``json_schema``.

        Returns ``default_value`` when the reply cannot be parsed, does not
        match the schema, or the provider refuses the request.
        """
        validator = ConstrainedResponseValidator(self.provider_name, json_schema, default_value, logger=self.logger)
        orchestrator = self._orchestrator(functions, max_rounds=1)
        transcript = self.build_transcript(message_history, user_prompt)
        turn = self._turn(system_prompt, verbosity, functions, json_schema)

        with self.logger.track_request("get_constrained_model_response", self.model_name):
            return await validator.resolve(
                lambda: orchestrator.run(turn, transcript),
                system_prompt,
                user_prompt,
            )

    async def get_model_response_with_forced_tools(
        self,
        system_prompt: Optional[str],
        user_prompt: str,
        verbosity: Verbosity = Verbosity.MEDIUM,
        message_history: Optional[Sequence[ChatMessage]] = None,
        functions: Optional[Sequence[FunctionDescriptor]] = None,
    ) -> str:
        """
        Run the full tool-calling loop until the model gives a text answer.

        The first round requires a tool call; later rounds let the model
        choose. Raises InvalidOperationError when ``functions`` is empty.
        """
        orchestrator = self._forced_orchestrator(functions)
        transcript = self.build_transcript(message_history, user_prompt)
        with self.logger.track_request("get_model_response_with_forced_tools", self.model_name):
            return await orchestrator.run(self._turn(system_prompt, verbosity, functions), transcript)

    async def get_streamed_model_response_with_forced_tools(
        self,
        system_prompt: Optional[str],
        user_prompt: str,
        verbosity: Verbosity = Verbosity.MEDIUM,
        message_history: Optional[Sequence[ChatMessage]] = None,
        functions: Optional[Sequence[FunctionDescriptor]] = None,
    ) -> AsyncGenerator[str, None]:
        """Streaming form of get_model_response_with_forced_tools."""
        orchestrator = self._forced_orchestrator(functions)
        transcript = self.build_transcript(message_history, user_prompt)
        stream = orchestrator.run_streamed(self._turn(system_prompt, verbosity, functions), transcript)
        try:
            async for fragment in stream:
                yield fragment
        finally:
            await stream.aclose()

    # ------------------------------------------------------------------
    # Shared helpers
    # ------------------------------------------------------------------

    @staticmethod
    def build_transcript(message_history: Optional[Sequence[ChatMessage]], user_prompt: str) -> List[ChatMessage]:
        return [*(message_history or ()), ChatMessage.user(user_prompt)]

    def _orchestrator(self, functions: Optional[Sequence[FunctionDescriptor]], max_rounds: int) -> ToolCallOrchestrator:
        return ToolCallOrchestrator(self.provider_name, functions, max_rounds=max_rounds, logger=self.logger)

    def _forced_orchestrator(self, functions: Optional[Sequence[FunctionDescriptor]]) -> ToolCallOrchestrator:
        if not functions:
            raise InvalidOperationError(
                f"{self.provider_name} forced tool use requires at least one function"
            )
        return ToolCallOrchestrator(
            self.provider_name,
            functions,
            max_rounds=self.max_tool_rounds,
            force_first_round=True,
            logger=self.logger,
        )

    def _turn(
        self,
        system_prompt: Optional[str],
        verbosity: Verbosity,
        functions: Optional[Sequence[FunctionDescriptor]],
        json_schema: Optional[Dict[str, Any]] = None,
    ) -> ModelTurn:
        async def turn(request: TurnRequest) -> ModelReply:
            return await self._request_reply(system_prompt, request, verbosity, functions, json_schema)
        return turn

    async def _stream_transcript(
        self,
        system_prompt: Optional[str],
        transcript: Sequence[ChatMessage],
        verbosity: Verbosity,
    ) -> AsyncGenerator[str, None]:
        source = await self._open_stream(system_prompt, transcript, verbosity)
        normalizer = StreamNormalizer(
            self.provider_name,
            source,
            extract=self._stream_text,
            model=self.model_name,
            logger=self.logger,
        )
        try:
            async for text in normalizer:
                yield text
        finally:
            await normalizer.aclose()
