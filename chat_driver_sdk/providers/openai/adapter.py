from typing import Any, AsyncIterable, Dict, Optional, Sequence

import httpx
from openai import AsyncOpenAI

from ...config.constants import OPENAI_LARGE_MODEL, OPENAI_MINI_MODEL, SDK_MAX_RETRIES
from ...config.settings import ProviderSettings
from ...models.enums import ModelTier, Verbosity
from ...models.functions import FunctionDescriptor
from ...models.messages import ChatMessage
from ...orchestration.tool_loop import ModelReply, TurnRequest
from ..base import ChatDriver
from .parsers import parse_reply
from .payloads import build_responses_payload, tool_choice_for
from .streaming import extract_stream_text


class GenericOpenAIDriver(ChatDriver):
    """Chat driver over the OpenAI Responses API.

    Shared by the OpenAI and Azure OpenAI drivers, which differ only in the
    client they construct and the model names they use.
    """

    def __init__(self, model_tier: ModelTier, model_name: str, client: Any, **kwargs):
        super().__init__(model_tier, model_name, **kwargs)
        self.client = client

    async def _request_reply(
        self,
        system_prompt: Optional[str],
        request: TurnRequest,
        verbosity: Verbosity,
        functions: Optional[Sequence[FunctionDescriptor]],
        json_schema: Optional[Dict[str, Any]] = None,
    ) -> ModelReply:
        payload = build_responses_payload(
            self.model_name,
            system_prompt,
            request.transcript,
            verbosity,
            functions=functions,
            tool_choice=tool_choice_for(request) if functions else None,
            json_schema=json_schema,
        )
        response = await self.retry.run(lambda: self.client.responses.create(**payload))
        self._log_usage(response)
        return parse_reply(response, self.provider_name)

    async def _open_stream(
        self,
        system_prompt: Optional[str],
        transcript: Sequence[ChatMessage],
        verbosity: Verbosity,
    ) -> AsyncIterable[Any]:
        payload = build_responses_payload(self.model_name, system_prompt, transcript, verbosity, stream=True)
        return await self.retry.run(lambda: self.client.responses.create(**payload))

    def _stream_text(self, event: Any) -> Optional[str]:
        return extract_stream_text(event)

    def _log_usage(self, response: Any) -> None:
        usage = getattr(response, "usage", None)
        if usage is not None and hasattr(usage, "model_dump"):
            self.logger.log_usage(usage.model_dump())


class OpenAIChatDriver(GenericOpenAIDriver):
    """OpenAI chat driver (gpt-5 family).

    Args:
        model_tier: Large (gpt-5) or mini (gpt-5-mini)
        client: Pre-built AsyncOpenAI-compatible client; skips credential lookup
        settings: Credentials to use instead of the environment
        **kwargs: Forwarded to ChatDriver (max_tool_rounds, retry_config, sleep)

    Raises:
        ConfigurationError: OPENAI_API_KEY is not set and no client was given
    """

    provider_name = "OpenAI"
    provider_key = "openai"

    MODELS = {
        ModelTier.LARGE: OPENAI_LARGE_MODEL,
        ModelTier.MINI: OPENAI_MINI_MODEL,
    }

    def __init__(
        self,
        model_tier: ModelTier = ModelTier.LARGE,
        client: Optional[Any] = None,
        settings: Optional[ProviderSettings] = None,
        **kwargs,
    ):
        model_tier = ModelTier(model_tier)
        if client is None:
            client = self.build_client(settings or ProviderSettings.from_env())
        super().__init__(model_tier, self.MODELS[model_tier], client, **kwargs)

    @classmethod
    def build_client(cls, settings: ProviderSettings, http_client: Optional[httpx.AsyncClient] = None) -> AsyncOpenAI:
        return AsyncOpenAI(
            api_key=settings.require("openai_api_key", cls.provider_name),
            max_retries=SDK_MAX_RETRIES,
            http_client=http_client,
        )
