from typing import Any, AsyncIterable, Dict, Optional, Sequence

from google import genai

from ...config.constants import GEMINI_LARGE_MODEL, GEMINI_MINI_MODEL
from ...config.settings import ProviderSettings
from ...models.enums import ModelTier, Verbosity
from ...models.functions import FunctionDescriptor
from ...models.messages import ChatMessage
from ...orchestration.tool_loop import ModelReply, TurnRequest
from ..base import ChatDriver
from .parsers import extract_text, parse_reply
from .payloads import build_config, build_contents, function_calling_mode


class GeminiChatDriver(ChatDriver):
    """Google Gemini chat driver (google-genai async client).

    Verbosity maps to sampling temperature and output token budget. Forced
    tool rounds use function calling mode ANY.

    Raises:
        ConfigurationError: GOOGLE_GEMINI_API_KEY is not set and no client
            was given
    """

    provider_name = "Gemini"
    provider_key = "gemini"

    MODELS = {
        ModelTier.LARGE: GEMINI_LARGE_MODEL,
        ModelTier.MINI: GEMINI_MINI_MODEL,
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
            settings = settings or ProviderSettings.from_env()
            client = genai.Client(api_key=settings.require("google_gemini_api_key", self.provider_name))
        super().__init__(model_tier, self.MODELS[model_tier], **kwargs)
        self.client = client

    async def _request_reply(
        self,
        system_prompt: Optional[str],
        request: TurnRequest,
        verbosity: Verbosity,
        functions: Optional[Sequence[FunctionDescriptor]],
        json_schema: Optional[Dict[str, Any]] = None,
    ) -> ModelReply:
        system_instruction, contents = build_contents(system_prompt, request.transcript)
        config = build_config(
            system_instruction,
            verbosity,
            functions=functions,
            mode=function_calling_mode(request),
            json_schema=json_schema,
        )
        response = await self.retry.run(
            lambda: self.client.aio.models.generate_content(
                model=self.model_name,
                contents=contents,
                config=config,
            )
        )
        return parse_reply(response, self.provider_name)

    async def _open_stream(
        self,
        system_prompt: Optional[str],
        transcript: Sequence[ChatMessage],
        verbosity: Verbosity,
    ) -> AsyncIterable[Any]:
        system_instruction, contents = build_contents(system_prompt, transcript)
        config = build_config(system_instruction, verbosity)
        return await self.retry.run(
            lambda: self.client.aio.models.generate_content_stream(
                model=self.model_name,
                contents=contents,
                config=config,
            )
        )

    def _stream_text(self, event: Any) -> Optional[str]:
        return extract_text(event)
