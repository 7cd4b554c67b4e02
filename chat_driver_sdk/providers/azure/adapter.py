from typing import Any, Optional

import httpx
from openai import AsyncAzureOpenAI

from ...config.constants import AZURE_OPENAI_LARGE_DEPLOYMENT, AZURE_OPENAI_MINI_DEPLOYMENT, SDK_MAX_RETRIES
from ...config.settings import ProviderSettings
from ...models.enums import ModelTier
from ..openai.adapter import GenericOpenAIDriver


class AzureOpenAIChatDriver(GenericOpenAIDriver):
    """Azure OpenAI chat driver (gpt-4.1 deployments, Responses API).

    gpt-4.1 accepts a single text verbosity, so every verbosity level is
    sent as "medium".

    Raises:
        ConfigurationError: AZURE_OPENAI_API_KEY or AZURE_OPENAI_ENDPOINT is
            not set and no client was given
    """

    provider_name = "Azure OpenAI"
    provider_key = "azure_openai"

    DEPLOYMENTS = {
        ModelTier.LARGE: AZURE_OPENAI_LARGE_DEPLOYMENT,
        ModelTier.MINI: AZURE_OPENAI_MINI_DEPLOYMENT,
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
        super().__init__(model_tier, self.DEPLOYMENTS[model_tier], client, **kwargs)

    @classmethod
    def build_client(
        cls,
        settings: ProviderSettings,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> AsyncAzureOpenAI:
        return AsyncAzureOpenAI(
            api_key=settings.require("azure_openai_api_key", cls.provider_name),
            azure_endpoint=settings.require("azure_openai_endpoint", cls.provider_name),
            api_version=settings.azure_openai_api_version,
            max_retries=SDK_MAX_RETRIES,
            http_client=http_client,
        )
