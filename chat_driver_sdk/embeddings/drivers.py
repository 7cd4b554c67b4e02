"""
Embedding drivers for OpenAI and Azure OpenAI.

Calls go through the same rate-limit retry engine as the chat drivers.
"""

from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, List, Optional

import httpx
from openai import AsyncAzureOpenAI, AsyncOpenAI

from ..config.constants import (
    AZURE_EMBEDDING_API_VERSION,
    EMBEDDING_LARGE_MODEL,
    EMBEDDING_MINI_MODEL,
    SDK_MAX_RETRIES,
)
from ..config.settings import ProviderSettings
from ..models.enums import ModelProvider, ModelTier
from ..observability.logging import ProviderLogger
from ..providers.errors import EmptyOutputError, InvalidOperationError
from ..reliability.retry import RetryConfig, RetryManager

EMBEDDING_MODELS = {
    ModelTier.LARGE: EMBEDDING_LARGE_MODEL,
    ModelTier.MINI: EMBEDDING_MINI_MODEL,
}


class EmbeddingDriver(ABC):
    """Turns text into an embedding vector."""

    provider_name: str = "Provider"
    provider_key: str = "provider"

    def __init__(
        self,
        model_tier: ModelTier,
        client: Any,
        retry_config: Optional[RetryConfig] = None,
        sleep: Optional[Callable[[float], Awaitable[Any]]] = None,
    ):
        self.model_tier = ModelTier(model_tier)
        self.model_name = EMBEDDING_MODELS[self.model_tier]
        self.client = client
        self.logger = ProviderLogger(self.provider_key)
        self.retry = RetryManager(self.provider_name, retry_config, sleep)

    async def embed(self, text: str) -> List[float]:
        """
        Embed ``text``.

        Raises:
            ProviderError: Classified transport failure
            EmptyOutputError: The response carried no embedding data
        """
        with self.logger.track_request("embed", self.model_name):
            response = await self.retry.run(
                lambda: self.client.embeddings.create(input=text, model=self.model_name)
            )
            data = getattr(response, "data", None)
            if not data:
                raise EmptyOutputError(self.provider_name, "no embedding data received")
            return list(data[0].embedding)

    @classmethod
    @abstractmethod
    def build_client(
        cls,
        model_tier: ModelTier,
        settings: ProviderSettings,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> Any:
        pass


class OpenAIEmbeddingDriver(EmbeddingDriver):
    provider_name = "OpenAI"
    provider_key = "openai"

    def __init__(self, model_tier: ModelTier = ModelTier.LARGE, client: Optional[Any] = None,
                 settings: Optional[ProviderSettings] = None, **kwargs):
        if client is None:
            client = self.build_client(model_tier, settings or ProviderSettings.from_env())
        super().__init__(model_tier, client, **kwargs)

    @classmethod
    def build_client(cls, model_tier: ModelTier, settings: ProviderSettings,
                     http_client: Optional[httpx.AsyncClient] = None) -> Any:
        return AsyncOpenAI(
            api_key=settings.require("openai_api_key", cls.provider_name),
            max_retries=SDK_MAX_RETRIES,
            http_client=http_client,
        )


class AzureOpenAIEmbeddingDriver(EmbeddingDriver):
    provider_name = "Azure OpenAI"
    provider_key = "azure_openai"

    def __init__(self, model_tier: ModelTier = ModelTier.LARGE, client: Optional[Any] = None,
                 settings: Optional[ProviderSettings] = None, **kwargs):
        if client is None:
            client = self.build_client(model_tier, settings or ProviderSettings.from_env())
        super().__init__(model_tier, client, **kwargs)

    @classmethod
    def build_client(cls, model_tier: ModelTier, settings: ProviderSettings,
                     http_client: Optional[httpx.AsyncClient] = None) -> Any:
        return AsyncAzureOpenAI(
            api_key=settings.require("azure_openai_api_key", cls.provider_name),
            azure_endpoint=settings.require("azure_openai_endpoint", cls.provider_name),
            azure_deployment=EMBEDDING_MODELS[ModelTier(model_tier)],
            api_version=AZURE_EMBEDDING_API_VERSION,
            max_retries=SDK_MAX_RETRIES,
            http_client=http_client,
        )


class EmbeddingDriverFactory:
    DRIVERS = {
        ModelProvider.OPENAI: OpenAIEmbeddingDriver,
        ModelProvider.AZURE_OPENAI: AzureOpenAIEmbeddingDriver,
    }

    def create(self, model_tier: ModelTier = ModelTier.LARGE,
               provider: ModelProvider = ModelProvider.OPENAI, **kwargs) -> EmbeddingDriver:
        provider = ModelProvider(provider)
        driver_class = self.DRIVERS.get(provider)
        if driver_class is None:
            raise InvalidOperationError(f"Embeddings are not supported for provider {provider.value}")
        return driver_class(ModelTier(model_tier), **kwargs)
