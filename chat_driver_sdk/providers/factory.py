"""Driver selection by provider and model tier."""

from typing import Dict, Type

from ..models.enums import ModelProvider, ModelTier
from .azure.adapter import AzureOpenAIChatDriver
from .base import ChatDriver
from .gemini.adapter import GeminiChatDriver
from .openai.adapter import OpenAIChatDriver


class ChatDriverFactory:
    """Creates chat drivers from explicit provider and tier enums."""

    DRIVERS: Dict[ModelProvider, Type[ChatDriver]] = {
        ModelProvider.OPENAI: OpenAIChatDriver,
        ModelProvider.AZURE_OPENAI: AzureOpenAIChatDriver,
        ModelProvider.GOOGLE_GEMINI: GeminiChatDriver,
    }

    def create(
        self,
        model_tier: ModelTier = ModelTier.LARGE,
        provider: ModelProvider = ModelProvider.OPENAI,
        **kwargs,
    ) -> ChatDriver:
        """
        Build a driver.

        Args:
            model_tier: Large or mini model
            provider: Backend to use
            **kwargs: Passed to the driver (client, settings, max_tool_rounds,
                retry_config, sleep)

        Raises:
            ValueError: Unknown provider
            ConfigurationError: Required credentials are missing
        """
        try:
            driver_class = self.DRIVERS[ModelProvider(provider)]
        except (KeyError, ValueError):
            raise ValueError(f"Unsupported chat provider: {provider}") from None
        return driver_class(ModelTier(model_tier), **kwargs)


def create_chat_driver(
    model_tier: ModelTier = ModelTier.LARGE,
    provider: ModelProvider = ModelProvider.OPENAI,
    **kwargs,
) -> ChatDriver:
    return ChatDriverFactory().create(model_tier, provider, **kwargs)
