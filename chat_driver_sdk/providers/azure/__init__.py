"""Azure OpenAI driver."""

from .adapter import AzureOpenAIChatDriver

__all__ = ["AzureOpenAIChatDriver"]
