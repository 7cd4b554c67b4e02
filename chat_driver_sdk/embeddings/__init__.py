"""Text embedding drivers."""

from .drivers import (
    AzureOpenAIEmbeddingDriver,
    EmbeddingDriver,
    EmbeddingDriverFactory,
    OpenAIEmbeddingDriver,
)
from .similarity import cosine_similarity

__all__ = [
    "AzureOpenAIEmbeddingDriver",
    "EmbeddingDriver",
    "EmbeddingDriverFactory",
    "OpenAIEmbeddingDriver",
    "cosine_similarity",
]
