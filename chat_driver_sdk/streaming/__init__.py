"""Streaming support: provider event streams normalized to text fragments."""

from .normalizer import StreamChunk, StreamInterrupted, StreamNormalizer
from .text_chunker import iter_text_fragments

__all__ = [
    "StreamChunk",
    "StreamInterrupted",
    "StreamNormalizer",
    "iter_text_fragments",
]
