from __future__ import annotations

import inspect
import time
from dataclasses import dataclass
from typing import Any, AsyncGenerator, AsyncIterable, Callable, Optional

from ..config.constants import INTERRUPTION_MESSAGE
from ..observability.logging import ProviderLogger


@dataclass
class StreamChunk:
    """A text fragment, or the terminal sentinel of a stream.

    Attributes:
        text: Fragment text (empty for a normal-completion sentinel)
        is_final: True for the last element of the stream
        interrupted: True when the stream ended on an upstream failure
    """
    text: str
    is_final: bool = False
    interrupted: bool = False


class StreamInterrupted(Exception):
    """Raised by an extractor when the provider reports an in-stream error event."""


def _default_extract(event: Any) -> Optional[str]:
    if isinstance(event, str):
        return event
    text = getattr(event, "text", None)
    return text if isinstance(text, str) else None


class StreamNormalizer:
    """
    Turns a provider event stream into a finite sequence of text fragments.

    Iterating yields strings. If the upstream raises after the stream has
    started, the failure is logged and a single interruption fragment is
    yielded as the last element; the consumer never sees the exception.
    Fragments already yielded are not affected.

    ``aclose()`` releases the upstream stream and may be called at any time.
    """

    def __init__(
        self,
        provider: str,
        source: AsyncIterable[Any],
        extract: Optional[Callable[[Any], Optional[str]]] = None,
        model: Optional[str] = None,
        logger: Optional[ProviderLogger] = None,
    ):
        self.provider = provider
        self.model = model
        self.logger = logger or ProviderLogger(provider)
        self._source = source
        self._iterator = source.__aiter__()
        self._extract = extract or _default_extract
        self._done = False
        self._start_time: Optional[float] = None

        self.chunk_count = 0
        self.total_chars = 0
        self.interrupted = False
        self.completed = False

    def __aiter__(self) -> "StreamNormalizer":
        return self

    async def __anext__(self) -> str:
        chunk = await self.next_chunk()
        return chunk.text

    async def next_chunk(self) -> StreamChunk:
        """Return the next non-empty fragment or the interruption chunk."""
        if self._done:
            raise StopAsyncIteration
        if self._start_time is None:
            self._start_time = time.time()

        while True:
            try:
                event = await self._iterator.__anext__()
                text = self._extract(event)
            except StopAsyncIteration:
                await self._finish()
                raise
            except Exception as e:  # noqa: BLE001
                self.interrupted = True
                self.logger.warning(
                    "Stream interrupted",
                    model=self.model,
                    chunks=self.chunk_count,
                    error_type=type(e).__name__,
                    error_msg=str(e),
                )
                await self._finish()
                return StreamChunk(INTERRUPTION_MESSAGE, is_final=True, interrupted=True)

            if text:
                self.chunk_count += 1
                self.total_chars += len(text)
                return StreamChunk(text)

    async def chunks(self) -> AsyncGenerator[StreamChunk, None]:
        """Yield StreamChunks, always ending with a final sentinel."""
        try:
            while True:
                try:
                    chunk = await self.next_chunk()
                except StopAsyncIteration:
                    yield StreamChunk("", is_final=True)
                    return
                yield chunk
                if chunk.is_final:
                    return
        finally:
            await self.aclose()

    async def collect(self) -> str:
        """Drain the stream into a single string."""
        parts = []
        async for text in self:
            parts.append(text)
        return "".join(parts)

    async def aclose(self) -> None:
        if self._done:
            return
        self._done = True
        await self._release()

    async def _finish(self) -> None:
        self._done = True
        self.completed = True
        duration = time.time() - (self._start_time or time.time())
        self.logger.log_streaming_metrics(
            self.chunk_count, self.total_chars, duration,
            model=self.model, interrupted=self.interrupted,
        )
        await self._release()

    async def _release(self) -> None:
        targets = [self._iterator]
        if self._source is not self._iterator:
            targets.append(self._source)
        for target in targets:
            closer = getattr(target, "aclose", None) or getattr(target, "close", None)
            if closer is None:
                continue
            result = closer()
            if inspect.isawaitable(result):
                await result
