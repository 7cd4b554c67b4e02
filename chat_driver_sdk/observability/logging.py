"""
Structured logging for chat drivers.

Every line is rendered as ``[provider=<key> field=value ...] message``. A
public driver call runs inside ``ProviderLogger.track_request``, which opens
a ``RequestTrace`` for the current task. While it is open, lines pick up the
model and request id, the tool orchestrator counts executed rounds and the
retry engine counts provider attempts, and the completion line reports them.
"""

import logging
import time
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Optional


@dataclass
class RequestTrace:
    """What one public driver call did."""
    method: str
    model: str
    request_id: str = field(default_factory=lambda: uuid.uuid4().hex[:8])
    started: float = field(default_factory=time.monotonic)
    tool_rounds: int = 0
    provider_calls: int = 0
    attempts: int = 0

    @property
    def retries(self) -> int:
        return self.attempts - self.provider_calls

    @property
    def duration_ms(self) -> int:
        return int((time.monotonic() - self.started) * 1000)

    def summary(self) -> Dict[str, Any]:
        return {
            "duration_ms": self.duration_ms,
            "tool_rounds": self.tool_rounds,
            "attempts": self.attempts,
            "retries": self.retries,
        }


_active_trace: ContextVar[Optional[RequestTrace]] = ContextVar("chat_driver_request_trace", default=None)


def current_trace() -> Optional[RequestTrace]:
    return _active_trace.get()


def record_provider_call(attempts: int) -> None:
    """Count one retried provider call and its attempts against the open trace."""
    trace = _active_trace.get()
    if trace is not None:
        trace.provider_calls += 1
        trace.attempts += attempts


def record_tool_round() -> None:
    trace = _active_trace.get()
    if trace is not None:
        trace.tool_rounds += 1


class ProviderLogger:
    """Logger bound to one provider key (``openai``, ``azure_openai``, ``gemini``)."""

    def __init__(self, provider_key: str):
        self.provider = provider_key
        self.logger = logging.getLogger(f"chat_driver_sdk.providers.{provider_key}")

    def render(self, message: str, fields: Dict[str, Any]) -> str:
        tags = {"provider": self.provider}
        trace = _active_trace.get()
        if trace is not None:
            tags["model"] = trace.model
            tags["request_id"] = trace.request_id
        tags.update((key, value) for key, value in fields.items() if value is not None)
        return "[{}] {}".format(" ".join(f"{key}={value}" for key, value in tags.items()), message)

    def debug(self, message: str, **fields):
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug(self.render(message, fields))

    def info(self, message: str, **fields):
        self.logger.info(self.render(message, fields))

    def warning(self, message: str, **fields):
        self.logger.warning(self.render(message, fields))

    def error(self, message: str, error: Optional[Exception] = None, **fields):
        if error is not None:
            fields["error_type"] = type(error).__name__
            fields["error_msg"] = str(error)
        self.logger.error(self.render(message, fields))

    @contextmanager
    def track_request(self, method: str, model: str) -> Iterator[RequestTrace]:
        """
        Open a RequestTrace for one driver call.

        Logs the start at DEBUG, then either the completion at INFO or the
        failure at ERROR, each with the trace summary. Exceptions propagate.
        """
        trace = RequestTrace(method, model)
        token = _active_trace.set(trace)
        self.debug(f"{method} started")
        try:
            yield trace
        except Exception as e:
            self.error(f"{method} failed", error=e, **trace.summary())
            raise
        else:
            self.info(f"{method} completed", **trace.summary())
        finally:
            _active_trace.reset(token)

    def log_usage(self, usage: Dict[str, Any]):
        self.debug(
            "Token usage",
            input_tokens=usage.get("input_tokens"),
            output_tokens=usage.get("output_tokens"),
            total_tokens=usage.get("total_tokens"),
        )

    def log_streaming_metrics(self, chunks: int, total_chars: int, duration: float,
                              model: Optional[str] = None, interrupted: bool = False):
        self.debug(
            "Stream finished",
            model=model,
            chunks=chunks,
            chars=total_chars,
            duration_ms=int(duration * 1000),
            interrupted=interrupted or None,
        )
