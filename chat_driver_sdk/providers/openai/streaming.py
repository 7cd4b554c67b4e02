from __future__ import annotations

from typing import Any, Optional

from ...streaming.normalizer import StreamInterrupted

TEXT_DELTA_EVENT = "response.output_text.delta"
FAILURE_EVENTS = ("error", "response.failed", "response.incomplete")


def extract_stream_text(event: Any) -> Optional[str]:
    """Text delta carried by a Responses API stream event.

    Error events raise StreamInterrupted so the normalizer ends the stream
    with its interruption notice.
    """
    event_type = getattr(event, "type", None)
    if isinstance(event_type, str):
        if event_type in FAILURE_EVENTS:
            message = getattr(event, "message", None) or event_type
            raise StreamInterrupted(f"stream reported {message}")
        if event_type != TEXT_DELTA_EVENT:
            return None

    delta = getattr(event, "delta", None)
    return delta if isinstance(delta, str) and delta else None
