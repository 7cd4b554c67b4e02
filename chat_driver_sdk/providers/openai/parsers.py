from __future__ import annotations

from typing import Any, List, Optional

from ...models.messages import ToolCallRequest
from ...orchestration.tool_loop import ModelReply
from ..errors import EmptyOutputError

TEXT_PART_TYPES = ("output_text", "text")


def _get(obj: Any, key: str) -> Any:
    if isinstance(obj, dict):
        return obj.get(key)
    return getattr(obj, key, None)


def _non_empty(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


def _text_from_item(item: Any) -> Optional[str]:
    if isinstance(item, str):
        return item or None

    item_type = _get(item, "type")
    if item_type == "text":
        text = _non_empty(_get(item, "text"))
        if text:
            return text

    content = _get(item, "content")
    if item_type == "message":
        if isinstance(content, str):
            return content or None
        for part in content or ():
            if _get(part, "type") in TEXT_PART_TYPES:
                text = _non_empty(_get(part, "text"))
                if text:
                    return text
        return None

    return _non_empty(content)


def extract_text(response: Any) -> Optional[str]:
    """First non-empty text in a Responses API reply.

    Checks ``output_text``, then each output item as: a ``text`` item, a
    ``message`` item (string content or output_text/text parts), a bare
    string, or any item with string ``content``.
    """
    text = _non_empty(_get(response, "output_text"))
    if text:
        return text

    for item in _get(response, "output") or ():
        text = _text_from_item(item)
        if text:
            return text
    return None


def extract_tool_calls(response: Any) -> List[ToolCallRequest]:
    calls: List[ToolCallRequest] = []
    for index, item in enumerate(_get(response, "output") or ()):
        if isinstance(item, str) or _get(item, "type") != "function_call":
            continue
        call_id = _get(item, "call_id") or _get(item, "id") or f"call_{index}"
        calls.append(ToolCallRequest(
            name=_get(item, "name"),
            arguments_json=_get(item, "arguments") or "{}",
            call_id=call_id,
        ))
    return calls


def parse_reply(response: Any, provider: str) -> ModelReply:
    """Canonical reply; raises EmptyOutputError if there is nothing to act on."""
    tool_calls = extract_tool_calls(response)
    text = extract_text(response)
    if not text and not tool_calls:
        raise EmptyOutputError(provider, "no text found in response output")
    return ModelReply(text=text, tool_calls=tool_calls, raw=response)
