import json
from typing import Any, List, Optional

from ...models.messages import ToolCallRequest
from ...orchestration.tool_loop import ModelReply
from ..errors import EmptyOutputError


def _parts(response: Any) -> List[Any]:
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return []
    content = getattr(candidates[0], "content", None)
    return list(getattr(content, "parts", None) or [])


def extract_text(response: Any) -> Optional[str]:
    """Concatenated text parts of the first candidate, skipping thoughts.

    Falls back to ``response.text`` when there are no candidate parts.
    """
    parts = _parts(response)
    if parts:
        texts = [
            part.text for part in parts
            if isinstance(getattr(part, "text", None), str) and not getattr(part, "thought", False)
        ]
        text = "".join(texts)
        return text or None

    text = getattr(response, "text", None)
    return text if isinstance(text, str) and text else None


def extract_tool_calls(response: Any) -> List[ToolCallRequest]:
    calls: List[ToolCallRequest] = []
    for index, part in enumerate(_parts(response)):
        function_call = getattr(part, "function_call", None)
        if function_call is None or not getattr(function_call, "name", None):
            continue
        args = dict(function_call.args) if getattr(function_call, "args", None) else {}
        calls.append(ToolCallRequest(
            name=function_call.name,
            arguments_json=json.dumps(args, default=str),
            call_id=getattr(function_call, "id", None) or f"{function_call.name}_{index}",
        ))
    return calls


def parse_reply(response: Any, provider: str) -> ModelReply:
    tool_calls = extract_tool_calls(response)
    text = extract_text(response)
    if not text and not tool_calls:
        raise EmptyOutputError(provider, "no text parts in response")
    return ModelReply(text=text, tool_calls=tool_calls, raw=response)
