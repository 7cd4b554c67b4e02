from typing import Any, Dict, List, Optional, Sequence, Union

from ...config.constants import CONSTRAINED_OUTPUT_NAME, MAX_TOOL_CALLS_PER_RESPONSE
from ...models.enums import ChatRole, Verbosity
from ...models.functions import FunctionDescriptor
from ...models.messages import ChatMessage, InputFile, InputText
from ...orchestration.tool_loop import TurnRequest

TEXT_VERBOSITY = {
    Verbosity.LOW: "low",
    Verbosity.MEDIUM: "medium",
    Verbosity.HIGH: "high",
}

REASONING_EFFORT = {
    Verbosity.LOW: "low",
    Verbosity.MEDIUM: "low",
    Verbosity.HIGH: "medium",
}

# Model families that only accept the default text verbosity
SINGLE_VERBOSITY_PREFIXES = ("gpt-4.1",)
REASONING_PREFIXES = ("gpt-5",)


def map_verbosity(model_name: str, verbosity: Verbosity) -> str:
    if model_name.startswith(SINGLE_VERBOSITY_PREFIXES):
        return "medium"
    return TEXT_VERBOSITY[Verbosity(verbosity)]


def tool_choice_for(request: TurnRequest) -> str:
    if request.force_tools:
        return "required"
    if request.tools_enabled:
        return "auto"
    return "none"


def build_tools(functions: Sequence[FunctionDescriptor]) -> List[Dict[str, Any]]:
    """Responses API function tools."""
    return [
        {
            "type": "function",
            "name": function.name,
            "description": function.description,
            "parameters": {
                "type": "object",
                "properties": function.properties,
                "required": function.required,
                "additionalProperties": False,
            },
        }
        for function in functions
    ]


def convert_content(message: ChatMessage) -> Union[str, List[Dict[str, Any]]]:
    if message.content is None:
        return ""
    if isinstance(message.content, str):
        return message.content
    if message.role != ChatRole.USER:
        return message.text

    parts: List[Dict[str, Any]] = []
    for part in message.content:
        if isinstance(part, InputText):
            parts.append({"type": "input_text", "text": part.text})
        elif isinstance(part, InputFile):
            parts.append({"type": "input_file", "file_id": part.file.file_id})
    return parts


def build_input_list(transcript: Sequence[ChatMessage]) -> List[Dict[str, Any]]:
    """Translate a canonical transcript into Responses API input items."""
    items: List[Dict[str, Any]] = []
    for message in transcript:
        if message.is_function_call:
            items.append({
                "type": "function_call",
                "name": message.function_call.name,
                "arguments": message.function_call.arguments_json,
                "call_id": message.tool_call_id,
            })
        elif message.is_function_output:
            items.append({
                "type": "function_call_output",
                "call_id": message.tool_call_id,
                "output": message.text,
            })
        elif message.role in (ChatRole.FUNCTION, ChatRole.TOOL):
            # Uncorrelated function output from older histories
            items.append({
                "role": "assistant",
                "content": f"Function {message.name} returned: {message.text}",
            })
        elif message.role == ChatRole.ASSISTANT and not message.text:
            continue
        else:
            items.append({"role": message.role.value, "content": convert_content(message)})
    return items


def build_responses_payload(
    model_name: str,
    system_prompt: Optional[str],
    transcript: Sequence[ChatMessage],
    verbosity: Verbosity,
    functions: Optional[Sequence[FunctionDescriptor]] = None,
    tool_choice: Optional[str] = None,
    json_schema: Optional[Dict[str, Any]] = None,
    stream: bool = False,
) -> Dict[str, Any]:
    """
    Build a Responses API request.

    Args:
        model_name: Model id or Azure deployment name
        system_prompt: Sent as ``instructions`` when present
        transcript: Canonical messages, including tool round items
        verbosity: Mapped to ``text.verbosity`` (and reasoning effort on gpt-5)
        functions: Declared as function tools when present
        tool_choice: "auto", "required" or "none"
        json_schema: Adds a json_schema output format
        stream: Request server-sent events
    """
    payload: Dict[str, Any] = {
        "model": model_name,
        "input": build_input_list(transcript),
        "text": {"verbosity": map_verbosity(model_name, verbosity)},
    }

    if system_prompt:
        payload["instructions"] = system_prompt

    if model_name.startswith(REASONING_PREFIXES):
        payload["reasoning"] = {"effort": REASONING_EFFORT[Verbosity(verbosity)]}

    if functions:
        payload["tools"] = build_tools(functions)
        payload["tool_choice"] = tool_choice or "auto"
        if payload["tool_choice"] != "none":
            payload["max_tool_calls"] = MAX_TOOL_CALLS_PER_RESPONSE

    if json_schema is not None:
        payload["text"]["format"] = {
            "type": "json_schema",
            "name": CONSTRAINED_OUTPUT_NAME,
            "schema": json_schema,
            "strict": False,
        }

    if stream:
        payload["stream"] = True

    return payload
