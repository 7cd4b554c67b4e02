"""Request building for the Gemini API (google-genai)."""

import json
from typing import Any, Dict, List, Optional, Sequence, Tuple

from google.genai import types

from ...models.enums import ChatRole, Verbosity
from ...models.functions import FunctionDescriptor
from ...models.messages import ChatMessage, InputFile, InputText
from ...orchestration.tool_loop import TurnRequest
from ...validation.json_schema import strip_additional_properties

TEMPERATURE = {
    Verbosity.LOW: 0.3,
    Verbosity.MEDIUM: 0.7,
    Verbosity.HIGH: 1.0,
}

MAX_OUTPUT_TOKENS = {
    Verbosity.LOW: 2048,
    Verbosity.MEDIUM: 4096,
    Verbosity.HIGH: 8192,
}


def function_calling_mode(request: TurnRequest) -> str:
    if request.force_tools:
        return "ANY"
    if request.tools_enabled:
        return "AUTO"
    return "NONE"


def build_tools(functions: Sequence[FunctionDescriptor]) -> List[types.Tool]:
    declarations = [
        types.FunctionDeclaration(
            name=function.name,
            description=function.description,
            parameters_json_schema=strip_additional_properties({
                "type": "object",
                "properties": function.properties,
                "required": function.required,
            }),
        )
        for function in functions
    ]
    return [types.Tool(function_declarations=declarations)]


def _user_parts(message: ChatMessage) -> List[types.Part]:
    if isinstance(message.content, list):
        parts = []
        for part in message.content:
            if isinstance(part, InputText):
                parts.append(types.Part(text=part.text))
            elif isinstance(part, InputFile):
                parts.append(types.Part.from_uri(
                    file_uri=part.file.uri or part.file.file_id,
                    mime_type=part.file.mime_type,
                ))
        return parts
    return [types.Part(text=message.text)]


def _function_call_part(message: ChatMessage) -> types.Part:
    try:
        args = json.loads(message.function_call.arguments_json or "{}")
    except ValueError:
        args = {}
    if not isinstance(args, dict):
        args = {"value": args}
    return types.Part(function_call=types.FunctionCall(
        name=message.function_call.name,
        args=args,
        id=message.tool_call_id,
    ))


def _function_response_part(message: ChatMessage) -> types.Part:
    try:
        value = json.loads(message.text)
    except ValueError:
        value = message.text
    response = value if isinstance(value, dict) else {"result": value}
    return types.Part(function_response=types.FunctionResponse(
        name=message.name,
        response=response,
        id=message.tool_call_id,
    ))


def build_contents(
    system_prompt: Optional[str],
    transcript: Sequence[ChatMessage],
) -> Tuple[Optional[str], List[types.Content]]:
    """
    Translate a canonical transcript into Gemini contents.

    System messages in the history are folded into the system instruction.
    Each run of tool-round messages becomes one model turn holding the
    function calls followed by one user turn holding their responses.

    Returns:
        (system_instruction, contents)
    """
    instructions = [system_prompt] if system_prompt else []
    contents: List[types.Content] = []
    pending_calls: List[types.Part] = []
    pending_responses: List[types.Part] = []

    def flush() -> None:
        if pending_calls:
            contents.append(types.Content(role="model", parts=list(pending_calls)))
        if pending_responses:
            contents.append(types.Content(role="user", parts=list(pending_responses)))
        pending_calls.clear()
        pending_responses.clear()

    for message in transcript:
        if message.is_function_call:
            pending_calls.append(_function_call_part(message))
            continue
        if message.is_function_output:
            pending_responses.append(_function_response_part(message))
            continue

        flush()
        if message.role == ChatRole.SYSTEM:
            instructions.append(message.text)
        elif message.role in (ChatRole.FUNCTION, ChatRole.TOOL):
            contents.append(types.Content(
                role="model",
                parts=[types.Part(text=f"Function {message.name} returned: {message.text}")],
            ))
        elif message.role == ChatRole.ASSISTANT:
            if message.text:
                contents.append(types.Content(role="model", parts=[types.Part(text=message.text)]))
        else:
            contents.append(types.Content(role="user", parts=_user_parts(message)))
    flush()

    system_instruction = "\n\n".join(instructions) if instructions else None
    return system_instruction, contents


def build_config(
    system_instruction: Optional[str],
    verbosity: Verbosity,
    functions: Optional[Sequence[FunctionDescriptor]] = None,
    mode: str = "AUTO",
    json_schema: Optional[Dict[str, Any]] = None,
) -> types.GenerateContentConfig:
    """
    Build the generation config for one call.

    Tools are declared only while tool calls are allowed when a response
    schema is requested, since Gemini does not combine function calling
    with a JSON response type.
    """
    verbosity = Verbosity(verbosity)
    kwargs: Dict[str, Any] = {
        "temperature": TEMPERATURE[verbosity],
        "max_output_tokens": MAX_OUTPUT_TOKENS[verbosity],
        "automatic_function_calling": types.AutomaticFunctionCallingConfig(disable=True),
    }
    if system_instruction:
        kwargs["system_instruction"] = system_instruction

    declare_tools = bool(functions) and (json_schema is None or mode != "NONE")
    if declare_tools:
        kwargs["tools"] = build_tools(functions)
        kwargs["tool_config"] = types.ToolConfig(
            function_calling_config=types.FunctionCallingConfig(mode=mode),
        )
    elif json_schema is not None:
        kwargs["response_mime_type"] = "application/json"
        kwargs["response_json_schema"] = strip_additional_properties(json_schema)

    return types.GenerateContentConfig(**kwargs)
