"""
Canonical transcript types.

A transcript is an ordered list of ChatMessage. Messages are frozen; a
conversation grows by appending new messages, never by editing old ones.
"""

import json
from datetime import datetime, timezone
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .attachments import FileReference
from .enums import ChatRole


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InputText(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["input_text"] = "input_text"
    text: str


class InputFile(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["input_file"] = "input_file"
    file: FileReference


ContentPart = Annotated[Union[InputText, InputFile], Field(discriminator="type")]


class FunctionCall(BaseModel):
    """Function call made by the assistant."""

    model_config = ConfigDict(frozen=True)

    name: str
    arguments_json: str = "{}"


class ToolCallRequest(BaseModel):
    """A function call requested by the model in one reply."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Function name requested by the model")
    arguments_json: str = Field(default="{}", description="Raw JSON arguments as sent by the model")
    call_id: str = Field(..., description="Correlation id linking this request to its result")

    def parse_arguments(self) -> Dict[str, Any]:
        """Decode the arguments; raises ValueError on malformed JSON or a non-object."""
        if not self.arguments_json or not self.arguments_json.strip():
            return {}
        arguments = json.loads(self.arguments_json)
        if not isinstance(arguments, dict):
            raise ValueError(f"expected a JSON object, got {type(arguments).__name__}")
        return arguments


class ToolCallResult(BaseModel):
    """Outcome of one ToolCallRequest, fed back to the model."""

    model_config = ConfigDict(frozen=True)

    call_id: str
    name: str
    output_json: str
    is_error: bool = False

    @classmethod
    def success(cls, request: ToolCallRequest, value: Any) -> "ToolCallResult":
        output = value if isinstance(value, str) else json.dumps(value, default=str)
        return cls(call_id=request.call_id, name=request.name, output_json=output)

    @classmethod
    def failure(cls, request: ToolCallRequest, message: str) -> "ToolCallResult":
        payload = {
            "error": True,
            "message": message,
            "functionName": request.name,
            "timestamp": _utcnow().isoformat(),
        }
        return cls(
            call_id=request.call_id,
            name=request.name,
            output_json=json.dumps(payload),
            is_error=True,
        )

    def output_value(self) -> Any:
        """The output decoded from JSON, or the raw string if it is not JSON."""
        try:
            return json.loads(self.output_json)
        except ValueError:
            return self.output_json


class ChatMessage(BaseModel):
    """One turn of a provider-independent transcript."""

    model_config = ConfigDict(frozen=True)

    role: ChatRole
    content: Optional[Union[str, List[ContentPart]]] = None
    name: Optional[str] = Field(default=None, description="Function identity for function/tool turns")
    function_call: Optional[FunctionCall] = None
    tool_call_id: Optional[str] = None
    timestamp: datetime = Field(default_factory=_utcnow)
    id: Optional[str] = None

    @classmethod
    def user(cls, content: Union[str, List[ContentPart]]) -> "ChatMessage":
        return cls(role=ChatRole.USER, content=content)

    @classmethod
    def assistant(cls, content: str) -> "ChatMessage":
        return cls(role=ChatRole.ASSISTANT, content=content)

    @classmethod
    def function_call_message(cls, request: ToolCallRequest) -> "ChatMessage":
        return cls(
            role=ChatRole.ASSISTANT,
            name=request.name,
            function_call=FunctionCall(name=request.name, arguments_json=request.arguments_json),
            tool_call_id=request.call_id,
        )

    @classmethod
    def function_output(cls, result: ToolCallResult) -> "ChatMessage":
        return cls(
            role=ChatRole.TOOL,
            name=result.name,
            content=result.output_json,
            tool_call_id=result.call_id,
        )

    @property
    def text(self) -> str:
        """Concatenated text content, ignoring file parts."""
        if self.content is None:
            return ""
        if isinstance(self.content, str):
            return self.content
        return "".join(part.text for part in self.content if isinstance(part, InputText))

    @property
    def is_function_call(self) -> bool:
        return self.function_call is not None

    @property
    def is_function_output(self) -> bool:
        return self.role in (ChatRole.TOOL, ChatRole.FUNCTION) and self.tool_call_id is not None
