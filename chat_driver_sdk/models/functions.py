from __future__ import annotations

import inspect
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Union

from jsonschema import Draft202012Validator
from pydantic import BaseModel, ConfigDict, Field


class FunctionArgumentError(ValueError):
    """Arguments supplied by the model do not satisfy the function's schema."""


class FunctionDescriptor(BaseModel):
    """
    A capability offered to the model.

    ``execute`` may be sync or async. ``validate_args`` receives the decoded
    arguments and returns the (possibly normalized) arguments, raising on
    invalid input; when omitted, arguments are checked against
    ``input_schema``.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str = Field(..., pattern=r"^[a-zA-Z0-9_-]{1,64}$")
    description: str
    input_schema: Dict[str, Any] = Field(default_factory=lambda: {"type": "object", "properties": {}})
    output_schema: Optional[Dict[str, Any]] = None
    execute: Callable[[Dict[str, Any]], Union[Any, Awaitable[Any]]]
    validate_args: Optional[Callable[[Dict[str, Any]], Dict[str, Any]]] = None

    @property
    def properties(self) -> Dict[str, Any]:
        return self.input_schema.get("properties", {})

    @property
    def required(self) -> List[str]:
        return list(self.input_schema.get("required", []))

    def validate_arguments(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        if self.validate_args is not None:
            return self.validate_args(arguments)

        errors = sorted(
            Draft202012Validator(self.input_schema).iter_errors(arguments),
            key=lambda e: [str(p) for p in e.path],
        )
        if errors:
            details = "; ".join(
                f"{'/'.join(str(p) for p in e.path) or 'arguments'}: {e.message}" for e in errors
            )
            raise FunctionArgumentError(f"Invalid arguments for {self.name}: {details}")
        return arguments

    async def invoke(self, arguments: Dict[str, Any]) -> Any:
        result = self.execute(arguments)
        if inspect.isawaitable(result):
            result = await result
        return result


def index_functions(functions: Optional[Sequence[FunctionDescriptor]]) -> Dict[str, FunctionDescriptor]:
    """Map functions by name, rejecting duplicates."""
    indexed: Dict[str, FunctionDescriptor] = {}
    for function in functions or ():
        if function.name in indexed:
            raise ValueError(f"Duplicate function name: {function.name}")
        indexed[function.name] = function
    return indexed
