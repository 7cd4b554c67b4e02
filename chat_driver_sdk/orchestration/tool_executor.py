from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional, Sequence

from ..models.functions import FunctionDescriptor
from ..models.messages import ToolCallRequest, ToolCallResult
from ..observability.logging import ProviderLogger
from .errors import ToolExecutionError


class ToolExecutor:
    """Executes model-requested tool calls against caller-registered functions.

    Every request yields exactly one ToolCallResult. Failures at any stage
    (unknown name, malformed arguments, validation, execution) produce an
    error-shaped result instead of raising.
    """

    def __init__(self, functions: Dict[str, FunctionDescriptor], logger: Optional[ProviderLogger] = None):
        self.functions = functions
        self.logger = logger or ProviderLogger("tools")

    async def execute_round(self, requests: Sequence[ToolCallRequest]) -> List[ToolCallResult]:
        """Run all requests of one round concurrently; results keep request order."""
        return list(await asyncio.gather(*(self.execute(request) for request in requests)))

    async def execute(self, request: ToolCallRequest) -> ToolCallResult:
        try:
            value = await self._run(request)
        except ToolExecutionError as e:
            self.logger.warning(
                "Tool call failed",
                function=request.name,
                call_id=request.call_id,
                stage=e.stage,
                error_msg=str(e),
            )
            return ToolCallResult.failure(request, str(e))

        self.logger.debug("Tool call completed", function=request.name, call_id=request.call_id)
        return ToolCallResult.success(request, value)

    async def _run(self, request: ToolCallRequest) -> Any:
        function = self.functions.get(request.name)
        if function is None:
            raise ToolExecutionError(
                request.name,
                f"Function {request.name} not found in provided functions",
                stage="lookup",
            )

        try:
            arguments = request.parse_arguments()
        except ValueError as e:
            raise ToolExecutionError(
                request.name,
                f"Failed to parse function call arguments: {e}",
                stage="arguments",
                original_error=e,
            ) from e

        try:
            arguments = function.validate_arguments(arguments)
        except Exception as e:  # noqa: BLE001
            raise ToolExecutionError(
                request.name,
                f"Argument validation failed: {e}",
                stage="validation",
                original_error=e,
            ) from e

        try:
            return await function.invoke(arguments)
        except Exception as e:  # noqa: BLE001
            raise ToolExecutionError(
                request.name,
                f"Function execution failed: {e}",
                stage="execution",
                original_error=e,
            ) from e
