"""Single tool call: catalog lookup, remote call, reply normalization.

Every failure mode of one call comes back as an InvocationOutcome with
ok=False and a message; nothing raised by the tool service escapes.
"""

import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Optional, Protocol

from executor_agent.tools.registry import ToolRegistry
from executor_agent.tools.schemas import ToolCallResult

logger = logging.getLogger(__name__)


class ToolCaller(Protocol):
    def call_tool(self, name: str, parameters: dict[str, Any]) -> ToolCallResult: ...


@dataclass
class InvocationOutcome:
    """Normalized result of one tool call."""
    ok: bool
    output: Any = None
    error: Optional[str] = None
    duration_ms: int = 0


def coerce_parameters(parameters: Any) -> dict[str, Any]:
    """Return parameters as a mapping, decoding steps stored as JSON strings.

    Raises:
        ValueError: if the value is not a mapping or a JSON object string
    """
    if parameters is None:
        return {}
    if isinstance(parameters, str):
        try:
            parameters = json.loads(parameters) if parameters.strip() else {}
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid parameters JSON: {e}") from e
    if not isinstance(parameters, dict):
        raise ValueError(
            f"Parameters must be an object, got {type(parameters).__name__}"
        )
    return parameters


class ToolInvoker:
    """Calls tools from the catalog through the remote tool service."""

    def __init__(self, registry: ToolRegistry, client: ToolCaller):
        self.registry = registry
        self.client = client

    def invoke(self, tool_name: str, parameters: Any) -> InvocationOutcome:
        start_time = time.time()

        def elapsed() -> int:
            return int((time.time() - start_time) * 1000)

        if self.registry.find_tool(tool_name) is None:
            return InvocationOutcome(ok=False, error=f'Tool "{tool_name}" not found')

        try:
            params = coerce_parameters(parameters)
            logger.info(f"  -> Calling {tool_name} with {sorted(params)}")
            reply = self.client.call_tool(tool_name, params)

            if not reply.success:
                return InvocationOutcome(
                    ok=False,
                    error=reply.message or "Tool execution failed",
                    duration_ms=elapsed(),
                )

            output = json.loads(reply.output) if reply.output else None
            return InvocationOutcome(ok=True, output=output, duration_ms=elapsed())

        except Exception as e:
            logger.error(f"Tool {tool_name} raised during call: {e}")
            return InvocationOutcome(
                ok=False,
                error=str(e) or type(e).__name__,
                duration_ms=elapsed(),
            )
