"""Tool catalog and remote tool service client."""

from executor_agent.tools.client import ToolServiceClient
from executor_agent.tools.registry import ToolRegistry, get_tool_registry
from executor_agent.tools.schemas import (
    ToolCallResult,
    ToolDefinition,
    ToolParameter,
    ToolSchema,
    ToolSummary,
    describe_tools,
)

__all__ = [
    "ToolCallResult",
    "ToolDefinition",
    "ToolParameter",
    "ToolRegistry",
    "ToolSchema",
    "ToolServiceClient",
    "ToolSummary",
    "describe_tools",
    "get_tool_registry",
]
