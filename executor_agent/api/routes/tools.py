"""Tool catalog API routes."""

from typing import Optional

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import PlainTextResponse

from executor_agent.tools.registry import ToolRegistry
from executor_agent.tools.schemas import ToolDefinition, ToolSummary, describe_tools

router = APIRouter(prefix="/tools", tags=["tools"])

_registry: Optional[ToolRegistry] = None


def init_registry(registry: ToolRegistry) -> None:
    global _registry
    _registry = registry


def _get_registry() -> ToolRegistry:
    if _registry is None:
        raise HTTPException(status_code=503, detail="Tool registry not initialized")
    return _registry


@router.get("", response_model=list[ToolSummary])
async def list_tools(
    category: Optional[str] = Query(None, description="Filter by category"),
) -> list[ToolSummary]:
    """List tools with optional category filter."""
    return _get_registry().list_summaries(category=category)


@router.get("/describe", response_class=PlainTextResponse)
async def describe_catalog(
    category: Optional[str] = Query(None, description="Filter by category"),
) -> str:
    """Planner-ready text description of the catalog."""
    reg = _get_registry()
    tools = reg.list_by_category(category) if category else reg.all_tools()
    return describe_tools(tools)


@router.get("/{name}", response_model=ToolDefinition)
async def get_tool(name: str) -> ToolDefinition:
    """Get a full tool definition."""
    tool = _get_registry().find_tool(name)
    if tool is None:
        raise HTTPException(status_code=404, detail=f'Tool "{name}" not found')
    return tool
