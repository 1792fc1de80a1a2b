"""Tool registry - loads and serves tool definitions.

The catalog is read-mostly: it is populated once (from the tool server's
list endpoint or from a YAML definitions file) and then only read by
execution runs. First load is guarded so that concurrent callers waiting
on initialization all observe the same completed catalog.
"""

import logging
import os
import threading
from pathlib import Path
from typing import Optional

import yaml

from executor_agent.tools.client import ToolServiceClient
from executor_agent.tools.schemas import ToolDefinition, ToolSummary

logger = logging.getLogger(__name__)

DEFINITIONS_PATH = Path(__file__).parent / "definitions" / "tools.yaml"

# "file" loads the YAML catalog, "remote" asks the tool server
TOOL_CATALOG_SOURCE = os.environ.get("TOOL_CATALOG_SOURCE", "file")
TOOL_CATALOG_PATH = os.environ.get("TOOL_CATALOG_PATH")


class ToolRegistry:
    """Registry of tool definitions keyed by tool name."""

    def __init__(
        self,
        source: Optional[str] = None,
        definitions_path: Optional[Path] = None,
        client: Optional[ToolServiceClient] = None,
    ):
        self.source = source or TOOL_CATALOG_SOURCE
        if definitions_path is None:
            definitions_path = Path(TOOL_CATALOG_PATH) if TOOL_CATALOG_PATH else DEFINITIONS_PATH
        self.definitions_path = definitions_path
        self._client = client
        self._tools: dict[str, ToolDefinition] = {}
        self._initialized = False
        self._init_lock = threading.Lock()

    @property
    def initialized(self) -> bool:
        return self._initialized

    def ensure_initialized(self) -> None:
        """Load the catalog exactly once.

        Callers racing on first load block on the lock; whoever gets it
        second sees the finished catalog and returns. A failed load leaves
        the registry uninitialized so the next caller retries.
        """
        if self._initialized:
            return

        with self._init_lock:
            if self._initialized:
                return

            if self.source == "remote":
                tools = self._load_from_server()
            elif self.source == "file":
                tools = self._load_from_file()
            else:
                raise ValueError(
                    f"Unknown tool catalog source: {self.source}. Expected 'file' or 'remote'"
                )

            for tool in tools:
                self.register(tool)

            self._initialized = True
            logger.info(
                f"Tool registry initialized with {len(tools)} tools from {self.source}"
            )

    def _load_from_server(self) -> list[ToolDefinition]:
        if self._client is None:
            self._client = ToolServiceClient()
        try:
            return self._client.list_tools()
        except Exception as e:
            logger.error(f"Failed to load tool catalog from {self._client.server_url}: {e}")
            raise

    def _load_from_file(self) -> list[ToolDefinition]:
        if not self.definitions_path.exists():
            logger.warning(f"Tool definitions file not found: {self.definitions_path}")
            return []

        with open(self.definitions_path) as f:
            data = yaml.safe_load(f) or {}

        tools = []
        for tool_data in data.get("tools", []):
            try:
                tool = ToolDefinition.from_input_schema(
                    name=tool_data["name"],
                    description=tool_data.get("description", ""),
                    category=tool_data.get("category"),
                    input_schema=tool_data.get("input_schema"),
                    output_schema=tool_data.get("output_schema"),
                )
                tools.append(tool)
                logger.debug(f"Loaded tool: {tool.name}")
            except Exception as e:
                logger.error(f"Failed to load tool definition {tool_data!r}: {e}")
        return tools

    def register(self, tool: ToolDefinition) -> None:
        """Add or replace a tool definition."""
        self._tools[tool.name] = tool

    def find_tool(self, name: str) -> Optional[ToolDefinition]:
        """Get tool definition by name, or None if absent."""
        return self._tools.get(name)

    def has_tool(self, name: str) -> bool:
        return name in self._tools

    def all_tools(self) -> list[ToolDefinition]:
        """List all tool definitions."""
        return list(self._tools.values())

    def list_by_category(self, category: str) -> list[ToolDefinition]:
        """List tools in a specific category."""
        return [t for t in self._tools.values() if t.category == category]

    def list_summaries(self, category: Optional[str] = None) -> list[ToolSummary]:
        """List lightweight tool summaries."""
        tools = self.list_by_category(category) if category else self.all_tools()
        return [
            ToolSummary(
                name=t.name,
                description=t.description,
                category=t.category,
                parameter_count=len(t.parameters),
                required_parameters=[k for k, p in t.parameters.items() if p.required],
            )
            for t in tools
        ]

    def count(self) -> int:
        """Get total number of tools."""
        return len(self._tools)

    def clear(self) -> None:
        """Drop all definitions; the next ensure_initialized() reloads."""
        with self._init_lock:
            self._tools.clear()
            self._initialized = False

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None


# Global registry instance
_registry: Optional[ToolRegistry] = None
_registry_lock = threading.Lock()


def get_tool_registry() -> ToolRegistry:
    """Get the global tool registry instance, initialized."""
    global _registry
    with _registry_lock:
        if _registry is None:
            _registry = ToolRegistry()
    _registry.ensure_initialized()
    return _registry
