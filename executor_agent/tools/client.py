"""HTTP client for the remote tool service.

The tool service exposes two operations:

    GET  {base}/tools                 List tool definitions (optional ?category=)
    POST {base}/tools/{name}/call     Execute a tool with a parameters mapping

A call replies with {success, message, output} where output is a
JSON-serialized value. Transport errors are raised as httpx exceptions;
translating them into step failures is the invoker's job.

Requires environment variables (optional):
    TOOL_SERVER_URL: Base URL of the tool service
    TOOL_CALL_TIMEOUT: Per-request timeout in seconds
"""

import logging
import os
from typing import Any, Optional

import httpx

from executor_agent.tools.schemas import ToolCallResult, ToolDefinition

logger = logging.getLogger(__name__)

DEFAULT_TOOL_SERVER_URL = "http://localhost:50051"
TOOL_SERVER_URL = os.environ.get("TOOL_SERVER_URL", DEFAULT_TOOL_SERVER_URL)
TOOL_CALL_TIMEOUT = float(os.environ.get("TOOL_CALL_TIMEOUT", "30"))


class ToolServiceClient:
    """Synchronous client for listing and calling remote tools.

    Safe to share across threads: httpx.Client pools connections and
    each request is independent.
    """

    def __init__(
        self,
        server_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.server_url = (server_url or TOOL_SERVER_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else TOOL_CALL_TIMEOUT
        self._client = httpx.Client(
            base_url=self.server_url,
            timeout=self.timeout,
            transport=transport,
        )
        logger.info(f"Tool service client for {self.server_url} (timeout={self.timeout}s)")

    def list_tools(self, category: Optional[str] = None) -> list[ToolDefinition]:
        """Fetch tool definitions from the server."""
        params = {"category": category} if category else None
        response = self._client.get("/tools", params=params)
        response.raise_for_status()

        tools = []
        for raw in response.json().get("tools", []):
            tools.append(
                ToolDefinition.from_input_schema(
                    name=raw["name"],
                    description=raw.get("description", ""),
                    category=raw.get("category"),
                    input_schema=raw.get("inputSchema"),
                    output_schema=raw.get("outputSchema"),
                )
            )
        logger.info(
            f"Listed {len(tools)} tools from {self.server_url}"
            + (f" (category={category})" if category else "")
        )
        return tools

    def call_tool(self, name: str, parameters: dict[str, Any]) -> ToolCallResult:
        """Execute a tool on the server.

        A 404 reply is the server's "unknown tool" answer and comes back
        as an unsuccessful result rather than an exception.
        """
        response = self._client.post(
            f"/tools/{name}/call",
            json={"parameters": parameters},
        )
        if response.status_code == 404:
            return ToolCallResult(success=False, message=f'Tool "{name}" not found')
        response.raise_for_status()
        return ToolCallResult.model_validate(response.json())

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "ToolServiceClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
