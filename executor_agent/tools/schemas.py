"""Tool catalog schemas.

A ToolDefinition describes one tool served by the remote tool service:
its name, what it does, and the parameters it accepts. The executor only
needs name lookup; the description helpers exist for prompt assembly by
the planner.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field


class ToolParameter(BaseModel):
    """A single input parameter of a tool."""

    type: str = "string"
    required: bool = False


class ToolSchema(BaseModel):
    """JSON-schema-like description of a tool's input or output."""

    type: str = "object"
    properties: dict[str, Any] = Field(default_factory=dict)
    required: list[str] = Field(default_factory=list)


class ToolDefinition(BaseModel):
    """A tool available in the catalog."""

    name: str = Field(..., description="Unique tool name, e.g. 'createAuthor'")
    description: str = ""
    category: Optional[str] = Field(
        default=None,
        description="Grouping used for filtering (blog, author, comment, ...)",
    )
    parameters: dict[str, ToolParameter] = Field(
        default_factory=dict,
        description="Parameter name -> {type, required}",
    )
    input_schema: Optional[ToolSchema] = None
    output_schema: Optional[ToolSchema] = None

    @classmethod
    def from_input_schema(
        cls,
        name: str,
        description: str = "",
        category: Optional[str] = None,
        input_schema: Optional[dict] = None,
        output_schema: Optional[dict] = None,
    ) -> "ToolDefinition":
        """Build a definition from the tool server's wire format.

        The server describes inputs as a JSON schema; the catalog flattens
        it into a parameter map where `required` is derived from the
        schema's required list.
        """
        parameters: dict[str, ToolParameter] = {}
        if input_schema and input_schema.get("properties"):
            required = set(input_schema.get("required") or [])
            for key, prop in input_schema["properties"].items():
                param_type = prop.get("type", "string") if isinstance(prop, dict) else str(prop)
                parameters[key] = ToolParameter(type=param_type, required=key in required)

        return cls(
            name=name,
            description=description,
            category=category or None,
            parameters=parameters,
            input_schema=ToolSchema(**input_schema) if input_schema else None,
            output_schema=ToolSchema(**output_schema) if output_schema else None,
        )

    def describe(self) -> str:
        """Render an LLM-facing description of this tool."""
        param_lines = "\n".join(
            f"  - {key}: {param.type} ({'required' if param.required else 'optional'})"
            for key, param in self.parameters.items()
        )
        return (
            f"\n{self.name}:\n"
            f"  Description: {self.description}\n"
            f"  Category: {self.category or 'general'}\n"
            f"  Parameters:\n{param_lines}"
        )


class ToolSummary(BaseModel):
    """Lightweight tool listing entry."""

    name: str
    description: str
    category: Optional[str] = None
    parameter_count: int = 0
    required_parameters: list[str] = Field(default_factory=list)


class ToolCallResult(BaseModel):
    """Reply of the remote tool-execution call.

    `output` is a JSON-serialized value; callers deserialize it on success.
    """

    success: bool
    message: str = ""
    output: str = ""


def describe_tools(tools: list[ToolDefinition]) -> str:
    """Render descriptions for a list of tools, one block per tool."""
    return "\n".join(tool.describe() for tool in tools)
