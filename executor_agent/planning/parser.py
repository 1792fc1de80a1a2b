"""Parse planner responses into executable steps.

The planner's LLM answers with JSON of the form:

    {
      "plan": "Create an author, then a blog post for them",
      "tools": [
        {"name": "createAuthor", "parameters": {...}},
        {"name": "createBlog", "parameters": {"authorId": "{{createAuthor._id}}"},
         "dependsOn": "createAuthor"}
      ],
      "executionOrder": ["createAuthor", "createBlog"]
    }

LLMs sometimes wrap that JSON in markdown fences; those are stripped first.
"""

import json
import logging
from typing import Any, Sequence

from pydantic import BaseModel, Field, ValidationError

from executor_agent.executor.ordering import order_steps
from executor_agent.executor.resolver import parse_value
from executor_agent.executor.schemas import TemplateRef, ToolExecution

logger = logging.getLogger(__name__)

DEFAULT_PLAN_TEXT = "Execute tools in specified order"

# Values the planner emits when it failed to fill in a real parameter
PLACEHOLDER_MARKER = "extracted"


class PlanParseError(ValueError):
    """The planner response is not a usable plan."""


class ParsedPlan(BaseModel):
    """A planner response in executor terms."""

    plan: str = DEFAULT_PLAN_TEXT
    tools: list[ToolExecution] = Field(default_factory=list)
    execution_order: list[str] = Field(default_factory=list)


def strip_code_fences(raw_text: str) -> str:
    """Remove a leading ```json / ``` fence and a trailing ``` fence."""
    content = raw_text.strip()
    if content.startswith("```json"):
        content = content[len("```json"):]
    elif content.startswith("```"):
        content = content[3:]
    if content.endswith("```"):
        content = content[:-3]
    return content.strip()


def parse_plan_response(raw_text: str) -> ParsedPlan:
    """Parse a planner response.

    Raises:
        PlanParseError: if the text is not JSON or lacks the tools /
            executionOrder arrays
    """
    try:
        data = json.loads(strip_code_fences(raw_text))
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse planner response: {e}\nRaw response: {raw_text[:500]}")
        raise PlanParseError(f"Planner response is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise PlanParseError("Invalid response: expected a JSON object")
    if not isinstance(data.get("tools"), list):
        raise PlanParseError("Invalid response: missing or invalid tools array")
    if not isinstance(data.get("executionOrder"), list):
        raise PlanParseError("Invalid response: missing or invalid executionOrder array")

    tools = []
    for entry in data["tools"]:
        if not isinstance(entry, dict) or not entry.get("name"):
            raise PlanParseError(f"Invalid tool entry: {entry!r}")
        try:
            tools.append(
                ToolExecution(
                    tool_name=entry["name"],
                    parameters=entry.get("parameters") or {},
                    depends_on=entry.get("dependsOn") or None,
                    output_mapping=entry.get("outputMapping") or None,
                )
            )
        except ValidationError as e:
            raise PlanParseError(f"Invalid tool entry {entry.get('name')!r}: {e}") from e

    return ParsedPlan(
        plan=data.get("plan") or DEFAULT_PLAN_TEXT,
        tools=tools,
        execution_order=[str(name) for name in data["executionOrder"]],
    )


def validate_plan(parsed: ParsedPlan) -> tuple[bool, list[str]]:
    """Check a parsed plan before handing it to the executor.

    Returns (is_valid, problems).
    """
    problems: list[str] = []

    if not parsed.tools:
        problems.append("Plan has no tools")
    if not parsed.execution_order:
        problems.append("Plan has no execution order")

    tool_names = {t.tool_name for t in parsed.tools}
    for name in parsed.execution_order:
        if name not in tool_names:
            problems.append(f"Tool {name} in executionOrder not found in tools array")

    for tool in parsed.tools:
        params = tool.parameters if isinstance(tool.parameters, dict) else {}
        for key, value in params.items():
            if isinstance(parse_value(value), TemplateRef):
                continue
            if PLACEHOLDER_MARKER in str(value).lower():
                problems.append(f'Invalid placeholder value for {tool.tool_name}.{key}: "{value}"')

    for problem in problems:
        logger.warning(problem)
    return not problems, problems


def analyze_dependencies(tools: Sequence[Any]) -> tuple[list[ToolExecution], list[str]]:
    """Normalize planner tool entries and compute their execution order."""
    steps = [
        t if isinstance(t, ToolExecution) else ToolExecution.model_validate(t)
        for t in tools
    ]
    return steps, order_steps(steps)
