"""Executor schemas: plan steps, per-step execution records, and run results.

Steps describe what the planner asked for. Execution records describe what
happened to each step during one run. A run result is what the caller gets
back once every record has reached a terminal status.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class ExecutionStatus(str, Enum):
    """Execution record states."""
    PENDING = "pending"
    COMPLETED = "completed"
    ERROR = "error"


class ExecutionMode(str, Enum):
    """How a run schedules its steps."""
    PARALLEL = "parallel"  # All steps at once, parameters used as given
    CHAINED = "chained"  # One at a time in list order, templates resolved


class ToolExecution(BaseModel):
    """One tool invocation within a plan."""

    tool_name: str = Field(..., description="Catalog name of the tool to call")
    parameters: Union[dict[str, Any], str] = Field(
        default_factory=dict,
        description="Parameter mapping. Values may be template references "
        "like '{{createAuthor._id}}'. A JSON string is accepted for steps "
        "that were stored serialized.",
    )
    depends_on: Optional[str] = Field(
        default=None,
        description="Tool name of the single step this one must follow",
    )
    output_mapping: Optional[dict[str, str]] = Field(
        default=None,
        description="Advisory description of how this step's output feeds dependents",
    )


class TemplateRef(BaseModel):
    """An unresolved reference to another step's output: {{tool.field...}}."""

    model_config = ConfigDict(frozen=True)

    tool_name: str
    path: tuple[str, ...] = ()

    @property
    def literal(self) -> str:
        """The template string this reference was parsed from."""
        return "{{" + ".".join((self.tool_name,) + self.path) + "}}"

    def __str__(self) -> str:
        return self.literal


class ExecutionRecord(BaseModel):
    """Mutable per-step state for one run."""

    tool_name: str
    parameters: Any = Field(default_factory=dict)
    status: ExecutionStatus = ExecutionStatus.PENDING
    result: Any = None
    error: Optional[str] = None
    duration_ms: int = 0


class ToolOutput(BaseModel):
    """A successful step's output, tagged with its tool."""

    tool: str
    output: Any = None


class AggregatedResults(BaseModel):
    """Run-level summary of all execution records."""

    total_executions: int = 0
    successful: int = 0
    failed: int = 0
    results: list[ToolOutput] = Field(default_factory=list)


class RunResult(BaseModel):
    """Everything a caller gets back from one engine run."""

    run_id: str = Field(default_factory=lambda: f"exec-{uuid.uuid4().hex[:12]}")
    plan: str
    mode: ExecutionMode
    executions: list[ExecutionRecord] = Field(default_factory=list)
    results: AggregatedResults = Field(default_factory=AggregatedResults)
    errors: list[str] = Field(
        default_factory=list,
        description="'toolName: message' for every failed step, in step order",
    )
    previous_outputs: Optional[dict[str, Any]] = Field(
        default=None,
        description="Chained mode only: tool name -> output, for the caller to persist",
    )
    created_at: str = Field(default_factory=lambda: datetime.utcnow().isoformat())
    duration_ms: int = 0


class ExecuteRequest(BaseModel):
    """Request to run a set of independent tools in parallel."""

    plan: str
    tools: list[ToolExecution]


class ChainedExecuteRequest(BaseModel):
    """Request to run steps sequentially with output chaining."""

    plan: str
    steps: list[ToolExecution]
    order: Optional[list[str]] = Field(
        default=None,
        description="Precomputed tool order. Computed from depends_on when omitted.",
    )


class RunSummary(BaseModel):
    """Listing entry for a stored run."""

    run_id: str
    plan: str
    mode: ExecutionMode
    total_executions: int
    successful: int
    failed: int
    created_at: str
