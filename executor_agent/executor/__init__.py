"""Execution engine for tool plans.

Takes an already-selected list of tool invocations and runs it against the
tool service, chaining outputs between steps when asked to.

Architecture (bottom-up):
- resolver: Replaces {{tool.field}} references with prior step outputs
- ordering: Depth-first dependency order over single-parent depends_on
- invoker: One tool call with catalog lookup and reply normalization
- aggregator: Folds execution records into counts and outputs
- engine: Parallel and chained strategies over one record lifecycle
- run_store: Recent run results for API polling
"""

from executor_agent.executor.engine import ExecutionEngine
from executor_agent.executor.errors import CyclicDependencyError, PlanValidationError
from executor_agent.executor.ordering import check_unique_names, order_steps, sort_steps
from executor_agent.executor.resolver import resolve_parameters
from executor_agent.executor.schemas import (
    ExecutionMode,
    ExecutionRecord,
    ExecutionStatus,
    RunResult,
    TemplateRef,
    ToolExecution,
)

__all__ = [
    "CyclicDependencyError",
    "ExecutionEngine",
    "ExecutionMode",
    "ExecutionRecord",
    "ExecutionStatus",
    "PlanValidationError",
    "RunResult",
    "TemplateRef",
    "ToolExecution",
    "check_unique_names",
    "order_steps",
    "resolve_parameters",
    "sort_steps",
]
