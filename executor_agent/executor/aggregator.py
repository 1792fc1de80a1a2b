"""Fold execution records into run-level results."""

from typing import Sequence

from executor_agent.executor.schemas import (
    AggregatedResults,
    ExecutionRecord,
    ExecutionStatus,
    ToolOutput,
)


def aggregate(records: Sequence[ExecutionRecord]) -> AggregatedResults:
    """Summarize records: counts plus the output of every successful step."""
    completed = [r for r in records if r.status == ExecutionStatus.COMPLETED]
    failed = [r for r in records if r.status == ExecutionStatus.ERROR]
    return AggregatedResults(
        total_executions=len(records),
        successful=len(completed),
        failed=len(failed),
        results=[ToolOutput(tool=r.tool_name, output=r.result) for r in completed],
    )


def collect_errors(records: Sequence[ExecutionRecord]) -> list[str]:
    """'toolName: message' for every failed record, in record order."""
    return [
        f"{r.tool_name}: {r.error}"
        for r in records
        if r.status == ExecutionStatus.ERROR
    ]
