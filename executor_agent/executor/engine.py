"""Plan execution: prepare records, run steps, aggregate outcomes.

The engine has two strategies over the same record lifecycle:

1. Parallel: every step is called at once with its parameters as given.
   The run waits for all calls; one failure never cancels the others.
2. Chained: steps run one at a time in list order. Before each call the
   step's template references are resolved against the outputs of the
   steps that already succeeded, and a successful output is stored before
   the next step starts. A failed step is recorded and the run moves on;
   anything referencing its output receives the literal template.

Callers wanting dependency order in chained mode sort the steps first
(see ordering.sort_steps). A supplied order is reported, not applied.

Tool failures never escape a run. Only a malformed step list raises
PlanValidationError, before any tool is called.
"""

import logging
import os
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Callable, Optional, Sequence

from pydantic import ValidationError

from executor_agent.executor.aggregator import aggregate, collect_errors
from executor_agent.executor.errors import PlanValidationError
from executor_agent.executor.invoker import (
    InvocationOutcome,
    ToolCaller,
    ToolInvoker,
    coerce_parameters,
)
from executor_agent.executor.ordering import check_unique_names, order_steps
from executor_agent.executor.resolver import find_unresolved, resolve_parameters
from executor_agent.executor.schemas import (
    ExecutionMode,
    ExecutionRecord,
    ExecutionStatus,
    RunResult,
    ToolExecution,
)
from executor_agent.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)

# Upper bound on concurrent tool calls in parallel mode (unset = one per step)
_max_concurrency_env = os.environ.get("MAX_TOOL_CONCURRENCY")
MAX_TOOL_CONCURRENCY: Optional[int] = int(_max_concurrency_env) if _max_concurrency_env else None

CANCELLED_MESSAGE = "Cancelled before execution"


class ExecutionEngine:
    """Runs plan steps against the tool service."""

    def __init__(
        self,
        registry: ToolRegistry,
        client: ToolCaller,
        max_concurrency: Optional[int] = None,
    ):
        self.registry = registry
        self.invoker = ToolInvoker(registry, client)
        if max_concurrency is None:
            max_concurrency = MAX_TOOL_CONCURRENCY
        if max_concurrency is not None and max_concurrency < 1:
            raise ValueError(f"max_concurrency must be at least 1, got {max_concurrency}")
        self.max_concurrency = max_concurrency

    def invoke(
        self,
        plan: str,
        steps: Sequence[Any],
        order: Optional[list[str]] = None,
        chained: Optional[bool] = None,
        cancellation_check: Optional[Callable[[], bool]] = None,
    ) -> RunResult:
        """Execute a plan's steps and return the aggregated run result.

        Args:
            plan: Free-text plan description (reported, not interpreted)
            steps: ToolExecution objects or dicts of the same shape
            order: Precomputed tool order, if the caller has one
            chained: Force a mode. When None, chained mode is used if an
                order is supplied or any step declares depends_on.
            cancellation_check: Polled between chained steps; True stops
                the run and marks the remaining steps as errors

        Raises:
            PlanValidationError: if the step list is malformed or cyclic
        """
        start_time = time.time()
        validated = self._validate(steps)
        mode = self._select_mode(validated, order, chained)

        if mode == ExecutionMode.CHAINED:
            # Rejects cyclic depends_on before anything runs
            dependency_order = order_steps(validated)
            if order is not None and order != dependency_order:
                logger.info(
                    f"Supplied order {order} differs from dependency order "
                    f"{dependency_order}; executing in list order"
                )

        logger.info(f"Preparing {mode.value} execution for plan: {plan}")
        records = self._prepare(validated)
        logger.info(f"Found {len(records)} tools to execute")

        previous_outputs: Optional[dict[str, Any]] = None
        if mode == ExecutionMode.PARALLEL:
            self._run_parallel(records)
        else:
            previous_outputs = self._run_chained(records, cancellation_check)

        results = aggregate(records)
        errors = collect_errors(records)
        duration_ms = int((time.time() - start_time) * 1000)

        logger.info(
            f"Run finished ({mode.value}): {results.successful}/{results.total_executions} "
            f"succeeded, {results.failed} failed, {duration_ms:,}ms"
        )

        return RunResult(
            plan=plan,
            mode=mode,
            executions=records,
            results=results,
            errors=errors,
            previous_outputs=previous_outputs,
            duration_ms=duration_ms,
        )

    # --- Preparation ---

    def _validate(self, steps: Sequence[Any]) -> list[ToolExecution]:
        if not isinstance(steps, (list, tuple)):
            raise PlanValidationError(
                f"Steps must be a list, got {type(steps).__name__}"
            )

        validated: list[ToolExecution] = []
        for idx, step in enumerate(steps):
            try:
                validated.append(
                    step if isinstance(step, ToolExecution) else ToolExecution.model_validate(step)
                )
            except ValidationError as e:
                raise PlanValidationError(f"Step {idx} is malformed: {e}") from e

        for step in validated:
            if not step.tool_name.strip():
                raise PlanValidationError("Step has an empty tool_name")
        check_unique_names(validated)

        return validated

    def _select_mode(
        self,
        steps: list[ToolExecution],
        order: Optional[list[str]],
        chained: Optional[bool],
    ) -> ExecutionMode:
        if chained is not None:
            return ExecutionMode.CHAINED if chained else ExecutionMode.PARALLEL
        if order is not None or any(s.depends_on for s in steps):
            return ExecutionMode.CHAINED
        return ExecutionMode.PARALLEL

    def _prepare(self, steps: list[ToolExecution]) -> list[ExecutionRecord]:
        return [
            ExecutionRecord(tool_name=s.tool_name, parameters=s.parameters)
            for s in steps
        ]

    # --- Strategies ---

    def _run_parallel(self, records: list[ExecutionRecord]) -> None:
        """Fan out one call per record and wait for all of them."""
        if not records:
            return

        workers = len(records)
        if self.max_concurrency is not None:
            workers = min(workers, self.max_concurrency)
        logger.info(f"Executing {len(records)} tools in parallel ({workers} workers)")

        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {
                executor.submit(self._execute_record, record, record.parameters): record
                for record in records
            }
            for future in as_completed(futures):
                record = futures[future]
                try:
                    future.result()
                except Exception as e:
                    logger.error(f"{record.tool_name} failed in parallel execution: {e}")
                    self._fail(record, str(e) or "Execution failed")

        completed = sum(1 for r in records if r.status == ExecutionStatus.COMPLETED)
        logger.info(f"Completed {completed}/{len(records)} executions")

    def _run_chained(
        self,
        records: list[ExecutionRecord],
        cancellation_check: Optional[Callable[[], bool]],
    ) -> dict[str, Any]:
        """Run records in order, threading outputs into later parameters."""
        outputs: dict[str, Any] = {}

        for idx, record in enumerate(records):
            if cancellation_check and cancellation_check():
                logger.info(
                    f"Run cancelled before step {idx + 1}/{len(records)} ({record.tool_name})"
                )
                for pending in records[idx:]:
                    self._fail(pending, CANCELLED_MESSAGE)
                break

            logger.info(f"Step {idx + 1}/{len(records)}: {record.tool_name}")

            try:
                params = coerce_parameters(record.parameters)
            except ValueError as e:
                self._fail(record, str(e))
                continue

            resolved = resolve_parameters(params, outputs)
            unresolved = find_unresolved(resolved)
            if unresolved:
                logger.warning(
                    f"{record.tool_name} called with unresolved references: "
                    f"{[ref.literal for ref in unresolved]}"
                )
            record.parameters = resolved

            outcome = self._execute_record(record, resolved)
            if outcome.ok:
                outputs[record.tool_name] = outcome.output

        return outputs

    # --- Record transitions ---

    def _execute_record(self, record: ExecutionRecord, parameters: Any) -> InvocationOutcome:
        outcome = self.invoker.invoke(record.tool_name, parameters)
        record.duration_ms = outcome.duration_ms
        if outcome.ok:
            record.status = ExecutionStatus.COMPLETED
            record.result = outcome.output
            logger.info(f"  {record.tool_name}: completed ({outcome.duration_ms}ms)")
        else:
            self._fail(record, outcome.error or "Execution failed")
        return outcome

    def _fail(self, record: ExecutionRecord, message: str) -> None:
        record.status = ExecutionStatus.ERROR
        record.error = message
        logger.error(f"  {record.tool_name}: {message}")
