"""Dependency ordering for plan steps.

Each step names at most one predecessor (depends_on). The order is a
depth-first walk in input order: a step's predecessor is emitted first,
then the step itself. A predecessor that is not in the step list is
ignored. A chain that loops back on itself is rejected.
"""

import logging
from typing import Sequence

from executor_agent.executor.errors import CyclicDependencyError, PlanValidationError
from executor_agent.executor.schemas import ToolExecution

logger = logging.getLogger(__name__)


def check_unique_names(steps: Sequence[ToolExecution]) -> None:
    """Outputs are keyed by tool name, so each name may appear once.

    Raises:
        PlanValidationError: on the first repeated tool_name
    """
    seen: set[str] = set()
    for step in steps:
        if step.tool_name in seen:
            raise PlanValidationError(f"Duplicate tool_name in plan: {step.tool_name}")
        seen.add(step.tool_name)


def order_steps(steps: Sequence[ToolExecution]) -> list[str]:
    """Compute the execution order as a list of tool names.

    Raises:
        PlanValidationError: if a tool_name repeats
        CyclicDependencyError: if a depends_on chain forms a cycle
    """
    check_unique_names(steps)
    by_name = {step.tool_name: step for step in steps}

    order: list[str] = []
    visited: set[str] = set()
    in_progress: list[str] = []

    def visit(step: ToolExecution) -> None:
        name = step.tool_name
        if name in visited:
            return
        if name in in_progress:
            cycle = in_progress[in_progress.index(name):] + [name]
            raise CyclicDependencyError(cycle)

        in_progress.append(name)
        if step.depends_on:
            dependency = by_name.get(step.depends_on)
            if dependency is not None:
                visit(dependency)
            else:
                logger.debug(
                    f"'{name}' depends on '{step.depends_on}' which is not in the plan, ignoring"
                )
        in_progress.pop()

        visited.add(name)
        order.append(name)

    for step in steps:
        visit(step)

    logger.info(f"Execution order: {order}")
    return order


def sort_steps(steps: Sequence[ToolExecution], order: Sequence[str]) -> list[ToolExecution]:
    """Rearrange steps to follow a tool-name order.

    Steps the order does not mention keep their relative input order and
    go last. Names in the order with no matching step are skipped.

    Raises:
        PlanValidationError: if a tool_name repeats
    """
    check_unique_names(steps)
    by_name = {step.tool_name: step for step in steps}
    sorted_steps: list[ToolExecution] = []
    placed: set[str] = set()

    for name in order:
        step = by_name.get(name)
        if step is None:
            logger.warning(f"Order names unknown tool '{name}', skipping")
            continue
        if name in placed:
            continue
        sorted_steps.append(step)
        placed.add(name)

    sorted_steps.extend(s for s in steps if s.tool_name not in placed)
    return sorted_steps
