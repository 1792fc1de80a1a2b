"""Run-level precondition failures.

Everything that goes wrong inside a single step is recorded as data on the
step's ExecutionRecord. Only a malformed plan stops a run, and it does so
before any tool is called.
"""

from typing import Optional


class PlanValidationError(ValueError):
    """The step list cannot be executed as given."""


class CyclicDependencyError(PlanValidationError):
    """A depends_on chain loops back on itself."""

    def __init__(self, cycle: list[str], message: Optional[str] = None):
        self.cycle = cycle
        super().__init__(message or f"Cyclic dependency: {' -> '.join(cycle)}")
