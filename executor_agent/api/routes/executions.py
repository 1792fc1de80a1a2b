"""Execution API routes.

Endpoints:
    POST /v1/executions                 Run independent tools in parallel
    POST /v1/executions/chained         Run steps in dependency order with output chaining
    POST /v1/executions/from-plan       Parse a planner response and run it chained
    GET  /v1/executions                 List recent runs
    GET  /v1/executions/{run_id}        Get a run result
"""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel

from executor_agent.executor.engine import ExecutionEngine
from executor_agent.executor.errors import PlanValidationError
from executor_agent.executor.ordering import order_steps, sort_steps
from executor_agent.executor.run_store import RunStore
from executor_agent.executor.schemas import (
    ChainedExecuteRequest,
    ExecuteRequest,
    RunResult,
    RunSummary,
)
from executor_agent.planning.parser import PlanParseError, parse_plan_response, validate_plan

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/executions", tags=["executions"])

_engine: Optional[ExecutionEngine] = None
_store: RunStore = RunStore()


def init_engine(engine: ExecutionEngine, store: Optional[RunStore] = None) -> None:
    global _engine, _store
    _engine = engine
    if store is not None:
        _store = store


def _get_engine() -> ExecutionEngine:
    if _engine is None:
        raise HTTPException(status_code=503, detail="Execution engine not initialized")
    return _engine


def get_run_store() -> RunStore:
    return _store


class PlanResponseRequest(BaseModel):
    """Raw planner output to execute."""

    response: str


@router.post("", response_model=RunResult)
def execute_parallel(request: ExecuteRequest) -> RunResult:
    """Run every tool concurrently, ignoring dependencies."""
    try:
        result = _get_engine().invoke(request.plan, request.tools, chained=False)
    except PlanValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    _store.save(result)
    return result


@router.post("/chained", response_model=RunResult)
def execute_chained(request: ChainedExecuteRequest) -> RunResult:
    """Run steps one at a time, resolving {{tool.field}} references.

    Steps are sorted by the supplied order, or by their depends_on
    dependencies when no order is given.
    """
    try:
        order = request.order if request.order is not None else order_steps(request.steps)
        steps = sort_steps(request.steps, order)
        result = _get_engine().invoke(request.plan, steps, order=order, chained=True)
    except PlanValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    _store.save(result)
    return result


@router.post("/from-plan", response_model=RunResult)
def execute_plan_response(request: PlanResponseRequest) -> RunResult:
    """Parse a planner response, validate it, and run it chained."""
    try:
        parsed = parse_plan_response(request.response)
    except PlanParseError as e:
        raise HTTPException(status_code=422, detail=str(e))

    is_valid, problems = validate_plan(parsed)
    if not is_valid:
        raise HTTPException(status_code=422, detail={"problems": problems})

    try:
        steps = sort_steps(parsed.tools, parsed.execution_order)
        result = _get_engine().invoke(
            parsed.plan, steps, order=parsed.execution_order, chained=True
        )
    except PlanValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    _store.save(result)
    return result


@router.get("", response_model=list[RunSummary])
def list_runs(limit: int = Query(20, ge=1, le=100)) -> list[RunSummary]:
    """List recent runs, newest first."""
    return _store.list_recent(limit=limit)


@router.get("/{run_id}", response_model=RunResult)
def get_run(run_id: str) -> RunResult:
    """Get a stored run result."""
    result = _store.get(run_id)
    if result is None:
        raise HTTPException(status_code=404, detail=f"Run not found: {run_id}")
    return result
