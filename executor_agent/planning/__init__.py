"""Planner response parsing."""

from executor_agent.planning.parser import (
    ParsedPlan,
    PlanParseError,
    analyze_dependencies,
    parse_plan_response,
    validate_plan,
)

__all__ = [
    "ParsedPlan",
    "PlanParseError",
    "analyze_dependencies",
    "parse_plan_response",
    "validate_plan",
]
