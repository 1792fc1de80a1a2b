"""Template resolution for step parameters.

A parameter value that is exactly "{{tool.field.subfield}}" refers to the
output of an earlier step. Values are classified once into literals and
TemplateRef objects; only the latter are looked up in the output table.

Resolution is soft:
- A reference to a tool with no output yet stays as its literal template
  string, so the step can still be attempted or inspected later.
- A reference whose tool output exists but lacks a field on the path
  resolves to None.
"""

import logging
import re
from typing import Any

from executor_agent.executor.schemas import TemplateRef

logger = logging.getLogger(__name__)

# Whole-string match only: "id is {{a.b}}" is a literal, not a reference
TEMPLATE_RE = re.compile(r"\{\{\s*([^{}\s][^{}]*?)\s*\}\}")


def parse_value(value: Any) -> Any:
    """Classify a parameter value: TemplateRef for references, else unchanged."""
    if not isinstance(value, str):
        return value
    m = TEMPLATE_RE.fullmatch(value)
    if not m:
        return value
    segments = m.group(1).split(".")
    return TemplateRef(tool_name=segments[0], path=tuple(segments[1:]))


def resolve_reference(ref: TemplateRef, outputs: dict[str, Any]) -> tuple[bool, Any]:
    """Look a reference up in the output table.

    Returns (found, value). found is False when the referenced tool has no
    output in the table. Missing fields along the path give (True, None).
    """
    if ref.tool_name not in outputs:
        return False, None

    current = outputs[ref.tool_name]
    for segment in ref.path:
        if isinstance(current, dict):
            current = current.get(segment)
        elif isinstance(current, list) and segment.isdigit() and int(segment) < len(current):
            current = current[int(segment)]
        else:
            return True, None
        if current is None:
            return True, None
    return True, current


def resolve_parameters(parameters: dict[str, Any], outputs: dict[str, Any]) -> dict[str, Any]:
    """Return a new mapping with every resolvable template replaced.

    Only top-level values are considered. Resolving an already-resolved
    mapping again is a no-op.
    """
    resolved: dict[str, Any] = {}
    for key, value in parameters.items():
        parsed = parse_value(value)
        if not isinstance(parsed, TemplateRef):
            resolved[key] = value
            continue

        found, ref_value = resolve_reference(parsed, outputs)
        if not found:
            logger.warning(
                f"Unresolved reference {parsed.literal} for '{key}': "
                f"no output from '{parsed.tool_name}'"
            )
            resolved[key] = value
            continue

        if ref_value is None:
            logger.warning(
                f"Reference {parsed.literal} for '{key}' hit a missing field, using None"
            )
        resolved[key] = ref_value

    return resolved


def find_unresolved(parameters: dict[str, Any]) -> list[TemplateRef]:
    """List the references still present in a parameter mapping."""
    refs = []
    for value in parameters.values():
        parsed = parse_value(value)
        if isinstance(parsed, TemplateRef):
            refs.append(parsed)
    return refs
