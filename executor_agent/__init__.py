"""Executor Agent - plan execution service.

Runs an already-selected set of tool invocations against a tool-serving
backend:
- Tool catalog (definitions loaded from the tool server or a YAML file)
- Dependency ordering and cross-tool parameter resolution
- Parallel and chained execution with run-level aggregation
"""

__version__ = "0.1.0"
