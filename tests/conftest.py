import json
import threading
import time

import pytest

from executor_agent.executor.engine import ExecutionEngine
from executor_agent.tools.registry import ToolRegistry
from executor_agent.tools.schemas import ToolCallResult


class FakeToolService:
    """Stands in for the remote tool service.

    Every successful call echoes its parameters back with a generated
    24-hex-digit `_id`, the way the blog server returns created documents.
    """

    def __init__(self, latency: float = 0.0):
        self.latency = latency
        self.calls: list[tuple[str, dict]] = []
        self.failures: dict[str, str] = {}
        self.exceptions: dict[str, Exception] = {}
        self.outputs: dict[str, str] = {}
        self._lock = threading.Lock()
        self._counter = 0

    def call_tool(self, name, parameters):
        with self._lock:
            self.calls.append((name, dict(parameters)))
            self._counter += 1
            n = self._counter

        if self.latency:
            time.sleep(self.latency)

        if name in self.exceptions:
            raise self.exceptions[name]
        if name in self.failures:
            return ToolCallResult(success=False, message=self.failures[name])
        if name in self.outputs:
            return ToolCallResult(success=True, message="ok", output=self.outputs[name])

        document = {"_id": f"{n:024x}", **parameters}
        return ToolCallResult(success=True, message=f"{name} done", output=json.dumps(document))

    def called_tools(self) -> list[str]:
        return [name for name, _ in self.calls]


@pytest.fixture
def registry():
    reg = ToolRegistry(source="file")
    reg.ensure_initialized()
    return reg


@pytest.fixture
def tool_service():
    return FakeToolService()


@pytest.fixture
def engine(registry, tool_service):
    return ExecutionEngine(registry, tool_service)
