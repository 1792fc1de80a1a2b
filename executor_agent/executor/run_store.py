"""In-process store of recent run results.

Lets API clients fetch a run after the request that produced it. This is
a bounded cache, not persistence: results vanish on restart and the oldest
are evicted once MAX_STORED_RUNS is reached.
"""

import logging
import os
import threading
from collections import OrderedDict
from typing import Optional

from executor_agent.executor.schemas import RunResult, RunSummary

logger = logging.getLogger(__name__)

MAX_STORED_RUNS = int(os.environ.get("MAX_STORED_RUNS", "100"))


class RunStore:
    """Thread-safe, size-bounded mapping of run_id -> RunResult."""

    def __init__(self, max_runs: int = MAX_STORED_RUNS):
        self.max_runs = max_runs
        self._runs: "OrderedDict[str, RunResult]" = OrderedDict()
        self._lock = threading.Lock()

    def save(self, result: RunResult) -> None:
        with self._lock:
            self._runs[result.run_id] = result
            self._runs.move_to_end(result.run_id)
            while len(self._runs) > self.max_runs:
                evicted, _ = self._runs.popitem(last=False)
                logger.debug(f"Evicted run {evicted} from store")

    def get(self, run_id: str) -> Optional[RunResult]:
        with self._lock:
            return self._runs.get(run_id)

    def list_recent(self, limit: int = 20) -> list[RunSummary]:
        """Newest first."""
        with self._lock:
            runs = list(self._runs.values())
        return [
            RunSummary(
                run_id=r.run_id,
                plan=r.plan,
                mode=r.mode,
                total_executions=r.results.total_executions,
                successful=r.results.successful,
                failed=r.results.failed,
                created_at=r.created_at,
            )
            for r in reversed(runs[-limit:] if limit > 0 else [])
        ]

    def count(self) -> int:
        with self._lock:
            return len(self._runs)
