from __future__ import annotations

from collections.abc import Callable, Iterator
from concurrent.futures import Future, ThreadPoolExecutor
from contextlib import contextmanager
from threading import Lock

from streamlet_testkit.config.models import HarnessSettings
from streamlet_testkit.testkit.errors import HarnessError


class ExecutionRuntime:
    # Shared multi-threaded runtime that graphs execute on, distinct from the test thread.
    # Scope it to a test group and shut it down explicitly (`scoped_runtime`, fixtures).
    def __init__(self, *, workers: int = 4, name: str = "streamlet-runtime") -> None:
        if workers < 1:
            raise ValueError("ExecutionRuntime workers must be >= 1")
        self.name = name
        self.workers = workers
        self._executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix=name)
        self._lock = Lock()
        self._running = True

    @property
    def running(self) -> bool:
        with self._lock:
            return self._running

    def submit(self, fn: Callable[[], object]) -> Future:
        with self._lock:
            if not self._running:
                raise HarnessError(f"ExecutionRuntime '{self.name}' is shut down")
            return self._executor.submit(fn)

    def shutdown(self, *, wait: bool = True) -> None:
        # Idempotent. Queued work that has not started yet is dropped.
        with self._lock:
            if not self._running:
                return
            self._running = False
        self._executor.shutdown(wait=wait, cancel_futures=True)

    def __enter__(self) -> ExecutionRuntime:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()

    def __repr__(self) -> str:
        return f"ExecutionRuntime(name={self.name!r}, workers={self.workers}, running={self.running})"


@contextmanager
def scoped_runtime(settings: HarnessSettings | None = None, *, name: str = "streamlet-runtime") -> Iterator[ExecutionRuntime]:
    # Acquire a runtime for a test group; released even if the group fails.
    resolved = settings or HarnessSettings()
    runtime = ExecutionRuntime(workers=resolved.workers, name=name)
    try:
        yield runtime
    finally:
        runtime.shutdown()
