from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from streamlet_testkit.observability.logging import LogMessage, LogSink, level_enabled
from streamlet_testkit.testkit.messages import PartitionedRecord

if TYPE_CHECKING:
    from streamlet_testkit.testkit.harness import RunResult


@runtime_checkable
class HarnessObserver(Protocol):
    # Lifecycle hooks of a harness run. `on_emit` is called from the graph's thread.
    def on_run_start(self, *, run_id: str, streamlet: str, inlets: list[str], outlets: list[str]) -> None:
        return None

    def on_emit(self, *, run_id: str, outlet: str, record: PartitionedRecord) -> None:
        return None

    def on_run_completed(self, *, run_id: str, streamlet: str, result: RunResult) -> None:
        return None

    def on_run_failed(self, *, run_id: str, streamlet: str, error: BaseException) -> None:
        return None


@dataclass(slots=True)
class FanoutObserver:
    # Forwards every hook to each observer in registration order.
    observers: list[HarnessObserver] = field(default_factory=list)

    def on_run_start(self, *, run_id: str, streamlet: str, inlets: list[str], outlets: list[str]) -> None:
        for observer in self.observers:
            observer.on_run_start(run_id=run_id, streamlet=streamlet, inlets=inlets, outlets=outlets)

    def on_emit(self, *, run_id: str, outlet: str, record: PartitionedRecord) -> None:
        for observer in self.observers:
            observer.on_emit(run_id=run_id, outlet=outlet, record=record)

    def on_run_completed(self, *, run_id: str, streamlet: str, result: RunResult) -> None:
        for observer in self.observers:
            observer.on_run_completed(run_id=run_id, streamlet=streamlet, result=result)

    def on_run_failed(self, *, run_id: str, streamlet: str, error: BaseException) -> None:
        for observer in self.observers:
            observer.on_run_failed(run_id=run_id, streamlet=streamlet, error=error)


@dataclass(slots=True)
class LoggingObserver:
    # Turns lifecycle hooks into structured LogMessages for a log sink.
    sink: LogSink
    level: str = "info"

    def on_run_start(self, *, run_id: str, streamlet: str, inlets: list[str], outlets: list[str]) -> None:
        self._log(
            "info",
            "run started",
            run_id=run_id,
            streamlet=streamlet,
            inlets=inlets,
            outlets=outlets,
        )

    def on_emit(self, *, run_id: str, outlet: str, record: PartitionedRecord) -> None:
        self._log("debug", "record emitted", run_id=run_id, outlet=outlet, key=record.key, value=repr(record.value))

    def on_run_completed(self, *, run_id: str, streamlet: str, result: RunResult) -> None:
        self._log(
            "info",
            "run completed",
            run_id=run_id,
            streamlet=streamlet,
            elapsed=round(result.elapsed, 6),
            received=dict(result.received),
            emitted=dict(result.emitted),
        )

    def on_run_failed(self, *, run_id: str, streamlet: str, error: BaseException) -> None:
        self._log(
            "error",
            "run failed",
            run_id=run_id,
            streamlet=streamlet,
            error_type=type(error).__name__,
            error=str(error),
        )

    def _log(self, level: str, message: str, **fields: object) -> None:
        if not level_enabled(level, self.level):
            return
        self.sink.emit(LogMessage(level=level, message=message, fields=fields))
