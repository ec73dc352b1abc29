from __future__ import annotations

import itertools
import time
from collections.abc import Callable, Iterable, Mapping
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FutureTimeoutError
from concurrent.futures import wait
from dataclasses import dataclass, field
from enum import Enum
from threading import Event, Lock

from streamlet_testkit.config.models import HarnessSettings
from streamlet_testkit.observability.factory import build_log_sink
from streamlet_testkit.observability.logging import LogSink, NullLogSink
from streamlet_testkit.streamlet.ports import Outlet
from streamlet_testkit.streamlet.streamlet import (
    OutletSink,
    RunnableGraph,
    Streamlet,
    StreamletContext,
    streamlet_ref,
)
from streamlet_testkit.testkit.bindings import TapRegistry
from streamlet_testkit.testkit.errors import (
    ConfigParameterError,
    HarnessBusyError,
    HarnessError,
    RunCancelledError,
    RunTimeoutError,
    StreamletExecutionError,
    WiringError,
)
from streamlet_testkit.testkit.inlet_tap import InletTap
from streamlet_testkit.testkit.observers import FanoutObserver, HarnessObserver, LoggingObserver
from streamlet_testkit.testkit.outlet_tap import OutletTap
from streamlet_testkit.testkit.runtime import ExecutionRuntime

# Time a cancelled graph gets to observe cancellation before `run` reports the timeout.
_CANCEL_GRACE_SECONDS = 1.0


class RunState(Enum):
    IDLE = "idle"
    WIRING = "wiring"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


_TRANSITIONS: dict[RunState, set[RunState]] = {
    RunState.IDLE: {RunState.WIRING},
    RunState.WIRING: {RunState.RUNNING, RunState.FAILED},
    RunState.RUNNING: {RunState.COMPLETED, RunState.FAILED},
    RunState.COMPLETED: set(),
    RunState.FAILED: set(),
}


@dataclass(frozen=True, slots=True)
class RunResult:
    # Outcome of a clean run. Failed runs raise instead of returning.
    run_id: str
    state: RunState
    elapsed: float
    received: dict[str, int] = field(default_factory=dict)
    emitted: dict[str, int] = field(default_factory=dict)


class TestHarness:
    """Runs one streamlet at a time against inlet and outlet taps.

    `run` wires taps to the streamlet's declared ports, starts the graph on the
    execution runtime, runs `assertions` on the calling thread while the graph
    is live, then joins the graph. A clean termination enqueues the completion
    signal on every outlet probe; a failure raises `StreamletExecutionError`
    and withholds it. The harness is reusable across runs but never runs two
    at once.
    """

    # Not a pytest test class despite the name.
    __test__ = False

    def __init__(
        self,
        runtime: ExecutionRuntime,
        *,
        settings: HarnessSettings | None = None,
        observers: Iterable[HarnessObserver] = (),
        config: Mapping[str, object] | None = None,
        name: str = "harness",
        log_sink: LogSink | None = None,
    ) -> None:
        self._runtime = runtime
        self._settings = settings or HarnessSettings()
        self._extra_observers = list(observers)
        self._config = dict(config or {})
        self._name = name
        # A sink built from settings belongs to this harness; an injected one stays with the caller.
        self._owns_log_sink = log_sink is None
        self._log_sink = log_sink if log_sink is not None else build_log_sink(self._settings.logging)
        observer_list = list(self._extra_observers)
        if not isinstance(self._log_sink, NullLogSink):
            observer_list.append(LoggingObserver(sink=self._log_sink, level=self._settings.logging.level))
        self._observer = FanoutObserver(observers=observer_list)
        self._counter = itertools.count(1)
        self._lock = Lock()
        self._state = RunState.IDLE

    @property
    def settings(self) -> HarnessSettings:
        return self._settings

    @property
    def runtime(self) -> ExecutionRuntime:
        return self._runtime

    @property
    def log_sink(self) -> LogSink:
        return self._log_sink

    @property
    def state(self) -> RunState:
        # State of the most recent run (IDLE before the first one).
        return self._state

    def with_config(self, **values: object) -> TestHarness:
        # Same runtime and observers, with extra config parameter values for every run.
        return TestHarness(
            self._runtime,
            settings=self._settings,
            observers=self._extra_observers,
            config={**self._config, **values},
            name=self._name,
            log_sink=self._log_sink,
        )

    def close(self) -> None:
        # Releases the log sink built from settings. Safe to call more than once.
        if not self._owns_log_sink:
            return
        close = getattr(self._log_sink, "close", None)
        if callable(close):
            close()

    def __enter__(self) -> TestHarness:
        return self

    def __exit__(self, exc_type: object, exc: object, tb: object) -> None:
        self.close()

    def run(
        self,
        streamlet: Streamlet,
        inlet_taps: Iterable[InletTap] = (),
        outlet_taps: Iterable[OutletTap] = (),
        assertions: Callable[[], object] | None = None,
        *,
        config: Mapping[str, object] | None = None,
        timeout: float | None = None,
    ) -> RunResult:
        if not self._lock.acquire(blocking=False):
            raise HarnessBusyError(f"Harness '{self._name}' is already running a streamlet")
        try:
            return self._run(
                streamlet,
                list(inlet_taps),
                list(outlet_taps),
                assertions,
                config=config,
                timeout=self._settings.run_timeout if timeout is None else timeout,
            )
        finally:
            self._lock.release()

    def _run(
        self,
        streamlet: Streamlet,
        inlet_taps: list[InletTap],
        outlet_taps: list[OutletTap],
        assertions: Callable[[], object] | None,
        *,
        config: Mapping[str, object] | None,
        timeout: float | None,
    ) -> RunResult:
        run_id = f"{self._name}:{next(self._counter)}"
        ref = streamlet_ref(streamlet)
        self._state = RunState.IDLE
        self._transition(RunState.WIRING)

        cancelled = Event()
        emitted: dict[str, int] = {}
        try:
            registry = self._wire(streamlet, inlet_taps, outlet_taps)
            context = StreamletContext(
                streamlet_ref=ref,
                run_id=run_id,
                config=self._resolve_config(streamlet, config),
                runtime=self._runtime,
            )
        except WiringError as exc:
            self._fail(run_id, ref, exc)
            raise

        inlets = registry.inlets
        outlets = registry.outlets
        for tap in outlets.values():
            if tap.probe.default_timeout is None:
                tap.probe.default_timeout = self._settings.probe_timeout
        sources = {name: tap.open(cancelled) for name, tap in inlets.items()}
        sinks = {
            name: self._sink(run_id, streamlet.shape.outlet(name), tap, emitted)
            for name, tap in outlets.items()
        }

        try:
            graph = streamlet.build_graph(sources, sinks, context)
            if not isinstance(graph, RunnableGraph):
                raise TypeError(f"build_graph returned {type(graph).__name__}, expected a RunnableGraph")
        except Exception as exc:
            error = StreamletExecutionError(ref, exc)
            self._fail(run_id, ref, error)
            raise error from exc

        self._transition(RunState.RUNNING)
        self._observer.on_run_start(
            run_id=run_id,
            streamlet=ref,
            inlets=list(inlets),
            outlets=list(outlets),
        )
        started = time.monotonic()
        try:
            future = self._runtime.submit(lambda: self._execute(graph, outlets, cancelled))
        except HarnessError as exc:
            self._fail(run_id, ref, exc)
            raise

        # Assertions run here, concurrently with the graph; they see live data through probes.
        assertion_error: BaseException | None = None
        if assertions is not None:
            try:
                assertions()
            except BaseException as exc:  # noqa: BLE001 - re-raised once the graph is joined
                assertion_error = exc

        remaining = None if timeout is None else max(0.0, timeout - (time.monotonic() - started))
        timed_out = False
        graph_error: BaseException | None = None
        try:
            future.result(timeout=remaining)
        except FutureTimeoutError:
            # A graph that itself raised TimeoutError is done; only a live graph timed out.
            if future.done():
                graph_error = future.exception()
            else:
                timed_out = True
        except BaseException as exc:  # noqa: BLE001 - recorded as a failed run, then re-raised
            graph_error = exc

        if timed_out:
            self._cancel(future, inlets.values(), cancelled)
            # The graph may have returned between the deadline and the cancel; that run is complete.
            timed_out = not (future.done() and not future.cancelled() and future.exception() is None)

        # Raised outside the handlers above so the chained context stays the one set here.
        if timed_out:
            error = RunTimeoutError(f"Streamlet '{ref}' did not terminate within {timeout}s; run cancelled")
            self._fail(run_id, ref, error)
            if assertion_error is not None:
                assertion_error.__context__ = error
                raise assertion_error
            raise error
        if graph_error is not None and not isinstance(graph_error, Exception):
            # SystemExit, KeyboardInterrupt and the like keep their identity.
            if not future.done():
                self._cancel(future, inlets.values(), cancelled)
            self._fail(run_id, ref, graph_error)
            raise graph_error
        if graph_error is not None:
            error = StreamletExecutionError(ref, graph_error)
            self._fail(run_id, ref, error)
            if assertion_error is not None:
                error.__context__ = assertion_error
            raise error from graph_error

        if assertion_error is not None:
            # The graph terminated cleanly; the run itself is complete.
            self._transition(RunState.COMPLETED)
            raise assertion_error

        result = RunResult(
            run_id=run_id,
            state=RunState.COMPLETED,
            elapsed=time.monotonic() - started,
            received={name: tap.delivered for name, tap in inlets.items()},
            emitted={name: emitted.get(name, 0) for name in outlets},
        )
        self._transition(RunState.COMPLETED)
        self._observer.on_run_completed(run_id=run_id, streamlet=ref, result=result)
        return result

    def _wire(
        self,
        streamlet: Streamlet,
        inlet_taps: list[InletTap],
        outlet_taps: list[OutletTap],
    ) -> TapRegistry:
        registry = TapRegistry(streamlet.shape)
        for inlet_tap in inlet_taps:
            registry.bind_inlet(inlet_tap)
        for outlet_tap in outlet_taps:
            registry.bind_outlet(outlet_tap)
        registry.validate_complete()
        return registry

    def _resolve_config(
        self,
        streamlet: Streamlet,
        overrides: Mapping[str, object] | None,
    ) -> dict[str, object]:
        # Declared parameters get their default unless a value is supplied for the harness or run.
        declared = {param.key: param for param in getattr(streamlet, "config_parameters", ())}
        supplied = {**self._config, **(overrides or {})}
        unknown = sorted(key for key in supplied if key not in declared)
        if unknown:
            raise ConfigParameterError(f"Unknown config parameters: {unknown}")
        resolved: dict[str, object] = {}
        for key, param in declared.items():
            value = supplied.get(key, param.default)
            if value is None:
                raise ConfigParameterError(f"Config parameter '{key}' has no value and no default")
            if not isinstance(value, param.value_type):
                raise ConfigParameterError(
                    f"Config parameter '{key}' expects {param.value_type.__name__}, "
                    f"got {type(value).__name__}"
                )
            resolved[key] = value
        return resolved

    def _sink(
        self,
        run_id: str,
        outlet: Outlet,
        tap: OutletTap,
        emitted: dict[str, int],
    ) -> OutletSink:
        observer = self._observer

        def _emit(record: object) -> None:
            tagged = tap.emit(record, via=outlet)
            emitted[outlet.name] = emitted.get(outlet.name, 0) + 1
            observer.on_emit(run_id=run_id, outlet=outlet.name, record=tagged)

        return _emit

    @staticmethod
    def _execute(graph: RunnableGraph, outlets: dict[str, OutletTap], cancelled: Event) -> None:
        # Runs on the execution runtime. The completion signal follows every record of the outlet.
        graph.run()
        if cancelled.is_set():
            raise RunCancelledError("Graph returned after the run was cancelled")
        for tap in outlets.values():
            tap.complete()

    @staticmethod
    def _cancel(future: Future, inlets: Iterable[InletTap], cancelled: Event) -> None:
        cancelled.set()
        for tap in inlets:
            tap.interrupt()
        # Graphs blocked outside their inlets keep running; the runtime shutdown reclaims them.
        wait([future], timeout=_CANCEL_GRACE_SECONDS)

    def _fail(self, run_id: str, ref: str, error: BaseException) -> None:
        self._transition(RunState.FAILED)
        self._observer.on_run_failed(run_id=run_id, streamlet=ref, error=error)

    def _transition(self, target: RunState) -> None:
        if target not in _TRANSITIONS[self._state]:
            raise RuntimeError(f"Illegal run state transition {self._state.value} -> {target.value}")
        self._state = target
