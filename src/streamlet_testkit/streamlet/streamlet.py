from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from streamlet_testkit.streamlet.ports import StreamletShape

# Per-inlet record source and per-outlet record sink handed to `build_graph`.
InletSource = Iterable[object]
OutletSink = Callable[[object], None]


@runtime_checkable
class RunnableGraph(Protocol):
    # A built, not yet started, processing graph.
    # `run` blocks until the graph terminates; raising means the graph failed.
    def run(self) -> None:
        raise NotImplementedError("RunnableGraph.run must be implemented")


@dataclass(frozen=True, slots=True)
class ConfigParameter:
    # Named configuration value a streamlet reads at graph construction time.
    key: str
    default: object | None = None
    value_type: type = str
    description: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.key, str) or not self.key:
            raise ValueError("ConfigParameter.key must be a non-empty string")
        if not isinstance(self.value_type, type):
            raise ValueError(f"ConfigParameter '{self.key}' value_type must be a class")
        if self.default is not None and not isinstance(self.default, self.value_type):
            raise ValueError(
                f"ConfigParameter '{self.key}' default must be {self.value_type.__name__}"
            )


@dataclass(frozen=True, slots=True)
class StreamletContext:
    # Run-scoped context injected by whoever executes the streamlet.
    streamlet_ref: str
    run_id: str
    config: Mapping[str, object] = field(default_factory=dict)
    # Execution runtime of the run; graphs may submit helper work to it.
    runtime: object | None = None

    def config_value(self, key: str) -> object:
        if key not in self.config:
            raise KeyError(f"Config parameter '{key}' is not declared for '{self.streamlet_ref}'")
        return self.config[key]


@runtime_checkable
class Streamlet(Protocol):
    # Capability interface of a component under test: a declared shape plus a graph factory.
    @property
    def shape(self) -> StreamletShape:
        raise NotImplementedError("Streamlet.shape must be implemented")

    @property
    def config_parameters(self) -> Sequence[ConfigParameter]:
        raise NotImplementedError("Streamlet.config_parameters must be implemented")

    def build_graph(
        self,
        sources: Mapping[str, InletSource],
        sinks: Mapping[str, OutletSink],
        context: StreamletContext,
    ) -> RunnableGraph:
        raise NotImplementedError("Streamlet.build_graph must be implemented")


def streamlet_ref(streamlet: object) -> str:
    # Human-readable reference used in logs and errors.
    ref = getattr(streamlet, "name", None)
    if isinstance(ref, str) and ref:
        return ref
    return type(streamlet).__name__
