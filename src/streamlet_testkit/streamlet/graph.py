from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from streamlet_testkit.streamlet.ports import Inlet, Outlet, StreamletShape
from streamlet_testkit.streamlet.step import Step
from streamlet_testkit.streamlet.streamlet import (
    ConfigParameter,
    InletSource,
    OutletSink,
    StreamletContext,
)


@dataclass(frozen=True, slots=True)
class StepGraph:
    # Linear graph: one source, ordered steps, one sink.
    source: InletSource
    steps: Sequence[Step]
    sink: OutletSink
    context: StreamletContext | None = None

    def run(self) -> None:
        # Steps are chained back to front so each one pushes straight into the next.
        # A record and everything it fans out to reach the sink before the next
        # record is pulled; a stage that forwards nothing ends that record's path.
        head = self.sink
        for step in reversed(self.steps):
            head = step.bind(head, self.context)
        for raw in self.source:
            head(raw)


class StepStreamlet:
    # Ready-made single-inlet/single-outlet streamlet built from steps.
    def __init__(
        self,
        *,
        inlet: Inlet,
        outlet: Outlet,
        steps: Sequence[Step],
        config_parameters: Sequence[ConfigParameter] = (),
        name: str | None = None,
    ) -> None:
        for step in steps:
            if not isinstance(step, Step):
                raise ValueError(f"StepStreamlet steps must be Step, got {step!r}")
        self._shape = StreamletShape(inlets=(inlet,), outlets=(outlet,))
        self._steps = tuple(steps)
        self._config_parameters = tuple(config_parameters)
        self.name = name or type(self).__name__

    @property
    def shape(self) -> StreamletShape:
        return self._shape

    @property
    def config_parameters(self) -> Sequence[ConfigParameter]:
        return self._config_parameters

    def build_graph(
        self,
        sources: Mapping[str, InletSource],
        sinks: Mapping[str, OutletSink],
        context: StreamletContext,
    ) -> StepGraph:
        inlet = self._shape.inlets[0]
        outlet = self._shape.outlets[0]
        return StepGraph(
            source=sources[inlet.name],
            steps=self._steps,
            sink=sinks[outlet.name],
            context=context,
        )
