from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from streamlet_testkit.streamlet.streamlet import OutletSink, StreamletContext

StepFn = Callable[[Any, StreamletContext | None], Any]


class StepKind(Enum):
    MAP = "map"
    FILTER = "filter"
    FLAT_MAP = "flat_map"
    TAP = "tap"


@dataclass(frozen=True, slots=True)
class Step:
    """One stage of a linear step graph.

    `fn` is always called as `fn(record, ctx)`; `kind` decides what reaches the
    next stage. MAP forwards the result, FILTER forwards the record when the
    result is truthy, FLAT_MAP forwards each item of the result in order and
    TAP forwards the record unchanged.
    """

    kind: StepKind
    fn: StepFn
    label: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.kind, StepKind):
            raise ValueError(f"Step.kind must be a StepKind, got {self.kind!r}")
        if not callable(self.fn):
            raise ValueError(f"Step '{self.name}' fn must be callable")

    @property
    def name(self) -> str:
        return self.label or self.kind.value

    def bind(self, downstream: OutletSink, ctx: StreamletContext | None = None) -> OutletSink:
        # Returns the sink the previous stage pushes into.
        fn = self.fn

        if self.kind is StepKind.MAP:

            def _push(record: object) -> None:
                downstream(fn(record, ctx))

        elif self.kind is StepKind.FILTER:

            def _push(record: object) -> None:
                if fn(record, ctx):
                    downstream(record)

        elif self.kind is StepKind.FLAT_MAP:

            def _push(record: object) -> None:
                # The fan-out is fully produced before any of it moves on.
                for out in list(fn(record, ctx)):
                    downstream(out)

        else:

            def _push(record: object) -> None:
                fn(record, ctx)
                downstream(record)

        return _push


def map_step(fn: StepFn, label: str | None = None) -> Step:
    return Step(StepKind.MAP, fn, label)


def filter_step(pred: StepFn, label: str | None = None) -> Step:
    return Step(StepKind.FILTER, pred, label)


def flat_map_step(fn: StepFn, label: str | None = None) -> Step:
    return Step(StepKind.FLAT_MAP, fn, label)


def tap_step(fn: StepFn, label: str | None = None) -> Step:
    return Step(StepKind.TAP, fn, label)
