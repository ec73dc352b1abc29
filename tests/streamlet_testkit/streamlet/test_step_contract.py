from __future__ import annotations

import pytest

from streamlet_testkit.streamlet.step import (
    Step,
    StepKind,
    filter_step,
    flat_map_step,
    map_step,
    tap_step,
)
from streamlet_testkit.streamlet.streamlet import StreamletContext


def _push(step: Step, record: object, ctx: StreamletContext | None = None) -> list[object]:
    out: list[object] = []
    step.bind(out.append, ctx)(record)
    return out


def test_map_forwards_the_result() -> None:
    assert _push(map_step(lambda msg, ctx: msg + 1), 1) == [2]


def test_filter_forwards_the_record_only_when_predicate_holds() -> None:
    step = filter_step(lambda msg, ctx: msg % 2 == 0)
    assert _push(step, 2) == [2]
    assert _push(step, 3) == []


def test_flat_map_forwards_each_item_in_order() -> None:
    step = flat_map_step(lambda msg, ctx: range(msg))
    assert _push(step, 3) == [0, 1, 2]
    assert _push(step, 0) == []


def test_flat_map_forwards_nothing_when_the_fan_out_fails() -> None:
    def _partial(msg: int, ctx: object):
        yield msg
        raise ValueError("halfway")

    out: list[object] = []
    with pytest.raises(ValueError):
        flat_map_step(_partial).bind(out.append)(1)
    assert out == []


def test_tap_runs_side_effect_and_forwards_the_record() -> None:
    seen: list[int] = []
    step = tap_step(lambda msg, ctx: seen.append(msg * 10))
    assert _push(step, 5) == [5]
    assert seen == [50]


def test_bound_step_sees_the_run_context() -> None:
    ctx = StreamletContext(streamlet_ref="s", run_id="s:1", config={"suffix": "!"})
    step = map_step(lambda msg, ctx: msg + ctx.config_value("suffix"))
    assert _push(step, "hi", ctx) == ["hi!"]


def test_step_name_defaults_to_kind() -> None:
    assert map_step(lambda msg, ctx: msg).name == "map"
    assert filter_step(lambda msg, ctx: True, label="evens").name == "evens"
    assert tap_step(lambda msg, ctx: None).kind is StepKind.TAP


def test_step_rejects_bad_kind_or_fn() -> None:
    with pytest.raises(ValueError):
        Step("map", lambda msg, ctx: msg)
    with pytest.raises(ValueError):
        Step(StepKind.MAP, "not callable")
