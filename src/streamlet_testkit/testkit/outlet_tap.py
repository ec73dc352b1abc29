from __future__ import annotations

from typing import Generic, TypeVar

from streamlet_testkit.streamlet.ports import Outlet
from streamlet_testkit.testkit.errors import PortTypeError
from streamlet_testkit.testkit.messages import PartitionedRecord
from streamlet_testkit.testkit.probe import Probe

T = TypeVar("T")


def partition(outlet: Outlet, record: object) -> PartitionedRecord:
    # Tag a record with the key its outlet's partitioner assigns.
    key = outlet.partitioner(record)
    if not isinstance(key, str):
        raise TypeError(
            f"Partitioner of outlet '{outlet.name}' returned {type(key).__name__}, expected str"
        )
    return PartitionedRecord(key=key, value=record)


class OutletTap(Generic[T]):
    # Test double standing in for the normal data sink of one outlet.
    def __init__(self, outlet: Outlet, *, timeout: float | None = None) -> None:
        if not isinstance(outlet, Outlet):
            raise PortTypeError(f"OutletTap requires an Outlet, got {outlet!r}")
        self._outlet = outlet
        self._probe = Probe(name=outlet.name, default_timeout=timeout)
        self._emitted = 0

    @staticmethod
    def as_tap(outlet: Outlet, *, timeout: float | None = None) -> OutletTap[T]:
        return OutletTap(outlet, timeout=timeout)

    @property
    def port(self) -> Outlet:
        return self._outlet

    @property
    def probe(self) -> Probe:
        return self._probe

    @property
    def emitted(self) -> int:
        return self._emitted

    def emit(self, record: T, *, via: Outlet | None = None) -> PartitionedRecord:
        # Called once per emitted record, from the graph's thread, in emission order.
        # `via` is the outlet as declared by the streamlet; its partitioner wins.
        outlet = via or self._outlet
        if not outlet.accepts(record):
            raise PortTypeError(
                f"Outlet '{outlet.name}' expects {outlet.value_type.__name__}, "
                f"got {type(record).__name__}"
            )
        tagged = partition(outlet, record)
        self._probe.push(tagged)
        self._emitted += 1
        return tagged

    def complete(self) -> None:
        self._probe.complete()

    def __repr__(self) -> str:
        return f"OutletTap(outlet={self._outlet.name!r}, emitted={self._emitted})"
