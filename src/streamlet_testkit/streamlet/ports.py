from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, TypeVar

from streamlet_testkit.streamlet.partitioner import Partitioner, round_robin

T = TypeVar("T")


class PortDirection(Enum):
    IN = "in"
    OUT = "out"


def _check_port(name: str, value_type: object) -> None:
    # Port identity is its name; the value type drives tap type checks.
    if not isinstance(name, str) or not name:
        raise ValueError("Port name must be a non-empty string")
    if not isinstance(value_type, type):
        raise ValueError(f"Port '{name}' value_type must be a class")


@dataclass(frozen=True, slots=True)
class Inlet(Generic[T]):
    # Named input port; records of `value_type` flow into the streamlet here.
    name: str
    value_type: type = object

    def __post_init__(self) -> None:
        _check_port(self.name, self.value_type)

    @property
    def direction(self) -> PortDirection:
        return PortDirection.IN

    def accepts(self, record: object) -> bool:
        return isinstance(record, self.value_type)


@dataclass(frozen=True, slots=True)
class Outlet(Generic[T]):
    # Named output port; every emitted record is tagged by `partitioner`.
    name: str
    value_type: type = object
    partitioner: Partitioner = field(default=round_robin, compare=False)

    def __post_init__(self) -> None:
        _check_port(self.name, self.value_type)
        if not callable(self.partitioner):
            raise ValueError(f"Outlet '{self.name}' partitioner must be callable")

    @property
    def direction(self) -> PortDirection:
        return PortDirection.OUT

    def accepts(self, record: object) -> bool:
        return isinstance(record, self.value_type)


Port = Inlet | Outlet


@dataclass(frozen=True, slots=True)
class StreamletShape:
    # Declared ports of a streamlet, in declaration order.
    inlets: tuple[Inlet, ...] = ()
    outlets: tuple[Outlet, ...] = ()

    def __post_init__(self) -> None:
        # Any iterable of ports is accepted; tuples keep the shape immutable.
        object.__setattr__(self, "inlets", tuple(self.inlets))
        object.__setattr__(self, "outlets", tuple(self.outlets))
        for port in self.inlets:
            if not isinstance(port, Inlet):
                raise ValueError(f"StreamletShape.inlets entries must be Inlet, got {port!r}")
        for port in self.outlets:
            if not isinstance(port, Outlet):
                raise ValueError(f"StreamletShape.outlets entries must be Outlet, got {port!r}")
        # Names are unique across the whole shape so taps can be keyed by name alone.
        names = self.port_names
        if len(names) != len(set(names)):
            raise ValueError(f"StreamletShape port names must be unique: {names}")

    @property
    def ports(self) -> list[Port]:
        return [*self.inlets, *self.outlets]

    @property
    def port_names(self) -> list[str]:
        return [port.name for port in self.ports]

    def inlet(self, name: str) -> Inlet:
        for port in self.inlets:
            if port.name == name:
                return port
        raise KeyError(f"Unknown inlet '{name}'")

    def outlet(self, name: str) -> Outlet:
        for port in self.outlets:
            if port.name == name:
                return port
        raise KeyError(f"Unknown outlet '{name}'")
