from __future__ import annotations

from streamlet_testkit.streamlet.ports import Inlet, Outlet, Port, StreamletShape
from streamlet_testkit.testkit.errors import (
    DuplicateBindingError,
    PortTypeError,
    UnboundPortError,
    UnknownPortError,
)
from streamlet_testkit.testkit.inlet_tap import InletTap
from streamlet_testkit.testkit.outlet_tap import OutletTap


class TapRegistry:
    # Taps of one run keyed by port name; checked against the streamlet's declared shape.
    def __init__(self, shape: StreamletShape) -> None:
        self._shape = shape
        self._inlets: dict[str, InletTap] = {}
        self._outlets: dict[str, OutletTap] = {}

    def bind_inlet(self, tap: InletTap) -> None:
        if not isinstance(tap, InletTap):
            raise PortTypeError(f"Expected an InletTap, got {type(tap).__name__}")
        declared = self._declared(tap.port, Inlet)
        if declared.name in self._inlets:
            raise DuplicateBindingError(f"Inlet '{declared.name}' already has a tap bound")
        self._check_type(declared, tap.port)
        self._inlets[declared.name] = tap

    def bind_outlet(self, tap: OutletTap) -> None:
        if not isinstance(tap, OutletTap):
            raise PortTypeError(f"Expected an OutletTap, got {type(tap).__name__}")
        declared = self._declared(tap.port, Outlet)
        if declared.name in self._outlets:
            raise DuplicateBindingError(f"Outlet '{declared.name}' already has a tap bound")
        self._check_type(declared, tap.port)
        self._outlets[declared.name] = tap

    def validate_complete(self) -> None:
        missing = [name for name in self._shape.port_names if name not in self.bound_names]
        if missing:
            raise UnboundPortError(missing)

    @property
    def bound_names(self) -> set[str]:
        return set(self._inlets) | set(self._outlets)

    @property
    def inlets(self) -> dict[str, InletTap]:
        return dict(self._inlets)

    @property
    def outlets(self) -> dict[str, OutletTap]:
        return dict(self._outlets)

    def _declared(self, port: Port, kind: type) -> Port:
        for candidate in self._shape.ports:
            if candidate.name != port.name:
                continue
            if not isinstance(candidate, kind):
                raise PortTypeError(
                    f"Port '{port.name}' is declared as {candidate.direction.value}, "
                    f"tap expects {port.direction.value}"
                )
            return candidate
        raise UnknownPortError(f"Streamlet does not declare port '{port.name}'")

    @staticmethod
    def _check_type(declared: Port, bound: Port) -> None:
        # Tap records must be usable where the declared port's records are.
        if isinstance(declared, Inlet):
            compatible = issubclass(bound.value_type, declared.value_type)
        else:
            compatible = issubclass(declared.value_type, bound.value_type)
        if not compatible:
            raise PortTypeError(
                f"Tap for port '{declared.name}' carries {bound.value_type.__name__}, "
                f"port declares {declared.value_type.__name__}"
            )
