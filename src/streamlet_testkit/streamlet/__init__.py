from .graph import StepGraph, StepStreamlet
from .partitioner import Partitioner, by_attribute, key_by, round_robin
from .ports import Inlet, Outlet, Port, PortDirection, StreamletShape
from .step import Step, StepKind, filter_step, flat_map_step, map_step, tap_step
from .streamlet import (
    ConfigParameter,
    InletSource,
    OutletSink,
    RunnableGraph,
    Streamlet,
    StreamletContext,
    streamlet_ref,
)

# Streamlet-side contracts: ports, shape, graph factory and step building blocks.
__all__ = [
    "ConfigParameter",
    "Inlet",
    "InletSource",
    "Outlet",
    "OutletSink",
    "Partitioner",
    "Port",
    "PortDirection",
    "RunnableGraph",
    "Step",
    "StepKind",
    "StepGraph",
    "StepStreamlet",
    "Streamlet",
    "StreamletContext",
    "StreamletShape",
    "by_attribute",
    "filter_step",
    "flat_map_step",
    "key_by",
    "map_step",
    "round_robin",
    "streamlet_ref",
    "tap_step",
]
