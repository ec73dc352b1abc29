from .config import ConfigError, HarnessSettings, load_settings
from .streamlet import (
    ConfigParameter,
    Inlet,
    Outlet,
    Step,
    StepStreamlet,
    Streamlet,
    StreamletContext,
    StreamletShape,
    by_attribute,
    filter_step,
    flat_map_step,
    key_by,
    map_step,
    round_robin,
    tap_step,
)
from .testkit import (
    AssertionMismatchError,
    Completed,
    CompletionSignal,
    DuplicateBindingError,
    ExecutionRuntime,
    InletTap,
    OutletTap,
    PartitionedRecord,
    Probe,
    ProbeExhaustedError,
    ProbeTimeoutError,
    RunResult,
    RunState,
    RunTimeoutError,
    StreamletExecutionError,
    TestHarness,
    UnboundPortError,
    scoped_runtime,
)

# Public surface for test authors; submodules expose the full API.
__all__ = [
    "AssertionMismatchError",
    "Completed",
    "CompletionSignal",
    "ConfigError",
    "ConfigParameter",
    "DuplicateBindingError",
    "ExecutionRuntime",
    "HarnessSettings",
    "Inlet",
    "InletTap",
    "Outlet",
    "OutletTap",
    "PartitionedRecord",
    "Probe",
    "ProbeExhaustedError",
    "ProbeTimeoutError",
    "RunResult",
    "RunState",
    "RunTimeoutError",
    "Step",
    "StepStreamlet",
    "Streamlet",
    "StreamletContext",
    "StreamletExecutionError",
    "StreamletShape",
    "TestHarness",
    "UnboundPortError",
    "by_attribute",
    "filter_step",
    "flat_map_step",
    "key_by",
    "load_settings",
    "map_step",
    "round_robin",
    "scoped_runtime",
    "tap_step",
]
