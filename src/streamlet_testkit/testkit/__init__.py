from .bindings import TapRegistry
from .errors import (
    AssertionMismatchError,
    ConfigParameterError,
    DuplicateBindingError,
    HarnessBusyError,
    HarnessError,
    PortTypeError,
    ProbeError,
    ProbeExhaustedError,
    ProbeTimeoutError,
    RunCancelledError,
    RunTimeoutError,
    StreamletExecutionError,
    UnboundPortError,
    UnknownPortError,
    WiringError,
)
from .harness import RunResult, RunState, TestHarness
from .inlet_tap import InletTap, QueueInletTap, SequenceInletTap
from .messages import CompletionSignal, Completed, PartitionedRecord
from .observers import FanoutObserver, HarnessObserver, LoggingObserver
from .outlet_tap import OutletTap, partition
from .probe import Probe
from .runtime import ExecutionRuntime, scoped_runtime

__all__ = [
    "AssertionMismatchError",
    "Completed",
    "CompletionSignal",
    "ConfigParameterError",
    "DuplicateBindingError",
    "ExecutionRuntime",
    "FanoutObserver",
    "HarnessBusyError",
    "HarnessError",
    "HarnessObserver",
    "InletTap",
    "LoggingObserver",
    "OutletTap",
    "PartitionedRecord",
    "PortTypeError",
    "Probe",
    "ProbeError",
    "ProbeExhaustedError",
    "ProbeTimeoutError",
    "QueueInletTap",
    "RunCancelledError",
    "RunResult",
    "RunState",
    "RunTimeoutError",
    "SequenceInletTap",
    "StreamletExecutionError",
    "TapRegistry",
    "TestHarness",
    "UnboundPortError",
    "UnknownPortError",
    "WiringError",
    "partition",
    "scoped_runtime",
]
