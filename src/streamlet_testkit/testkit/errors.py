from __future__ import annotations


class HarnessError(Exception):
    # Base error for every failure raised by the testkit.
    pass


class WiringError(HarnessError):
    # Tap bindings or run configuration are invalid; raised before execution starts.
    pass


class DuplicateBindingError(WiringError):
    # More than one tap bound to the same port.
    pass


class UnboundPortError(WiringError):
    # A declared port has no tap bound to it.
    def __init__(self, missing: list[str]) -> None:
        self.missing = list(missing)
        super().__init__(f"No tap bound for declared ports: {self.missing}")


class UnknownPortError(WiringError):
    # A tap targets a port the streamlet does not declare.
    pass


class PortTypeError(WiringError, TypeError):
    # Record or tap type does not match the port declaration.
    pass


class ConfigParameterError(WiringError):
    # Config values given to a run do not match the streamlet's declared parameters.
    pass


class StreamletExecutionError(HarnessError):
    # The streamlet's graph failed; the underlying error is kept as `cause` and `__cause__`.
    def __init__(self, streamlet: str, cause: BaseException) -> None:
        self.streamlet = streamlet
        self.cause = cause
        super().__init__(f"Streamlet '{streamlet}' failed: {type(cause).__name__}: {cause}")


class RunTimeoutError(HarnessError):
    # The run did not terminate within its overall timeout and was cancelled.
    pass


class RunCancelledError(HarnessError):
    # Raised inside the graph by inlet sources once the harness cancels the run.
    pass


class HarnessBusyError(HarnessError):
    # A second run was started while the harness was still running one.
    pass


class ProbeError(HarnessError, AssertionError):
    # Probe failures are assertion failures from the test runner's point of view.
    pass


class ProbeTimeoutError(ProbeError):
    # Not enough messages arrived before the timeout.
    pass


class ProbeExhaustedError(ProbeError):
    # The completion signal arrived before the requested number of records.
    pass


class AssertionMismatchError(ProbeError):
    # Received message differs from the expected one.
    def __init__(self, expected: object, actual: object) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"Expected {expected!r}, received {actual!r}")
