from __future__ import annotations

import time
from collections import deque
from collections.abc import Callable
from threading import Condition

from streamlet_testkit.testkit.errors import (
    AssertionMismatchError,
    ProbeExhaustedError,
    ProbeTimeoutError,
)
from streamlet_testkit.testkit.messages import (
    CompletionSignal,
    Completed,
    PartitionedRecord,
    ProbeMessage,
)

_FALLBACK_TIMEOUT = 3.0


class Probe:
    """FIFO observation channel of one tapped outlet.

    The graph appends (single writer), test assertions consume destructively
    (single reader). Every blocking operation is bounded by a timeout in
    seconds; when a call omits it, `default_timeout` applies.
    """

    def __init__(self, *, name: str = "probe", default_timeout: float | None = None) -> None:
        self.name = name
        self.default_timeout = default_timeout
        self._messages: deque[ProbeMessage] = deque()
        self._cond = Condition()
        self._completed = False

    # -- writer side (harness) -------------------------------------------------

    def push(self, record: PartitionedRecord) -> None:
        with self._cond:
            if self._completed:
                raise RuntimeError(f"Probe '{self.name}' already completed; record rejected")
            self._messages.append(record)
            self._cond.notify_all()

    def complete(self) -> None:
        # Enqueued at most once; nothing may follow it.
        with self._cond:
            if self._completed:
                return
            self._completed = True
            self._messages.append(Completed)
            self._cond.notify_all()

    # -- reader side (assertions) ----------------------------------------------

    @property
    def completed(self) -> bool:
        # True once the completion signal was enqueued, consumed or not.
        with self._cond:
            return self._completed

    def pending(self) -> int:
        with self._cond:
            return len(self._messages)

    def receive(self, timeout: float | None = None) -> ProbeMessage:
        limit = self._timeout(timeout)
        deadline = time.monotonic() + limit
        with self._cond:
            if not self._wait_for(lambda: bool(self._messages), deadline):
                raise ProbeTimeoutError(
                    f"Probe '{self.name}': no message within {limit:.3f}s"
                )
            return self._messages.popleft()

    def receive_n(self, n: int, timeout: float | None = None) -> list[PartitionedRecord]:
        # Receives exactly `n` records; the whole call shares one deadline.
        if n < 0:
            raise ValueError("receive_n expects n >= 0")
        limit = self._timeout(timeout)
        deadline = time.monotonic() + limit
        received: list[PartitionedRecord] = []
        with self._cond:
            while len(received) < n:
                if not self._wait_for(lambda: bool(self._messages), deadline):
                    raise ProbeTimeoutError(
                        f"Probe '{self.name}': received {len(received)} of {n} "
                        f"messages within {limit:.3f}s: {received!r}"
                    )
                head = self._messages[0]
                if isinstance(head, CompletionSignal):
                    # Leave the signal queued so a later expect_completed still sees it.
                    raise ProbeExhaustedError(
                        f"Probe '{self.name}': completed after {len(received)} of {n} "
                        f"messages: {received!r}"
                    )
                received.append(self._messages.popleft())
        return received

    def expect_message(self, expected: object, timeout: float | None = None) -> ProbeMessage:
        actual = self.receive(timeout)
        if actual != expected:
            raise AssertionMismatchError(expected, actual)
        return actual

    def expect_completed(self, timeout: float | None = None) -> None:
        self.expect_message(Completed, timeout)

    def expect_no_message(self, duration: float) -> None:
        # Succeeds only if nothing at all arrives for `duration` seconds.
        deadline = time.monotonic() + duration
        with self._cond:
            if self._wait_for(lambda: bool(self._messages), deadline):
                raise AssertionMismatchError("no message", self._messages[0])

    def _timeout(self, timeout: float | None) -> float:
        if timeout is not None:
            resolved = timeout
        elif self.default_timeout is not None:
            resolved = self.default_timeout
        else:
            resolved = _FALLBACK_TIMEOUT
        if resolved < 0:
            raise ValueError("Probe timeout must be >= 0")
        return resolved

    def _wait_for(self, predicate: Callable[[], bool], deadline: float) -> bool:
        # Caller holds the condition. Condition.wait may wake early; loop to the deadline.
        while not predicate():
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return False
            self._cond.wait(remaining)
        return True

    def __repr__(self) -> str:
        return f"Probe(name={self.name!r}, pending={self.pending()}, completed={self.completed})"
