from __future__ import annotations

from collections import deque
from collections.abc import Iterable, Iterator
from threading import Condition, Event
from typing import Generic, TypeVar

from streamlet_testkit.streamlet.ports import Inlet
from streamlet_testkit.testkit.errors import HarnessError, PortTypeError, RunCancelledError

T = TypeVar("T")


def _check_record(inlet: Inlet, record: object) -> None:
    if not inlet.accepts(record):
        raise PortTypeError(
            f"Inlet '{inlet.name}' expects {inlet.value_type.__name__}, "
            f"got {type(record).__name__}"
        )


class InletTap(Generic[T]):
    """Test double standing in for the normal data source of one inlet.

    Build one with `InletTap.from_sequence` (finite, closes itself once every
    record is delivered) or `InletTap.as_queue` (fed by the test through
    `offer`, open until `close`). The harness calls `open` once per run to
    obtain the iterable the graph consumes.
    """

    def __init__(self, inlet: Inlet) -> None:
        if not isinstance(inlet, Inlet):
            raise PortTypeError(f"InletTap requires an Inlet, got {inlet!r}")
        self._inlet = inlet
        self._delivered = 0

    @property
    def port(self) -> Inlet:
        return self._inlet

    @property
    def delivered(self) -> int:
        # Records handed to the graph during the last run.
        return self._delivered

    @staticmethod
    def from_sequence(inlet: Inlet, records: Iterable[T]) -> SequenceInletTap[T]:
        return SequenceInletTap(inlet, records)

    @staticmethod
    def as_queue(inlet: Inlet) -> QueueInletTap[T]:
        return QueueInletTap(inlet)

    def open(self, cancelled: Event) -> Iterator[T]:
        raise NotImplementedError("InletTap.open must be implemented")

    def interrupt(self) -> None:
        # Wake a consumer blocked on this tap so it can observe cancellation.
        return None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(inlet={self._inlet.name!r})"


class SequenceInletTap(InletTap[T]):
    # Finite tap: delivers the records in order, then ends the inlet.
    def __init__(self, inlet: Inlet, records: Iterable[T]) -> None:
        super().__init__(inlet)
        self._records: tuple[T, ...] = tuple(records)
        for record in self._records:
            _check_record(inlet, record)

    @property
    def records(self) -> tuple[T, ...]:
        return self._records

    def open(self, cancelled: Event) -> Iterator[T]:
        self._delivered = 0
        return self._iterate(cancelled)

    def _iterate(self, cancelled: Event) -> Iterator[T]:
        for record in self._records:
            if cancelled.is_set():
                raise RunCancelledError(f"Inlet '{self._inlet.name}' cancelled")
            self._delivered += 1
            yield record


class QueueInletTap(InletTap[T]):
    # Interactive tap: unbounded queue fed by the test; ends only after `close`.
    def __init__(self, inlet: Inlet) -> None:
        super().__init__(inlet)
        self._queue: deque[T] = deque()
        self._cond = Condition()
        self._closed = False

    @property
    def closed(self) -> bool:
        with self._cond:
            return self._closed

    def offer(self, record: T) -> None:
        # Never blocks; the buffer is unbounded.
        _check_record(self._inlet, record)
        with self._cond:
            if self._closed:
                raise HarnessError(f"Inlet tap '{self._inlet.name}' is closed")
            self._queue.append(record)
            self._cond.notify_all()

    def offer_all(self, records: Iterable[T]) -> None:
        for record in records:
            self.offer(record)

    def close(self) -> None:
        # Queued records are still delivered; end-of-input follows the last one.
        with self._cond:
            self._closed = True
            self._cond.notify_all()

    def interrupt(self) -> None:
        with self._cond:
            self._cond.notify_all()

    def open(self, cancelled: Event) -> Iterator[T]:
        self._delivered = 0
        return self._iterate(cancelled)

    def _iterate(self, cancelled: Event) -> Iterator[T]:
        while True:
            with self._cond:
                while not self._queue and not self._closed and not cancelled.is_set():
                    self._cond.wait()
                if cancelled.is_set():
                    raise RunCancelledError(f"Inlet '{self._inlet.name}' cancelled")
                if not self._queue:
                    # Closed and drained.
                    return
                record = self._queue.popleft()
                self._delivered += 1
            # Yield outside the lock so `offer` never waits on downstream processing.
            yield record
