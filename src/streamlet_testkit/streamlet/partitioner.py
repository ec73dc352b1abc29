from __future__ import annotations

from collections.abc import Callable
from typing import Protocol

# Partitioners derive the partition key an outlet attaches to each emitted record.


class Partitioner(Protocol):
    def __call__(self, record: object) -> str:
        raise NotImplementedError("Partitioner protocol has no implementation")


def round_robin(record: object) -> str:
    # Empty key: the record is not pinned to any partition.
    _ = record
    return ""


def key_by(fn: Callable[[object], object]) -> Partitioner:
    # Adapt an arbitrary key function; keys are always strings on the wire.
    if not callable(fn):
        raise ValueError("key_by expects a callable")

    def _partition(record: object) -> str:
        return str(fn(record))

    _partition.__name__ = f"key_by({getattr(fn, '__name__', 'fn')})"
    return _partition


def by_attribute(name: str) -> Partitioner:
    # Key records by one of their attributes (dataclass field, property, ...).
    if not isinstance(name, str) or not name:
        raise ValueError("by_attribute expects a non-empty attribute name")

    def _partition(record: object) -> str:
        return str(getattr(record, name))

    _partition.__name__ = f"by_attribute({name})"
    return _partition
