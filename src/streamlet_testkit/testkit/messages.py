from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class PartitionedRecord(Generic[T]):
    # Unit observed on an outlet: the emitted record tagged with its partition key.
    key: str
    value: T

    def __post_init__(self) -> None:
        if not isinstance(self.key, str):
            raise TypeError(f"PartitionedRecord.key must be str, got {type(self.key).__name__}")


@dataclass(frozen=True, slots=True)
class CompletionSignal:
    # Terminal sentinel: the run finished cleanly and the outlet will emit nothing more.
    def __repr__(self) -> str:
        return "Completed"


Completed = CompletionSignal()

ProbeMessage = PartitionedRecord | CompletionSignal
