from __future__ import annotations

from pathlib import Path

from streamlet_testkit.config.models import LoggingSettings
from streamlet_testkit.observability.logging import (
    JsonlLogSink,
    LogSink,
    MemoryLogSink,
    NullLogSink,
    StdoutLogSink,
)


def build_log_sink(settings: LoggingSettings) -> LogSink:
    # Settings are validated by the model; a jsonl sink always has a path here.
    if settings.sink == "stdout":
        return StdoutLogSink()
    if settings.sink == "jsonl":
        return JsonlLogSink(Path(str(settings.path)))
    if settings.sink == "memory":
        return MemoryLogSink()
    return NullLogSink()
