from .factory import build_log_sink
from .logging import (
    LOG_LEVELS,
    JsonlLogSink,
    LogMessage,
    LogSink,
    MemoryLogSink,
    NullLogSink,
    StdoutLogSink,
    level_enabled,
)

__all__ = [
    "LOG_LEVELS",
    "JsonlLogSink",
    "LogMessage",
    "LogSink",
    "MemoryLogSink",
    "NullLogSink",
    "StdoutLogSink",
    "build_log_sink",
    "level_enabled",
]
