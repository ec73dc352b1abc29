from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

# Config models map the harness YAML sections to typed structures.


class LoggingSettings(BaseModel):
    # Where harness lifecycle logs go; `none` keeps test output quiet.
    model_config = ConfigDict(extra="forbid")
    sink: Literal["none", "stdout", "jsonl", "memory"] = "none"
    path: str | None = None
    level: Literal["debug", "info", "warning", "error"] = "info"

    @model_validator(mode="after")
    def _require_path_for_jsonl(self) -> LoggingSettings:
        if self.sink == "jsonl" and not self.path:
            raise ValueError("logging.path must be set when logging.sink is 'jsonl'")
        return self


class HarnessSettings(BaseModel):
    # Timeouts are in seconds. `run_timeout: null` lets a run wait indefinitely.
    model_config = ConfigDict(extra="forbid")
    probe_timeout: float = Field(default=3.0, gt=0)
    run_timeout: Annotated[float, Field(gt=0)] | None = 30.0
    workers: int = Field(default=4, ge=1)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
