"""Observable events — progress and log lines."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class EventKind(str, Enum):
    """Channels an EventBus delivers on."""

    PROGRESS = "progress"
    LOG = "log"


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"


class ProgressEvent(BaseModel):
    """Step transition marker; ``step_index == total_steps`` means done."""

    model_config = ConfigDict(frozen=True)

    step_index: int = Field(ge=0)
    total_steps: int = Field(gt=0)
    label: str

    @model_validator(mode="after")
    def _index_within_total(self) -> ProgressEvent:
        if self.step_index > self.total_steps:
            raise ValueError(
                f"step_index {self.step_index} exceeds total_steps {self.total_steps}"
            )
        return self

    @property
    def is_complete(self) -> bool:
        return self.step_index == self.total_steps

    @property
    def fraction(self) -> float:
        return self.step_index / self.total_steps


class LogLine(BaseModel):
    """One line of narration or tool output."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    level: LogLevel = LogLevel.INFO
    subsystem: str
    message: str

    def render(self) -> str:
        """Format as ``<ISO-8601> [LEVEL] [subsystem] message``."""
        stamp = self.timestamp.astimezone(timezone.utc).isoformat(
            timespec="milliseconds"
        ).replace("+00:00", "Z")
        return f"{stamp} [{self.level.value}] [{self.subsystem}] {self.message}"
