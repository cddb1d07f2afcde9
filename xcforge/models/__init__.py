"""xcforge data models — all Pydantic v2, all frozen (immutable)."""

from xcforge.models.config import BuildPlan, PlatformTarget
from xcforge.models.events import EventKind, LogLevel, LogLine, ProgressEvent
from xcforge.models.outcome import BuildOutcome, BuildWorkspace, ProjectSnapshot
from xcforge.models.states import (
    BUILD_STEPS,
    VALID_TRANSITIONS,
    BuildState,
    RunTransition,
    StepDefinition,
)

__all__ = [
    # config
    "BuildPlan",
    "PlatformTarget",
    # events
    "EventKind",
    "LogLevel",
    "LogLine",
    "ProgressEvent",
    # outcome
    "BuildOutcome",
    "BuildWorkspace",
    "ProjectSnapshot",
    # states
    "BuildState",
    "RunTransition",
    "StepDefinition",
    "VALID_TRANSITIONS",
    "BUILD_STEPS",
]
