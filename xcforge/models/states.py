"""Run state machine models — one orchestration run, no loops back."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class BuildState(str, Enum):
    """States a single orchestration run moves through."""

    IDLE = "idle"
    VALIDATING = "validating"
    PREPARING_WORKSPACE = "preparing_workspace"
    RUNNING_STEP = "running_step"
    RESOLVING = "resolving"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


# Enforced by RunStateMachine. SUCCEEDED and FAILED are terminal.
VALID_TRANSITIONS: dict[BuildState, set[BuildState]] = {
    BuildState.IDLE: {BuildState.VALIDATING},
    BuildState.VALIDATING: {BuildState.PREPARING_WORKSPACE, BuildState.FAILED},
    BuildState.PREPARING_WORKSPACE: {BuildState.RUNNING_STEP, BuildState.FAILED},
    BuildState.RUNNING_STEP: {
        BuildState.RUNNING_STEP,
        BuildState.RESOLVING,
        BuildState.SUCCEEDED,
        BuildState.FAILED,
    },
    BuildState.RESOLVING: {BuildState.RUNNING_STEP, BuildState.FAILED},
    BuildState.SUCCEEDED: set(),
    BuildState.FAILED: set(),
}

TERMINAL_STATES: frozenset[BuildState] = frozenset(
    {BuildState.SUCCEEDED, BuildState.FAILED}
)


class StepDefinition(BaseModel):
    """One external toolchain invocation in the build sequence."""

    model_config = ConfigDict(frozen=True)

    index: int
    label: str


ARCHIVE_PRIMARY = StepDefinition(index=0, label="Archive primary platform")
ARCHIVE_COMPANION = StepDefinition(index=1, label="Archive companion platform")
MERGE_BUNDLE = StepDefinition(index=2, label="Merge into bundle")

BUILD_STEPS: list[StepDefinition] = [ARCHIVE_PRIMARY, ARCHIVE_COMPANION, MERGE_BUNDLE]
COMPLETE_LABEL = "Complete"


class RunTransition(BaseModel):
    """Records a single state transition of a run."""

    model_config = ConfigDict(frozen=True)

    from_state: BuildState
    to_state: BuildState
    step_index: int | None = None
    label: str = ""
    timestamp_utc: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
