"""Run state machine — validates every transition of one build run.

Enforces:
- Valid transitions only (VALID_TRANSITIONS table)
- Terminal states (SUCCEEDED, FAILED) are final
- Every transition is recorded in order
"""

from __future__ import annotations

from xcforge.models.states import (
    TERMINAL_STATES,
    VALID_TRANSITIONS,
    BuildState,
    RunTransition,
)


class InvalidTransitionError(RuntimeError):
    """Raised when a requested state transition is not valid."""


class RunStateMachine:
    """Tracks the state of a single orchestration run."""

    def __init__(self) -> None:
        self._state = BuildState.IDLE
        self._step_index: int | None = None
        self._history: list[RunTransition] = []

    @property
    def state(self) -> BuildState:
        return self._state

    @property
    def step_index(self) -> int | None:
        """Index of the step currently (or last) running."""
        return self._step_index

    @property
    def history(self) -> list[RunTransition]:
        return list(self._history)

    @property
    def is_terminal(self) -> bool:
        return self._state in TERMINAL_STATES

    def transition(
        self,
        target: BuildState,
        *,
        step_index: int | None = None,
        label: str = "",
    ) -> RunTransition:
        """Move to *target*, recording the transition.

        Step indices must strictly increase across RUNNING_STEP entries.
        """
        allowed = VALID_TRANSITIONS.get(self._state, set())
        if target not in allowed:
            raise InvalidTransitionError(
                f"Cannot transition from {self._state.value} to {target.value}. "
                f"Allowed: {sorted(s.value for s in allowed)}"
            )

        if target == BuildState.RUNNING_STEP:
            if step_index is None:
                raise InvalidTransitionError("running_step requires a step_index")
            if self._step_index is not None and step_index <= self._step_index:
                raise InvalidTransitionError(
                    f"Step {step_index} cannot follow step {self._step_index}"
                )
            self._step_index = step_index

        record = RunTransition(
            from_state=self._state,
            to_state=target,
            step_index=step_index if step_index is not None else self._step_index,
            label=label,
        )
        self._history.append(record)
        self._state = target
        return record

    def fail(self, label: str = "") -> RunTransition | None:
        """Move to FAILED unless the run is already terminal."""
        if self.is_terminal:
            return None
        return self.transition(BuildState.FAILED, label=label)
