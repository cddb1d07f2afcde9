"""Unit tests for the RunStateMachine.

Covers: valid transitions, invalid transitions, terminal states, step
ordering, and history tracking.
"""

from __future__ import annotations

import pytest

from xcforge.core.run_state import InvalidTransitionError, RunStateMachine
from xcforge.models.states import TERMINAL_STATES, VALID_TRANSITIONS, BuildState


def _to_running(machine: RunStateMachine) -> None:
    machine.transition(BuildState.VALIDATING)
    machine.transition(BuildState.PREPARING_WORKSPACE)
    machine.transition(BuildState.RUNNING_STEP, step_index=0, label="first")


class TestRunStateMachine:
    def test_starts_idle(self):
        machine = RunStateMachine()
        assert machine.state == BuildState.IDLE
        assert machine.step_index is None
        assert machine.history == []
        assert not machine.is_terminal

    def test_happy_path(self):
        machine = RunStateMachine()
        _to_running(machine)
        machine.transition(BuildState.RUNNING_STEP, step_index=1)
        machine.transition(BuildState.RESOLVING)
        machine.transition(BuildState.RUNNING_STEP, step_index=2)
        machine.transition(BuildState.SUCCEEDED, label="Complete")

        assert machine.state == BuildState.SUCCEEDED
        assert machine.is_terminal
        assert machine.step_index == 2
        assert len(machine.history) == 7
        assert machine.history[-1].label == "Complete"

    def test_idle_cannot_skip_validation(self):
        machine = RunStateMachine()
        with pytest.raises(InvalidTransitionError, match="Cannot transition"):
            machine.transition(BuildState.RUNNING_STEP, step_index=0)

    def test_running_step_requires_index(self):
        machine = RunStateMachine()
        machine.transition(BuildState.VALIDATING)
        machine.transition(BuildState.PREPARING_WORKSPACE)
        with pytest.raises(InvalidTransitionError, match="requires a step_index"):
            machine.transition(BuildState.RUNNING_STEP)

    @pytest.mark.parametrize("index", [0, -1])
    def test_step_indices_strictly_increase(self, index):
        machine = RunStateMachine()
        _to_running(machine)
        with pytest.raises(InvalidTransitionError, match="cannot follow"):
            machine.transition(BuildState.RUNNING_STEP, step_index=index)

    def test_failure_from_validating(self):
        machine = RunStateMachine()
        machine.transition(BuildState.VALIDATING)
        record = machine.fail(label="configuration_not_found")

        assert record is not None
        assert record.from_state == BuildState.VALIDATING
        assert machine.state == BuildState.FAILED

    def test_fail_is_noop_when_terminal(self):
        machine = RunStateMachine()
        machine.transition(BuildState.VALIDATING)
        machine.fail()
        assert machine.fail() is None
        assert len(machine.history) == 2

    @pytest.mark.parametrize("terminal", sorted(TERMINAL_STATES, key=lambda s: s.value))
    def test_terminal_states_are_final(self, terminal):
        assert VALID_TRANSITIONS[terminal] == set()

    def test_history_is_a_copy(self):
        machine = RunStateMachine()
        machine.transition(BuildState.VALIDATING)
        machine.history.clear()
        assert len(machine.history) == 1

    def test_history_records_step_index(self):
        machine = RunStateMachine()
        _to_running(machine)
        machine.transition(BuildState.RESOLVING)
        # Resolving inherits the index of the last running step
        assert machine.history[-1].step_index == 0
        assert machine.history[-1].timestamp_utc.tzinfo is not None

    def test_every_state_has_a_table_entry(self):
        assert set(VALID_TRANSITIONS) == set(BuildState)
