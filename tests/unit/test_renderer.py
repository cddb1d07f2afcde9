"""Unit tests for the rich build renderer."""

from __future__ import annotations

from pathlib import Path

from rich.console import Console

from xcforge.core.errors import ConfigurationNotFoundError, ProcessFailedError
from xcforge.models.events import LogLevel, LogLine, ProgressEvent
from xcforge.models.outcome import BuildOutcome
from xcforge.monitor import BuildRenderer, StepTracker
from xcforge.monitor.renderer import StepStatus


def _render(renderable) -> str:
    console = Console(width=120, record=True, color_system=None)
    console.print(renderable)
    return console.export_text()


def _progress(index: int, label: str = "step") -> ProgressEvent:
    return ProgressEvent(step_index=index, total_steps=3, label=label)


class TestStepTracker:
    def test_initially_pending(self):
        tracker = StepTracker()
        assert set(tracker.statuses.values()) == {StepStatus.PENDING}
        assert tracker.completed_count == 0

    def test_apply_marks_previous_done(self):
        tracker = StepTracker()
        tracker.apply(_progress(0))
        tracker.apply(_progress(1))
        assert tracker.statuses == {
            0: StepStatus.DONE,
            1: StepStatus.RUNNING,
            2: StepStatus.PENDING,
        }

    def test_complete_marks_all_done(self):
        tracker = StepTracker()
        for i in range(3):
            tracker.apply(_progress(i))
        tracker.apply(_progress(3, "Complete"))
        assert tracker.completed_count == 3
        assert tracker.last_event.is_complete

    def test_mark_failed(self):
        tracker = StepTracker()
        tracker.apply(_progress(0))
        tracker.apply(_progress(1))
        tracker.mark_failed()
        assert tracker.statuses[1] == StepStatus.FAILED
        assert tracker.statuses[2] == StepStatus.PENDING


class TestBuildRenderer:
    def test_steps_panel(self):
        tracker = StepTracker()
        tracker.apply(_progress(0, "Archive primary platform"))
        text = _render(BuildRenderer().render_steps(tracker, "[Core]"))

        assert "Archive primary platform" in text
        assert "RUNNING" in text
        assert "Scheme: [Core]" in text
        assert "Progress: 0/3" in text

    def test_log_line(self):
        line = LogLine(level=LogLevel.WARN, subsystem="xcforge", message="careful")
        text = BuildRenderer().render_log_line(line)
        assert text.plain.endswith("[WARN] [xcforge] careful")
        assert str(text.style) == "yellow"

    def test_success_outcome(self):
        outcome = BuildOutcome.success("Core", Path("/p/Core.xcframework"), Path("/p"))
        text = _render(BuildRenderer().render_outcome(outcome))
        assert "XCFramework generated successfully!" in text
        assert "/p/Core.xcframework" in text

    def test_failure_outcome_shows_tail(self):
        error = ProcessFailedError("Archive companion platform", 65, "error: [bad] dest")
        outcome = BuildOutcome.failure("Core", error, Path("/p/run"))
        text = _render(BuildRenderer().render_outcome(outcome))

        assert "Archive companion platform failed" in text
        assert "Last output:" in text
        assert "error: [bad] dest" in text
        assert "Workspace: /p/run" in text

    def test_failure_outcome_without_tail(self):
        outcome = BuildOutcome.failure("X", ConfigurationNotFoundError("X"))
        text = _render(BuildRenderer().render_outcome(outcome))
        assert "Scheme X not found in project." in text
        assert "Last output:" not in text
        assert "Workspace" not in text
