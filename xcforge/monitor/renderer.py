"""Rich terminal renderer for build progress.

``StepTracker`` folds ``ProgressEvent``s into per-step statuses;
``BuildRenderer`` turns the tracker and the final ``BuildOutcome`` into
Rich renderables.

Color scheme
------------
- green     : done
- yellow    : running
- red       : failed
- dim       : pending
"""

from __future__ import annotations

from enum import Enum

from rich.console import Console, Group
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from xcforge.core.errors import ProcessFailedError
from xcforge.models.events import LogLevel, LogLine, ProgressEvent
from xcforge.models.outcome import BuildOutcome
from xcforge.models.states import BUILD_STEPS


class StepStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    DONE = "done"
    FAILED = "failed"


_STATUS_MARKUP: dict[StepStatus, str] = {
    StepStatus.PENDING: "[dim]PENDING[/dim]",
    StepStatus.RUNNING: "[yellow]RUNNING[/yellow]",
    StepStatus.DONE: "[green]DONE[/green]",
    StepStatus.FAILED: "[bold red]FAILED[/bold red]",
}

_LEVEL_STYLES: dict[LogLevel, str] = {
    LogLevel.DEBUG: "dim",
    LogLevel.INFO: "",
    LogLevel.WARN: "yellow",
    LogLevel.ERROR: "bold red",
}


class StepTracker:
    """Per-step status derived from the progress events seen so far."""

    def __init__(self) -> None:
        self.statuses: dict[int, StepStatus] = {
            step.index: StepStatus.PENDING for step in BUILD_STEPS
        }
        self.labels: dict[int, str] = {step.index: step.label for step in BUILD_STEPS}
        self.last_event: ProgressEvent | None = None

    def apply(self, event: ProgressEvent) -> None:
        for index in self.statuses:
            if index < event.step_index:
                self.statuses[index] = StepStatus.DONE
        if not event.is_complete:
            self.statuses[event.step_index] = StepStatus.RUNNING
            self.labels[event.step_index] = event.label
        self.last_event = event

    def mark_failed(self) -> None:
        """Flag the running step (if any) as failed."""
        for index, status in self.statuses.items():
            if status == StepStatus.RUNNING:
                self.statuses[index] = StepStatus.FAILED

    @property
    def completed_count(self) -> int:
        return sum(1 for s in self.statuses.values() if s == StepStatus.DONE)


class BuildRenderer:
    """Renders build state as Rich output.

    Parameters
    ----------
    console:
        Rich Console instance.  A new one is created if not provided.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def render_steps(self, tracker: StepTracker, scheme: str) -> Panel:
        table = Table(show_header=True, header_style="bold", expand=True)
        table.add_column("#", justify="right", width=3)
        table.add_column("Step")
        table.add_column("Status", justify="center")

        for index, status in tracker.statuses.items():
            table.add_row(str(index + 1), tracker.labels[index], _STATUS_MARKUP[status])

        footer = Text.from_markup(
            f"[bold]Scheme:[/bold] {escape(scheme)}  |  "
            f"[bold]Progress:[/bold] {tracker.completed_count}/{len(tracker.statuses)}"
        )
        return Panel(
            Group(table, Text(""), footer),
            title="[bold]xcforge[/bold]",
            border_style="blue",
        )

    def render_log_line(self, line: LogLine) -> Text:
        return Text(line.render(), style=_LEVEL_STYLES.get(line.level, ""))

    def render_outcome(self, outcome: BuildOutcome) -> Panel:
        if outcome.succeeded:
            body = "\n".join([
                "[bold green]XCFramework generated successfully![/bold green]",
                "",
                f"[bold]Scheme:[/bold]  {escape(outcome.configuration)}",
                f"[bold]Bundle:[/bold]  {escape(str(outcome.bundle_path))}",
            ])
            return Panel(body, title="[bold]Build succeeded[/bold]", border_style="green")

        error = outcome.error
        headline = escape(error.description) if error is not None else "Build failed"
        lines = [f"[bold red]{headline}[/bold red]"]
        if error is not None and error.remediation:
            lines += ["", f"[dim]{escape(error.remediation)}[/dim]"]
        if outcome.workspace is not None:
            lines += ["", f"[bold]Workspace:[/bold] {escape(str(outcome.workspace))}"]

        renderables: list = [Text.from_markup("\n".join(lines))]
        if isinstance(error, ProcessFailedError) and error.output_tail:
            renderables += [Text(""), Text("Last output:", style="bold"), Text(error.output_tail)]

        return Panel(
            Group(*renderables),
            title="[bold]Build failed[/bold]",
            border_style="red",
        )
