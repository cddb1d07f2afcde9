"""``xcforge build`` — archive a scheme for both platforms and merge.

The build runs on a background worker; this command drains its events on
the main thread to drive a live step table and the per-build log file.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.live import Live

from xcforge.config import ForgeSettings
from xcforge.core.errors import ProjectLoadError
from xcforge.core.orchestrator import BuildOrchestrator
from xcforge.core.project import XcodeProjectProvider
from xcforge.core.worker import BuildWorker
from xcforge.models.config import BuildPlan
from xcforge.models.events import EventKind
from xcforge.monitor.renderer import BuildRenderer, StepTracker
from xcforge.sinks.file_log import FileLogSink

console = Console()


def build_cmd(
    project: Path = typer.Argument(..., help="Path to the .xcodeproj bundle."),
    scheme: str = typer.Option(
        None,
        "--scheme",
        "-s",
        help="Scheme to build.  Defaults to the first scheme alphabetically.",
    ),
    toolchain: Path = typer.Option(
        None,
        "--toolchain",
        help="Absolute path to xcodebuild (overrides XCFORGE_TOOLCHAIN_PATH).",
    ),
    log_dir: Path = typer.Option(
        None,
        "--log-dir",
        help="Directory for the build log (overrides XCFORGE_LOG_DIR).",
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Echo every log line to the terminal."
    ),
) -> None:
    """Archive a scheme for device and simulator, then create the XCFramework."""
    settings = ForgeSettings()

    provider = XcodeProjectProvider()
    try:
        provider.load(project)
    except ProjectLoadError as exc:
        console.print(f"[red]{escape(exc.summary())}[/red]", highlight=False)
        raise typer.Exit(code=1) from exc

    if scheme is None:
        names = provider.sorted_configuration_names()
        if not names:
            console.print(
                "[red]No schemes found in the project.[/red]\n\n"
                "[dim]Share a scheme in Xcode (Manage Schemes > Shared) and try again.[/dim]"
            )
            raise typer.Exit(code=1)
        scheme = names[0]

    plan = BuildPlan.from_settings(settings)
    if toolchain is not None:
        plan = plan.model_copy(update={"toolchain_path": toolchain})

    orchestrator = BuildOrchestrator(provider, plan)
    renderer = BuildRenderer(console)
    tracker = StepTracker()

    with FileLogSink(log_dir or settings.log_dir) as sink:
        log_path = sink.start(scheme)
        orchestrator.subscribe_log(sink.accept)

        with BuildWorker(orchestrator) as worker:
            future = worker.submit(scheme)
            with Live(
                renderer.render_steps(tracker, scheme), console=console, refresh_per_second=8
            ) as live:
                for kind, event in worker.iter_events(future):
                    if kind == EventKind.PROGRESS:
                        tracker.apply(event)
                        live.update(renderer.render_steps(tracker, scheme))
                    elif verbose:
                        live.console.print(renderer.render_log_line(event))
                outcome = future.result()
                if not outcome.succeeded:
                    tracker.mark_failed()
                live.update(renderer.render_steps(tracker, scheme))

    console.print(renderer.render_outcome(outcome))
    console.print(f"[dim]Build log: {log_path}[/dim]", highlight=False)

    if not outcome.succeeded:
        raise typer.Exit(code=1)
