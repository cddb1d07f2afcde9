"""``xcforge schemes`` — list the schemes of a project."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from xcforge.core.errors import ProjectLoadError
from xcforge.core.project import XcodeProjectProvider

console = Console()


def schemes_cmd(
    project: Path = typer.Argument(..., help="Path to the .xcodeproj bundle."),
) -> None:
    """List the schemes (build configurations) a project declares."""
    provider = XcodeProjectProvider()
    try:
        provider.load(project)
    except ProjectLoadError as exc:
        console.print(f"[red]{escape(exc.summary())}[/red]")
        raise typer.Exit(code=1) from exc

    names = provider.sorted_configuration_names()
    if not names:
        console.print("[dim]No schemes found.[/dim]")
        return

    table = Table(title=f"Schemes in {provider.current_project_path().name}")
    table.add_column("Scheme", style="cyan")
    for name in names:
        table.add_row(name)
    console.print(table)
