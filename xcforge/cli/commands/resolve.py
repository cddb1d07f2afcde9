"""``xcforge resolve`` — run the archive product resolver on its own."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from xcforge.core.event_bus import EventBus
from xcforge.core.log_emitter import LogEmitter
from xcforge.core.resolver import ArchiveProductResolver
from xcforge.models.events import EventKind, LogLine

console = Console()


def resolve_cmd(
    archive_root: str = typer.Argument(
        ..., help="Archive path without extension, relative to --base."
    ),
    product_name: str = typer.Argument(..., help="Expected product (scheme) name."),
    base: Path = typer.Option(
        Path("."), "--base", "-b", help="Directory the archive path is relative to."
    ),
) -> None:
    """Show which product the resolver would pick inside an archive."""
    bus = EventBus()
    bus.subscribe(EventKind.LOG, _print_line)
    resolver = ArchiveProductResolver(LogEmitter(bus))

    chosen = resolver.resolve(archive_root, product_name, base)
    console.print(chosen, markup=False, highlight=False)


def _print_line(line: LogLine) -> None:
    console.print(
        f"{line.level.value}: {line.message}", style="dim", markup=False, highlight=False
    )
