"""Main Typer application — imports and registers all CLI commands.

Entry point: ``xcforge`` (configured via pyproject.toml project.scripts).
"""

from __future__ import annotations

import logging

import typer
from rich.logging import RichHandler

from xcforge import __version__
from xcforge.cli.commands.build import build_cmd
from xcforge.cli.commands.resolve import resolve_cmd
from xcforge.cli.commands.schemes import schemes_cmd
from xcforge.config import ForgeSettings

app = typer.Typer(
    name="xcforge",
    help="xcforge: archive an Xcode scheme for two platforms and merge an XCFramework.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

app.command(name="schemes", help="List the schemes of a project.")(schemes_cmd)
app.command(name="build", help="Build an XCFramework for a scheme.")(build_cmd)
app.command(name="resolve", help="Resolve the product inside an archive.")(resolve_cmd)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"xcforge {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        None, "--log-level", help="Diagnostics level (overrides XCFORGE_LOG_LEVEL)."
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the version and exit.",
    ),
) -> None:
    """Configure diagnostics logging before any command runs."""
    level = (log_level or ForgeSettings().effective_log_level).upper()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(show_path=False, markup=False)],
        force=True,
    )


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
