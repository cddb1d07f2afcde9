"""Argument shapes for the two toolchain invocations."""

from __future__ import annotations

import shlex
from collections.abc import Sequence
from pathlib import Path, PurePath

from xcforge.models.config import PlatformTarget

ARCHIVE_BUILD_SETTINGS: tuple[str, ...] = (
    "SKIP_INSTALL=NO",
    "BUILD_LIBRARY_FOR_DISTRIBUTION=YES",
)


def archive_arguments(
    project_path: Path,
    scheme: str,
    platform: PlatformTarget,
    archive_path: PurePath,
) -> list[str]:
    """``xcodebuild archive`` for one platform; *archive_path* has no extension."""
    return [
        "archive",
        "-project", str(project_path),
        "-scheme", scheme,
        "-destination", platform.destination,
        "-archivePath", str(archive_path),
        *ARCHIVE_BUILD_SETTINGS,
    ]


def create_bundle_arguments(
    primary_product: str,
    companion_product: str,
    output: PurePath,
) -> list[str]:
    """``xcodebuild -create-xcframework`` merging the two products."""
    return [
        "-create-xcframework",
        "-framework", primary_product,
        "-framework", companion_product,
        "-output", str(output),
    ]


def format_command(tool: str, arguments: Sequence[str]) -> str:
    """Shell-quoted command line for narration."""
    return shlex.join([tool, *arguments])
