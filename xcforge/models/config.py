"""Build plan models — platforms, extensions and toolchain location."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

if TYPE_CHECKING:
    from xcforge.config import ForgeSettings


class PlatformTarget(BaseModel):
    """One platform variant a scheme is archived for."""

    model_config = ConfigDict(frozen=True)

    name: str  # human readable, e.g. "iOS Simulator"
    destination: str  # value passed to -destination
    suffix: str  # appended to the archive name, e.g. "iOS-Simulator"


class BuildPlan(BaseModel):
    """Everything the orchestrator needs besides the project itself.

    The defaults reproduce the classic iOS device + simulator
    XCFramework recipe.
    """

    model_config = ConfigDict(frozen=True)

    toolchain_path: Path = Path("/usr/bin/xcodebuild")
    runs_dir: Path = Path("build/runs")
    primary: PlatformTarget = PlatformTarget(
        name="iOS",
        destination="generic/platform=iOS",
        suffix="iOS",
    )
    companion: PlatformTarget = PlatformTarget(
        name="iOS Simulator",
        destination="generic/platform=iOS Simulator",
        suffix="iOS-Simulator",
    )
    archive_extension: str = "xcarchive"
    product_extension: str = "framework"
    bundle_extension: str = "xcframework"
    output_tail_lines: int = 50

    @classmethod
    def from_settings(cls, settings: ForgeSettings) -> BuildPlan:
        """Derive a plan from environment-driven settings."""
        return cls(
            toolchain_path=settings.toolchain_path,
            runs_dir=settings.runs_dir,
            primary=PlatformTarget(
                name=settings.primary_platform_name,
                destination=settings.primary_destination,
                suffix=settings.primary_suffix,
            ),
            companion=PlatformTarget(
                name=settings.companion_platform_name,
                destination=settings.companion_destination,
                suffix=settings.companion_suffix,
            ),
            output_tail_lines=settings.output_tail_lines,
        )

    @property
    def toolchain_name(self) -> str:
        return self.toolchain_path.name
