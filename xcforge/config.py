"""Runtime configuration — env-driven.

All settings can be overridden via XCFORGE_* environment variables or a
.env file in the working directory.

Examples
--------
Point at a non-default Xcode::

    export XCFORGE_TOOLCHAIN_PATH=/Applications/Xcode-beta.app/Contents/Developer/usr/bin/xcodebuild

Build for macOS + Mac Catalyst instead of device + simulator::

    XCFORGE_PRIMARY_PLATFORM_NAME=macOS
    XCFORGE_PRIMARY_DESTINATION=generic/platform=macOS
    XCFORGE_PRIMARY_SUFFIX=macOS
"""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class ForgeSettings(BaseSettings):
    """Settings with environment variable overrides."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="XCFORGE_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Runtime environment
    environment: str = "development"
    log_level: str = "INFO"
    debug: bool = False

    # Toolchain and layout
    toolchain_path: Path = Path("/usr/bin/xcodebuild")
    runs_dir: Path = Path("build/runs")
    log_dir: Path = Path(".xcforge/logs")
    output_tail_lines: int = 50

    # Platform pair
    primary_platform_name: str = "iOS"
    primary_destination: str = "generic/platform=iOS"
    primary_suffix: str = "iOS"
    companion_platform_name: str = "iOS Simulator"
    companion_destination: str = "generic/platform=iOS Simulator"
    companion_suffix: str = "iOS-Simulator"

    @property
    def effective_log_level(self) -> str:
        """DEBUG when debug mode is on, otherwise the configured level."""
        return "DEBUG" if self.debug else self.log_level.upper()
