"""Per-run workspace and terminal outcome models."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict

from xcforge.core.errors import BuildError
from xcforge.models.config import PlatformTarget


class ProjectSnapshot(BaseModel):
    """What the metadata provider reported when a run started."""

    model_config = ConfigDict(frozen=True)

    project_path: Path
    root: Path
    configurations: frozenset[str]


class BuildWorkspace(BaseModel):
    """Directory layout of one orchestration run.

    ``root`` is absolute; the ``relative_*`` helpers give the paths as
    passed to the toolchain, which always runs with the project root as
    its working directory.
    """

    model_config = ConfigDict(frozen=True)

    project_root: Path
    relative_root: Path
    configuration: str

    @property
    def root(self) -> Path:
        return self.project_root / self.relative_root

    @property
    def relative_archives_dir(self) -> Path:
        return self.relative_root / "archives"

    def relative_archive_base(self, platform: PlatformTarget) -> Path:
        """Archive path without extension, as passed to ``-archivePath``."""
        return self.relative_archives_dir / f"{self.configuration}-{platform.suffix}"

    def relative_bundle_path(self, bundle_extension: str) -> Path:
        return self.relative_root / f"{self.configuration}.{bundle_extension}"


class BuildOutcome(BaseModel):
    """Terminal result of one run: a bundle path or the first error."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    configuration: str
    bundle_path: Path | None = None
    error: BuildError | None = None
    workspace: Path | None = None

    @classmethod
    def success(
        cls, configuration: str, bundle_path: Path, workspace: Path
    ) -> BuildOutcome:
        return cls(
            configuration=configuration,
            bundle_path=bundle_path,
            workspace=workspace,
        )

    @classmethod
    def failure(
        cls, configuration: str, error: BuildError, workspace: Path | None = None
    ) -> BuildOutcome:
        return cls(configuration=configuration, error=error, workspace=workspace)

    @property
    def succeeded(self) -> bool:
        return self.error is None and self.bundle_path is not None
