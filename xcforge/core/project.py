"""Project metadata providers.

The orchestrator only needs three facts about a project: where it lives,
the project file to hand to ``-project``, and which scheme names exist.
``ProjectMetadataProvider`` captures exactly that; concrete providers
either read an ``.xcodeproj`` bundle or hold fixed values.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Protocol, runtime_checkable

from xcforge.core.errors import ProjectLoadError

logger = logging.getLogger(__name__)

PROJECT_SUFFIX = ".xcodeproj"
SCHEME_SUFFIX = ".xcscheme"


@runtime_checkable
class ProjectMetadataProvider(Protocol):
    """Capability interface consumed by the orchestrator."""

    def current_project_root(self) -> Path | None:
        """Base directory of the loaded project, or ``None``."""
        ...

    def current_project_path(self) -> Path | None:
        """Project file passed to the toolchain, or ``None``."""
        ...

    def list_configuration_names(self) -> set[str]:
        """Scheme names of the loaded project (empty if none loaded)."""
        ...


class StaticProjectProvider:
    """Provider with fixed answers — scripting and test doubles.

    Parameters
    ----------
    project_path:
        Project file; its parent directory is the project root.
        ``None`` models "no project loaded".
    configurations:
        Scheme names to report.
    """

    def __init__(
        self,
        project_path: Path | None,
        configurations: Iterable[str] = (),
    ) -> None:
        self._project_path = Path(project_path) if project_path else None
        self._configurations = set(configurations)

    def current_project_root(self) -> Path | None:
        return self._project_path.parent if self._project_path else None

    def current_project_path(self) -> Path | None:
        return self._project_path

    def list_configuration_names(self) -> set[str]:
        if self._project_path is None:
            return set()
        return set(self._configurations)


class XcodeProjectProvider:
    """Reads scheme names from an ``.xcodeproj`` bundle on disk.

    Shared schemes live in ``xcshareddata/xcschemes``; per-user schemes in
    ``xcuserdata/<user>.xcuserdatad/xcschemes``.  Only file names are
    read.  Nothing is loaded until ``load()`` succeeds.
    """

    def __init__(self) -> None:
        self._project_path: Path | None = None

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self, path: Path | str) -> Path:
        """Load the project at *path*, replacing any previous one.

        Raises ``ProjectLoadError`` if *path* is not an ``.xcodeproj``
        directory.  Returns the resolved project path.
        """
        candidate = Path(path).expanduser()
        if candidate.suffix != PROJECT_SUFFIX:
            raise ProjectLoadError(candidate, f"not a {PROJECT_SUFFIX} bundle")
        if not candidate.is_dir():
            raise ProjectLoadError(candidate, "no such project directory")

        self._project_path = candidate.resolve()
        logger.info("Loaded project %s", self._project_path)
        return self._project_path

    def unload(self) -> None:
        self._project_path = None

    @property
    def is_loaded(self) -> bool:
        return self._project_path is not None

    # ------------------------------------------------------------------
    # ProjectMetadataProvider
    # ------------------------------------------------------------------

    def current_project_root(self) -> Path | None:
        return self._project_path.parent if self._project_path else None

    def current_project_path(self) -> Path | None:
        return self._project_path

    def list_configuration_names(self) -> set[str]:
        if self._project_path is None:
            return set()
        return {p.stem for p in self._scheme_files(self._project_path)}

    def sorted_configuration_names(self) -> list[str]:
        return sorted(self.list_configuration_names())

    @staticmethod
    def _scheme_files(project_path: Path) -> list[Path]:
        files = list((project_path / "xcshareddata" / "xcschemes").glob(f"*{SCHEME_SUFFIX}"))
        files.extend(
            (project_path / "xcuserdata").glob(f"*.xcuserdatad/xcschemes/*{SCHEME_SUFFIX}")
        )
        return files
