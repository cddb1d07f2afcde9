"""Build error taxonomy.

Every failure a run can end in is a ``BuildError`` subclass.  Each one
carries a stable ``kind`` string plus a human-readable ``description``
and ``remediation`` hint so callers can present it without knowing the
concrete type.
"""

from __future__ import annotations

from pathlib import Path


class BuildError(RuntimeError):
    """Base class for every terminal orchestration failure."""

    kind: str = "build_error"
    remediation: str = ""

    @property
    def description(self) -> str:
        return str(self)

    def summary(self) -> str:
        """Description and remediation joined the way an alert shows them."""
        parts = [self.description, self.remediation]
        return "\n\n".join(p for p in parts if p)


class ProjectNotLoadedError(BuildError):
    """No project root is known to the metadata provider."""

    kind = "project_not_loaded"
    remediation = "Select a project first."

    def __init__(self) -> None:
        super().__init__("No project loaded. Please open an .xcodeproj first.")


class ProjectLoadError(BuildError):
    """The project definition could not be opened."""

    kind = "project_load_failed"
    remediation = "Check that the path points to a readable .xcodeproj bundle."

    def __init__(self, path: Path | str, cause: str) -> None:
        self.path = Path(path)
        self.cause = cause
        super().__init__(f"Failed to open project at {self.path.name}: {cause}")


class ConfigurationNotFoundError(BuildError):
    """The requested scheme is not in the project's current list."""

    kind = "configuration_not_found"
    remediation = "Refresh the scheme list or choose another scheme."

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Scheme {name} not found in project.")


class WorkspaceCreationError(BuildError):
    """The per-run build directory could not be created."""

    kind = "workspace_creation_failed"
    remediation = "Check permissions and free space in the project directory."

    def __init__(self, path: Path, cause: str) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"Could not create build directory {path}: {cause}")


class LaunchError(BuildError):
    """The toolchain executable could not be started at all."""

    kind = "launch_failed"
    remediation = "Verify the Xcode command line tools are installed and selected."

    def __init__(self, command: Path | str, cause: str) -> None:
        self.command = str(command)
        self.cause = cause
        super().__init__(f"Could not launch {self.command}: {cause}")


class ProcessFailedError(BuildError):
    """The toolchain ran but exited non-zero."""

    kind = "process_failed"
    remediation = "Inspect the output tail and the build log for the first error."

    def __init__(
        self,
        step_label: str,
        exit_status: int,
        output_tail: str,
        *,
        tool: str = "toolchain",
    ) -> None:
        self.step_label = step_label
        self.exit_status = exit_status
        self.output_tail = output_tail
        self.tool = tool
        super().__init__(
            f"{step_label} failed: {tool} exited with status {exit_status}."
        )


class ProductNotFoundError(BuildError):
    """An archive step succeeded but the expected product is missing."""

    kind = "product_not_found"
    remediation = (
        "Make sure the scheme builds a framework product with "
        "SKIP_INSTALL=NO so it is copied into the archive."
    )

    def __init__(self, platform: str, expected_path: str) -> None:
        self.platform = platform
        self.expected_path = expected_path
        super().__init__(f"{platform} framework not found at {expected_path}")
