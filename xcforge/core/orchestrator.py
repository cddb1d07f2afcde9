"""Build orchestrator — archives a scheme twice and merges an XCFramework.

The orchestrator wires together the ProcessRunner, ArchiveProductResolver,
LogEmitter and EventBus into one run:

1. validate preconditions (project loaded, scheme known)
2. claim a fresh workspace under ``<root>/build/runs``
3. archive for the primary platform
4. archive for the companion platform
5. resolve the product inside each archive
6. merge both products into the bundle

Steps are strictly sequential.  The first failure ends the run; nothing
is retried and the workspace is left on disk for inspection.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from xcforge.core.errors import (
    BuildError,
    ConfigurationNotFoundError,
    ProcessFailedError,
    ProductNotFoundError,
    ProjectNotLoadedError,
    WorkspaceCreationError,
)
from xcforge.core.event_bus import EventBus, Handler
from xcforge.core.log_emitter import LogEmitter
from xcforge.core.process_runner import CommandRunner, ProcessRunner
from xcforge.core.project import ProjectMetadataProvider
from xcforge.core.resolver import ArchiveProductResolver
from xcforge.core.run_state import RunStateMachine
from xcforge.core.toolchain import (
    archive_arguments,
    create_bundle_arguments,
    format_command,
)
from xcforge.models.config import BuildPlan, PlatformTarget
from xcforge.models.events import EventKind, ProgressEvent
from xcforge.models.outcome import BuildOutcome, BuildWorkspace, ProjectSnapshot
from xcforge.models.states import (
    ARCHIVE_COMPANION,
    ARCHIVE_PRIMARY,
    BUILD_STEPS,
    COMPLETE_LABEL,
    MERGE_BUNDLE,
    BuildState,
    StepDefinition,
)

logger = logging.getLogger(__name__)

WORKSPACE_TIMESTAMP_FORMAT = "%Y%m%d-%H%M%S"
MAX_WORKSPACE_ATTEMPTS = 100


class BuildOrchestrator:
    """Sequences the toolchain invocations for one scheme at a time.

    Not safe for overlapping ``build()`` calls; serialize them (see
    ``BuildWorker``) or use one orchestrator per concurrent build.

    Parameters
    ----------
    provider:
        Source of the project location and scheme list.  Snapshotted once
        at the start of every run.
    plan:
        Toolchain location, platform pair and extensions.
    runner:
        Command runner; a ``ProcessRunner`` by default.
    bus:
        Event bus for progress and log events.  Created if not provided.
    clock:
        Local-time clock used for the workspace timestamp.
    """

    def __init__(
        self,
        provider: ProjectMetadataProvider,
        plan: BuildPlan | None = None,
        *,
        runner: CommandRunner | None = None,
        bus: EventBus | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.provider = provider
        self.plan = plan or BuildPlan()
        self.bus = bus or EventBus()
        self.emitter = LogEmitter(self.bus)
        self.runner = runner or ProcessRunner(tail_lines=self.plan.output_tail_lines)
        self.resolver = ArchiveProductResolver(
            self.emitter,
            archive_extension=self.plan.archive_extension,
            product_extension=self.plan.product_extension,
        )
        self._clock = clock

        self.run_state = RunStateMachine()
        self.last_outcome: BuildOutcome | None = None

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe_progress(self, handler: Handler) -> None:
        self.bus.subscribe(EventKind.PROGRESS, handler)

    def subscribe_log(self, handler: Handler) -> None:
        self.bus.subscribe(EventKind.LOG, handler)

    # ------------------------------------------------------------------
    # Run lifecycle
    # ------------------------------------------------------------------

    def build(self, configuration_name: str) -> BuildOutcome:
        """Run the full sequence for *configuration_name*.

        Every ``BuildError`` becomes a failed ``BuildOutcome``; this
        method only raises for programming errors.
        """
        self.run_state = RunStateMachine()
        self.run_state.transition(BuildState.VALIDATING)
        workspace: BuildWorkspace | None = None

        try:
            snapshot = self.validate(configuration_name)
            self.run_state.transition(BuildState.PREPARING_WORKSPACE)
            workspace = self.prepare_workspace(snapshot, configuration_name)
            bundle_path = self._run_steps(snapshot, workspace)
        except BuildError as exc:
            self.run_state.fail(label=exc.kind)
            self.emitter.error(exc.description)
            outcome = BuildOutcome.failure(
                configuration_name,
                exc,
                workspace.root if workspace else None,
            )
        except Exception:
            self.run_state.fail(label="internal_error")
            raise
        else:
            outcome = BuildOutcome.success(configuration_name, bundle_path, workspace.root)

        self.last_outcome = outcome
        return outcome

    def validate(self, configuration_name: str) -> ProjectSnapshot:
        """Check preconditions in order; first failure wins."""
        root = self.provider.current_project_root()
        project_path = self.provider.current_project_path()
        if root is None or project_path is None or root == Path(""):
            raise ProjectNotLoadedError()

        configurations = frozenset(self.provider.list_configuration_names())
        if configuration_name not in configurations:
            raise ConfigurationNotFoundError(configuration_name)

        return ProjectSnapshot(
            project_path=project_path,
            root=root,
            configurations=configurations,
        )

    def prepare_workspace(
        self, snapshot: ProjectSnapshot, configuration_name: str
    ) -> BuildWorkspace:
        """Create ``<root>/<runs_dir>/<scheme>-<timestamp>`` for this run.

        If a run in the same second already claimed that name, ``-2``,
        ``-3``, ... are tried until a fresh directory is created.
        """
        runs_dir = snapshot.root / self.plan.runs_dir
        try:
            runs_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise WorkspaceCreationError(runs_dir, exc.strerror or str(exc)) from exc

        stamp = self._clock().strftime(WORKSPACE_TIMESTAMP_FORMAT)
        base_name = f"{configuration_name}-{stamp}"

        for attempt in range(1, MAX_WORKSPACE_ATTEMPTS + 1):
            name = base_name if attempt == 1 else f"{base_name}-{attempt}"
            relative_root = self.plan.runs_dir / name
            try:
                (snapshot.root / relative_root).mkdir(parents=True, exist_ok=False)
            except FileExistsError:
                continue
            except OSError as exc:
                raise WorkspaceCreationError(
                    snapshot.root / relative_root, exc.strerror or str(exc)
                ) from exc
            logger.debug("Claimed workspace %s", snapshot.root / relative_root)
            return BuildWorkspace(
                project_root=snapshot.root,
                relative_root=relative_root,
                configuration=configuration_name,
            )

        raise WorkspaceCreationError(
            runs_dir / base_name,
            f"{MAX_WORKSPACE_ATTEMPTS} workspaces already exist for this timestamp",
        )

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _run_steps(self, snapshot: ProjectSnapshot, workspace: BuildWorkspace) -> Path:
        scheme = workspace.configuration
        root = snapshot.root
        primary_archive = workspace.relative_archive_base(self.plan.primary)
        companion_archive = workspace.relative_archive_base(self.plan.companion)

        self._run_step(
            ARCHIVE_PRIMARY,
            archive_arguments(snapshot.project_path, scheme, self.plan.primary, primary_archive),
            root,
        )
        self._run_step(
            ARCHIVE_COMPANION,
            archive_arguments(snapshot.project_path, scheme, self.plan.companion, companion_archive),
            root,
        )

        # Product name may differ from the scheme name
        self.run_state.transition(BuildState.RESOLVING)
        primary_product = self._resolve_product(self.plan.primary, primary_archive, scheme, root)
        companion_product = self._resolve_product(
            self.plan.companion, companion_archive, scheme, root
        )

        bundle = workspace.relative_bundle_path(self.plan.bundle_extension)
        self._run_step(
            MERGE_BUNDLE,
            create_bundle_arguments(primary_product, companion_product, bundle),
            root,
        )

        self._publish_progress(len(BUILD_STEPS), COMPLETE_LABEL)
        self.run_state.transition(BuildState.SUCCEEDED, label=COMPLETE_LABEL)
        return root / bundle

    def _run_step(self, step: StepDefinition, arguments: list[str], cwd: Path) -> None:
        self.run_state.transition(
            BuildState.RUNNING_STEP, step_index=step.index, label=step.label
        )
        self._publish_progress(step.index, step.label)
        self.emitter.info(
            f"{step.label} command: {format_command(self.plan.toolchain_name, arguments)}"
        )

        started = time.monotonic()
        listener = self.emitter.output_listener(self.plan.toolchain_name)
        try:
            self.runner.run(
                self.plan.toolchain_path, arguments, cwd, listener, step_label=step.label
            )
        except ProcessFailedError as exc:
            if exc.step_label == step.label:
                raise
            raise ProcessFailedError(
                step.label, exc.exit_status, exc.output_tail, tool=exc.tool
            ) from exc

        elapsed = time.monotonic() - started
        self.emitter.info(f"{step.label} completed in {elapsed:.1f} seconds")

    def _resolve_product(
        self,
        platform: PlatformTarget,
        archive_base: Path,
        scheme: str,
        root: Path,
    ) -> str:
        relative = self.resolver.resolve(archive_base, scheme, root)
        if not (root / relative).exists():
            raise ProductNotFoundError(platform.name, relative)
        self.emitter.info(f"Resolved framework path for {platform.name}: {relative}")
        return relative

    def _publish_progress(self, step_index: int, label: str) -> None:
        event = ProgressEvent(
            step_index=step_index,
            total_steps=len(BUILD_STEPS),
            label=label,
        )
        self.bus.publish(EventKind.PROGRESS, event)
