"""Shared test fixtures for xcforge."""

from __future__ import annotations

import os
import stat
import sys
from collections.abc import Callable, Sequence
from datetime import datetime
from pathlib import Path
from typing import Any

import pytest

from xcforge.core.errors import LaunchError, ProcessFailedError
from xcforge.core.event_bus import EventBus
from xcforge.core.orchestrator import BuildOrchestrator
from xcforge.core.process_runner import OutputListener
from xcforge.core.project import StaticProjectProvider
from xcforge.models.events import EventKind, LogLine, ProgressEvent

FIXED_NOW = datetime(2026, 10, 18, 12, 0, 0)
FIXED_STAMP = "20261018-120000"


# ---------------------------------------------------------------------------
# Fake toolchain runner
# ---------------------------------------------------------------------------


class FakeRunner:
    """In-process stand-in for ``ProcessRunner``.

    Archive calls create ``<archivePath>.xcarchive/Products/Library/
    Frameworks/<product>.framework`` under the working directory; merge
    calls create the ``-output`` directory.

    Parameters
    ----------
    products:
        Product names to create per destination.  Destinations not listed
        get a single product named after the scheme.
    failures:
        ``step_label -> (exit_status, output_tail)`` for steps that fail.
    launch_error:
        If set, every call raises ``LaunchError`` with this cause.
    """

    def __init__(
        self,
        products: dict[str, list[str]] | None = None,
        failures: dict[str, tuple[int, str]] | None = None,
        launch_error: str | None = None,
    ) -> None:
        self.products = products or {}
        self.failures = failures or {}
        self.launch_error = launch_error
        self.calls: list[dict[str, Any]] = []

    def run(
        self,
        command: Path,
        arguments: Sequence[str],
        working_directory: Path,
        listener: OutputListener | None = None,
        *,
        step_label: str = "",
    ) -> None:
        args = list(arguments)
        self.calls.append({
            "command": command,
            "arguments": args,
            "cwd": working_directory,
            "step_label": step_label,
        })
        if self.launch_error is not None:
            raise LaunchError(command, self.launch_error)

        if listener is not None:
            listener.on_output(f"Running {args[0]}\n")

        if step_label in self.failures:
            status, tail = self.failures[step_label]
            if listener is not None:
                listener.on_output(tail + "\n")
            raise ProcessFailedError(step_label, status, tail, tool=command.name)

        if args[0] == "archive":
            scheme = _option(args, "-scheme")
            destination = _option(args, "-destination")
            archive = working_directory / f"{_option(args, '-archivePath')}.xcarchive"
            frameworks = archive / "Products" / "Library" / "Frameworks"
            frameworks.mkdir(parents=True, exist_ok=True)
            for name in self.products.get(destination, [scheme]):
                (frameworks / f"{name}.framework").mkdir()
        elif args[0] == "-create-xcframework":
            (working_directory / _option(args, "-output")).mkdir(parents=True)

        if listener is not None:
            listener.on_output("** SUCCEEDED **\n")

    @property
    def step_labels(self) -> list[str]:
        return [c["step_label"] for c in self.calls]


def _option(args: list[str], name: str) -> str:
    return args[args.index(name) + 1]


class EventRecorder:
    """Collects events published on an EventBus."""

    def __init__(self, bus: EventBus) -> None:
        self.progress: list[ProgressEvent] = []
        self.lines: list[LogLine] = []
        bus.subscribe(EventKind.PROGRESS, self.progress.append)
        bus.subscribe(EventKind.LOG, self.lines.append)

    @property
    def progress_tuples(self) -> list[tuple[int, int, str]]:
        return [(e.step_index, e.total_steps, e.label) for e in self.progress]

    def messages(self, level: str | None = None) -> list[str]:
        return [
            line.message
            for line in self.lines
            if level is None or line.level.value == level
        ]


# ---------------------------------------------------------------------------
# Project fixtures
# ---------------------------------------------------------------------------


def make_xcodeproj(
    root: Path,
    shared: Sequence[str] = ("Core", "UI"),
    user: dict[str, Sequence[str]] | None = None,
    name: str = "App",
) -> Path:
    """Create a minimal ``.xcodeproj`` bundle with scheme files."""
    project = root / f"{name}.xcodeproj"
    schemes_dir = project / "xcshareddata" / "xcschemes"
    schemes_dir.mkdir(parents=True)
    (project / "project.pbxproj").write_text("// !$*UTF8*$!\n")
    for scheme in shared:
        (schemes_dir / f"{scheme}.xcscheme").write_text("<Scheme/>\n")
    for username, names in (user or {}).items():
        user_dir = project / "xcuserdata" / f"{username}.xcuserdatad" / "xcschemes"
        user_dir.mkdir(parents=True)
        for scheme in names:
            (user_dir / f"{scheme}.xcscheme").write_text("<Scheme/>\n")
    return project


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """Provide a directory holding App.xcodeproj with schemes Core and UI."""
    make_xcodeproj(tmp_path)
    return tmp_path


@pytest.fixture
def provider(project_root: Path) -> StaticProjectProvider:
    """Provide a static provider for App.xcodeproj with {Core, UI}."""
    return StaticProjectProvider(project_root / "App.xcodeproj", {"Core", "UI"})


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    """Provide a clock frozen at 2026-10-18 12:00:00 local time."""
    return lambda: FIXED_NOW


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def make_orchestrator(
    provider: StaticProjectProvider,
    fixed_clock: Callable[[], datetime],
) -> Callable[..., tuple[BuildOrchestrator, EventRecorder]]:
    """Factory fixture: orchestrator wired to a fake runner and a recorder."""

    def _factory(
        runner: Any = None,
        provider_override: Any = None,
        **kwargs: Any,
    ) -> tuple[BuildOrchestrator, EventRecorder]:
        orch = BuildOrchestrator(
            provider_override or provider,
            runner=runner or FakeRunner(),
            clock=fixed_clock,
            **kwargs,
        )
        return orch, EventRecorder(orch.bus)

    return _factory


# ---------------------------------------------------------------------------
# Fake xcodebuild executable (real child processes)
# ---------------------------------------------------------------------------

FAKE_XCODEBUILD = '''\
import os
import sys

args = sys.argv[1:]


def opt(name):
    return args[args.index(name) + 1]


if args and args[0] == "archive":
    scheme = opt("-scheme")
    destination = opt("-destination")
    archive = opt("-archivePath")
    print(f"Archiving {scheme} for {destination}", flush=True)
    if os.environ.get("FAKE_XCODEBUILD_FAIL_DESTINATION") == destination:
        print("error: no such destination", file=sys.stderr, flush=True)
        sys.exit(65)
    product = os.environ.get("FAKE_XCODEBUILD_PRODUCT", scheme)
    framework = os.path.join(
        archive + ".xcarchive", "Products", "Library", "Frameworks", product + ".framework"
    )
    os.makedirs(framework, exist_ok=True)
    print("** ARCHIVE SUCCEEDED **", flush=True)
elif args and args[0] == "-create-xcframework":
    output = opt("-output")
    frameworks = [args[i + 1] for i, a in enumerate(args) if a == "-framework"]
    for framework in frameworks:
        if not os.path.isdir(framework):
            print(f"error: the path does not point to a valid framework: {framework}",
                  file=sys.stderr, flush=True)
            sys.exit(1)
    os.makedirs(output)
    print(f"xcframework successfully written out to: {os.path.abspath(output)}", flush=True)
else:
    print("usage: xcodebuild", file=sys.stderr, flush=True)
    sys.exit(64)
'''


@pytest.fixture
def fake_xcodebuild(tmp_path: Path) -> Path:
    """Provide an executable named ``xcodebuild`` backed by this interpreter."""
    bin_dir = tmp_path / "toolchain"
    bin_dir.mkdir()
    script = bin_dir / "xcodebuild"
    script.write_text(f"#!{sys.executable}\n{FAKE_XCODEBUILD}")
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return script


@pytest.fixture
def clean_fake_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove fake-toolchain switches inherited from the environment."""
    for key in list(os.environ):
        if key.startswith("FAKE_XCODEBUILD_") or key.startswith("XCFORGE_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def make_runner() -> type[FakeRunner]:
    """Factory fixture: ``make_runner(products=..., failures=...)``."""
    return FakeRunner


@pytest.fixture
def xcodeproj_factory() -> Callable[..., Path]:
    """Factory fixture: ``xcodeproj_factory(root, shared=..., user=...)``."""
    return make_xcodeproj
