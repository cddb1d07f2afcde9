"""Process runner — one external command, streamed output, exit status.

The child gets no stdin and a single pipe for both stdout and stderr.  A
reader thread pushes every chunk to the listener as soon as it is read,
without waiting for a newline, so callers see tool output (prompts and
progress dots included) while the step is still running.  The last
``tail_lines`` lines are kept for the failure report.

A run ends when the child exits.  Helpers the child leaves behind may
keep the pipe open; once the child is gone the reader gets a short grace
period to drain what is already buffered and is then detached.
"""

from __future__ import annotations

import codecs
import logging
import os
import select
import subprocess
import threading
from collections import deque
from collections.abc import Sequence
from pathlib import Path
from typing import IO, Protocol, runtime_checkable

from xcforge.core.errors import LaunchError, ProcessFailedError

logger = logging.getLogger(__name__)

DEFAULT_TAIL_LINES = 50
READ_CHUNK_SIZE = 65536
POLL_INTERVAL = 0.05
EXIT_GRACE_SECONDS = 0.5


@runtime_checkable
class OutputListener(Protocol):
    """Receives process output chunks in the order they were produced.

    A chunk is whatever the pipe had available: part of a line, one line,
    or several lines.
    """

    def on_output(self, chunk: str) -> None:
        ...


@runtime_checkable
class CommandRunner(Protocol):
    """Anything that can run one toolchain command to completion.

    ``ProcessRunner`` is the real implementation; tests substitute fakes.
    Raises ``LaunchError`` or ``ProcessFailedError``; returns ``None`` on a
    zero exit status.
    """

    def run(
        self,
        command: Path,
        arguments: Sequence[str],
        working_directory: Path,
        listener: OutputListener | None = None,
        *,
        step_label: str = "",
    ) -> None:
        ...


class OutputTail:
    """Last *max_lines* lines of a chunked text stream.

    Chunks may end mid-line; the unfinished line is held until the next
    chunk completes it and still counts as a line in ``text()``.
    """

    def __init__(self, max_lines: int) -> None:
        self.max_lines = max_lines
        self._lines: deque[str] = deque(maxlen=max(max_lines, 1))
        self._partial = ""

    def feed(self, chunk: str) -> None:
        *complete, self._partial = (self._partial + chunk).split("\n")
        for line in complete:
            self._lines.append(line.rstrip("\r"))

    def text(self) -> str:
        if self.max_lines <= 0:
            return ""
        lines = list(self._lines)
        if self._partial:
            lines.append(self._partial.rstrip("\r"))
        return "\n".join(lines[-self.max_lines:])


class ProcessRunner:
    """Runs external commands with live, merged output.

    Parameters
    ----------
    tail_lines:
        How many trailing output lines a ``ProcessFailedError`` carries.
    exit_grace:
        Seconds the reader may keep draining after the child exits before
        it is detached from a pipe that descendants still hold open.
    """

    def __init__(
        self,
        tail_lines: int = DEFAULT_TAIL_LINES,
        exit_grace: float = EXIT_GRACE_SECONDS,
    ) -> None:
        self.tail_lines = tail_lines
        self.exit_grace = exit_grace

    def run(
        self,
        command: Path,
        arguments: Sequence[str],
        working_directory: Path,
        listener: OutputListener | None = None,
        *,
        step_label: str = "",
    ) -> None:
        """Run *command* and block until it exits.

        Raises
        ------
        LaunchError
            *command* is not absolute, *working_directory* is missing, or
            the process could not be spawned.  No output is produced.
        ProcessFailedError
            The process exited with a non-zero status.
        """
        command = Path(command)
        if not command.is_absolute():
            raise LaunchError(command, "executable path must be absolute")
        if not Path(working_directory).is_dir():
            raise LaunchError(
                command, f"working directory {working_directory} does not exist"
            )

        argv = [str(command), *arguments]
        try:
            process = subprocess.Popen(
                argv,
                cwd=str(working_directory),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
            )
        except OSError as exc:
            raise LaunchError(command, exc.strerror or str(exc)) from exc

        logger.debug("Spawned pid %s: %s", process.pid, argv)

        tail = OutputTail(self.tail_lines)
        stop = threading.Event()
        assert process.stdout is not None
        reader = threading.Thread(
            target=self._pump,
            args=(process.stdout, listener, tail, stop),
            name=f"xcforge-output-{process.pid}",
            daemon=True,
        )
        reader.start()
        status = process.wait()

        reader.join(timeout=self.exit_grace)
        if reader.is_alive():
            logger.debug(
                "pid %s exited but its output pipe is still open; detaching reader",
                process.pid,
            )
            stop.set()
            reader.join()

        logger.debug("pid %s exited with status %s", process.pid, status)
        if status != 0:
            raise ProcessFailedError(
                step_label or command.name, status, tail.text(), tool=command.name
            )

    @staticmethod
    def _pump(
        stream: IO[bytes],
        listener: OutputListener | None,
        tail: OutputTail,
        stop: threading.Event,
    ) -> None:
        """Relay every chunk from the merged pipe until EOF or *stop*."""
        fd = stream.fileno()
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        with stream:
            while not stop.is_set():
                ready, _, _ = select.select([fd], [], [], POLL_INTERVAL)
                if not ready:
                    continue
                data = os.read(fd, READ_CHUNK_SIZE)
                if not data:
                    break
                _relay(decoder.decode(data), listener, tail)
            _relay(decoder.decode(b"", final=True), listener, tail)


def _relay(chunk: str, listener: OutputListener | None, tail: OutputTail) -> None:
    if not chunk:
        return
    tail.feed(chunk)
    if listener is None:
        return
    try:
        listener.on_output(chunk)
    except Exception as exc:  # noqa: BLE001
        logger.error("Output listener failed: %s", exc)
