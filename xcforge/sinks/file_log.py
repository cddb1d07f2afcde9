"""File log sink — one log file per build, single writer.

Layout: {log_dir}/{sanitized scheme}-{timestamp}.log

Lines can arrive from the orchestrator thread and from the process
output reader thread at the same time; every write goes through one lock
so lines are never interleaved mid-line.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import IO

from xcforge.core.sanitizer import sanitize_for_filesystem
from xcforge.models.events import LogLine

logger = logging.getLogger(__name__)

HEADER_FORMAT = "ISO8601 [LEVEL] [Component] Message"


class FileLogSink:
    """Appends rendered ``LogLine`` events to a per-build log file.

    Parameters
    ----------
    log_dir:
        Directory for log files.  Created on ``start()``.
    """

    def __init__(self, log_dir: Path | str) -> None:
        self._log_dir = Path(log_dir).expanduser()
        self._lock = threading.Lock()
        self._file: IO[str] | None = None
        self._path: Path | None = None

    @property
    def sink_name(self) -> str:
        return "file_log"

    @property
    def current_path(self) -> Path | None:
        with self._lock:
            return self._path

    def start(self, configuration: str, now: datetime | None = None) -> Path:
        """Open a fresh log file for *configuration*, closing any previous one."""
        started = now or datetime.now(timezone.utc)
        stamp = started.strftime("%Y%m%dT%H%M%SZ")
        self._log_dir.mkdir(parents=True, exist_ok=True)
        path = self._log_dir / f"{sanitize_for_filesystem(configuration)}-{stamp}.log"

        header = "\n".join([
            "# xcforge build log",
            f"# Scheme: {configuration}",
            f"# Started: {started.isoformat()}",
            f"# Format: {HEADER_FORMAT}",
            "#",
            "",
        ])
        handle = path.open("w", encoding="utf-8", buffering=1)
        handle.write(header)

        with self._lock:
            if self._file is not None:
                self._file.close()
            self._file = handle
            self._path = path

        logger.debug("FileLogSink: writing %s", path)
        return path

    def accept(self, line: LogLine) -> None:
        """Append one rendered line; ignored until ``start()`` is called."""
        with self._lock:
            if self._file is None:
                return
            self._file.write(line.render() + "\n")

    def close(self) -> None:
        with self._lock:
            if self._file is not None:
                self._file.close()
            self._file = None

    def __enter__(self) -> FileLogSink:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
