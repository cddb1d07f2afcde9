"""Log emitter — turns narration and tool output into ``LogLine`` events.

Messages are split on newlines; every non-blank line is trimmed and
published on the ``log`` channel of the event bus.  A lock keeps the
lines of one message together when tool output and narration are
emitted from different threads.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from datetime import datetime, timezone

from xcforge.core.event_bus import EventBus
from xcforge.models.events import EventKind, LogLevel, LogLine

DEFAULT_SUBSYSTEM = "xcforge"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class LogEmitter:
    """Formats leveled, timestamped lines and forwards them to the bus.

    Parameters
    ----------
    bus:
        Event bus receiving ``LogLine`` events on ``EventKind.LOG``.
    subsystem:
        Default subsystem tag for narration.
    now:
        Clock used for line timestamps.
    """

    def __init__(
        self,
        bus: EventBus,
        subsystem: str = DEFAULT_SUBSYSTEM,
        *,
        now: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._bus = bus
        self._subsystem = subsystem
        self._now = now
        self._lock = threading.Lock()

    @property
    def subsystem(self) -> str:
        return self._subsystem

    def emit(
        self,
        message: str,
        level: LogLevel = LogLevel.INFO,
        subsystem: str | None = None,
    ) -> list[LogLine]:
        """Publish one line per non-blank line of *message*."""
        emitted: list[LogLine] = []
        with self._lock:
            for raw in message.splitlines():
                text = raw.strip()
                if not text:
                    continue
                line = LogLine(
                    timestamp=self._now(),
                    level=level,
                    subsystem=subsystem or self._subsystem,
                    message=text,
                )
                self._bus.publish(EventKind.LOG, line)
                emitted.append(line)
        return emitted

    def info(self, message: str) -> list[LogLine]:
        return self.emit(message, LogLevel.INFO)

    def debug(self, message: str) -> list[LogLine]:
        return self.emit(message, LogLevel.DEBUG)

    def warning(self, message: str) -> list[LogLine]:
        return self.emit(message, LogLevel.WARN)

    def error(self, message: str) -> list[LogLine]:
        return self.emit(message, LogLevel.ERROR)

    def output_listener(self, subsystem: str) -> CommandOutputListener:
        """Return a listener that logs tool output under *subsystem*."""
        return CommandOutputListener(self, subsystem)


class CommandOutputListener:
    """``OutputListener`` that relays process output at DEBUG level."""

    def __init__(self, emitter: LogEmitter, subsystem: str) -> None:
        self._emitter = emitter
        self.subsystem = subsystem

    def on_output(self, chunk: str) -> None:
        self._emitter.emit(chunk, LogLevel.DEBUG, self.subsystem)
