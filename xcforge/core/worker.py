"""Background build worker.

Runs ``BuildOrchestrator.build()`` off the caller's thread on a
single-thread executor, so builds submitted to one worker never overlap.
Progress and log events are queued and handed back to the caller's own
thread through ``drain()`` / ``iter_events()``.
"""

from __future__ import annotations

import queue
from collections.abc import Iterator
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any

from xcforge.core.orchestrator import BuildOrchestrator
from xcforge.models.events import EventKind
from xcforge.models.outcome import BuildOutcome


class BuildWorker:
    """Serializes builds for one orchestrator on a dedicated thread.

    Usage
    -----
    >>> with BuildWorker(orchestrator) as worker:
    ...     future = worker.submit("Core")
    ...     for kind, event in worker.iter_events(future):
    ...         render(kind, event)
    ...     outcome = future.result()
    """

    def __init__(self, orchestrator: BuildOrchestrator) -> None:
        self.orchestrator = orchestrator
        self._events: queue.Queue[tuple[EventKind, Any]] = queue.Queue()
        self._executor = ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="xcforge-build"
        )
        self._progress_handler = lambda event: self._events.put((EventKind.PROGRESS, event))
        self._log_handler = lambda event: self._events.put((EventKind.LOG, event))
        orchestrator.subscribe_progress(self._progress_handler)
        orchestrator.subscribe_log(self._log_handler)

    def submit(self, configuration_name: str) -> Future[BuildOutcome]:
        """Queue a build; the future resolves to its ``BuildOutcome``."""
        return self._executor.submit(self.orchestrator.build, configuration_name)

    def drain(self, timeout: float | None = None) -> list[tuple[EventKind, Any]]:
        """Return every queued event, waiting up to *timeout* for the first."""
        events: list[tuple[EventKind, Any]] = []
        try:
            events.append(self._events.get(timeout=timeout))
        except queue.Empty:
            return events
        while True:
            try:
                events.append(self._events.get_nowait())
            except queue.Empty:
                return events

    def iter_events(
        self, future: Future[BuildOutcome], poll_interval: float = 0.1
    ) -> Iterator[tuple[EventKind, Any]]:
        """Yield events until *future* is done and the queue is empty."""
        while True:
            done = future.done()
            yield from self.drain(timeout=0 if done else poll_interval)
            if done and self._events.empty():
                return

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting builds and detach from the orchestrator."""
        self._executor.shutdown(wait=wait)
        self.orchestrator.bus.unsubscribe(EventKind.PROGRESS, self._progress_handler)
        self.orchestrator.bus.unsubscribe(EventKind.LOG, self._log_handler)

    def __enter__(self) -> BuildWorker:
        return self

    def __exit__(self, *exc: object) -> None:
        self.shutdown()
