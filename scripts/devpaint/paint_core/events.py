"""Lifecycle event names and the single-queue event bus."""

from __future__ import annotations

import logging
import queue
import threading
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable

logger = logging.getLogger(__name__)

FILE_BUILD_TOGGLE = "file-build-toggle"
WORKER_START = "worker-start"
WORKER_MESSAGE = "worker-message"
WORKER_UPDATE = "worker-update"
WORKER_COMPLETE = "worker-complete"
WORKER_RESET = "worker-reset"
CONSOLE_LOG = "console-log"
INSTALL_START = "install-start"
INSTALL_COMPLETE = "install-complete"
MISSING_MODULE = "missing-module"
SERVER_START = "server-start"

# Re-enters the queue after the install-complete hold delay.
INSTALL_CLEAR = "install-clear"

EVENT_NAMES = (
    FILE_BUILD_TOGGLE,
    WORKER_START,
    WORKER_MESSAGE,
    WORKER_UPDATE,
    WORKER_COMPLETE,
    WORKER_RESET,
    CONSOLE_LOG,
    INSTALL_START,
    INSTALL_COMPLETE,
    MISSING_MODULE,
    SERVER_START,
)

Handler = Callable[[dict[str, Any]], None]


@dataclass
class Event:
    name: str
    payload: dict[str, Any] = field(default_factory=dict)


class EventBus:
    """Publish/subscribe channel backed by one FIFO queue.

    ``emit`` and ``schedule`` are safe to call from any thread; handlers
    only ever run on the thread that calls ``process``/``run``, one event
    at a time, so subscribers never see concurrent mutation.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, list[Handler]] = defaultdict(list)
        self._queue: queue.Queue[Event] = queue.Queue()
        self._timers: list[threading.Timer] = []
        self._lock = threading.Lock()

    def on(self, name: str, handler: Handler) -> None:
        self._handlers[name].append(handler)

    def emit(self, name: str, payload: dict[str, Any] | None = None) -> None:
        self._queue.put(Event(name, dict(payload or {})))

    def schedule(self, delay: float, name: str, payload: dict[str, Any] | None = None) -> threading.Timer:
        """Emit ``name`` after ``delay`` seconds. Not cancellable by callers."""
        timer = threading.Timer(delay, self.emit, args=(name, payload))
        timer.daemon = True
        with self._lock:
            self._timers = [t for t in self._timers if t.is_alive()]
            self._timers.append(timer)
        timer.start()
        return timer

    @property
    def pending_timers(self) -> int:
        with self._lock:
            return sum(1 for t in self._timers if t.is_alive())

    @property
    def idle(self) -> bool:
        return self._queue.empty() and self.pending_timers == 0

    def dispatch(self, event: Event) -> None:
        handlers = self._handlers.get(event.name)
        if not handlers:
            logger.debug("no subscribers for %s event", event.name)
            return
        for handler in list(handlers):
            try:
                handler(event.payload)
            except Exception:
                logger.exception("handler for %s event failed", event.name)

    def process(self, timeout: float | None = None) -> bool:
        """Dispatch the next queued event, waiting up to ``timeout`` seconds."""
        try:
            event = self._queue.get(block=timeout is None or timeout > 0, timeout=timeout)
        except queue.Empty:
            return False
        self.dispatch(event)
        return True

    def process_pending(self) -> int:
        count = 0
        while self.process(timeout=0):
            count += 1
        return count

    def run(self, stop: threading.Event, poll_interval: float = 0.1, on_idle: Callable[[], None] | None = None) -> None:
        """Process events until ``stop`` is set.

        ``on_idle`` runs between queue polls on the same thread, which is
        where keyboard polling happens.
        """
        while not stop.is_set():
            self.process(timeout=poll_interval)
            if on_idle is not None:
                on_idle()
