"""Event router: the only code that mutates DashboardState."""

from __future__ import annotations

import logging
import os
from numbers import Real
from typing import Any, Callable

from paint_core import events
from paint_core.events import EventBus
from paint_core.formatting import format_args, relative_path
from paint_core.models import (
    DEFAULT_START_PHASE,
    DONE_PHASE,
    DashboardState,
    MissingModulePrompt,
    WorkerError,
    WorkerState,
)

logger = logging.getLogger(__name__)

INSTALL_HOLD_SECONDS = 2.0
SKIPPED_INSTALL_PREFIX = "[404] "

Scheduler = Callable[[float, str, dict[str, Any]], Any]


class MalformedEvent(ValueError):
    """Payload missing a required field or carrying the wrong type."""


def _require(payload: dict[str, Any], key: str, kind: type | tuple[type, ...]) -> Any:
    if key not in payload:
        raise MalformedEvent(f"missing field {key!r}")
    value = payload[key]
    kinds = kind if isinstance(kind, tuple) else (kind,)
    # bool is an int subclass; only accept it where asked for
    if not isinstance(value, kinds) or (isinstance(value, bool) and bool not in kinds):
        raise MalformedEvent(f"field {key!r} has type {type(value).__name__}")
    return value


def _phase(payload: dict[str, Any]) -> tuple[str, str] | None:
    value = payload.get("phase")
    if value is None:
        return None
    if isinstance(value, (list, tuple)) and len(value) == 2 and all(isinstance(v, str) for v in value):
        return (value[0], value[1])
    raise MalformedEvent("field 'phase' must be a (label, color) pair")


def _worker_error(value: Any) -> BaseException | None:
    if value is None:
        return None
    if isinstance(value, BaseException):
        return value
    if isinstance(value, dict):
        message = value.get("message") or value.get("msg") or str(value)
        return WorkerError(str(message))
    return WorkerError(str(value))


class EventRouter:
    """Applies lifecycle events to a DashboardState and repaints after each.

    Every rule is synchronous and touches one aspect of the state. Payloads
    are checked on the way in; malformed ones are logged and dropped
    without a repaint.
    """

    def __init__(
        self,
        state: DashboardState,
        repaint: Callable[[], None],
        *,
        scheduler: Scheduler | None = None,
        install_hold_seconds: float = INSTALL_HOLD_SECONDS,
        cwd: str | None = None,
    ) -> None:
        self.state = state
        self.repaint = repaint
        self.scheduler = scheduler
        self.install_hold_seconds = install_hold_seconds
        self.cwd = cwd or os.getcwd()
        self.rules: dict[str, Callable[[dict[str, Any]], None]] = {
            events.FILE_BUILD_TOGGLE: self.on_file_build_toggle,
            events.WORKER_START: self.on_worker_start,
            events.WORKER_MESSAGE: self.on_worker_message,
            events.WORKER_UPDATE: self.on_worker_update,
            events.WORKER_COMPLETE: self.on_worker_complete,
            events.WORKER_RESET: self.on_worker_reset,
            events.CONSOLE_LOG: self.on_console_log,
            events.INSTALL_START: self.on_install_start,
            events.INSTALL_COMPLETE: self.on_install_complete,
            events.INSTALL_CLEAR: self.on_install_clear,
            events.MISSING_MODULE: self.on_missing_module,
            events.SERVER_START: self.on_server_start,
        }

    def attach(self, bus: EventBus) -> None:
        if self.scheduler is None:
            self.scheduler = bus.schedule
        for name in self.rules:
            bus.on(name, self._handler(name))

    def _handler(self, name: str) -> Callable[[dict[str, Any]], None]:
        def handle(payload: dict[str, Any]) -> None:
            self.apply(name, payload)

        return handle

    def apply(self, name: str, payload: dict[str, Any] | None = None) -> bool:
        """Run the rule for ``name`` then repaint. Returns False if dropped."""
        rule = self.rules.get(name)
        if rule is None:
            logger.debug("ignoring unknown event %s", name)
            return False
        payload = payload if payload is not None else {}
        if not isinstance(payload, dict):
            logger.warning("dropping %s event: payload is %s, not an object", name, type(payload).__name__)
            return False
        try:
            rule(payload)
        except MalformedEvent as exc:
            logger.warning("dropping malformed %s event: %s", name, exc)
            return False
        self.repaint()
        return True

    def _worker(self, payload: dict[str, Any]) -> tuple[str, WorkerState]:
        worker_id = _require(payload, "id", str)
        return worker_id, self.state.ensure_worker(worker_id)

    def on_file_build_toggle(self, payload: dict[str, Any]) -> None:
        path = relative_path(_require(payload, "id", str), self.cwd)
        if _require(payload, "isBuilding", bool):
            self.state.active_file_builds.add(path)
        else:
            self.state.active_file_builds.discard(path)

    def on_worker_start(self, payload: dict[str, Any]) -> None:
        phase = _phase(payload)
        _, worker = self._worker(payload)
        worker.phase = phase or DEFAULT_START_PHASE

    def on_worker_message(self, payload: dict[str, Any]) -> None:
        msg = _require(payload, "msg", str)
        _, worker = self._worker(payload)
        worker.output += msg

    def on_worker_update(self, payload: dict[str, Any]) -> None:
        phase = _phase(payload)
        _, worker = self._worker(payload)
        if phase is not None:
            worker.phase = phase

    def on_worker_complete(self, payload: dict[str, Any]) -> None:
        error = _worker_error(payload.get("error"))
        _, worker = self._worker(payload)
        worker.phase = DONE_PHASE
        worker.done = True
        if worker.error is None:
            worker.error = error

    def on_worker_reset(self, payload: dict[str, Any]) -> None:
        worker_id, _ = self._worker(payload)
        self.state.workers[worker_id] = WorkerState()

    def on_console_log(self, payload: dict[str, Any]) -> None:
        level = _require(payload, "level", str)
        args = _require(payload, "args", (list, tuple))
        message = format_args(args)
        if self.state.is_installing:
            if not message.startswith(SKIPPED_INSTALL_PREFIX):
                self.state.install_output += message
        else:
            self.state.console_output += f"[{level}] {message}\n"

    def on_install_start(self, payload: dict[str, Any]) -> None:
        self.state.is_installing = True
        self.state.install_output = ""

    def on_install_complete(self, payload: dict[str, Any]) -> None:
        # The clear is not cancelled by a later install-start; it blanks
        # whatever is on screen when it fires.
        if self.scheduler is None:
            self.on_install_clear({})
            return
        self.scheduler(self.install_hold_seconds, events.INSTALL_CLEAR, {})

    def on_install_clear(self, payload: dict[str, Any]) -> None:
        self.state.missing_module = None
        self.state.is_installing = False
        self.state.install_output = ""
        self.state.console_output = ""

    def on_missing_module(self, payload: dict[str, Any]) -> None:
        module_id = _require(payload, "id", str)
        data = payload.get("data")
        prompt = None
        if data is not None:
            if not isinstance(data, dict):
                raise MalformedEvent("field 'data' must be an object")
            prompt = MissingModulePrompt(
                id=module_id,
                spec=_require(data, "spec", str),
                pkg_name=_require(data, "pkgName", str),
            )

        current = self.state.missing_module
        if current is None:
            if prompt is not None:
                self.state.missing_module = prompt
        elif current.id == module_id:
            self.state.missing_module = prompt

    def on_server_start(self, payload: dict[str, Any]) -> None:
        ips = _require(payload, "ips", (list, tuple))
        if not all(isinstance(ip, str) for ip in ips):
            raise MalformedEvent("field 'ips' must hold strings")
        start_time_ms = _require(payload, "startTimeMs", Real)
        hostname = _require(payload, "hostname", str)
        port = _require(payload, "port", int)
        protocol = _require(payload, "protocol", str)

        server = self.state.server
        server.start_time_ms = start_time_ms
        server.hostname = hostname
        server.port = port
        server.protocol = protocol
        server.ips = list(ips)
