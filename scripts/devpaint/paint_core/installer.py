"""Runs the configured add-package command and reports it on the bus."""

from __future__ import annotations

import logging
import subprocess
import threading

from paint_core import events
from paint_core.config import PACKAGE_PLACEHOLDER
from paint_core.events import EventBus

logger = logging.getLogger(__name__)


def build_command(template: list[str], pkg_name: str) -> list[str]:
    return [part.replace(PACKAGE_PLACEHOLDER, pkg_name) for part in template]


class PackageInstaller:
    def __init__(self, bus: EventBus, template: list[str], timeout: float = 600) -> None:
        self.bus = bus
        self.template = template
        self.timeout = timeout
        self._thread: threading.Thread | None = None

    @property
    def busy(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def __call__(self, pkg_name: str) -> None:
        if self.busy:
            logger.info("install already running, ignoring request for %s", pkg_name)
            return
        self._thread = threading.Thread(
            target=self.run,
            args=(pkg_name,),
            name="devpaint-install",
            daemon=True,
        )
        self._thread.start()

    def run(self, pkg_name: str) -> int:
        cmd = build_command(self.template, pkg_name)
        logger.info("running %s", " ".join(cmd))
        self.bus.emit(events.INSTALL_START)
        returncode = self._stream(cmd)
        self.bus.emit(events.INSTALL_COMPLETE)
        return returncode

    def _stream(self, cmd: list[str]) -> int:
        """Forward merged stdout/stderr line by line while the command runs."""
        try:
            proc = subprocess.Popen(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                bufsize=1,
            )
        except FileNotFoundError:
            self._log("error", f"{cmd[0]}: command not found\n")
            return 127

        timed_out = threading.Event()

        def kill() -> None:
            timed_out.set()
            proc.kill()

        watchdog = threading.Timer(self.timeout, kill)
        watchdog.daemon = True
        watchdog.start()
        try:
            with proc.stdout:
                for line in proc.stdout:
                    self._log("info", line)
            returncode = proc.wait()
        finally:
            watchdog.cancel()

        if timed_out.is_set():
            self._log("error", f"{' '.join(cmd)} timed out\n")
            return 124
        if returncode != 0:
            logger.warning("%s exited with %s", cmd[0], returncode)
        return returncode

    def _log(self, level: str, message: str) -> None:
        self.bus.emit(events.CONSOLE_LOG, {"level": level, "args": [message]})
