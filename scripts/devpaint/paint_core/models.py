"""Shared model contracts for the dashboard state."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

DEFAULT_START_PHASE = ("RUNNING", "yellow")
DONE_PHASE = ("DONE", "green")


class WorkerError(Exception):
    """Error reported by a worker whose payload was not an exception."""


@dataclass
class WorkerState:
    done: bool = False
    phase: tuple[str, str] | None = None
    error: BaseException | None = None
    output: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "done": self.done,
            "phase": list(self.phase) if self.phase else None,
            "error": str(self.error) if self.error is not None else None,
            "output": self.output,
        }


@dataclass(frozen=True)
class MissingModulePrompt:
    id: str
    spec: str
    pkg_name: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "spec": self.spec, "pkgName": self.pkg_name}


@dataclass
class ServerInfo:
    port: int = 0
    hostname: str = ""
    protocol: str = ""
    start_time_ms: float = 0
    ips: list[str] = field(default_factory=list)

    @property
    def started(self) -> bool:
        return self.start_time_ms > 0 and self.port > 0 and bool(self.protocol)

    def to_dict(self) -> dict[str, Any]:
        return {
            "port": self.port,
            "hostname": self.hostname,
            "protocol": self.protocol,
            "startTimeMs": self.start_time_ms,
            "ips": list(self.ips),
        }


@dataclass
class DashboardState:
    """Everything currently known about the running session.

    Only the event router mutates an instance; renderers read it.
    """

    server: ServerInfo = field(default_factory=ServerInfo)
    console_output: str = ""
    install_output: str = ""
    is_installing: bool = False
    missing_module: MissingModulePrompt | None = None
    workers: dict[str, WorkerState] = field(default_factory=dict)
    active_file_builds: set[str] = field(default_factory=set)

    @classmethod
    def with_workers(cls, names: list[str]) -> DashboardState:
        state = cls()
        for name in names:
            state.ensure_worker(name)
        return state

    def ensure_worker(self, name: str) -> WorkerState:
        worker = self.workers.get(name)
        if worker is None:
            worker = WorkerState()
            self.workers[name] = worker
        return worker

    @property
    def is_building(self) -> bool:
        return bool(self.active_file_builds)

    def to_dict(self) -> dict[str, Any]:
        return {
            "server": self.server.to_dict(),
            "started": self.server.started,
            "consoleOutput": self.console_output,
            "installOutput": self.install_output,
            "isInstalling": self.is_installing,
            "missingModule": self.missing_module.to_dict() if self.missing_module else None,
            "workers": {name: worker.to_dict() for name, worker in self.workers.items()},
            "activeFileBuilds": sorted(self.active_file_builds),
        }
