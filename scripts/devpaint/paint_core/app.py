"""Dev console dashboard entrypoint."""

from __future__ import annotations

import argparse
import json
import logging
import sys
import threading
from contextlib import nullcontext
from typing import Any, Iterable, Iterator, TextIO

from rich.console import Console

from paint_core import ports
from paint_core.config import env_config_path, resolve_config
from paint_core.events import Event, EventBus
from paint_core.installer import PackageInstaller
from paint_core.interaction import InteractionController
from paint_core.logs import configure_logging
from paint_core.models import DashboardState
from paint_core.renderer import Painter
from paint_core.router import EventRouter
from paint_core.terminal import KeyReader, is_interactive

logger = logging.getLogger(__name__)

POLL_SECONDS = 0.05


def parse_event(line: str) -> Event | None:
    """Decode one ``{"event": name, ...payload}`` line, or None if unusable."""
    text = line.strip()
    if not text:
        return None
    try:
        record = json.loads(text)
    except json.JSONDecodeError as exc:
        logger.warning("skipping undecodable event line: %s", exc)
        return None
    if not isinstance(record, dict) or not isinstance(record.get("event"), str):
        logger.warning("skipping event line without an event name")
        return None
    name = record.pop("event")
    return Event(name, record)


def read_events(lines: Iterable[str]) -> Iterator[Event]:
    for line in lines:
        event = parse_event(line)
        if event is not None:
            yield event


class Dashboard:
    """Owns the state and wires bus, router, painter and keyboard together."""

    def __init__(
        self,
        settings: dict[str, Any],
        stream: TextIO | None = None,
        *,
        styled: bool | None = None,
        paint_every_event: bool = True,
    ) -> None:
        self.settings = settings
        self.state = DashboardState.with_workers(settings["scripts"])
        self.bus = EventBus()
        self.painter = Painter(
            self.state,
            stream,
            styled=styled,
            program_name=settings["program_name"],
            install_title=settings["install_title"],
        )
        self.paint_every_event = paint_every_event
        self.router = EventRouter(
            self.state,
            self.repaint,
            install_hold_seconds=settings["install_hold_seconds"],
        )
        self.router.attach(self.bus)

        self.controller: InteractionController | None = None
        command = settings["add_package_command"]
        if command:
            self.controller = InteractionController(
                self.state,
                PackageInstaller(self.bus, command),
                self.repaint,
            )

    def repaint(self) -> None:
        if self.paint_every_event:
            self.painter.repaint()

    def feed(self, source: Iterable[str]) -> None:
        for event in read_events(source):
            self.bus.emit(event.name, event.payload)

    def drain(self) -> None:
        """Process queued events until nothing is queued or scheduled."""
        while not self.bus.idle:
            self.bus.process(timeout=POLL_SECONDS)

    def run_live(self, source: Iterable[str], keys: KeyReader | None = None) -> None:
        if self.controller is not None:
            self.controller.keys = keys
        finished = threading.Event()
        stop = threading.Event()

        def pump() -> None:
            try:
                self.feed(source)
            finally:
                finished.set()

        reader = threading.Thread(target=pump, name="devpaint-events", daemon=True)
        reader.start()

        def on_idle() -> None:
            if self.controller is not None:
                self.controller.poll()
            if finished.is_set() and self.bus.idle:
                stop.set()

        self.repaint()
        self.bus.run(stop, poll_interval=POLL_SECONDS, on_idle=on_idle)


def _open_source(path: str) -> TextIO:
    if path == "-":
        return sys.stdin
    return open(path, encoding="utf-8")


def _negotiate(port: int, can_prompt: bool) -> int:
    # stdin carrying events cannot also answer the fallback prompt
    negotiator = ports.PortNegotiator(
        console=Console(highlight=False),
        interactive=None if can_prompt else False,
    )
    return negotiator.negotiate(port)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Live status dashboard for a dev server's event stream")
    parser.add_argument("--events", default="-", help="Newline-delimited JSON events file ('-' for stdin)")
    parser.add_argument("-l", "--live", action="store_true", help="Repaint on every event until the stream ends")
    parser.add_argument("--json", action="store_true", help="Emit the final dashboard state as JSON")
    parser.add_argument("--port", type=int, help="Port to negotiate before the dashboard starts")
    parser.add_argument("--port-only", action="store_true", help="Print the negotiated port and exit")
    parser.add_argument("--config", default=env_config_path(), help="Optional JSON config file")
    parser.add_argument("--script", action="append", dest="scripts", help="Worker name to show in order (repeatable)")
    parser.add_argument("--program-name", help="Title shown above the server status")
    parser.add_argument("--add-package-command", help="Command run on Enter for a missing package; {pkg} is replaced")
    parser.add_argument("--log-level", help="Log level (default WARNING)")
    parser.add_argument("--log-file", help="Write logs to this file instead of stderr")
    args = parser.parse_args(argv)

    try:
        settings = resolve_config(
            args.config,
            {
                "port": args.port,
                "scripts": args.scripts,
                "program_name": args.program_name,
                "add_package_command": args.add_package_command,
                "log_level": args.log_level,
                "log_file": args.log_file,
            },
        )
    except ValueError as exc:
        parser.error(str(exc))

    configure_logging(settings["log_level"], settings["log_file"])

    if args.port is not None or args.port_only:
        try:
            port = _negotiate(settings["port"], can_prompt=args.port_only or args.events != "-")
        except ports.PortUnavailable as exc:
            err = Console(stderr=True, highlight=False, soft_wrap=True)
            err.print(ports.fatal_message(exc))
            err.print()
            return 1
        settings["port"] = port
        if args.port_only:
            print(port)
            return 0

    try:
        source = _open_source(args.events)
    except OSError as exc:
        parser.error(f"cannot read events: {exc}")

    with nullcontext(source) if source is sys.stdin else source:
        if args.json or not args.live:
            dashboard = Dashboard(settings, paint_every_event=False)
            dashboard.feed(source)
            dashboard.drain()
            if args.json:
                print(json.dumps(dashboard.state.to_dict(), indent=2))
            else:
                dashboard.painter.repaint()
            return 0

        dashboard = Dashboard(settings)
        use_keys = dashboard.controller is not None and source is not sys.stdin and is_interactive(sys.stdin)
        try:
            with KeyReader(sys.stdin) if use_keys else nullcontext(None) as keys:
                dashboard.run_live(source, keys)
        except KeyboardInterrupt:
            return 0
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
