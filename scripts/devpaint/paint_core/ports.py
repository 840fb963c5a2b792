"""Port selection with an interactive fallback prompt."""

from __future__ import annotations

import logging
import re
import socket
from typing import Callable, TextIO

from rich.console import Console
from rich.text import Text

logger = logging.getLogger(__name__)

MAX_PORT = 65535
DECLINE_RE = re.compile(r"^no?$", re.IGNORECASE)


class PortUnavailable(Exception):
    def __init__(self, requested: int, available: int) -> None:
        super().__init__(f"port {requested} not available (next free: {available})")
        self.requested = requested
        self.available = available


def _port_is_free(port: int, host: str) -> bool:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        try:
            sock.bind((host, port))
        except OSError:
            return False
    return True


def find_available_port(port: int, host: str = "") -> int:
    """First port at or above ``port`` that can be bound on ``host``."""
    for candidate in range(port, MAX_PORT + 1):
        if _port_is_free(candidate, host):
            return candidate
    raise OSError(f"no free port at or above {port}")


def declined(answer: str) -> bool:
    return DECLINE_RE.match(answer) is not None


def fatal_message(exc: PortUnavailable) -> Text:
    text = Text("✘ Port ", style="red")
    text.append(str(exc.requested), style="bold red")
    text.append(f" not available (next free: {exc.available}). Use ", style="red")
    text.append("--port", style="bold red")
    text.append(" to specify a different port.", style="red")
    return text


class PortNegotiator:
    """Resolve the port to serve on, asking before falling back."""

    def __init__(
        self,
        probe: Callable[[int], int] | None = None,
        console: Console | None = None,
        stdin: TextIO | None = None,
        interactive: bool | None = None,
    ) -> None:
        self.probe = probe if probe is not None else find_available_port
        self.console = console if console is not None else Console(highlight=False)
        self.stdin = stdin
        self.interactive = self.console.is_terminal if interactive is None else interactive

    def _ask(self, default_port: int, available: int) -> bool:
        prompt = Text("! Port ", style="yellow")
        prompt.append(str(default_port), style="bold yellow")
        prompt.append(" not available. Run on port ", style="yellow")
        prompt.append(str(available), style="bold yellow")
        prompt.append(" instead? (Y/n) ", style="yellow")
        try:
            answer = self.console.input(prompt, stream=self.stdin)
        except EOFError:
            return False
        return not declined(answer.rstrip("\r\n"))

    def negotiate(self, default_port: int) -> int:
        available = self.probe(default_port)
        if available == default_port:
            return default_port

        if self.interactive and self._ask(default_port, available):
            logger.info("port %s busy, using %s", default_port, available)
            return available

        raise PortUnavailable(default_port, available)
