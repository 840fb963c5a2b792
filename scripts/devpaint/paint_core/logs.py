"""Logging setup that keeps stdout free for the dashboard."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

_HANDLER_NAME = "devpaint"


def resolve_level(value: str | int | None) -> int:
    if value is None:
        return logging.WARNING
    if isinstance(value, int):
        return value
    try:
        return int(value)
    except (TypeError, ValueError):
        pass
    resolved = logging.getLevelName(value.upper())
    return resolved if isinstance(resolved, int) else logging.WARNING


def configure_logging(level: str | int | None = None, log_file: str | None = None) -> logging.Handler:
    """Install the single devpaint handler on the root logger."""
    root = logging.getLogger()
    for existing in list(root.handlers):
        if existing.get_name() == _HANDLER_NAME:
            root.removeHandler(existing)
            existing.close()

    handler: logging.Handler
    if log_file:
        handler = logging.FileHandler(log_file, encoding="utf-8")
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    else:
        handler = RichHandler(
            console=Console(stderr=True),
            show_path=False,
            rich_tracebacks=True,
        )
    handler.set_name(_HANDLER_NAME)
    root.addHandler(handler)
    root.setLevel(resolve_level(level))
    return handler
