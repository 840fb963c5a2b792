"""Shared text formatting helpers for human-facing sections."""

from __future__ import annotations

import json
import math
import os
import re
from typing import Any

FORMAT_SPEC_RE = re.compile(r"%[sdifjoOc%]")
INDENT = "  "


def _inspect(value: Any) -> str:
    if isinstance(value, str):
        return value
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list, tuple)):
        try:
            return json.dumps(value, default=str)
        except (TypeError, ValueError):
            return repr(value)
    return str(value)


def _number_text(number: float) -> str:
    return str(int(number)) if number.is_integer() else str(number)


def _as_number(value: Any, integer: bool) -> str:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return "NaN"
    if math.isnan(number):
        return "NaN"
    if math.isinf(number):
        return "Infinity" if number > 0 else "-Infinity"
    if integer:
        return str(int(number))
    return _number_text(number)


def format_args(args: list[Any] | tuple[Any, ...]) -> str:
    """Format console arguments the way a ``console.log`` call would.

    A leading string may carry printf-style placeholders; any arguments
    left over are appended, separated by single spaces.
    """
    if not args:
        return ""

    first, rest = args[0], list(args[1:])
    if not isinstance(first, str):
        return " ".join(_inspect(arg) for arg in args)

    def substitute(match: re.Match[str]) -> str:
        token = match.group(0)
        if token == "%%":
            return "%"
        if not rest:
            return token
        value = rest.pop(0)
        if token == "%c":
            return ""
        if token in ("%d", "%i"):
            return _as_number(value, integer=True)
        if token == "%f":
            return _as_number(value, integer=False)
        if token == "%j":
            try:
                return json.dumps(value, default=str)
            except (TypeError, ValueError):
                return "[Circular]"
        return _inspect(value)

    head = FORMAT_SPEC_RE.sub(substitute, first)
    return " ".join([head, *(_inspect(arg) for arg in rest)])


def indent_block(text: str, indent: str = INDENT) -> str:
    """Trim ``text`` and indent every continuation line."""
    return text.strip().replace("\n", "\n" + indent)


def relative_path(path: str, cwd: str) -> str:
    try:
        return os.path.relpath(path, cwd)
    except ValueError:
        # different drive on Windows
        return path


def server_url(protocol: str, host: str, port: int) -> str:
    scheme = protocol.rstrip(":/")
    return f"{scheme}://{host}:{port}"


def elapsed_message(start_time_ms: float) -> str:
    if start_time_ms < 1000:
        return f"Server started in {_number_text(float(start_time_ms))}ms."
    return "Server started."
