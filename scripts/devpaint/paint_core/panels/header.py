"""Dashboard title renderer."""

from __future__ import annotations

from rich.text import Text


def render(program_name: str) -> Text:
    text = Text(program_name, style="bold")
    text.append("\n\n")
    return text
