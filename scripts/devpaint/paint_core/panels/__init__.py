"""Section rendering helpers."""

from __future__ import annotations

from rich.text import Text

from paint_core.formatting import INDENT, indent_block

SECTION_STYLE = "bold underline"
ERROR_STYLE = "red"
URL_STYLE = "bold cyan"
MUTED_STYLE = "dim"


def section_header(title: str, error: bool = False) -> Text:
    style = f"{SECTION_STYLE} {ERROR_STYLE}" if error else SECTION_STYLE
    return Text(f"▼ {title}", style=style)


def section(title: str, body: str, *, error: bool = False, lead: str = "", ansi: bool = False) -> Text:
    """Header, blank line, then the trimmed and indented body."""
    text = Text()
    text.append_text(section_header(title, error=error))
    text.append("\n\n")
    block = lead + indent_block(body, INDENT)
    if ansi:
        text.append_text(Text.from_ansi(block, end=""))
    else:
        text.append(block)
    text.append("\n\n")
    return text
