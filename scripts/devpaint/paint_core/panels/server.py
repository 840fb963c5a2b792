"""Server status line renderer."""

from __future__ import annotations

from rich.text import Text

from paint_core.formatting import INDENT, elapsed_message, server_url
from paint_core.models import DashboardState
from paint_core.panels import MUTED_STYLE, URL_STYLE


def render(state: DashboardState) -> Text:
    server = state.server
    text = Text()
    if not server.started:
        text.append(f"{INDENT}Server starting…", style=MUTED_STYLE)
        text.append("\n\n")
        return text

    text.append(INDENT)
    text.append(server_url(server.protocol, server.hostname, server.port), style=URL_STYLE)
    for ip in server.ips:
        text.append(" • ", style="cyan")
        text.append(server_url(server.protocol, ip, server.port), style=URL_STYLE)
    text.append("\n")
    text.append(INDENT + elapsed_message(server.start_time_ms), style=MUTED_STYLE)
    if state.is_building:
        text.append(" Building...", style=MUTED_STYLE)
    text.append("\n\n")
    return text
