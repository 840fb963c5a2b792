"""Console transcript section."""

from __future__ import annotations

from rich.text import Text

from paint_core.models import DashboardState
from paint_core.panels import section


def render(state: DashboardState) -> Text | None:
    if not state.console_output:
        return None
    return section("Console", state.console_output, ansi=True)
