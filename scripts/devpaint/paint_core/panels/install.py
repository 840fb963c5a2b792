"""Install overlay renderer."""

from __future__ import annotations

from rich.text import Text

from paint_core.formatting import INDENT
from paint_core.models import DashboardState
from paint_core.panels import section


def render(state: DashboardState, title: str) -> Text | None:
    if not state.is_installing:
        return None
    return section(title, state.install_output, lead=INDENT, ansi=True)
