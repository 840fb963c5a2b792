"""Per-worker output sections."""

from __future__ import annotations

from rich.text import Text

from paint_core.models import DashboardState
from paint_core.panels import section


def render(state: DashboardState) -> list[Text]:
    sections = []
    for name, worker in state.workers.items():
        if not worker.output:
            continue
        sections.append(section(name, worker.output, error=worker.error is not None, ansi=True))
    return sections
