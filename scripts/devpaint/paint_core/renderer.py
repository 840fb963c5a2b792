"""Full-frame renderer and the painter that writes frames to a stream."""

from __future__ import annotations

import io
import sys
from typing import TextIO

from rich.console import Console
from rich.text import Text

from paint_core.models import DashboardState
from paint_core.panels.console import render as render_console
from paint_core.panels.header import render as render_header
from paint_core.panels.install import render as render_install
from paint_core.panels.server import render as render_server
from paint_core.panels.workers import render as render_workers
from paint_core.terminal import clear_sequence, is_interactive

DEFAULT_PROGRAM_NAME = "Snowpack"
DEFAULT_INSTALL_TITLE = "snowpack install"

# Only used to satisfy rich; soft wrapping means lines are never wrapped.
FRAME_WIDTH = 120


def build_frame(
    state: DashboardState,
    program_name: str = DEFAULT_PROGRAM_NAME,
    install_title: str = DEFAULT_INSTALL_TITLE,
) -> Text:
    parts: list[Text] = []

    console_section = render_console(state)
    if console_section is not None:
        parts.append(console_section)
    parts.extend(render_workers(state))
    parts.append(render_header(program_name))
    parts.append(render_server(state))

    install_section = render_install(state, install_title)
    if install_section is not None:
        parts.append(install_section)

    frame = Text(end="")
    for part in parts:
        frame.append_text(part)
    return frame


def render(
    state: DashboardState,
    *,
    styled: bool = True,
    platform: str | None = None,
    program_name: str = DEFAULT_PROGRAM_NAME,
    install_title: str = DEFAULT_INSTALL_TITLE,
) -> str:
    """Clear sequence followed by every section, as one string."""
    buffer = io.StringIO()
    console = Console(
        file=buffer,
        force_terminal=styled,
        color_system="standard" if styled else None,
        width=FRAME_WIDTH,
        highlight=False,
        emoji=False,
        soft_wrap=True,
        legacy_windows=False,
    )
    console.print(build_frame(state, program_name, install_title), end="")
    return clear_sequence(platform) + buffer.getvalue()


class Painter:
    """Repaints the whole dashboard on every call."""

    def __init__(
        self,
        state: DashboardState,
        stream: TextIO | None = None,
        *,
        styled: bool | None = None,
        platform: str | None = None,
        program_name: str = DEFAULT_PROGRAM_NAME,
        install_title: str = DEFAULT_INSTALL_TITLE,
    ) -> None:
        self.state = state
        self.stream = stream if stream is not None else sys.stdout
        self.styled = is_interactive(self.stream) if styled is None else styled
        self.platform = platform
        self.program_name = program_name
        self.install_title = install_title
        self.frames = 0

    def frame(self) -> str:
        return render(
            self.state,
            styled=self.styled,
            platform=self.platform,
            program_name=self.program_name,
            install_title=self.install_title,
        )

    def repaint(self) -> None:
        self.stream.write(self.frame())
        self.stream.flush()
        self.frames += 1
