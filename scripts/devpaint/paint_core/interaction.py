"""Keyboard confirmation for the missing-module prompt."""

from __future__ import annotations

import logging
from typing import Callable, Protocol

from paint_core.models import DashboardState
from paint_core.terminal import CONFIRM_KEYS

logger = logging.getLogger(__name__)


class KeySource(Protocol):
    def poll(self) -> str | None: ...


class InteractionController:
    """Installs the prompted package when the user presses Enter."""

    def __init__(
        self,
        state: DashboardState,
        add_package: Callable[[str], None],
        repaint: Callable[[], None],
        keys: KeySource | None = None,
    ) -> None:
        self.state = state
        self.add_package = add_package
        self.repaint = repaint
        self.keys = keys

    def handle_key(self, key: str | None) -> bool:
        if key not in CONFIRM_KEYS:
            return False
        prompt = self.state.missing_module
        if prompt is None:
            return False
        logger.info("installing %s for %s", prompt.pkg_name, prompt.id)
        self.add_package(prompt.pkg_name)
        self.repaint()
        return True

    def poll(self) -> bool:
        if self.keys is None:
            return False
        return self.handle_key(self.keys.poll())
