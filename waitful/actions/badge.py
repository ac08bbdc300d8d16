"""
Badge indicator — the short host-visible countdown next to the extension icon.
An empty string means "no active focus session".
"""

from __future__ import annotations

import logging
from typing import Callable, List

logger = logging.getLogger(__name__)


def format_badge(remaining_seconds: int) -> str:
    """Compact countdown: "2h", "12m", "45s"; "" once nothing is left."""
    if remaining_seconds <= 0:
        return ""
    if remaining_seconds >= 3600:
        return f"{remaining_seconds // 3600}h"
    if remaining_seconds >= 60:
        return f"{remaining_seconds // 60}m"
    return f"{remaining_seconds}s"


class BadgeIndicator:

    def __init__(self):
        self.text = ""
        self._listeners: List[Callable[[str], None]] = []

    def set_text(self, text: str) -> None:
        if text == self.text:
            return
        self.text = text
        for listener in self._listeners:
            try:
                listener(text)
            except Exception:
                logger.exception("badge listener failed")

    def clear(self) -> None:
        self.set_text("")

    def register_listener(self, fn: Callable[[str], None]) -> None:
        """Register a callback(text) fired whenever the badge text changes."""
        self._listeners.append(fn)
