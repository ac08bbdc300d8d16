"""
Page host — the slice of a loaded page the interception agent works against.

A Page stands in for the document/window pair a content script sees: its URL,
whether it is hidden or focused, its scroll style, a full-viewport placeholder
that hides the page content, and capture-phase listeners for visibility, focus
and key events. Browser bridges drive it by calling set_hidden(), blur(),
focus() and press_key().
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional

from ..breathing.evasion import KeyPress

logger = logging.getLogger(__name__)

VISIBILITY_CHANGE = "visibilitychange"
FOCUS_CHANGE = "focuschange"
KEY_DOWN = "keydown"

_EVENT_KINDS = (VISIBILITY_CHANGE, FOCUS_CHANGE, KEY_DOWN)


class Page:

    def __init__(self, url: str):
        self.url = url
        self.hidden = False
        self.focused = True
        self.overflow = ""
        self.closed = False
        self.placeholder_attached = False
        self.placeholder_interactive = False
        self.keys_seen_by_page: List[KeyPress] = []
        self._listeners: Dict[str, List[Callable]] = {k: [] for k in _EVENT_KINDS}

    # ------------------------------------------------------------------
    # Content suppression
    # ------------------------------------------------------------------

    def attach_placeholder(self) -> None:
        """Cover the viewport before any page content renders."""
        self.placeholder_attached = True
        self.placeholder_interactive = False

    def remove_placeholder(self) -> None:
        self.placeholder_attached = False
        self.placeholder_interactive = False

    def close(self) -> None:
        self.closed = True
        logger.debug("page closed: %s", self.url)

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def add_listener(self, kind: str, fn: Callable) -> None:
        self._listeners[kind].append(fn)

    def remove_listener(self, kind: str, fn: Callable) -> None:
        if fn in self._listeners[kind]:
            self._listeners[kind].remove(fn)

    def listener_count(self, kind: Optional[str] = None) -> int:
        kinds = [kind] if kind else list(_EVENT_KINDS)
        return sum(len(self._listeners[k]) for k in kinds)

    # ------------------------------------------------------------------
    # Events from the browser
    # ------------------------------------------------------------------

    def set_hidden(self, hidden: bool) -> None:
        self.hidden = hidden
        for fn in list(self._listeners[VISIBILITY_CHANGE]):
            fn(hidden)

    def blur(self) -> None:
        self._set_focused(False)

    def focus(self) -> None:
        self._set_focused(True)

    def _set_focused(self, focused: bool) -> None:
        self.focused = focused
        for fn in list(self._listeners[FOCUS_CHANGE]):
            fn(focused)

    def press_key(self, press: KeyPress) -> bool:
        """
        Dispatch a key press. Capture listeners run first; if any of them
        suppresses it the page never sees the key. Returns True when the
        key reached the page.
        """
        for fn in list(self._listeners[KEY_DOWN]):
            if fn(press):
                return False
        self.keys_seen_by_page.append(press)
        return True
