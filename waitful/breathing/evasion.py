"""
Evasion keys — shortcuts a user might reach for to escape an active pause.

The overlay traps these at capture priority so neither the page nor the
browser chrome ever sees them.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class EvasionKind(str, Enum):
    REFRESH = "refresh"
    NEW_TAB = "new_tab"
    CLOSE_TAB = "close_tab"
    DEV_TOOLS = "dev_tools"
    FORCE_QUIT = "force_quit"
    ESCAPE = "escape"


@dataclass(frozen=True)
class KeyPress:
    key: str
    ctrl: bool = False
    meta: bool = False
    shift: bool = False
    alt: bool = False

    @classmethod
    def parse(cls, combo: str) -> "KeyPress":
        """Build a KeyPress from a string like "Ctrl+Shift+I" or "F5"."""
        parts = [p.strip() for p in combo.split("+") if p.strip()]
        if not parts:
            raise ValueError(f"empty key combo: {combo!r}")
        mods = {p.lower() for p in parts[:-1]}
        unknown = mods - {"ctrl", "control", "meta", "cmd", "shift", "alt", "option"}
        if unknown:
            raise ValueError(f"unknown modifier(s) in {combo!r}: {sorted(unknown)}")
        return cls(
            key=parts[-1],
            ctrl=bool(mods & {"ctrl", "control"}),
            meta=bool(mods & {"meta", "cmd"}),
            shift="shift" in mods,
            alt=bool(mods & {"alt", "option"}),
        )

    @property
    def primary(self) -> bool:
        """Ctrl on Windows/Linux, Cmd on macOS."""
        return self.ctrl or self.meta


_DEV_TOOLS_LETTERS = {"i", "j", "c"}


def classify_key(press: KeyPress) -> Optional[EvasionKind]:
    """Return which evasion a key press amounts to, or None for ordinary input."""
    key = press.key.lower()

    if key == "escape" or key == "esc":
        return EvasionKind.ESCAPE
    if key == "f5" or (press.primary and key == "r"):
        return EvasionKind.REFRESH
    if press.primary and key == "t":
        return EvasionKind.NEW_TAB
    if press.primary and key == "w":
        return EvasionKind.CLOSE_TAB
    if key == "f12":
        return EvasionKind.DEV_TOOLS
    if key in _DEV_TOOLS_LETTERS and (
        (press.ctrl and press.shift) or (press.meta and press.alt)
    ):
        return EvasionKind.DEV_TOOLS
    if (press.alt and key == "f4") or (press.meta and key == "q"):
        return EvasionKind.FORCE_QUIT
    return None
