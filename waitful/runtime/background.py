"""
Background runtime — the long-lived context that owns the focus session.

Constructed once per process (or per app instance in tests). It is the only
receiver on the message bus; every other context talks to it through
send_message()/post_message().
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

from ..actions.badge import BadgeIndicator
from ..actions.focus_mode import FocusModeController
from .bus import MessageBus
from .protocol import (
    Ack,
    CancelFocusMode,
    GetRemainingTime,
    PauseResolved,
    RemainingTime,
    StartFocusMode,
    parse_message,
)

logger = logging.getLogger(__name__)


class BackgroundRuntime:

    def __init__(
        self,
        focus: Optional[FocusModeController] = None,
        bus: Optional[MessageBus] = None,
    ):
        self.focus = focus or FocusModeController(badge=BadgeIndicator())
        self.bus = bus or MessageBus()
        self.bus.set_handler(self.handle)
        self._pause_listeners: List[Callable[[PauseResolved], None]] = []

    async def start(self) -> None:
        await self.bus.start()

    async def stop(self) -> None:
        await self.bus.stop()
        await self.focus.shutdown()

    async def handle(self, payload: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Process one raw envelope; returns the reply, or None to send nothing."""
        message = parse_message(payload)
        if message is None:
            return None

        if isinstance(message, StartFocusMode):
            self.focus.start(message.duration)
            return Ack().model_dump()

        if isinstance(message, CancelFocusMode):
            self.focus.cancel()
            return Ack().model_dump()

        if isinstance(message, GetRemainingTime):
            return RemainingTime(remaining_seconds=self.focus.get_remaining()).model_dump()

        if isinstance(message, PauseResolved):
            logger.info("pause %s on %s", message.outcome, message.domain)
            for listener in self._pause_listeners:
                try:
                    listener(message)
                except Exception:
                    logger.exception("pause listener failed")
        return None

    def register_pause_listener(self, fn: Callable[[PauseResolved], None]) -> None:
        """Register a callback(PauseResolved) for agents' analytics notifications."""
        self._pause_listeners.append(fn)
