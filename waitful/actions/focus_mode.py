"""
Focus Mode — the session timer service.

One controller per background runtime is the only writer of the focus
session. Other contexts never touch it directly; they reach it through the
runtime message protocol and derive "remaining = end - now" from snapshots.
"""

from __future__ import annotations

import asyncio
import logging
import math
import time
from dataclasses import dataclass
from typing import Callable, Optional

from ..config import config
from .badge import BadgeIndicator, format_badge

logger = logging.getLogger(__name__)


@dataclass
class FocusSession:
    end_timestamp: Optional[float] = None
    started_at: Optional[float] = None

    @property
    def active(self) -> bool:
        return self.end_timestamp is not None

    def remaining_seconds(self, now: float) -> int:
        if self.end_timestamp is None:
            return 0
        return max(0, math.floor(self.end_timestamp - now))


class FocusModeController:
    """
    Owns the single focus session.

    start() overwrites whatever session exists (last caller wins) and starts
    a repeating tick that republishes the badge; the tick stops itself once
    the session runs out. get_remaining() is a pure read.
    """

    def __init__(
        self,
        badge: Optional[BadgeIndicator] = None,
        clock: Callable[[], float] = time.time,
        tick_interval_s: float = config.tick_interval_s,
    ):
        self.badge = badge or BadgeIndicator()
        self.session = FocusSession()
        self._clock = clock
        self._tick_interval_s = tick_interval_s
        self._ticker: Optional[asyncio.Task] = None

    def start(self, duration_seconds: int) -> bool:
        if duration_seconds <= 0:
            raise ValueError("duration_seconds must be positive")
        now = self._clock()
        self.session = FocusSession(end_timestamp=now + duration_seconds, started_at=now)
        logger.info("focus session started for %ss", duration_seconds)
        self.badge.set_text(format_badge(duration_seconds))
        self._restart_ticker()
        return True

    def cancel(self) -> bool:
        if self.session.active:
            logger.info("focus session cancelled")
        self.session = FocusSession()
        self._stop_ticker()
        self.badge.clear()
        return True

    def get_remaining(self) -> int:
        return self.session.remaining_seconds(self._clock())

    def tick(self) -> int:
        """Recompute remaining time, refresh the badge, clear the session on expiry."""
        if not self.session.active:
            return 0
        remaining = self.get_remaining()
        if remaining <= 0:
            logger.info("focus session finished")
            self.session = FocusSession()
            self.badge.clear()
            return 0
        self.badge.set_text(format_badge(remaining))
        return remaining

    async def shutdown(self) -> None:
        ticker, self._ticker = self._ticker, None
        if ticker is not None:
            ticker.cancel()
            try:
                await ticker
            except asyncio.CancelledError:
                pass

    @property
    def ticking(self) -> bool:
        return self._ticker is not None and not self._ticker.done()

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _restart_ticker(self) -> None:
        self._stop_ticker()
        self._ticker = asyncio.get_running_loop().create_task(self._tick_loop())

    def _stop_ticker(self) -> None:
        if self._ticker is not None:
            self._ticker.cancel()
            self._ticker = None

    async def _tick_loop(self) -> None:
        while True:
            await asyncio.sleep(self._tick_interval_s)
            if self.tick() <= 0:
                break
