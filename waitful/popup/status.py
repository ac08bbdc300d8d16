"""
Popup status — the toolbar popup's view of the focus session.

The popup holds no timer of its own. While a session is running it asks the
background runtime for the remaining time once per tick and mirrors the
answer; each answer is an independent snapshot, so a cancel issued from
another surface shows up here whenever the next poll sees it.

Works over any transport with the shape of MessageBus.send_message — the
in-process bus, or RuntimeClient.send_message over HTTP.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Iterable, Optional

from ..actions.badge import format_badge
from ..agent.site_match import host_of, should_intercept
from ..config import config
from ..runtime.protocol import CancelFocusMode, GetRemainingTime, StartFocusMode, dump_message
from ..settings import normalize_site

logger = logging.getLogger(__name__)

Send = Callable[[Dict[str, Any]], Awaitable[Optional[Dict[str, Any]]]]


def format_countdown(remaining_seconds: int) -> str:
    """Popup clock face, e.g. "24:05"."""
    minutes, seconds = divmod(max(0, remaining_seconds), 60)
    return f"{minutes}:{seconds:02d}"


def is_distracting(url: str, sites: Iterable[Any]) -> bool:
    """Whether the popup's current tab is on the distracting list."""
    return should_intercept(host_of(url), [normalize_site(s) for s in sites])


class FocusStatusPoller:

    def __init__(self, send: Send, tick_interval_s: float = config.tick_interval_s):
        self._send = send
        self._tick_interval_s = tick_interval_s
        self.remaining: Optional[int] = None
        self.focus_active = False
        self._poller: Optional[asyncio.Task] = None
        self._finished_listeners: list[Callable[[], None]] = []

    @property
    def badge_text(self) -> str:
        return format_badge(self.remaining or 0)

    @property
    def countdown(self) -> str:
        return format_countdown(self.remaining) if self.remaining else ""

    @property
    def polling(self) -> bool:
        return self._poller is not None and not self._poller.done()

    # ------------------------------------------------------------------
    # User actions
    # ------------------------------------------------------------------

    async def start_focus(self, minutes: int = config.default_focus_minutes) -> bool:
        reply = await self._send(dump_message(StartFocusMode(duration=minutes * 60)))
        if not reply or not reply.get("success"):
            logger.warning("focus session start was not acknowledged")
            return False
        self.focus_active = True
        self.remaining = minutes * 60
        self._start_polling()
        return True

    async def cancel_focus(self) -> None:
        await self.stop()
        self.focus_active = False
        self.remaining = None
        await self._send(dump_message(CancelFocusMode()))

    async def resume(self) -> None:
        """On popup open: pick up a session started from another surface."""
        if await self.poll_once() > 0:
            self.focus_active = True
            self._start_polling()

    # ------------------------------------------------------------------
    # Polling
    # ------------------------------------------------------------------

    async def poll_once(self) -> int:
        """One GET_REMAINING_TIME round trip; -1 when no reply arrived."""
        return self._apply(await self._send(dump_message(GetRemainingTime())))

    def _apply(self, reply: Optional[Dict[str, Any]]) -> int:
        if not reply or "remaining_seconds" not in reply:
            return -1
        remaining = int(reply["remaining_seconds"])
        if remaining <= 0:
            self._finish()
        else:
            self.remaining = remaining
        return remaining

    async def stop(self) -> None:
        # clearing _poller first is what ends _run; the cancel only cuts the wait short
        poller, self._poller = self._poller, None
        if poller is None or poller is asyncio.current_task():
            return
        poller.cancel()
        try:
            await poller
        except asyncio.CancelledError:
            pass

    def register_finished_listener(self, fn: Callable[[], None]) -> None:
        """Register a callback() fired once the session is seen to be over."""
        self._finished_listeners.append(fn)

    def _start_polling(self) -> None:
        if not self.polling:
            self._poller = asyncio.get_running_loop().create_task(self._run())

    def _owns_poll(self) -> bool:
        return self._poller is asyncio.current_task()

    async def _run(self) -> None:
        # wait_for on 3.10/3.11 can swallow a cancel that races a reply,
        # so ownership is re-checked after every await
        while self._owns_poll():
            await asyncio.sleep(self._tick_interval_s)
            if not self._owns_poll():
                break
            reply = await self._send(dump_message(GetRemainingTime()))
            if not self._owns_poll():
                break
            if self._apply(reply) == 0:
                break

    def _finish(self) -> None:
        was_active = self.focus_active
        self.focus_active = False
        self.remaining = None
        if was_active:
            for fn in self._finished_listeners:
                fn()
