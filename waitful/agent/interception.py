"""
Pause Interception Agent — runs once per loaded page.

Decides whether the page is a distracting destination, and if so covers it
with a breathing overlay until the user either honours the pause (the page
closes) or bypasses it (the page is revealed). Every fallible step falls
back to *not* intercepting so a storage or parsing problem can never leave a
page blocked.

Usage:
    agent = InterceptionAgent(page, store, post_message=bus.post_message)
    await agent.on_page_load()
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional

from ..breathing.overlay import BreathingOverlay
from ..breathing.state_machine import BreathingPattern, BreathingStateMachine, pattern_named
from ..config import config
from ..runtime.protocol import PauseResolved, dump_message
from ..settings import DISABLED, PauseSettings, read_pause_settings
from ..storage import LocalStore
from .page import Page
from .pause_log import PauseAction, PauseLog
from .site_history import SiteHistory, VisitSummary
from .site_match import host_of, should_intercept

logger = logging.getLogger(__name__)


class InterceptionAgent:

    def __init__(
        self,
        page: Page,
        store: LocalStore,
        post_message: Optional[Callable[[Dict[str, Any]], None]] = None,
        settings_reader: Callable[[], PauseSettings] = read_pause_settings,
        pattern: Optional[BreathingPattern] = None,
        tick_interval_s: float = config.tick_interval_s,
    ):
        self.page = page
        self.overlay: Optional[BreathingOverlay] = None
        self.domain: Optional[str] = host_of(page.url)
        self._log = PauseLog(store)
        self._history = SiteHistory(store)
        self._post_message = post_message
        self._read_settings = settings_reader
        self._pattern = pattern or pattern_named(config.breathing_pattern)
        self._tick_interval_s = tick_interval_s
        self._original_overflow = ""
        # injected before anything renders; removed again if we do not intercept
        self.page.attach_placeholder()

    # ------------------------------------------------------------------
    # Page load
    # ------------------------------------------------------------------

    async def on_page_load(self) -> bool:
        """Returns True when the page was intercepted."""
        settings = self._settings_snapshot()
        if not should_intercept(self.domain, settings.distracting_sites, settings.enabled):
            await self.remove_overlay()
            return False

        self._original_overflow = self.page.overflow
        self.page.overflow = "hidden"

        self._safe_log(PauseAction.INITIATED, duration=settings.pause_duration)
        visits = self._record_visit()

        machine = BreathingStateMachine(settings.pause_duration, pattern=self._pattern)
        self.overlay = BreathingOverlay(
            machine,
            site_name=self.domain,
            on_complete=self.handle_complete,
            on_skip=self.handle_skip,
            visits=visits,
            tick_interval_s=self._tick_interval_s,
        )
        self.overlay.mount(self.page)
        logger.info("pause shown on %s for %ss", self.domain, settings.pause_duration)
        return True

    def _settings_snapshot(self) -> PauseSettings:
        try:
            return self._read_settings()
        except Exception:
            logger.warning("could not read settings, not intercepting", exc_info=True)
            return DISABLED

    def _record_visit(self) -> Optional[VisitSummary]:
        try:
            return self._history.record_visit(self.domain or "")
        except Exception:
            logger.warning("could not update site history for %s", self.domain, exc_info=True)
            return None

    # ------------------------------------------------------------------
    # Decisions
    # ------------------------------------------------------------------

    async def handle_complete(self) -> None:
        """The user honoured the pause: log it, tell the runtime, close the page."""
        await self.remove_overlay()
        self._safe_log(PauseAction.COMPLETED)
        self._notify("completed")
        self.page.close()

    async def handle_skip(self, reason: str) -> None:
        """The user chose to proceed: log it, tell the runtime, reveal the page."""
        await self.remove_overlay()
        self._safe_log(PauseAction.SKIPPED, reason=reason)
        self._notify("skipped", reason)

    async def remove_overlay(self) -> None:
        """Unmount the overlay (releasing its tick) and restore the page."""
        overlay, self.overlay = self.overlay, None
        if overlay is not None:
            await overlay.unmount()
            self.page.overflow = self._original_overflow
        self.page.remove_placeholder()

    async def on_page_unload(self) -> None:
        await self.remove_overlay()

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _safe_log(self, action: PauseAction, **data) -> None:
        try:
            self._log.append(action, self.domain or "", **data)
        except Exception:
            logger.warning("could not write pause log (%s)", action.value, exc_info=True)

    def _notify(self, outcome: str, reason: Optional[str] = None) -> None:
        if self._post_message is None:
            return
        message = PauseResolved(
            outcome=outcome, domain=self.domain or "", url=self.page.url, reason=reason
        )
        self._post_message(dump_message(message))
