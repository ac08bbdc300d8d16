"""
Breathing overlay — the full-viewport surface an agent mounts over a page.

Binds one BreathingStateMachine to a Page: forwards visibility, focus and
key events into the machine, owns the once-per-second tick, and exposes the
text the overlay shows plus the two decisions offered once the pause is
complete. The tick task lives exactly as long as the overlay is mounted.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Dict, Optional

from ..agent.page import FOCUS_CHANGE, KEY_DOWN, VISIBILITY_CHANGE, Page
from ..agent.site_history import FIRST_VISIT, VisitSummary
from ..config import config
from .evasion import KeyPress
from .state_machine import BreathingPhase, BreathingStateMachine, Decision

logger = logging.getLogger(__name__)

BREATHE_MESSAGE = "It's time to take a deep breath."
PAUSED_MESSAGE = "Paused"
EVASION_REMINDER = "Stay with the pause for a moment. It will be over soon."

DECISION_LABELS: Dict[Decision, str] = {
    Decision.HONOR: "I can wait, close this tab",
    Decision.BYPASS: "Proceed to site",
}

_PHASE_MESSAGES = {
    BreathingPhase.READY: BREATHE_MESSAGE,
    BreathingPhase.INHALE: BREATHE_MESSAGE,
    BreathingPhase.HOLD: "Hold",
    BreathingPhase.EXHALE: "Breathe out",
    BreathingPhase.REST: "Rest",
    BreathingPhase.COMPLETE: "",
}


class BreathingOverlay:

    def __init__(
        self,
        machine: BreathingStateMachine,
        site_name: str,
        on_complete: Callable[[], Awaitable[None]],
        on_skip: Callable[[str], Awaitable[None]],
        visits: Optional[VisitSummary] = None,
        tick_interval_s: float = config.tick_interval_s,
    ):
        self.machine = machine
        self.site_name = site_name
        self.visits = visits or VisitSummary(visits_in_last_24h=1, last_visit_ago=FIRST_VISIT)
        self._on_complete = on_complete
        self._on_skip = on_skip
        self._tick_interval_s = tick_interval_s
        self._page: Optional[Page] = None
        self._ticker: Optional[asyncio.Task] = None

    # ------------------------------------------------------------------
    # Mounting
    # ------------------------------------------------------------------

    @property
    def mounted(self) -> bool:
        return self._page is not None

    def mount(self, page: Page) -> None:
        if self._page is not None:
            raise RuntimeError("overlay already mounted")
        self._page = page
        page.placeholder_interactive = True
        page.add_listener(VISIBILITY_CHANGE, self._on_visibility)
        page.add_listener(FOCUS_CHANGE, self._on_focus)
        page.add_listener(KEY_DOWN, self._on_key)
        # a page loaded in a background tab starts out paused
        self.machine.set_hidden(page.hidden)
        self.machine.set_focused(page.focused)
        self._ticker = asyncio.get_running_loop().create_task(self._run())

    async def unmount(self) -> None:
        page, self._page = self._page, None
        if page is not None:
            page.remove_listener(VISIBILITY_CHANGE, self._on_visibility)
            page.remove_listener(FOCUS_CHANGE, self._on_focus)
            page.remove_listener(KEY_DOWN, self._on_key)
        ticker, self._ticker = self._ticker, None
        if ticker is not None:
            ticker.cancel()
            try:
                await ticker
            except asyncio.CancelledError:
                pass

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._tick_interval_s)
            self.machine.tick()

    # ------------------------------------------------------------------
    # Page events
    # ------------------------------------------------------------------

    def _on_visibility(self, hidden: bool) -> None:
        self.machine.set_hidden(hidden)

    def _on_focus(self, focused: bool) -> None:
        self.machine.set_focused(focused)

    def _on_key(self, press: KeyPress) -> bool:
        return self.machine.handle_key(press)

    # ------------------------------------------------------------------
    # What the overlay shows
    # ------------------------------------------------------------------

    def main_message(self) -> str:
        if self.machine.is_paused and not self.machine.is_complete:
            return PAUSED_MESSAGE
        return _PHASE_MESSAGES[self.machine.phase]

    def reminder(self) -> str:
        return EVASION_REMINDER if self.machine.evasion_flagged else ""

    def stats(self) -> Dict[str, str]:
        """Shown with the decisions once the pause is complete."""
        if not self.machine.is_complete:
            return {}
        return {
            f"visits to {self.site_name} in the last 24 hours": str(self.visits.visits_in_last_24h),
            "since your last visit": self.visits.last_visit_ago,
        }

    def decisions(self) -> Dict[Decision, str]:
        return {d: DECISION_LABELS[d] for d in self.machine.available_decisions()}

    # ------------------------------------------------------------------
    # Decisions
    # ------------------------------------------------------------------

    async def honor(self) -> None:
        self.machine.decide(Decision.HONOR)
        await self._on_complete()

    async def bypass(self, reason: str = "proceed") -> None:
        self.machine.decide(Decision.BYPASS)
        await self._on_skip(reason)
