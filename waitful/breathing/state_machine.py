"""
Breathing State Machine — drives the phases and countdown of one pause.

    ready → inhale → {hold → exhale → rest → inhale}* → complete

The machine is pure: it never reads a clock. Its owner calls tick() once per
elapsed second and forwards visibility / focus / key events. The countdown
only moves while the pause is not paused, so time spent in another tab is
not counted but is not thrown away either.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Tuple

from ..config import config
from .evasion import EvasionKind, KeyPress, classify_key

logger = logging.getLogger(__name__)


class BreathingPhase(str, Enum):
    READY = "ready"
    INHALE = "inhale"
    HOLD = "hold"
    EXHALE = "exhale"
    REST = "rest"
    COMPLETE = "complete"


class Decision(str, Enum):
    HONOR = "honor"      # keep the pause: close the page
    BYPASS = "bypass"    # proceed to the site anyway


class DecisionUnavailable(RuntimeError):
    """Raised when a decision is made before the pause is complete, or twice."""


@dataclass(frozen=True)
class BreathingPattern:
    """Seconds per phase; zero-length phases are skipped."""
    inhale: int = 4
    hold: int = 0
    exhale: int = 0
    rest: int = 0

    def cycle(self) -> List[Tuple[BreathingPhase, int]]:
        phases = [
            (BreathingPhase.INHALE, self.inhale),
            (BreathingPhase.HOLD, self.hold),
            (BreathingPhase.EXHALE, self.exhale),
            (BreathingPhase.REST, self.rest),
        ]
        return [(p, s) for p, s in phases if s > 0] or [(BreathingPhase.INHALE, 1)]


# ready → inhale → complete
SINGLE_BREATH = BreathingPattern(inhale=4)
# the looping form: 4s in, 4s hold, 4s out, 2s rest
BOX_BREATHING = BreathingPattern(inhale=4, hold=4, exhale=4, rest=2)

# names accepted by config.breathing_pattern
PATTERNS = {"single": SINGLE_BREATH, "box": BOX_BREATHING}


def pattern_named(name: str) -> BreathingPattern:
    pattern = PATTERNS.get(name.strip().lower())
    if pattern is None:
        logger.warning("unknown breathing pattern %r, using single breath", name)
        return SINGLE_BREATH
    return pattern


@dataclass
class PauseState:
    phase: BreathingPhase
    remaining_seconds: int
    is_paused: bool
    evasion_flagged: bool


class BreathingStateMachine:

    def __init__(
        self,
        duration_seconds: int,
        pattern: BreathingPattern = SINGLE_BREATH,
        ready_delay_s: int = config.ready_delay_s,
        evasion_warning_s: int = config.evasion_warning_s,
    ):
        if duration_seconds <= 0:
            raise ValueError("duration_seconds must be positive")
        self.duration_seconds = duration_seconds
        self.pattern = pattern
        self._cycle = pattern.cycle()
        self._ready_delay_s = ready_delay_s
        self._evasion_warning_s = evasion_warning_s

        self.phase = BreathingPhase.READY
        self.remaining_seconds = duration_seconds
        self.decision: Optional[Decision] = None
        self.last_evasion: Optional[EvasionKind] = None

        self._cycle_index = 0
        self._phase_elapsed = 0
        self._hidden = False
        self._blurred = False
        self._warning_left = 0
        self._listeners: List[Callable[[PauseState], None]] = []

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    @property
    def is_paused(self) -> bool:
        return self._hidden or self._blurred or self._warning_left > 0

    @property
    def evasion_flagged(self) -> bool:
        return self._warning_left > 0

    @property
    def is_complete(self) -> bool:
        return self.phase == BreathingPhase.COMPLETE

    def state(self) -> PauseState:
        return PauseState(
            phase=self.phase,
            remaining_seconds=self.remaining_seconds,
            is_paused=self.is_paused,
            evasion_flagged=self.evasion_flagged,
        )

    def register_listener(self, fn: Callable[[PauseState], None]) -> None:
        """Register a callback(PauseState) fired after every state change."""
        self._listeners.append(fn)

    # ------------------------------------------------------------------
    # Clock
    # ------------------------------------------------------------------

    def tick(self) -> PauseState:
        """Advance by one second of wall time."""
        paused = self.is_paused
        if self._warning_left > 0:
            self._warning_left -= 1

        if not paused and not self.is_complete:
            self.remaining_seconds -= 1
            if self.remaining_seconds <= 0:
                self.remaining_seconds = 0
                self.phase = BreathingPhase.COMPLETE
                logger.debug("pause complete")
            else:
                self._advance_phase()

        self._notify()
        return self.state()

    def _advance_phase(self) -> None:
        self._phase_elapsed += 1
        if self.phase == BreathingPhase.READY:
            if self._phase_elapsed >= self._ready_delay_s:
                self._enter(0)
            return
        _, length = self._cycle[self._cycle_index]
        if self._phase_elapsed >= length:
            self._enter((self._cycle_index + 1) % len(self._cycle))

    def _enter(self, cycle_index: int) -> None:
        self._cycle_index = cycle_index
        self._phase_elapsed = 0
        self.phase = self._cycle[cycle_index][0]

    # ------------------------------------------------------------------
    # Page events
    # ------------------------------------------------------------------

    def set_hidden(self, hidden: bool) -> None:
        self._hidden = hidden
        self._notify()

    def set_focused(self, focused: bool) -> None:
        self._blurred = not focused
        self._notify()

    def handle_key(self, press: KeyPress) -> bool:
        """Returns True when the key is an evasion attempt and must be suppressed."""
        kind = classify_key(press)
        if kind is None:
            return False
        logger.info("evasion attempt trapped: %s", kind.value)
        self.last_evasion = kind
        self._warning_left = self._evasion_warning_s
        self._notify()
        return True

    # ------------------------------------------------------------------
    # Decisions
    # ------------------------------------------------------------------

    def available_decisions(self) -> Tuple[Decision, ...]:
        if self.is_complete and self.decision is None:
            return (Decision.HONOR, Decision.BYPASS)
        return ()

    def decide(self, decision: Decision) -> Decision:
        if decision not in self.available_decisions():
            raise DecisionUnavailable(
                f"cannot {decision.value} in phase {self.phase.value}"
                + (" (already decided)" if self.decision else "")
            )
        self.decision = decision
        self._notify()
        return decision

    def _notify(self) -> None:
        state = self.state()
        for listener in self._listeners:
            try:
                listener(state)
            except Exception:
                logger.exception("breathing listener failed")
