"""
Pause log — append-only record of every pause shown, honoured or bypassed,
grouped by local calendar day under the "pauseLogs" key.
"""

from __future__ import annotations

import time
from dataclasses import asdict, dataclass
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from ..storage import PAUSE_LOGS, LocalStore


class PauseAction(str, Enum):
    INITIATED = "initiated"
    COMPLETED = "completed"
    SKIPPED = "skipped"


@dataclass
class PauseLogEntry:
    timestamp: float              # epoch seconds
    action: str
    domain: str
    reason: Optional[str] = None
    duration: Optional[int] = None

    def to_dict(self) -> dict:
        return {k: v for k, v in asdict(self).items() if v is not None}


def day_key(timestamp: float) -> str:
    """Local calendar day, e.g. "Mon Oct 19 2026"."""
    return datetime.fromtimestamp(timestamp).strftime("%a %b %d %Y")


class PauseLog:

    def __init__(self, store: LocalStore):
        self._store = store

    def append(
        self,
        action: PauseAction,
        domain: str,
        reason: Optional[str] = None,
        duration: Optional[int] = None,
        timestamp: Optional[float] = None,
    ) -> PauseLogEntry:
        """Read-merge-write the day's list; concurrent writers race last-write-wins."""
        ts = time.time() if timestamp is None else timestamp
        entry = PauseLogEntry(
            timestamp=ts, action=action.value, domain=domain, reason=reason, duration=duration
        )
        logs = self._store.get([PAUSE_LOGS]).get(PAUSE_LOGS) or {}
        logs.setdefault(day_key(ts), []).append(entry.to_dict())
        self._store.set({PAUSE_LOGS: logs})
        return entry

    def all(self) -> Dict[str, List[PauseLogEntry]]:
        logs = self._store.get([PAUSE_LOGS]).get(PAUSE_LOGS) or {}
        return {day: [PauseLogEntry(**e) for e in entries] for day, entries in logs.items()}

    def for_day(self, day: str) -> List[PauseLogEntry]:
        return self.all().get(day, [])
