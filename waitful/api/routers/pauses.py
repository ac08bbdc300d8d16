"""
/pauses — read access to the append-only pause log.
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Request

from ...agent.pause_log import PauseLog
from ...api.schemas import PauseLogDayOut, PauseLogEntryOut

router = APIRouter(prefix="/pauses", tags=["pauses"])


def _get_pause_log(request: Request) -> PauseLog:
    return PauseLog(request.app.state.store)


@router.get("/logs", response_model=List[PauseLogDayOut])
def get_logs(day: Optional[str] = None, log: PauseLog = Depends(_get_pause_log)):
    """All days, or just *day* (e.g. "Mon Oct 19 2026")."""
    logs = log.all()
    if day is not None:
        logs = {day: logs.get(day, [])}
    return [
        PauseLogDayOut(
            day=d,
            entries=[PauseLogEntryOut(**e.__dict__) for e in entries],
        )
        for d, entries in logs.items()
    ]
