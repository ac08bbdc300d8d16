"""
Pydantic schemas for the local API.
"""

from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field

# ── Settings ───────────────────────────────────────────────────────────────

class SettingsPatch(BaseModel):
    """Partial update written by the settings editors (contract key names)."""
    model_config = ConfigDict(populate_by_name=True)

    distracting_sites: Optional[List[Any]] = Field(None, alias="distractingSites")
    pause_duration:    Optional[int]       = Field(None, alias="pauseDuration", ge=1, le=300)
    enable_pauses:     Optional[bool]      = Field(None, alias="enablePauses")
    default_focus_time: Optional[int]      = Field(None, alias="defaultFocusTime", ge=1, le=240)


# ── Pause logs ─────────────────────────────────────────────────────────────

class PauseLogEntryOut(BaseModel):
    timestamp: float
    action: str
    domain: str
    reason: Optional[str] = None
    duration: Optional[int] = None


class PauseLogDayOut(BaseModel):
    day: str
    entries: List[PauseLogEntryOut]


# ── Focus status ───────────────────────────────────────────────────────────

class BadgeOut(BaseModel):
    text: str
    remaining_seconds: int
