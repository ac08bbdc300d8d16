"""
/settings — the read/write contract the settings editors rely on.
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException

from ...api.schemas import SettingsPatch
from ...settings import DEFAULTS, get_settings, normalize_site, update_settings

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("")
def read_settings():
    """Return current settings with their defaults for reference."""
    return {"settings": get_settings(), "defaults": DEFAULTS}


@router.put("")
def write_settings(patch: SettingsPatch):
    """Apply a partial update; unknown keys are ignored. Persists to data/settings.json."""
    data = {k: v for k, v in patch.model_dump(by_alias=True).items() if v is not None}
    sites = data.get("distractingSites")
    if sites is not None and any(not normalize_site(s) for s in sites):
        raise HTTPException(status_code=422, detail="Every distracting site needs a domain")
    return {"settings": update_settings(data)}
