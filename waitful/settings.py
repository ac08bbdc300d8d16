"""
User settings ("sync" area) — persisted to data/settings.json.

The settings editors are separate surfaces; this module only honours their
read/write contract. Import get_settings() to read current values,
update_settings(patch) to mutate and save, and read_pause_settings() for the
typed snapshot the interception agent decides on.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List

from .config import config

logger = logging.getLogger(__name__)

_FILE: Path = config.data_dir / "settings.json"

# Storage keys are part of the contract shared with the editors.
DISTRACTING_SITES = "distractingSites"
PAUSE_DURATION = "pauseDuration"
ENABLE_PAUSES = "enablePauses"
DEFAULT_FOCUS_TIME = "defaultFocusTime"

DEFAULT_PAUSE_SECONDS = 7

DEFAULTS: dict[str, Any] = {
    DISTRACTING_SITES: [],           # str domains or {"domain": ..., "favicon": ...}
    PAUSE_DURATION: DEFAULT_PAUSE_SECONDS,
    ENABLE_PAUSES: True,
    DEFAULT_FOCUS_TIME: config.default_focus_minutes,
}

_current: dict[str, Any] = {}


@dataclass(frozen=True)
class PauseSettings:
    """Read-only snapshot taken by an agent at decision time."""
    distracting_sites: List[str] = field(default_factory=list)
    pause_duration: int = DEFAULT_PAUSE_SECONDS
    enabled: bool = True


# Fail-safe snapshot: nothing gets intercepted.
DISABLED = PauseSettings(distracting_sites=[], enabled=False)


def _coerce(key: str, value: Any) -> Any:
    default = DEFAULTS[key]
    if isinstance(default, list):
        if not isinstance(value, list):
            raise ValueError(f"{key} must be a list")
        return list(value)
    if isinstance(default, bool) and isinstance(value, str):
        return value.strip().lower() not in ("false", "0", "no", "")
    # coerce to the same type as the default
    return type(default)(value)


def _load() -> None:
    global _current
    _current = {k: (list(v) if isinstance(v, list) else v) for k, v in DEFAULTS.items()}
    if not _FILE.exists():
        return
    try:
        saved = json.loads(_FILE.read_text())
    except (OSError, ValueError):
        logger.warning("settings file %s unreadable, using defaults", _FILE)
        return
    if not isinstance(saved, dict):
        logger.warning("settings file %s is not an object, using defaults", _FILE)
        return
    # a bad value only resets its own key
    for k, v in saved.items():
        if k not in DEFAULTS:
            continue
        try:
            _current[k] = _coerce(k, v)
        except (TypeError, ValueError):
            logger.warning("settings key %s has bad value %r, using default", k, v)


def get_settings() -> dict[str, Any]:
    """Return a copy of the current settings dict."""
    if not _current:
        _load()
    return {k: (list(v) if isinstance(v, list) else v) for k, v in _current.items()}


def update_settings(patch: dict[str, Any]) -> dict[str, Any]:
    """Apply *patch* (unknown keys ignored), persist to disk, return full settings."""
    if not _current:
        _load()
    # validate the whole patch before touching the live settings
    coerced = {k: _coerce(k, v) for k, v in patch.items() if k in DEFAULTS}
    _current.update(coerced)
    _FILE.parent.mkdir(parents=True, exist_ok=True)
    _FILE.write_text(json.dumps(_current, indent=2))
    return get_settings()


def normalize_site(entry: Any) -> str:
    """Bare lowercase domain for a stored site entry ('' when unusable)."""
    if isinstance(entry, dict):
        entry = entry.get("domain", "")
    if not isinstance(entry, str):
        return ""
    return entry.strip().lower()


def read_pause_settings() -> PauseSettings:
    s = get_settings()
    sites = [d for d in (normalize_site(e) for e in s[DISTRACTING_SITES]) if d]
    duration = s[PAUSE_DURATION]
    return PauseSettings(
        distracting_sites=sites,
        pause_duration=duration if duration > 0 else DEFAULT_PAUSE_SECONDS,
        enabled=s[ENABLE_PAUSES] is not False,
    )


# Eagerly load on import
_load()
