"""
Central configuration for the Waitful background runtime.
All values can be overridden via environment variables or a local config.json.
"""

from __future__ import annotations

import json
import os
from dataclasses import MISSING, dataclass, field, fields
from pathlib import Path

_ROOT = Path(__file__).parent.parent
_CONFIG_FILE = _ROOT / "config.json"


@dataclass
class Config:
    # API
    api_host: str = "127.0.0.1"
    api_port: int = 8766

    # Timing
    tick_interval_s: float = 1.0             # focus badge + breathing countdown
    reply_timeout_s: float = 2.0             # how long a sender waits for a reply
    ready_delay_s: int = 1                   # "ready" phase before breathing starts
    evasion_warning_s: int = 3               # how long the evasion reminder stays up

    # Focus sessions
    default_focus_minutes: int = 25

    # Storage
    data_dir: Path = field(default_factory=lambda: _ROOT / "data")
    local_store_db: str = "local_store.db"

    # Breathing pause
    breathing_pattern: str = "single"        # "single" (one long inhale) or "box"

    log_level: str = "INFO"

    def __post_init__(self):
        self.data_dir = Path(self.data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)

    @classmethod
    def load(cls, config_file: Path = _CONFIG_FILE) -> "Config":
        """Defaults, then config.json, then WAITFUL_* env vars, passed to the constructor together."""
        overrides = {}
        if config_file.exists():
            saved = json.loads(config_file.read_text())
            overrides.update({k: v for k, v in saved.items() if k in cls.__dataclass_fields__})
        for f in fields(cls):
            env_key = f"WAITFUL_{f.name.upper()}"
            if env_key in os.environ:
                default = f.default_factory() if f.default is MISSING else f.default
                overrides[f.name] = type(default)(os.environ[env_key])
        return cls(**overrides)


# Module-level singleton
config = Config.load()
