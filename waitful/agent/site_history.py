"""
Site visit stats — per-host visit history shown on the completed pause.

Two shapes live side by side, both keyed by bare hostname:
    siteHistory[host] = {"visitTimestamps": [ms, ...]}
    siteStats[host]   = {"attempts": n, "lastAttempt": iso8601}
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional

from ..storage import SITE_HISTORY, SITE_STATS, LocalStore
from .site_match import strip_www

_DAY_MS = 24 * 60 * 60 * 1000


@dataclass
class VisitSummary:
    visits_in_last_24h: int       # includes the visit being recorded
    last_visit_ago: str


def format_time_ago(timestamp_ms: float, now_ms: Optional[float] = None) -> str:
    now_ms = time.time() * 1000 if now_ms is None else now_ms
    seconds = int((now_ms - timestamp_ms) // 1000)
    if seconds < 60:
        return "just now"
    minutes = seconds // 60
    if minutes < 60:
        return f"{minutes} minute{'s' if minutes > 1 else ''} ago"
    hours = minutes // 60
    if hours < 24:
        return f"{hours} hour{'s' if hours > 1 else ''} ago"
    days = hours // 24
    return f"{days} day{'s' if days > 1 else ''} ago"


FIRST_VISIT = "this is your first visit"


class SiteHistory:

    def __init__(self, store: LocalStore):
        self._store = store

    def record_visit(self, host: str, now: Optional[float] = None) -> VisitSummary:
        """
        Count one visit to *host* and summarise the visits before it.
        Read-merge-write of both stat maps; other hosts' entries are preserved.
        """
        host = strip_www(host)
        now = time.time() if now is None else now
        now_ms = now * 1000

        current = self._store.get([SITE_HISTORY, SITE_STATS])
        history = current.get(SITE_HISTORY) or {}
        stats = current.get(SITE_STATS) or {}

        previous: List[float] = list(history.get(host, {}).get("visitTimestamps", []))
        recent = [ts for ts in previous if ts > now_ms - _DAY_MS]
        summary = VisitSummary(
            visits_in_last_24h=len(recent) + 1,
            last_visit_ago=format_time_ago(previous[-1], now_ms) if previous else FIRST_VISIT,
        )

        history[host] = {"visitTimestamps": previous + [now_ms]}
        site_stats = stats.get(host, {})
        stats[host] = {
            "attempts": int(site_stats.get("attempts", 0)) + 1,
            "lastAttempt": datetime.fromtimestamp(now, tz=timezone.utc).isoformat(),
        }
        self._store.set({SITE_HISTORY: history, SITE_STATS: stats})
        return summary

    def attempts(self, host: str) -> int:
        stats = self._store.get([SITE_STATS]).get(SITE_STATS) or {}
        return int(stats.get(strip_www(host), {}).get("attempts", 0))
