"""Tests for the local store, the pause log and per-site visit stats."""

from datetime import datetime

import pytest

from waitful.agent.pause_log import PauseAction, PauseLog, day_key
from waitful.agent.site_history import FIRST_VISIT, SiteHistory, format_time_ago
from waitful.storage import PAUSE_LOGS, SITE_HISTORY, SITE_STATS, LocalStore

NOW = 1_760_000_000.0


class TestLocalStore:
    def test_missing_keys_are_omitted(self, store):
        assert store.get(["nothing"]) == {}

    def test_set_then_get(self, store):
        store.set({"a": {"x": [1, 2]}, "b": 3})
        assert store.get(["a", "b"]) == {"a": {"x": [1, 2]}, "b": 3}

    def test_set_overwrites(self, store):
        store.set({"a": 1})
        store.set({"a": 2})
        assert store.get(["a"]) == {"a": 2}

    def test_remove(self, store):
        store.set({"a": 1, "b": 2})
        store.remove(["a"])
        assert store.get(["a", "b"]) == {"b": 2}

    def test_empty_key_list(self, store):
        assert store.get([]) == {}

    def test_survives_reopen(self, tmp_path):
        LocalStore(tmp_path / "s.db").set({"k": "v"})
        assert LocalStore(tmp_path / "s.db").get(["k"]) == {"k": "v"}


class TestPauseLog:
    def test_entries_grouped_by_day(self, store):
        log = PauseLog(store)
        log.append(PauseAction.INITIATED, "youtube.com", duration=7, timestamp=NOW)
        log.append(PauseAction.SKIPPED, "youtube.com", reason="proceed", timestamp=NOW + 10)
        day = day_key(NOW)
        entries = log.for_day(day)
        assert [e.action for e in entries] == ["initiated", "skipped"]
        assert entries[0].duration == 7
        assert entries[1].reason == "proceed"

    def test_day_key_format(self):
        ts = datetime(2026, 10, 19, 12, 0).timestamp()
        assert day_key(ts) == "Mon Oct 19 2026"

    def test_append_only_keeps_earlier_days(self, store):
        log = PauseLog(store)
        log.append(PauseAction.INITIATED, "a.com", timestamp=NOW)
        log.append(PauseAction.INITIATED, "b.com", timestamp=NOW + 3 * 86_400)
        assert len(log.all()) == 2

    def test_absent_optionals_not_stored(self, store):
        PauseLog(store).append(PauseAction.COMPLETED, "a.com", timestamp=NOW)
        raw = store.get([PAUSE_LOGS])[PAUSE_LOGS][day_key(NOW)][0]
        assert raw == {"timestamp": NOW, "action": "completed", "domain": "a.com"}

    def test_empty_log(self, store):
        assert PauseLog(store).all() == {}
        assert PauseLog(store).for_day("Mon Oct 19 2026") == []


class TestFormatTimeAgo:
    @pytest.mark.parametrize("seconds_ago,expected", [
        (5, "just now"),
        (60, "1 minute ago"),
        (150, "2 minutes ago"),
        (3600, "1 hour ago"),
        (5 * 3600, "5 hours ago"),
        (86_400, "1 day ago"),
        (3 * 86_400, "3 days ago"),
    ])
    def test_buckets(self, seconds_ago, expected):
        now_ms = NOW * 1000
        assert format_time_ago(now_ms - seconds_ago * 1000, now_ms) == expected


class TestSiteHistory:
    def test_first_visit(self, store):
        summary = SiteHistory(store).record_visit("youtube.com", now=NOW)
        assert summary.visits_in_last_24h == 1
        assert summary.last_visit_ago == FIRST_VISIT

    def test_counts_recent_visits_including_this_one(self, store):
        history = SiteHistory(store)
        history.record_visit("youtube.com", now=NOW - 2 * 86_400)   # too old to count
        history.record_visit("youtube.com", now=NOW - 3600)
        summary = history.record_visit("youtube.com", now=NOW)
        assert summary.visits_in_last_24h == 2
        assert summary.last_visit_ago == "1 hour ago"

    def test_keyed_by_bare_hostname(self, store):
        history = SiteHistory(store)
        history.record_visit("www.reddit.com", now=NOW)
        history.record_visit("reddit.com", now=NOW + 1)
        assert history.attempts("reddit.com") == 2
        assert set(store.get([SITE_HISTORY])[SITE_HISTORY]) == {"reddit.com"}

    def test_merge_preserves_other_hosts(self, store):
        history = SiteHistory(store)
        history.record_visit("a.com", now=NOW)
        history.record_visit("b.com", now=NOW)
        stats = store.get([SITE_STATS])[SITE_STATS]
        assert stats["a.com"]["attempts"] == 1
        assert stats["b.com"]["attempts"] == 1
        assert "lastAttempt" in stats["a.com"]

    def test_unknown_host_has_no_attempts(self, store):
        assert SiteHistory(store).attempts("nowhere.org") == 0
