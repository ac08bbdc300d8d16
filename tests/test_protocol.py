"""Tests for the runtime message envelopes."""

import pytest

from waitful.runtime.protocol import (
    Ack,
    CancelFocusMode,
    GetRemainingTime,
    PauseResolved,
    RemainingTime,
    StartFocusMode,
    dump_message,
    parse_message,
)


class TestParseMessage:
    def test_start_focus_mode(self):
        msg = parse_message({"type": "START_FOCUS_MODE", "duration": 1500})
        assert isinstance(msg, StartFocusMode)
        assert msg.duration == 1500

    def test_cancel_focus_mode(self):
        assert isinstance(parse_message({"type": "CANCEL_FOCUS_MODE"}), CancelFocusMode)

    def test_get_remaining_time(self):
        assert isinstance(parse_message({"type": "GET_REMAINING_TIME"}), GetRemainingTime)

    def test_pause_resolved(self):
        msg = parse_message({
            "type": "PAUSE_RESOLVED",
            "outcome": "skipped",
            "domain": "reddit.com",
            "url": "https://www.reddit.com/",
            "reason": "proceed",
        })
        assert isinstance(msg, PauseResolved)
        assert msg.reason == "proceed"

    def test_unknown_type_returns_none(self):
        assert parse_message({"type": "SETTINGS_CHANGED"}) is None

    def test_missing_type_returns_none(self):
        assert parse_message({"duration": 60}) is None

    @pytest.mark.parametrize("payload", [None, "START_FOCUS_MODE", 42, ["GET_REMAINING_TIME"]])
    def test_non_object_returns_none(self, payload):
        assert parse_message(payload) is None

    @pytest.mark.parametrize("duration", [0, -10, "1500", 12.5, True, None])
    def test_bad_duration_returns_none(self, duration):
        assert parse_message({"type": "START_FOCUS_MODE", "duration": duration}) is None

    def test_start_without_duration_returns_none(self):
        assert parse_message({"type": "START_FOCUS_MODE"}) is None

    def test_pause_resolved_bad_outcome_returns_none(self):
        assert parse_message({
            "type": "PAUSE_RESOLVED", "outcome": "ignored", "domain": "x.com",
        }) is None


class TestDumpMessage:
    def test_dump_has_type_tag(self):
        assert dump_message(StartFocusMode(duration=60)) == {
            "type": "START_FOCUS_MODE", "duration": 60,
        }

    def test_reply_wire_keys(self):
        assert Ack().model_dump() == {"success": True}
        assert RemainingTime(remaining_seconds=12).model_dump() == {"remaining_seconds": 12}

    def test_dump_drops_absent_optionals(self):
        body = dump_message(PauseResolved(outcome="completed", domain="x.com"))
        assert "reason" not in body
