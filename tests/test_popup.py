"""Tests for the popup's focus-status poller."""

import asyncio

import pytest
import pytest_asyncio

from waitful.actions.badge import BadgeIndicator
from waitful.actions.focus_mode import FocusModeController
from waitful.popup.status import FocusStatusPoller, format_countdown, is_distracting
from waitful.runtime.background import BackgroundRuntime
from waitful.runtime.bus import MessageBus


@pytest_asyncio.fixture()
async def runtime(clock):
    rt = BackgroundRuntime(
        focus=FocusModeController(badge=BadgeIndicator(), clock=clock, tick_interval_s=0.01),
        bus=MessageBus(reply_timeout_s=0.5),
    )
    await rt.start()
    yield rt
    await rt.stop()


@pytest_asyncio.fixture()
async def popup(runtime):
    poller = FocusStatusPoller(runtime.bus.send_message, tick_interval_s=0.01)
    yield poller
    await poller.stop()


async def _until(predicate, limit=100):
    for _ in range(limit):
        if predicate():
            return
        await asyncio.sleep(0.01)
    raise AssertionError("condition never met")


class TestFormatting:
    @pytest.mark.parametrize("seconds,expected", [(0, "0:00"), (5, "0:05"), (65, "1:05"), (1500, "25:00")])
    def test_countdown(self, seconds, expected):
        assert format_countdown(seconds) == expected

    def test_current_tab_indicator(self):
        sites = ["youtube.com", {"domain": "reddit.com", "favicon": "x"}]
        assert is_distracting("https://www.reddit.com/r/all", sites) is True
        assert is_distracting("https://github.com", sites) is False
        assert is_distracting("chrome://newtab", sites) is False


class TestPolling:
    async def test_start_focus_polls_remaining(self, popup, clock):
        assert await popup.start_focus(minutes=25) is True
        assert popup.focus_active is True
        clock.advance(65)
        await _until(lambda: popup.remaining == 1500 - 65)
        assert popup.countdown == "23:55"
        assert popup.badge_text == "23m"

    async def test_session_end_stops_polling(self, popup, clock):
        finished = []
        popup.register_finished_listener(lambda: finished.append(True))
        await popup.start_focus(minutes=1)
        clock.advance(61)
        await _until(lambda: not popup.polling)
        assert popup.focus_active is False
        assert popup.remaining is None
        assert popup.badge_text == ""
        assert finished == [True]

    async def test_cancel_from_popup(self, popup, runtime):
        await popup.start_focus(minutes=10)
        await popup.cancel_focus()
        assert popup.polling is False
        assert runtime.focus.session.active is False
        assert await popup.poll_once() == 0

    async def test_cancel_from_another_surface_is_eventually_seen(self, popup, runtime):
        await popup.start_focus(minutes=10)
        other = FocusStatusPoller(runtime.bus.send_message)
        await other.cancel_focus()
        await _until(lambda: not popup.focus_active)

    async def test_resume_picks_up_existing_session(self, popup, runtime):
        await runtime.bus.send_message({"type": "START_FOCUS_MODE", "duration": 300})
        await popup.resume()
        assert popup.focus_active is True
        assert popup.polling is True
        assert popup.remaining == 300

    async def test_resume_without_session_stays_idle(self, popup):
        await popup.resume()
        assert popup.focus_active is False
        assert popup.polling is False


class TestMissingReplies:
    async def test_start_not_acknowledged(self):
        async def silent(_payload):
            return None

        poller = FocusStatusPoller(silent)
        assert await poller.start_focus(minutes=5) is False
        assert poller.focus_active is False

    async def test_no_reply_keeps_last_snapshot(self):
        replies = iter([{"success": True}, None, {"remaining_seconds": 42}])

        async def flaky(_payload):
            return next(replies)

        poller = FocusStatusPoller(flaky, tick_interval_s=10)
        await poller.start_focus(minutes=5)
        assert await poller.poll_once() == -1
        assert poller.remaining == 300
        assert await poller.poll_once() == 42
        await poller.stop()


class TestStopping:
    async def test_stop_returns_when_cancel_is_swallowed(self):
        """A poll whose reply lands together with the cancel must not keep the loop alive."""
        in_flight = asyncio.Event()

        async def racing(payload):
            if payload["type"] == "START_FOCUS_MODE":
                return {"success": True}
            in_flight.set()
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                pass
            return {"remaining_seconds": 30}

        poller = FocusStatusPoller(racing, tick_interval_s=0.01)
        await poller.start_focus(minutes=5)
        await asyncio.wait_for(in_flight.wait(), 1)

        await asyncio.wait_for(poller.stop(), 1)
        assert poller.polling is False

    async def test_cancel_leaves_no_stale_snapshot(self):
        in_flight = asyncio.Event()

        async def racing(payload):
            if payload["type"] != "GET_REMAINING_TIME":
                return {"success": True}
            in_flight.set()
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                pass
            return {"remaining_seconds": 30}

        poller = FocusStatusPoller(racing, tick_interval_s=0.01)
        await poller.start_focus(minutes=5)
        await asyncio.wait_for(in_flight.wait(), 1)

        await asyncio.wait_for(poller.cancel_focus(), 1)
        assert poller.remaining is None
        assert poller.focus_active is False
