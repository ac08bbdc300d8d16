"""
Browser Simulator — drives the Waitful runtime the way the extension's
contexts would, so you can watch the whole system work without a browser.

Usage:
    # Make sure the runtime is running first:
    #   python start.py
    # Then in a separate terminal:
    python scripts/simulate.py                       # default: all scenarios
    python scripts/simulate.py --scenario visit      # specific scenario
    python scripts/simulate.py --url https://www.reddit.com/r/python
    python scripts/simulate.py --speed 4.0           # 4x faster ticks
"""

from __future__ import annotations

import argparse
import asyncio
from typing import Awaitable, Callable, Dict

from waitful.agent.interception import InterceptionAgent
from waitful.agent.page import Page
from waitful.api.client import RuntimeClient
from waitful.breathing.evasion import KeyPress
from waitful.config import config
from waitful.popup.status import FocusStatusPoller
from waitful.settings import read_pause_settings
from waitful.storage import LocalStore

API = f"http://{config.api_host}:{config.api_port}"


# ---------------------------------------------------------------------------
# Scenarios
# ---------------------------------------------------------------------------

async def scenario_focus(client: RuntimeClient, url: str, speed: float) -> None:
    """Popup starts a one-minute focus session, watches it, then cancels."""
    poller = FocusStatusPoller(client.send_message, tick_interval_s=1.0 / speed)
    ok = await poller.start_focus(minutes=1)
    print(f"  {'✓' if ok else '✗'} START_FOCUS_MODE acknowledged")
    for _ in range(5):
        await asyncio.sleep(1.0 / speed)
        print(f"    popup {poller.countdown:>6}   badge {poller.badge_text!r}")
    await poller.cancel_focus()
    remaining = await poller.poll_once()
    print(f"  ✓ cancelled, GET_REMAINING_TIME -> {remaining}")


async def _visit(client: RuntimeClient, url: str, speed: float, script) -> None:
    store = LocalStore(config.data_dir / config.local_store_db)
    page = Page(url)
    agent = InterceptionAgent(
        page,
        store,
        post_message=lambda m: asyncio.ensure_future(client.post_message(m)),
        tick_interval_s=1.0 / speed,
    )
    if not await agent.on_page_load():
        print(f"  - {url} is not on the distracting list {read_pause_settings().distracting_sites}")
        return
    overlay = agent.overlay
    print(f"  ✓ pause shown on {agent.domain}")
    await script(page, speed)
    while not overlay.machine.is_complete:
        s = overlay.machine.state()
        print(f"    {s.phase.value:<8} {s.remaining_seconds:>3}s  {overlay.main_message()} {overlay.reminder()}")
        await asyncio.sleep(1.0 / speed)
    for label, value in overlay.stats().items():
        print(f"    {value:>24}  {label}")
    print(f"  → options: {list(overlay.decisions().values())}; proceeding to site")
    await overlay.bypass("proceed")
    await asyncio.sleep(0.1)


async def scenario_visit(client: RuntimeClient, url: str, speed: float) -> None:
    """A distracting page loads, the tab is hidden for a while, then restored."""
    async def script(page: Page, speed: float):
        await asyncio.sleep(1.0 / speed)
        page.set_hidden(True)
        print("    (tab hidden)")
        await asyncio.sleep(3.0 / speed)
        page.set_hidden(False)
        print("    (tab visible again)")
    await _visit(client, url, speed, script)


async def scenario_evasion(client: RuntimeClient, url: str, speed: float) -> None:
    """User tries refresh, dev tools and Escape during the pause."""
    async def script(page: Page, speed: float):
        for combo in ("F5", "Ctrl+Shift+I", "Escape"):
            reached = page.press_key(KeyPress.parse(combo))
            print(f"    {combo:<14} {'reached page' if reached else 'trapped'}")
            await asyncio.sleep(0.5 / speed)
    await _visit(client, url, speed, script)


SCENARIOS: Dict[str, Callable[[RuntimeClient, str, float], Awaitable[None]]] = {
    "focus": scenario_focus,
    "visit": scenario_visit,
    "evasion": scenario_evasion,
}


# ---------------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------------

async def run(names: list[str], url: str, speed: float) -> None:
    async with RuntimeClient(base_url=API) as client:
        for name in names:
            print(f"\n{'─' * 60}")
            print(f"  SCENARIO: {name.upper()}")
            print(f"{'─' * 60}")
            await SCENARIOS[name](client, url, speed)


def main() -> None:
    parser = argparse.ArgumentParser(description="Waitful browser simulator")
    parser.add_argument(
        "--scenario",
        choices=list(SCENARIOS.keys()) + ["all"],
        default="all",
        help="Which scenario to run (default: all)",
    )
    parser.add_argument("--url", default="https://www.youtube.com/watch?v=abc", help="Page to visit")
    parser.add_argument("--speed", type=float, default=1.0, help="Speed multiplier (default 1.0)")
    args = parser.parse_args()

    names = list(SCENARIOS) if args.scenario == "all" else [args.scenario]
    print(f"Runtime: {API}  |  Speed: {args.speed}×")
    asyncio.run(run(names, args.url, args.speed))
    print("\n[✓] Simulation complete.")


if __name__ == "__main__":
    main()
