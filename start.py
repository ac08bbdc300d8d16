"""
Convenience launcher — starts the Waitful background runtime and (optionally)
the browser simulator against it.

Usage:
    python start.py             # runtime only
    python start.py --simulate  # runtime + one simulator pass
"""

from __future__ import annotations

import argparse
import subprocess
import sys
import time


def start_runtime() -> subprocess.Popen:
    return subprocess.Popen(
        [sys.executable, "-m", "waitful.main"],
        stdout=sys.stdout,
        stderr=sys.stderr,
    )


def run_simulator() -> int:
    return subprocess.call([sys.executable, "scripts/simulate.py", "--speed", "4"])


def main() -> None:
    parser = argparse.ArgumentParser(description="Start the Waitful runtime")
    parser.add_argument("--simulate", action="store_true", help="Also run the browser simulator once")
    args = parser.parse_args()

    print("Starting Waitful runtime…")
    runtime_proc = start_runtime()

    if args.simulate:
        time.sleep(1.5)  # give the runtime a moment to bind
        run_simulator()

    print("\nRuntime → http://127.0.0.1:8766")
    print("Press Ctrl+C to stop.\n")

    try:
        runtime_proc.wait()
    except KeyboardInterrupt:
        print("\nShutting down…")
        runtime_proc.terminate()
        runtime_proc.wait()


if __name__ == "__main__":
    main()
