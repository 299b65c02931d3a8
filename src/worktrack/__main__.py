"""Entry point: python -m worktrack <command>

- projects / clients / add / progress / delete: manage records
- stats:  dashboard figures
- timer:  show, start or pause the stopwatch
- watch:  live timer display (asyncio tick)
"""

from __future__ import annotations

import asyncio
import logging
import sys

from worktrack.config import load_config


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _run_watch() -> None:
    """Live timer display until Ctrl+C."""
    config = load_config()
    _setup_logging(config.log_level)

    from worktrack.cli import watch

    try:
        asyncio.run(watch(config))
    except KeyboardInterrupt:
        pass


def _run_command(cmd: str, args: list[str]) -> None:
    config = load_config()
    _setup_logging(config.log_level)

    from worktrack.cli import run_command

    sys.exit(run_command(config, cmd, args))


def _print_usage() -> None:
    print("Usage: worktrack <command> [args]")
    print("  projects [--status S] [query]   List projects (S: all|planning|in-progress|completed)")
    print("  clients                         List clients and their totals")
    print("  add [--no-client] NAME CLIENT [BUDGET] [DEADLINE] [PROGRESS]")
    print("                                  Add a project and update its client (unless --no-client)")
    print("  progress ID DELTA               Adjust progress (capped at 100)")
    print("  delete ID                       Delete a project")
    print("  stats                           Dashboard figures")
    print("  timer [start|pause]             Show or control the stopwatch")
    print("  watch                           Live stopwatch display")


def main() -> None:
    from worktrack.cli import COMMANDS

    cmd = sys.argv[1] if len(sys.argv) > 1 else "stats"

    if cmd == "watch":
        _run_watch()
    elif cmd in COMMANDS:
        _run_command(cmd, sys.argv[2:])
    else:
        _print_usage()
        sys.exit(1)


if __name__ == "__main__":
    main()
