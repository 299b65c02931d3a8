"""Terminal front end: renders workspace snapshots and forwards edits.

Each command takes the Workspace and its remaining argv and returns an exit
code. All state changes go through the repositories, the aggregation engine
or the timer.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from collections.abc import Callable
from dataclasses import replace

from worktrack.config import WorktrackConfig
from worktrack.core import Workspace
from worktrack.models import to_number
from worktrack.scheduler.timer import format_elapsed
from worktrack.stats import STATUSES, client_drift, filter_projects, project_status, summarize

logger = logging.getLogger(__name__)

Command = Callable[[Workspace, list[str]], int]


def _usage(text: str) -> int:
    print(f"Usage: worktrack {text}", file=sys.stderr)
    return 2


def _fmt_money(value: int | float) -> str:
    return f"${value:,.2f}" if isinstance(value, float) else f"${value:,}"


def cmd_projects(ws: Workspace, args: list[str]) -> int:
    status = "all"
    if args[:1] == ["--status"]:
        if len(args) < 2 or args[1] not in ("all", *STATUSES):
            return _usage(f"projects [--status {{all,{','.join(STATUSES)}}}] [query]")
        status, args = args[1], args[2:]
    projects = filter_projects(ws.projects.list(), " ".join(args), status)
    if not projects:
        print("No projects found.")
        return 0
    for p in projects:
        print(
            f"{p.id}  {p.name:<24} {p.client:<18} {_fmt_money(p.budget):>12}  "
            f"{p.deadline:<10} {p.progress:>3}%  {project_status(p.progress)}"
        )
    return 0


def cmd_clients(ws: Workspace, args: list[str]) -> int:
    clients = ws.clients.list()
    if not clients:
        print("No clients yet.")
        return 0
    for c in clients:
        print(
            f"[{c.avatar:<2}] {c.name:<24} {c.projects:>3} projects  "
            f"{_fmt_money(c.total_paid):>12}  {c.status}"
        )
    for d in client_drift(ws.projects.list(), clients):
        print(
            f"  ! {d.name}: stored {d.stored_projects} / {_fmt_money(d.stored_total)}, "
            f"projects say {d.actual_projects} / {_fmt_money(d.actual_total)}",
            file=sys.stderr,
        )
    return 0


def cmd_add(ws: Workspace, args: list[str]) -> int:
    update_client = True
    if args[:1] == ["--no-client"]:
        update_client, args = False, args[1:]
    if len(args) < 2 or not args[0].strip() or not args[1].strip():
        return _usage("add [--no-client] NAME CLIENT [BUDGET] [DEADLINE] [PROGRESS]")
    name, client, *rest = args
    data = {"name": name, "client": client}
    for key, value in zip(("budget", "deadline", "progress"), rest):
        data[key] = value
    if update_client:
        project = ws.add_project_and_update_client(data)
    else:
        # client totals are left alone; `clients` will report the drift
        project = ws.projects.add(data)
    print(f"Added {project.name} for {project.client} ({project.id})")
    return 0


def cmd_progress(ws: Workspace, args: list[str]) -> int:
    if len(args) != 2:
        return _usage("progress ID DELTA")
    project = ws.projects.get(args[0])
    if project is None:
        print(f"No project {args[0]}", file=sys.stderr)
        return 1
    progress = min(100, project.progress + to_number(args[1]))
    ws.projects.update(project.id, {"progress": progress})
    print(f"{project.name}: {progress}% ({project_status(progress)})")
    return 0


def cmd_delete(ws: Workspace, args: list[str]) -> int:
    if len(args) != 1:
        return _usage("delete ID")
    if not ws.projects.delete(args[0]):
        print(f"No project {args[0]}", file=sys.stderr)
        return 1
    print(f"Deleted {args[0]}")
    return 0


def cmd_stats(ws: Workspace, args: list[str]) -> int:
    summary = summarize(ws)
    print(f"Total earnings:  {_fmt_money(summary.total_earnings)}")
    print(f"Active clients:  {summary.active_clients}")
    print(f"Tasks due:       {summary.tasks_due} (within {ws.config.stats.due_within_days} days)")
    print(f"Completion rate: {summary.completion_rate}%")
    print(f"Timer:           {ws.timer.formatted()}{' (running)' if ws.timer.is_running else ''}")
    return 0


def cmd_timer(ws: Workspace, args: list[str]) -> int:
    action = args[0] if args else "show"
    if action == "start":
        ws.timer.start()
    elif action == "pause":
        ws.timer.pause()
    elif action != "show":
        return _usage("timer [start|pause]")
    print(f"{ws.timer.formatted()} {'running' if ws.timer.is_running else 'paused'}")
    return 0


COMMANDS: dict[str, Command] = {
    "projects": cmd_projects,
    "clients": cmd_clients,
    "add": cmd_add,
    "progress": cmd_progress,
    "delete": cmd_delete,
    "stats": cmd_stats,
    "timer": cmd_timer,
}


def run_command(config: WorktrackConfig, name: str, args: list[str]) -> int:
    with Workspace(config) as ws:
        return COMMANDS[name](ws, args)


async def watch(config: WorktrackConfig) -> None:
    """Live timer display until interrupted or paused from another session.

    The watcher never writes the timer: each refresh re-reads the stored
    snapshot so a `timer pause` issued elsewhere is seen and not overwritten.
    """
    config = replace(config, timer=replace(config.timer, persist_on_tick=False))
    with Workspace(config) as ws:
        if not ws.timer.is_running:
            print(f"{ws.timer.formatted()} paused (run `worktrack timer start`)")
            return

        try:
            while True:
                sys.stdout.write(
                    f"\r{format_elapsed(ws.timer.elapsed_ms)} running  (Ctrl+C to stop watching)"
                )
                sys.stdout.flush()
                await asyncio.sleep(config.timer.tick_interval)
                ws.timer.reload()
                if not ws.timer.is_running:
                    print(f"\r{ws.timer.formatted()} paused", end="")
                    return
        finally:
            print()
