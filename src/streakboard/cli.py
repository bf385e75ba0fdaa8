"""CLI commands for streakboard."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.prompt import Confirm

from streakboard.config import get_db_path, get_leaderboard_size, is_strict_dates
from streakboard.db import UserStore
from streakboard.display import (
    console,
    print_calendar,
    print_completion_result,
    print_dashboard,
    print_login_result,
    print_onboarding_needed,
    print_streak_broken,
    print_task_action,
)
from streakboard.errors import NotSignedInError, StreakboardError
from streakboard.identity import LocalIdentityProvider
from streakboard.session import HabitSession, Page


def build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    parser = argparse.ArgumentParser(
        prog="streakboard",
        description="Track daily habits, streaks, and a shared leaderboard",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Show debug logging")
    subparsers = parser.add_subparsers(dest="command")
    login_p = subparsers.add_parser("login", help="Sign in (creates the account on first use)")
    login_p.add_argument("account", help="Account name")
    subparsers.add_parser("logout", help="Sign out")
    subparsers.add_parser("whoami", help="Show the signed-in account")
    username_p = subparsers.add_parser("username", help="Set your leaderboard name (once)")
    username_p.add_argument("name")
    add_p = subparsers.add_parser("add", help="Add a task")
    add_p.add_argument("name", nargs="+")
    rename_p = subparsers.add_parser("rename", help="Rename a task")
    rename_p.add_argument("task_id", type=int)
    rename_p.add_argument("name", nargs="+")
    delete_p = subparsers.add_parser("delete", help="Delete a task and its history")
    delete_p.add_argument("task_id", type=int)
    delete_p.add_argument("--yes", "-y", action="store_true", help="Skip confirmation")
    archive_p = subparsers.add_parser("archive", help="Archive or unarchive a task")
    archive_p.add_argument("task_id", type=int)
    done_p = subparsers.add_parser("done", help="Mark a task done for today")
    done_p.add_argument("task_id", type=int)
    subparsers.add_parser("calendar", help="Show tasks with this month's calendar")
    subparsers.add_parser("dashboard", help="Show the leaderboards")
    return parser


def configure_logging(verbose: bool = False) -> None:
    """Route log records through rich on stderr."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def build_session(config_path: Path | None = None, on_streak_broken=print_streak_broken) -> HabitSession:
    """Wire a session to the configured store and identity provider.

    Pass on_streak_broken=None where stdout is not a terminal (the MCP server).
    """
    store = UserStore(get_db_path(config_path))
    return HabitSession(
        store,
        LocalIdentityProvider(config_path),
        leaderboard_size=get_leaderboard_size(config_path),
        strict_dates=is_strict_dates(config_path),
        on_streak_broken=on_streak_broken,
    )


def main(argv: list[str] | None = None) -> None:
    """Entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)
    command = args.command or "calendar"

    session = build_session()
    exit_code = 0
    try:
        session.start()
        result = run_command(session, command, args)
        if not result.get("ok", True):
            exit_code = 1
    except (StreakboardError, ValueError) as exc:
        console.print(f"[red]{escape(str(exc))}[/]")
        exit_code = 1
    finally:
        session.close()
        session.store.close()
    if exit_code:
        sys.exit(exit_code)


def run_command(session: HabitSession, command: str, args: argparse.Namespace) -> dict:
    if command == "login":
        return do_login(session, args.account)
    if command == "logout":
        return do_logout(session)
    if command == "whoami":
        return do_whoami(session)
    if command == "username":
        return do_username(session, args.name)
    if command == "add":
        return do_add(session, " ".join(args.name))
    if command == "rename":
        return do_rename(session, args.task_id, " ".join(args.name))
    if command == "delete":
        return do_delete(session, args.task_id, yes=args.yes)
    if command == "archive":
        return do_archive(session, args.task_id)
    if command == "done":
        return do_done(session, args.task_id)
    if command == "dashboard":
        return do_dashboard(session)
    return do_calendar(session)


def _onboarded(session: HabitSession) -> bool:
    """True when the user is signed in and has a username; prints a hint otherwise."""
    if not session.signed_in:
        raise NotSignedInError()
    if session.needs_onboarding:
        print_onboarding_needed()
        return False
    return True


def do_login(session: HabitSession, account: str) -> dict:
    identity = session.identity.sign_in(account)
    print_login_result(identity.display_name, session.username)
    return {"ok": True, "uid": identity.uid, "username": session.username}


def do_logout(session: HabitSession) -> dict:
    session.identity.sign_out()
    console.print("Signed out.")
    return {"ok": True}


def do_whoami(session: HabitSession) -> dict:
    identity = session.identity.current_identity()
    if identity is None:
        console.print("Not signed in.")
        return {"ok": True, "uid": None}
    print_login_result(identity.display_name, session.username)
    return {"ok": True, "uid": identity.uid, "username": session.username}


def do_username(session: HabitSession, name: str) -> dict:
    username = session.set_username(name)
    console.print(f"[green]Username set to [bold]{escape(username)}[/][/]")
    return {"ok": True, "username": username}


def do_add(session: HabitSession, name: str) -> dict:
    if not _onboarded(session):
        return {"ok": False, "reason": "no_username"}
    task = session.add_task(name)
    print_task_action("Added", task)
    return {"ok": True, "task": task}


def do_rename(session: HabitSession, task_id: int, name: str) -> dict:
    if not _onboarded(session):
        return {"ok": False, "reason": "no_username"}
    task = session.rename_task(task_id, name)
    print_task_action("Renamed to", task)
    return {"ok": True, "task": task}


def do_delete(session: HabitSession, task_id: int, yes: bool = False) -> dict:
    if not _onboarded(session):
        return {"ok": False, "reason": "no_username"}
    task = session.find_task(task_id)
    if not yes and not Confirm.ask(f"Delete task [bold]{escape(task.name)}[/]?", console=console):
        return {"ok": False, "reason": "cancelled"}
    session.delete_task(task_id)
    print_task_action("Deleted", task)
    return {"ok": True, "task": task}


def do_archive(session: HabitSession, task_id: int) -> dict:
    if not _onboarded(session):
        return {"ok": False, "reason": "no_username"}
    task = session.toggle_archive(task_id)
    print_task_action("Archived" if task.archived else "Unarchived", task)
    return {"ok": True, "task": task}


def do_done(session: HabitSession, task_id: int) -> dict:
    if not _onboarded(session):
        return {"ok": False, "reason": "no_username"}
    result = session.mark_today(task_id)
    print_completion_result(result)
    return {"ok": True, "status": result.status.value, "streak_broken": result.streak_broken,
            "task": result.task}


def do_calendar(session: HabitSession) -> dict:
    if not _onboarded(session):
        return {"ok": False, "reason": "no_username"}
    session.show(Page.CALENDAR)
    print_calendar({
        "username": session.username,
        "active": session.active_tasks,
        "archived": session.archived_tasks,
        "today": session.today(),
    })
    return {"ok": True, "active": len(session.active_tasks), "archived": len(session.archived_tasks)}


def do_dashboard(session: HabitSession) -> dict:
    if not _onboarded(session):
        return {"ok": False, "reason": "no_username"}
    session.show(Page.DASHBOARD)
    print_dashboard(session.leaderboard, highlight_username=session.username)
    return {"ok": True, "leaderboard": session.leaderboard}


if __name__ == "__main__":
    main()
