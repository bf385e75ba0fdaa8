"""MCP server for streakboard.

Exposes the signed-in user's tasks and the leaderboards as MCP tools.
Run via: python3 -m streakboard.mcp_server
"""
from __future__ import annotations

from typing import Any

from mcp.server.fastmcp import FastMCP

mcp = FastMCP(name="streakboard")


def _get_session():
    from streakboard.cli import build_session
    # stdout carries the JSON-RPC stream; nothing may print to it.
    return build_session(on_streak_broken=None).start()


def _close(session) -> None:
    session.close()
    session.store.close()


@mcp.tool()
def get_tasks(include_archived: bool = False) -> dict[str, Any]:
    """Get the signed-in user's tasks with current and longest streaks."""
    session = _get_session()
    try:
        if not session.signed_in:
            return {"error": "Not signed in. Run: streakboard login <account>"}
        tasks = session.tasks if include_archived else session.active_tasks
        return {
            "username": session.username,
            "tasks": [t.to_dict() for t in tasks],
            "count": len(tasks),
        }
    finally:
        _close(session)


@mcp.tool()
def mark_done(task_id: int) -> dict[str, Any]:
    """Mark a task done for today. Marking the same day twice changes nothing."""
    from streakboard.errors import StreakboardError

    session = _get_session()
    try:
        if not session.signed_in:
            return {"error": "Not signed in. Run: streakboard login <account>"}
        if session.needs_onboarding:
            return {"error": "Choose a username first. Run: streakboard username <name>"}
        try:
            result = session.mark_today(task_id)
        except StreakboardError as exc:
            return {"error": str(exc)}
        return {
            "status": result.status.value,
            "streak_broken": result.streak_broken,
            "task": result.task.to_dict(),
        }
    finally:
        _close(session)


@mcp.tool()
def get_leaderboard() -> dict[str, Any]:
    """Get the top users for the weekly, monthly, yearly, and all-time windows."""
    session = _get_session()
    try:
        if not session.signed_in:
            return {"error": "Not signed in. Run: streakboard login <account>"}
        return {
            "leaderboards": {w.value: entries for w, entries in session.leaderboard.items()},
            "username": session.username,
        }
    finally:
        _close(session)


def main() -> None:
    mcp.run()


if __name__ == "__main__":
    main()
