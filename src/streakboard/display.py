"""Rich terminal display for streakboard."""

from __future__ import annotations

from datetime import date

from rich import box
from rich.console import Console, Group
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from streakboard.leaderboard import medal
from streakboard.models import Task
from streakboard.streaks import CompletionResult, CompletionStatus
from streakboard.windows import WINDOWS, Window, month_grid

console = Console()

_WEEKDAYS = ("Mo", "Tu", "We", "Th", "Fr", "Sa", "Su")


def format_number(n: int) -> str:
    """Format large numbers: 421543 -> '421.5K', 1200 -> '1,200', 1234567 -> '1.2M'."""
    if n >= 1_000_000:
        value = n / 1_000_000
        if value >= 100:
            return f"{value:.0f}M"
        return f"{value:.1f}M"
    if n >= 10_000:
        return f"{n / 1_000:.1f}K"
    return f"{n:,}"


def _month_table(task: Task, today: date) -> Table:
    """Calendar grid for today's month, completed days in green, today underlined."""
    days = month_grid(today)
    done = set(task.history)
    table = Table(box=None, show_header=True, header_style="bold", pad_edge=False)
    for name in _WEEKDAYS:
        table.add_column(name, justify="right", width=3)

    cells: list[str] = [""] * date.fromisoformat(days[0]).weekday()
    for d in days:
        label = str(int(d[-2:]))
        style = "bold white on green" if d in done else "grey50"
        if d == today.isoformat():
            style += " underline"
        cells.append(f"[{style}]{label:>2}[/]")
    while len(cells) % 7:
        cells.append("")
    for i in range(0, len(cells), 7):
        table.add_row(*cells[i:i + 7])
    return table


def print_task_card(task: Task, today: date) -> None:
    """Print one task with its streaks and this month's calendar."""
    header = (
        f"  \U0001f525 Streak: [bold]{task.streak}[/] days  |  "
        f"\U0001f3c6 Longest: [bold]{task.longest_streak}[/] days"
    )
    panel = Panel(
        Group(header, "", _month_table(task, today)),
        title=f"[bold]{escape(task.name)}[/] [grey50](#{task.id})[/]",
        box=box.ROUNDED,
        border_style="green" if today.isoformat() in task.history else "grey50",
        width=50,
    )
    console.print(panel)


def print_calendar(data: dict) -> None:
    """Print the calendar page: active task cards, then the archived list.

    data keys: username, active (list[Task]), archived (list[Task]), today (date).
    """
    today = data.get("today") or date.today()
    active: list[Task] = data.get("active", [])
    archived: list[Task] = data.get("archived", [])

    console.print(f"[bold]\U0001f525 Streaks[/] for [bold]{escape(data.get('username') or 'anon')}[/]"
                  f"  [grey50]{today.strftime('%B %Y')}[/]")
    if not active:
        console.print("  No active tasks. Add one with: [bold]streakboard add <name>[/]")
    for task in active:
        print_task_card(task, today)

    if archived:
        table = Table(title="Archived", box=box.ROUNDED, show_header=True, header_style="bold")
        table.add_column("ID", justify="right")
        table.add_column("Task")
        table.add_column("Longest", justify="right")
        table.add_column("Completions", justify="right")
        for task in archived:
            table.add_row(
                str(task.id), escape(task.name), f"{task.longest_streak} days",
                format_number(len(task.history)),
            )
        console.print(table)


def print_dashboard(leaderboard: dict[Window, list[dict]], highlight_username: str | None = None) -> None:
    """Print one ranked table per leaderboard window."""
    console.print("[bold]\U0001f30d Leaderboards[/]")
    for window in WINDOWS:
        table = Table(
            title=window.heading,
            box=box.ROUNDED,
            show_header=True,
            header_style="bold",
            width=50,
        )
        table.add_column("", width=2)
        table.add_column("User", min_width=20)
        table.add_column("Completions", justify="right")
        entries = leaderboard.get(window, [])
        if not entries:
            table.add_row("", "[grey50]No users yet[/]", "")
        for entry in entries:
            name = escape(entry["username"])
            if highlight_username and entry["username"] == highlight_username:
                name = f"[bold cyan]{name}[/]"
            table.add_row(medal(entry["rank"]), name, format_number(entry["count"]))
        console.print(table)


def print_completion_result(result: CompletionResult) -> None:
    task = result.task
    if result.status is CompletionStatus.DUPLICATE:
        console.print(f"[yellow]{escape(task.name)} is already marked done today.[/]")
        return
    if result.status is CompletionStatus.INVALID_DATE:
        console.print(f"[red]Could not mark {escape(task.name)}: invalid date.[/]")
        return
    console.print(
        f"[green]✅ {escape(task.name)}[/]  \U0001f525 {task.streak}  |  \U0001f3c6 {task.longest_streak}"
    )


def print_streak_broken(task: Task, result: CompletionResult) -> None:
    gap = f" ({result.gap_days} days since last time)" if result.gap_days else ""
    console.print(f"[bold red]Streak broken![/] {escape(task.name)}{gap}")


def print_task_action(action: str, task: Task) -> None:
    console.print(f"{action} [bold]{escape(task.name)}[/] [grey50](#{task.id})[/]")


def print_login_result(display_name: str, username: str | None) -> None:
    lines = ["", f"  Signed in as [bold]{escape(display_name)}[/]"]
    if username:
        lines.append(f"  Username: [bold]{escape(username)}[/]")
    else:
        lines.append("  Pick a leaderboard name: [bold]streakboard username <name>[/]")
    lines.append("")
    console.print(Panel("\n".join(lines), title="[bold]STREAKBOARD[/]", box=box.ROUNDED,
                        border_style="green", width=50))


def print_onboarding_needed() -> None:
    console.print(
        "[yellow]Choose a username first: [bold]streakboard username <name>[/][/]"
    )
