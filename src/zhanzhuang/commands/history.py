"""Command 'history': latest completed sessions."""

import typer

from zhanzhuang.services.app_context import build_app_context
from zhanzhuang.ui.display import history_table
from zhanzhuang.utils.ui.console import get_console

console = get_console()


def history(
    limit: int = typer.Option(5, "--limit", "-n", min=1, help="Number of sessions to show"),
) -> None:
    """Show the most recent sessions."""
    ctx = build_app_context()
    records = ctx.history.recent(limit)

    if not records:
        console.print("[yellow]No sessions yet. Start one with 'zhanzhuang start'.[/yellow]")
        return

    console.print(history_table(records))
