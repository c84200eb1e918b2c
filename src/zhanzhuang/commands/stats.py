"""Command 'stats': streak, totals and the 7-day calendar."""

from dataclasses import asdict

import typer

from zhanzhuang.models.stats import summarize
from zhanzhuang.services.app_context import build_app_context
from zhanzhuang.ui.display import render_week
from zhanzhuang.utils.ui.console import get_console

console = get_console()


def format_duration(minutes: float) -> str:
    """Format minutes as hours and minutes."""
    hours = int(minutes // 60)
    mins = int(minutes % 60)
    if hours > 0:
        return f"{hours}h {mins}m"
    return f"{mins}m"


def stats(
    output: str = typer.Option(None, "--output", "-o", help="Output format (json)"),
) -> None:
    """Show practice statistics."""
    ctx = build_app_context()
    summary = summarize(ctx.history.records)

    if output == "json":
        data = asdict(summary)
        data["total_minutes"] = summary.total_minutes
        console.print_json(data=data)
        return

    console.print("\n[bold green]站桩禅院 · Practice Summary[/bold green]\n")
    console.print(f"Current Streak: [bold]{summary.streak}[/bold] days")
    console.print(f"Sessions: [bold]{summary.total_sessions}[/bold]")
    console.print(f"Total Time: [bold]{format_duration(summary.total_minutes)}[/bold]")
    console.print(f"Practice Days: {summary.practice_days}")
    console.print("\n[bold]Last 7 Days[/bold]")
    console.print(render_week(summary.week))
    console.print()
