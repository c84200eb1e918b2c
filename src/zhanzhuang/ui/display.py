"""Rich renderables for the timer screen, history and statistics."""

from __future__ import annotations

from collections.abc import Sequence

from rich.align import Align
from rich.console import Console, Group
from rich.layout import Layout
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from zhanzhuang.models.session import SessionRecord
from zhanzhuang.models.stats import DayActivity
from zhanzhuang.models.timer import TimerSnapshot, TimerStatus, format_clock
from zhanzhuang.models.wisdom import Quote
from zhanzhuang.services.session_service import SessionCompleted

WEEKDAY_LABELS = ("日", "一", "二", "三", "四", "五", "六")

DEFAULT_ADVICE = "双脚与肩同宽，膝盖微曲，保持呼吸平稳，意守丹田。"

BAR_WIDTH = 40


def render_week(week: Sequence[DayActivity]) -> Text:
    """One row of day cells, practised days highlighted."""
    text = Text(justify="center")
    for i, day in enumerate(week):
        if i:
            text.append(" ")
        label = "✓" if day.active else WEEKDAY_LABELS[day.weekday]
        style = "bold white on green" if day.active else "dim"
        text.append(f" {label} ", style=style)
    return text


def render_progress(snap: TimerSnapshot, width: int = BAR_WIDTH) -> Text:
    done = 1.0 - snap.progress
    filled = int(width * done)
    bar = "▓" * filled + "░" * (width - filled)
    return Text(f"{bar}  {int(done * 100)}%", style="dim", justify="center")


def quote_panel(quote: Quote | None) -> Panel:
    if quote is None:
        body = Text("…", style="dim", justify="center")
    else:
        body = Group(
            Text(f"「{quote.quote}」", style="italic", justify="center"),
            Text(f"— {quote.author}", style="dim", justify="center"),
        )
    return Panel(body, border_style="green")


def blessing_panel(completed: SessionCompleted) -> Panel:
    """The completion card: blessing, duration and streak."""
    lines = [
        Text(completed.blessing.title, style="bold green", justify="center"),
        Text(""),
        Text(f"“{completed.blessing.message}”", justify="center"),
        Text(""),
        Text(
            f"本次站桩 {completed.record.minutes} 分钟  ·  {completed.streak} 天连修",
            style="cyan",
            justify="center",
        ),
    ]
    if not completed.persisted:
        lines.append(
            Text("Warning: session not saved to disk", style="yellow", justify="center")
        )
    return Panel(Group(*lines), border_style="green", padding=(1, 2))


def history_table(records: Sequence[SessionRecord]) -> Table:
    table = Table(title=f"Recent Sessions ({len(records)})", show_header=True)
    table.add_column("Date", style="cyan")
    table.add_column("Duration", justify="right")
    table.add_column("ID", style="dim")
    for record in records:
        table.add_row(record.date, f"{record.minutes}m", record.id)
    return table


class TimerDisplay:
    """Builds the full-screen layout for the live timer."""

    def __init__(self, console: Console | None = None):
        self.console = console or Console()

    def create_layout(
        self,
        snap: TimerSnapshot,
        quote: Quote | None,
        streak: int,
        week: Sequence[DayActivity],
        audio_enabled: bool = False,
        completed: SessionCompleted | None = None,
    ) -> Layout:
        layout = Layout()
        layout.split_column(
            Layout(name="header", size=3),
            Layout(name="body"),
            Layout(name="footer", size=3),
        )

        header = Text(justify="center")
        header.append("站桩禅院", style="bold green")
        header.append(f"   {streak} 天连修", style="cyan")
        header.append("   ♪" if audio_enabled else "   ∅", style="dim")
        layout["header"].update(Align.center(header, vertical="middle"))

        if completed is not None:
            body = blessing_panel(completed)
        else:
            body = self._create_body(snap, quote, week)
        layout["body"].update(Align.center(body, vertical="middle"))

        layout["footer"].update(
            Align.center(self._create_footer(snap.status), vertical="middle")
        )
        return layout

    def _create_body(
        self, snap: TimerSnapshot, quote: Quote | None, week: Sequence[DayActivity]
    ) -> Group:
        if snap.status is TimerStatus.PAUSED:
            color = "yellow"
        elif snap.status is TimerStatus.COMPLETED:
            color = "green"
        elif snap.remaining_seconds < 60 and snap.status is TimerStatus.RUNNING:
            color = "red"
        else:
            color = "cyan"

        advice = quote.advice if quote is not None else DEFAULT_ADVICE
        return Group(
            quote_panel(quote),
            Text(""),
            Text(format_clock(snap.remaining_seconds), style=f"bold {color}", justify="center"),
            Text(snap.status.value.upper(), style=color, justify="center"),
            Text(""),
            render_progress(snap),
            Text(""),
            render_week(week),
            Text(""),
            Text(advice, style="dim italic", justify="center"),
        )

    @staticmethod
    def _create_footer(status: TimerStatus) -> Text:
        if status is TimerStatus.RUNNING:
            hints = "'p' pause  •  'r' reset  •  'm' sound  •  'q' quit"
        elif status is TimerStatus.COMPLETED:
            hints = "'r' new session  •  'q' quit"
        else:
            hints = "'p' start  •  'r' reset  •  'm' sound  •  'q' quit"
        return Text(hints, style="dim", justify="center")
