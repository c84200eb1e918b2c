"""Command 'start': the live meditation timer."""

from __future__ import annotations

import asyncio

import typer
from rich.live import Live

from zhanzhuang.exceptions import ConfigError
from zhanzhuang.models.config_models import MAX_MINUTES, MIN_MINUTES, clamp_minutes
from zhanzhuang.models.stats import compute_streak, week_activity
from zhanzhuang.models.timer import (
    AsyncioTickScheduler,
    TickScheduler,
    TimerEngine,
    TimerSnapshot,
    TimerStatus,
)
from zhanzhuang.models.wisdom import Quote
from zhanzhuang.services.app_context import AppContext, build_app_context
from zhanzhuang.services.session_service import SessionCompleted, SessionOrchestrator
from zhanzhuang.ui.display import TimerDisplay, blessing_panel
from zhanzhuang.ui.keyboard import get_keyboard_handler
from zhanzhuang.utils.logger import get_logger
from zhanzhuang.utils.ui.console import get_console

console = get_console()
logger = get_logger("cli")

POLL_INTERVAL = 0.25


class SessionView:
    """Screen state fed by engine and orchestrator callbacks."""

    def __init__(self, engine: TimerEngine):
        self.engine = engine
        self.quote: Quote | None = None
        self.completed: SessionCompleted | None = None
        self.last_completed: SessionCompleted | None = None

    def on_state(self, snap: TimerSnapshot) -> None:
        if snap.status is not TimerStatus.COMPLETED:
            self.completed = None

    def show_completed(self, completed: SessionCompleted) -> None:
        self.last_completed = completed
        # The card only appears while the finished timer is still on screen.
        if self.engine.status is TimerStatus.COMPLETED:
            self.completed = completed
        else:
            logger.debug("Blessing for %s arrived after reset, not shown", completed.record.id)


async def run_session(
    ctx: AppContext,
    duration_seconds: int,
    display: TimerDisplay,
    keyboard,
    scheduler: TickScheduler | None = None,
    poll_interval: float = POLL_INTERVAL,
) -> SessionCompleted | None:
    """Drive one timer screen until the user quits.

    Returns the last completed session, if any.
    """
    engine = TimerEngine(scheduler or AsyncioTickScheduler(), duration_seconds)
    view = SessionView(engine)
    engine.subscribe(view.on_state)

    orchestrator = SessionOrchestrator(ctx.history, ctx.wisdom, on_completed=view.show_completed)
    orchestrator.attach(engine)

    quote_task = asyncio.create_task(ctx.wisdom.fetch_ambient_wisdom())
    audio_enabled = ctx.config_service.config.audio_enabled

    def render():
        records = ctx.history.records
        return display.create_layout(
            engine.snapshot(),
            view.quote,
            compute_streak(records),
            week_activity(records),
            audio_enabled=audio_enabled,
            completed=view.completed,
        )

    engine.start()
    try:
        with Live(render(), console=display.console, refresh_per_second=4, screen=True) as live:
            while True:
                key = keyboard.get_key()
                if key == "q":
                    break
                if key in ("p", " "):
                    if engine.status is TimerStatus.RUNNING:
                        engine.pause()
                    else:
                        engine.start()
                elif key == "r":
                    engine.reset()
                elif key == "m":
                    audio_enabled = not audio_enabled
                    try:
                        ctx.config_service.set_audio_enabled(audio_enabled)
                    except ConfigError as e:
                        logger.warning("Sound setting not saved, kept for this session: %s", e)

                if view.quote is None and quote_task.done():
                    result = quote_task.result()
                    if result.error:
                        logger.warning("Ambient quote fell back to static text: %s", result.error)
                    view.quote = result.value

                live.update(render())
                await asyncio.sleep(poll_interval)
    finally:
        keyboard.stop()
        engine.reset()
        await orchestrator.drain()
        if not quote_task.done():
            quote_task.cancel()

    return view.last_completed


def start(
    minutes: int = typer.Option(
        None,
        "--minutes",
        "-m",
        help=f"Session length in minutes ({MIN_MINUTES}-{MAX_MINUTES}); defaults to the configured length",
    ),
) -> None:
    """Start a standing-meditation session."""
    ctx = build_app_context()
    minutes = clamp_minutes(minutes if minutes is not None else ctx.default_minutes)

    async def _run():
        async with ctx.wisdom:
            return await run_session(
                ctx,
                minutes * 60,
                TimerDisplay(console),
                get_keyboard_handler(),
            )

    completed = asyncio.run(_run())
    if completed is not None:
        console.print(blessing_panel(completed))
    else:
        console.print("[dim]Session ended before completion[/dim]")
