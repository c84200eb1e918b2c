"""Tests for the live timer loop in commands/session.py.

Keys come from a scripted keyboard; ticks from ``ManualTickScheduler``.
Script entries that are callables run in place of a keypress.
"""

from __future__ import annotations

import io
import logging
from unittest.mock import MagicMock

import httpx
import pytest
from rich.console import Console

from zhanzhuang.commands.session import SessionView, run_session
from zhanzhuang.exceptions import ConfigError
from zhanzhuang.models.timer import ManualTickScheduler, TimerEngine, TimerStatus
from zhanzhuang.services.app_context import AppContext
from zhanzhuang.services.config_service import ConfigService
from zhanzhuang.services.wisdom import FALLBACK_BLESSING, FALLBACK_QUOTE, WisdomProvider
from zhanzhuang.ui.display import TimerDisplay


class ScriptedKeyboard:
    def __init__(self, *script):
        self.script = list(script)
        self.stopped = False

    def get_key(self):
        if not self.script:
            return "q"
        item = self.script.pop(0)
        if callable(item):
            item()
            return None
        return item

    def stop(self):
        self.stopped = True


class RecordingDisplay(TimerDisplay):
    def __init__(self):
        super().__init__(Console(file=io.StringIO(), width=100))
        self.calls = []

    def create_layout(self, snap, quote, streak, week, audio_enabled=False, completed=None):
        self.calls.append(
            {"snap": snap, "quote": quote, "streak": streak, "audio": audio_enabled, "completed": completed}
        )
        return super().create_layout(snap, quote, streak, week, audio_enabled, completed)


@pytest.fixture()
def ctx(history, offline_wisdom):
    return AppContext(config_service=ConfigService(), history=history, wisdom=offline_wisdom)


async def _run(ctx, keyboard, scheduler, duration=3, display=None):
    return await run_session(
        ctx,
        duration,
        display or RecordingDisplay(),
        keyboard,
        scheduler=scheduler,
        poll_interval=0,
    )


class TestRunSession:
    @pytest.mark.asyncio
    async def test_completed_session_recorded(self, ctx):
        scheduler = ManualTickScheduler()
        display = RecordingDisplay()
        keyboard = ScriptedKeyboard(None, lambda: scheduler.advance(3), None, None, "q")

        completed = await _run(ctx, keyboard, scheduler, display=display)

        assert completed is not None
        assert completed.record.duration_seconds == 3
        assert completed.blessing == FALLBACK_BLESSING
        assert completed.streak == 1
        assert len(ctx.history) == 1
        assert keyboard.stopped
        # The completion card was on screen before quitting.
        assert any(call["completed"] is completed for call in display.calls)

    @pytest.mark.asyncio
    async def test_quit_before_completion(self, ctx):
        scheduler = ManualTickScheduler()
        keyboard = ScriptedKeyboard(lambda: scheduler.advance(1), "q")

        assert await _run(ctx, keyboard, scheduler) is None
        assert len(ctx.history) == 0
        assert scheduler.active == []

    @pytest.mark.asyncio
    async def test_pause_stops_countdown(self, ctx):
        scheduler = ManualTickScheduler()
        display = RecordingDisplay()
        keyboard = ScriptedKeyboard("p", lambda: scheduler.advance(10), "q")

        assert await _run(ctx, keyboard, scheduler, display=display) is None
        paused = [c["snap"] for c in display.calls if c["snap"].status is TimerStatus.PAUSED]
        assert paused and paused[-1].remaining_seconds == 3

    @pytest.mark.asyncio
    async def test_space_resumes(self, ctx):
        scheduler = ManualTickScheduler()
        keyboard = ScriptedKeyboard("p", " ", lambda: scheduler.advance(3), None, "q")

        completed = await _run(ctx, keyboard, scheduler)
        assert completed is not None

    @pytest.mark.asyncio
    async def test_reset_then_run_again(self, ctx):
        scheduler = ManualTickScheduler()
        keyboard = ScriptedKeyboard(
            lambda: scheduler.advance(3), None, "r", "p", lambda: scheduler.advance(3), None, "q"
        )

        await _run(ctx, keyboard, scheduler)
        assert len(ctx.history) == 2

    @pytest.mark.asyncio
    async def test_sound_toggle_persisted(self, ctx):
        scheduler = ManualTickScheduler()
        display = RecordingDisplay()
        keyboard = ScriptedKeyboard("m", None, "q")

        await _run(ctx, keyboard, scheduler, display=display)

        assert display.calls[-1]["audio"] is True
        assert ConfigService().config.audio_enabled is True

    @pytest.mark.asyncio
    async def test_sound_toggle_save_failure_keeps_session(self, ctx, mocker, caplog):
        mocker.patch.object(ctx.config_service, "save_config", side_effect=ConfigError("disk full"))
        scheduler = ManualTickScheduler()
        display = RecordingDisplay()
        keyboard = ScriptedKeyboard(
            lambda: scheduler.advance(1), "m", lambda: scheduler.advance(5), None, "q"
        )

        with caplog.at_level(logging.WARNING, logger="zhanzhuang"):
            completed = await _run(ctx, keyboard, scheduler, display=display)

        assert completed is not None
        assert len(ctx.history) == 1
        assert display.calls[-1]["audio"] is True
        assert any("Sound setting not saved" in r.getMessage() for r in caplog.records)

    @pytest.mark.asyncio
    async def test_quote_shown_once_fetched(self, ctx):
        scheduler = ManualTickScheduler()
        display = RecordingDisplay()
        keyboard = ScriptedKeyboard(None, None, None, "q")

        await _run(ctx, keyboard, scheduler, display=display)
        assert display.calls[-1]["quote"] == FALLBACK_QUOTE

    @pytest.mark.asyncio
    async def test_failed_quote_logged(self, history, caplog):
        def handler(request):
            return httpx.Response(500)

        wisdom = WisdomProvider(api_key="k", transport=httpx.MockTransport(handler))
        ctx = AppContext(config_service=ConfigService(), history=history, wisdom=wisdom)
        scheduler = ManualTickScheduler()
        keyboard = ScriptedKeyboard(*([None] * 50), "q")

        with caplog.at_level(logging.WARNING, logger="zhanzhuang"):
            async with wisdom:
                await _run(ctx, keyboard, scheduler)

        assert any("Ambient quote fell back" in r.getMessage() for r in caplog.records)


class TestSessionView:
    def test_blessing_after_reset_not_shown(self):
        scheduler = ManualTickScheduler()
        engine = TimerEngine(scheduler, duration_seconds=1)
        view = SessionView(engine)
        engine.subscribe(view.on_state)

        engine.start()
        scheduler.advance(1)
        engine.reset()

        completed = MagicMock()
        view.show_completed(completed)
        assert view.completed is None
        assert view.last_completed is completed

    def test_card_cleared_on_reset(self):
        scheduler = ManualTickScheduler()
        engine = TimerEngine(scheduler, duration_seconds=1)
        view = SessionView(engine)
        engine.subscribe(view.on_state)

        engine.start()
        scheduler.advance(1)
        view.show_completed(marker := MagicMock())
        assert view.completed is marker

        engine.reset()
        assert view.completed is None
