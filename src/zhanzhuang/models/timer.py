"""Countdown state machine driving a meditation session.

The engine does no I/O. Time enters only through a ``TickScheduler``: the
engine asks it for a repeating one-second handle when it starts running and
cancels that handle on every way out of RUNNING, so a stray tick can never
decrement a stopped timer.

    IDLE --start--> RUNNING --pause--> PAUSED --start--> RUNNING
    RUNNING --tick (remaining hits 0)--> COMPLETED
    any --reset--> IDLE
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from zhanzhuang.utils.logger import get_logger

logger = get_logger("timer")

TICK_INTERVAL = 1.0


class TimerStatus(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"


@dataclass(frozen=True)
class TimerSnapshot:
    """Immutable view of the engine, handed to state listeners."""

    status: TimerStatus
    duration_seconds: int
    remaining_seconds: int

    @property
    def progress(self) -> float:
        """Fraction of the session still remaining (1.0 at start, 0.0 at end)."""
        if self.duration_seconds <= 0:
            return 0.0
        return self.remaining_seconds / self.duration_seconds

    @property
    def elapsed_seconds(self) -> int:
        return self.duration_seconds - self.remaining_seconds


@dataclass(frozen=True)
class CompletionEvent:
    """Emitted once when a running countdown reaches zero."""

    duration_seconds: int


StateListener = Callable[[TimerSnapshot], None]
CompletionListener = Callable[[CompletionEvent], None]


def format_clock(seconds: int) -> str:
    """Format seconds as MM:SS (minutes may exceed 59)."""
    seconds = max(0, int(seconds))
    return f"{seconds // 60:02d}:{seconds % 60:02d}"


# ---------------------------------------------------------------------------
# Tick scheduling
# ---------------------------------------------------------------------------


class TickHandle(ABC):
    """A repeating tick that can be stopped."""

    @abstractmethod
    def cancel(self) -> None:
        """Stop delivering ticks. Safe to call more than once."""

    @property
    @abstractmethod
    def cancelled(self) -> bool: ...


class TickScheduler(ABC):
    """Source of repeating ticks."""

    @abstractmethod
    def schedule_repeating(
        self, interval: float, callback: Callable[[], None]
    ) -> TickHandle: ...


class _AsyncioTickHandle(TickHandle):
    def __init__(
        self,
        loop: asyncio.AbstractEventLoop,
        interval: float,
        callback: Callable[[], None],
    ):
        self._loop = loop
        self._interval = interval
        self._callback = callback
        self._start = loop.time()
        self._fired = 0
        self._cancelled = False
        self._timer: asyncio.TimerHandle | None = None
        self._schedule_next()

    def _schedule_next(self) -> None:
        # Deadlines are anchored to the start time so slow callbacks do not drift.
        deadline = self._start + (self._fired + 1) * self._interval
        self._timer = self._loop.call_at(deadline, self._fire)

    def _fire(self) -> None:
        self._timer = None
        if self._cancelled:
            return
        self._fired += 1
        try:
            self._callback()
        finally:
            if not self._cancelled:
                self._schedule_next()

    def cancel(self) -> None:
        self._cancelled = True
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class AsyncioTickScheduler(TickScheduler):
    """Ticks delivered by an asyncio event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop

    def schedule_repeating(
        self, interval: float, callback: Callable[[], None]
    ) -> TickHandle:
        loop = self._loop or asyncio.get_running_loop()
        return _AsyncioTickHandle(loop, interval, callback)


class _ManualTickHandle(TickHandle):
    def __init__(self, callback: Callable[[], None]):
        self._callback = callback
        self._cancelled = False

    def fire(self) -> None:
        if not self._cancelled:
            self._callback()

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class ManualTickScheduler(TickScheduler):
    """Scheduler whose ticks are delivered by calling ``advance()``."""

    def __init__(self):
        self.handles: list[_ManualTickHandle] = []

    def schedule_repeating(
        self, interval: float, callback: Callable[[], None]
    ) -> TickHandle:
        handle = _ManualTickHandle(callback)
        self.handles.append(handle)
        return handle

    @property
    def active(self) -> list[_ManualTickHandle]:
        return [h for h in self.handles if not h.cancelled]

    def advance(self, ticks: int = 1) -> None:
        """Deliver *ticks* ticks to every live handle."""
        for _ in range(ticks):
            for handle in self.active:
                handle.fire()


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


class TimerEngine:
    """Countdown timer with explicit IDLE/RUNNING/PAUSED/COMPLETED states."""

    def __init__(self, scheduler: TickScheduler, duration_seconds: int = 600):
        if duration_seconds <= 0:
            raise ValueError("duration_seconds must be positive")

        self._scheduler = scheduler
        self._duration = int(duration_seconds)
        self._remaining = self._duration
        self._status = TimerStatus.IDLE
        self._handle: TickHandle | None = None

        self._state_listeners: list[StateListener] = []
        self._completion_listeners: list[CompletionListener] = []

    # ----- State -----
    @property
    def status(self) -> TimerStatus:
        return self._status

    @property
    def duration_seconds(self) -> int:
        return self._duration

    @property
    def remaining_seconds(self) -> int:
        return self._remaining

    def snapshot(self) -> TimerSnapshot:
        return TimerSnapshot(
            status=self._status,
            duration_seconds=self._duration,
            remaining_seconds=self._remaining,
        )

    # ----- Listeners -----
    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a state listener; returns a function that removes it."""
        self._state_listeners.append(listener)
        return lambda: self._state_listeners.remove(listener)

    def on_complete(self, listener: CompletionListener) -> Callable[[], None]:
        """Register a completion listener; returns a function that removes it."""
        self._completion_listeners.append(listener)
        return lambda: self._completion_listeners.remove(listener)

    # ----- Commands -----
    def start(self) -> bool:
        """Start or resume the countdown. Returns False if not allowed."""
        if self._status not in (TimerStatus.IDLE, TimerStatus.PAUSED):
            return False
        if self._remaining <= 0:
            return False

        self._handle = self._scheduler.schedule_repeating(TICK_INTERVAL, self.tick)
        self._transition(TimerStatus.RUNNING)
        return True

    def pause(self) -> bool:
        """Freeze the countdown. Returns False unless it was running."""
        if self._status is not TimerStatus.RUNNING:
            return False
        self._transition(TimerStatus.PAUSED)
        return True

    def reset(self) -> None:
        """Stop and go back to IDLE with the configured duration."""
        self._remaining = self._duration
        self._transition(TimerStatus.IDLE)

    def set_duration(self, seconds: int) -> bool:
        """Change the session length. Only honoured while IDLE."""
        if seconds <= 0:
            raise ValueError("duration must be positive")
        if self._status is not TimerStatus.IDLE:
            logger.debug("set_duration(%s) ignored while %s", seconds, self._status.value)
            return False

        self._duration = int(seconds)
        self._remaining = self._duration
        self._emit_state()
        return True

    def tick(self) -> None:
        """Advance one second. Bound to the scheduler; ignored unless RUNNING."""
        if self._status is not TimerStatus.RUNNING:
            return

        self._remaining = max(0, self._remaining - 1)
        if self._remaining > 0:
            self._emit_state()
            return

        # Status changes before anyone is told, so re-entrant or late ticks
        # fall into the guard above and completion fires once.
        self._transition(TimerStatus.COMPLETED)
        event = CompletionEvent(duration_seconds=self._duration)
        for listener in list(self._completion_listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("completion listener failed")

    # ----- Internals -----
    def _transition(self, status: TimerStatus) -> None:
        if status is not TimerStatus.RUNNING:
            self._cancel_tick()
        self._status = status
        self._emit_state()

    def _cancel_tick(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _emit_state(self) -> None:
        snap = self.snapshot()
        for listener in list(self._state_listeners):
            try:
                listener(snap)
            except Exception:
                logger.exception("state listener failed")
