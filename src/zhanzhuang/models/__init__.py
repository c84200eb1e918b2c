"""Core models: timer state machine, session records, statistics."""

from .session import SessionRecord, new_record
from .stats import DayActivity, LedgerSummary, compute_streak, summarize, week_activity
from .timer import (
    AsyncioTickScheduler,
    CompletionEvent,
    ManualTickScheduler,
    TimerEngine,
    TimerSnapshot,
    TimerStatus,
    format_clock,
)
from .wisdom import Blessing, Quote, WisdomResult

__all__ = [
    "AsyncioTickScheduler",
    "Blessing",
    "CompletionEvent",
    "DayActivity",
    "LedgerSummary",
    "ManualTickScheduler",
    "Quote",
    "SessionRecord",
    "TimerEngine",
    "TimerSnapshot",
    "TimerStatus",
    "WisdomResult",
    "compute_streak",
    "format_clock",
    "new_record",
    "summarize",
    "week_activity",
]
