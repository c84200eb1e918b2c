"""Statistics derived from the session ledger.

Everything here is a pure function of the records and ``today``; nothing is
cached, so out-of-order or same-day records need no special care.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, timedelta

from .session import SessionRecord

WEEK_DAYS = 7


@dataclass(frozen=True)
class DayActivity:
    """One cell of the weekly calendar."""

    date: str  # YYYY-MM-DD
    weekday: int  # 0 = Sunday ... 6 = Saturday
    active: bool


@dataclass(frozen=True)
class LedgerSummary:
    """Headline numbers for the statistics view."""

    streak: int
    total_sessions: int
    total_seconds: int
    practice_days: int
    week: list[DayActivity] = field(default_factory=list)

    @property
    def total_minutes(self) -> int:
        return self.total_seconds // 60


def sunday_weekday(day: date) -> int:
    """Weekday index with Sunday as 0."""
    return (day.weekday() + 1) % 7


def distinct_dates(records: Iterable[SessionRecord]) -> list[str]:
    """Distinct session dates, most recent first."""
    return sorted({r.date for r in records}, reverse=True)


def compute_streak(records: Iterable[SessionRecord], today: date | None = None) -> int:
    """
    Count consecutive practice days ending today or yesterday.

    Several sessions on one day count once. If the latest practice day is
    older than yesterday the streak is broken and 0 is returned.
    """
    dates = distinct_dates(records)
    if not dates:
        return 0

    today = today or date.today()
    today_str = today.isoformat()
    yesterday_str = (today - timedelta(days=1)).isoformat()

    if dates[0] not in (today_str, yesterday_str):
        return 0

    count = 0
    cursor = date.fromisoformat(dates[0])
    for day in dates:
        if day != cursor.isoformat():
            break
        count += 1
        cursor -= timedelta(days=1)

    return count


def week_activity(
    records: Iterable[SessionRecord], today: date | None = None
) -> list[DayActivity]:
    """Seven calendar days ending today, oldest first, flagged if practised."""
    today = today or date.today()
    practised = {r.date for r in records}

    result = []
    for offset in range(WEEK_DAYS - 1, -1, -1):
        day = today - timedelta(days=offset)
        iso = day.isoformat()
        result.append(
            DayActivity(date=iso, weekday=sunday_weekday(day), active=iso in practised)
        )
    return result


def summarize(records: Iterable[SessionRecord], today: date | None = None) -> LedgerSummary:
    """Compute streak, totals and the weekly calendar in one pass over *records*."""
    records = list(records)
    today = today or date.today()
    return LedgerSummary(
        streak=compute_streak(records, today),
        total_sessions=len(records),
        total_seconds=sum(r.duration_seconds for r in records),
        practice_days=len({r.date for r in records}),
        week=week_activity(records, today),
    )
