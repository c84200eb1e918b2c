"""Completed-session records and their JSON form."""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import date
from typing import Any

# Field names of the stored form. Fixed for compatibility with existing
# ledgers, which predate this package.
ID_FIELD = "id"
DURATION_FIELD = "duration"
DATE_FIELD = "date"


@dataclass(frozen=True)
class SessionRecord:
    """One completed meditation session."""

    id: str
    duration_seconds: int
    date: str  # YYYY-MM-DD, local time, day the session completed

    @property
    def minutes(self) -> int:
        """Whole minutes of the configured duration."""
        return self.duration_seconds // 60

    @property
    def day(self) -> date:
        """Parse date as a datetime.date."""
        return date.fromisoformat(self.date)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the stored dictionary form."""
        return {
            ID_FIELD: self.id,
            DURATION_FIELD: self.duration_seconds,
            DATE_FIELD: self.date,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], fallback_id: str = "") -> SessionRecord:
        """Create from the stored dictionary form.

        Extra keys are ignored. A missing or non-numeric duration becomes 0
        and a missing id becomes *fallback_id*. A missing date, or one not
        written as YYYY-MM-DD, cannot be defaulted and raises ValueError.
        """
        raw_date = data.get(DATE_FIELD)
        if not isinstance(raw_date, str) or not raw_date:
            raise ValueError(f"record has no usable date: {data!r}")
        # Only YYYY-MM-DD; streaks compare these strings lexicographically.
        if date.fromisoformat(raw_date).isoformat() != raw_date:
            raise ValueError(f"record date is not YYYY-MM-DD: {raw_date!r}")

        raw_duration = data.get(DURATION_FIELD, 0)
        try:
            duration = max(0, int(raw_duration))
        except (TypeError, ValueError):
            duration = 0

        raw_id = data.get(ID_FIELD)
        record_id = str(raw_id) if raw_id not in (None, "") else fallback_id

        return cls(id=record_id, duration_seconds=duration, date=raw_date)


class RecordIdFactory:
    """Issues millisecond-timestamp ids, unique within one process."""

    def __init__(self, clock=time.time):
        self._clock = clock
        self._last = ""
        self._dupes = 0

    def __call__(self) -> str:
        stamp = str(int(self._clock() * 1000))
        if stamp == self._last:
            self._dupes += 1
            return f"{stamp}-{self._dupes}"
        self._last = stamp
        self._dupes = 0
        return stamp


_default_ids = RecordIdFactory()


def new_record(
    duration_seconds: int,
    today: date | None = None,
    id_factory: RecordIdFactory | None = None,
) -> SessionRecord:
    """Build the record for a session completing now (or on *today*)."""
    day = today or date.today()
    make_id = id_factory or _default_ids
    return SessionRecord(
        id=make_id(),
        duration_seconds=int(duration_seconds),
        date=day.isoformat(),
    )
