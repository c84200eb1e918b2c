"""Turns a finished countdown into a ledger entry and a blessing."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date

from zhanzhuang.models.session import RecordIdFactory, SessionRecord, new_record
from zhanzhuang.models.stats import compute_streak
from zhanzhuang.models.timer import CompletionEvent, TimerEngine
from zhanzhuang.models.wisdom import Blessing
from zhanzhuang.services.wisdom import WisdomProvider
from zhanzhuang.storage.history import HistoryStore
from zhanzhuang.utils.logger import get_logger

logger = get_logger("session")


@dataclass(frozen=True)
class SessionCompleted:
    """Everything the presentation layer shows when a session ends."""

    record: SessionRecord
    streak: int
    blessing: Blessing
    persisted: bool
    blessing_from_fallback: bool = False


class SessionOrchestrator:
    """
    Listens for timer completion and records the session.

    Work runs as an asyncio task created from the completion callback, so
    the engine is never blocked on storage or the network. Results go to
    *on_completed*, if given.
    """

    def __init__(
        self,
        history: HistoryStore,
        wisdom: WisdomProvider,
        on_completed: Callable[[SessionCompleted], None] | None = None,
        today: Callable[[], date] = date.today,
        id_factory: RecordIdFactory | None = None,
    ):
        self.history = history
        self.wisdom = wisdom
        self.on_completed = on_completed
        self._today = today
        self._id_factory = id_factory
        self._tasks: set[asyncio.Task] = set()

    def attach(self, engine: TimerEngine) -> Callable[[], None]:
        """Subscribe to *engine* completions. Returns the unsubscribe function."""
        return engine.on_complete(self.handle_completion)

    def handle_completion(self, event: CompletionEvent) -> asyncio.Task:
        """Completion listener: schedule ``complete()`` on the running loop."""
        task = asyncio.get_running_loop().create_task(
            self._complete_and_notify(event.duration_seconds)
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait for in-flight completions (used before shutting down)."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks))

    async def complete(self, duration_seconds: int) -> SessionCompleted:
        """Record a session of *duration_seconds* and fetch its blessing."""
        today = self._today()
        record = new_record(duration_seconds, today=today, id_factory=self._id_factory)

        appended = self.history.append(record)
        streak = compute_streak(self.history.records, today=today)
        logger.info(
            "Session %s recorded: %ss on %s, streak %d",
            record.id,
            record.duration_seconds,
            record.date,
            streak,
        )

        result = await self.wisdom.fetch_completion_blessing(duration_seconds // 60)
        if result.error:
            logger.warning("Blessing fell back to static text: %s", result.error)

        return SessionCompleted(
            record=record,
            streak=streak,
            blessing=result.value,
            persisted=appended.persisted,
            blessing_from_fallback=result.is_fallback,
        )

    async def _complete_and_notify(self, duration_seconds: int) -> SessionCompleted:
        completed = await self.complete(duration_seconds)
        if self.on_completed is not None:
            self.on_completed(completed)
        return completed
