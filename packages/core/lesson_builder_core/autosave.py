"""Debounced autosave on asyncio.

Every change restarts the debounce timer; when it expires the scheduler calls
``persist``. At most one save runs at a time: a save requested while another
is in flight returns immediately. If the document changed while a save was in
flight, the timer is re-armed once that save finishes so the latest state is
written eventually. Failed saves are logged and not retried.
"""

import asyncio
from collections.abc import Awaitable, Callable, Coroutine
from datetime import datetime, timezone

from lesson_builder_core.utils.logging import get_logger

logger = get_logger(__name__)

PersistFn = Callable[[], Awaitable[object]]


class AutosaveScheduler:
    """Single-flight debounced saver."""

    def __init__(self, persist: PersistFn, delay: float = 3.0):
        if delay < 0:
            raise ValueError("Autosave delay must be non-negative")
        self._persist = persist
        self.delay = delay
        self.last_saved_at: datetime | None = None
        self.last_error: Exception | None = None
        self._in_flight = False
        self._changed_during_flight = False
        self._closed = False
        self._timer: asyncio.Task | None = None
        self._tasks: set[asyncio.Task] = set()

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    @property
    def scheduled(self) -> bool:
        return self._timer is not None and not self._timer.done()

    @property
    def closed(self) -> bool:
        return self._closed

    def notify_change(self) -> None:
        """Restart the debounce timer after a document change."""
        if self._closed:
            return
        if self._in_flight:
            self._changed_during_flight = True
        self._schedule()

    def cancel(self) -> None:
        """Drop a scheduled save without running it."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _schedule(self) -> None:
        self.cancel()
        self._timer = self._spawn(self._fire_after_delay())

    def _spawn(self, coro: Coroutine[object, object, None]) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _fire_after_delay(self) -> None:
        await asyncio.sleep(self.delay)
        # Detach before saving so a new change cannot cancel the save itself
        self._timer = None
        await self.save_now()

    async def save_now(self) -> bool:
        """Persist immediately unless a save is already running.

        Returns:
            True if this call performed a successful save
        """
        if self._in_flight:
            logger.debug("Save already in flight, skipping")
            return False

        self._in_flight = True
        self._changed_during_flight = False
        try:
            await self._persist()
        except Exception as e:
            self.last_error = e
            logger.warning(f"Autosave failed: {e}")
            return False
        else:
            self.last_error = None
            self.last_saved_at = datetime.now(timezone.utc)
            return True
        finally:
            self._in_flight = False
            if self._changed_during_flight and not self._closed:
                self._changed_during_flight = False
                self._schedule()

    async def flush(self) -> bool:
        """Run a scheduled save right away instead of waiting for the timer."""
        if not self.scheduled:
            return False
        self.cancel()
        return await self.save_now()

    async def close(self, final_save: bool = True) -> bool:
        """Stop scheduling and optionally perform one last best-effort save.

        Returns:
            True if the final save ran and succeeded
        """
        self._closed = True
        self.cancel()
        pending = [task for task in self._tasks if not task.done()]
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        if not final_save:
            return False
        return await self.save_now()
