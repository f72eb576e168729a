"""Session completion notifier."""
import asyncio
import logging
from typing import Awaitable, Callable, Set

logger = logging.getLogger(__name__)

Recorder = Callable[[str], Awaitable[None]]


class PersistenceNotifier:
    """Records a finished session in the background, at most once."""

    def __init__(self, record: Recorder):
        self._record = record
        self._tasks: Set[asyncio.Task] = set()
        self.notified = False

    def notify(self, companion_id: str) -> bool:
        """
        Schedule recording of the session and return immediately.

        Returns:
            True if a notification was scheduled, False if one already was
        """
        if self.notified:
            logger.warning(
                f"[NOTIFIER] Duplicate completion ignored - companion: {companion_id}"
            )
            return False

        self.notified = True
        task = asyncio.get_running_loop().create_task(self._run(companion_id))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return True

    async def _run(self, companion_id: str) -> None:
        try:
            await self._record(companion_id)
        except Exception as e:
            logger.error(
                f"[NOTIFIER] Failed to record session - companion: {companion_id}, "
                f"Error: {type(e).__name__}: {str(e)}",
                exc_info=True,
            )

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def flush(self) -> None:
        """Wait for scheduled notifications to finish."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks))
