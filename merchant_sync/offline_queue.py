"""In-memory queue of actions deferred while offline."""

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Awaitable, Callable, Optional

from .errors import FailureKind, classify


@dataclass(frozen=True)
class QueuedAction:
    """An action waiting for connectivity."""

    id: str
    operation: Callable[[], Awaitable[Any]]
    description: str
    enqueued_at: datetime = field(default_factory=datetime.now)


@dataclass(frozen=True)
class QueueStatus:
    """Snapshot of the queue for status indicators."""

    count: int
    is_processing: bool


class OfflineQueue:
    """Ordered ledger of deferred actions, drained when back online.

    Actions stay in the ledger until a drain attempts them successfully.
    Only one drain runs at a time.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        """Initialize offline queue.

        Args:
            logger: Optional logger
        """
        self.logger = logger or logging.getLogger(__name__)
        self._queue: list[QueuedAction] = []
        self._processing = False

    def __len__(self) -> int:
        return len(self._queue)

    def add(self, operation: Callable[[], Awaitable[Any]], description: str) -> str:
        """Add action to the end of the queue without running it.

        Args:
            operation: Zero-argument callable returning an awaitable
            description: Human-readable label

        Returns:
            Unique action ID
        """
        action = QueuedAction(
            id=f"action_{uuid.uuid4().hex}",
            operation=operation,
            description=description,
        )
        self._queue.append(action)
        self.logger.info(f"Queued offline action: {description}")
        return action.id

    async def process_queue(self) -> None:
        """Attempt every queued action once, keeping the ones that fail.

        Calling this while a drain is in progress, or with an empty queue,
        does nothing.
        """
        if self._processing or not self._queue:
            return

        self._processing = True
        try:
            batch = list(self._queue)
            self.logger.info(f"Processing {len(batch)} queued actions...")

            results = await asyncio.gather(
                *(self._attempt(action) for action in batch),
                return_exceptions=True,
            )

            succeeded = set()
            for action, result in zip(batch, results):
                if isinstance(result, BaseException):
                    self.logger.warning(
                        "Queued action '%s' failed: %s", action.description, result
                    )
                else:
                    succeeded.add(action.id)

            self.logger.info(
                f"Queue processed: {len(succeeded)} succeeded, "
                f"{len(batch) - len(succeeded)} failed"
            )

            # Keep failed actions and anything queued during the drain
            self._queue = [a for a in self._queue if a.id not in succeeded]
        finally:
            self._processing = False

    async def _attempt(self, action: QueuedAction) -> Any:
        return await action.operation()

    def get_status(self) -> QueueStatus:
        """Get queue status.

        Returns:
            QueueStatus snapshot
        """
        return QueueStatus(count=len(self._queue), is_processing=self._processing)

    def clear(self) -> None:
        """Remove all queued actions."""
        if self._queue:
            self.logger.info(f"Cleared {len(self._queue)} queued actions")
        self._queue = []

    def pending(self) -> list[QueuedAction]:
        """Return queued actions in drain order."""
        return list(self._queue)


async def perform_or_defer(
    queue: OfflineQueue,
    operation: Callable[[], Awaitable[Any]],
    description: str,
) -> Any:
    """Run an action now, or queue it if it failed for lack of connectivity.

    Args:
        queue: Queue receiving deferred actions
        operation: Zero-argument callable returning an awaitable
        description: Human-readable label

    Returns:
        Operation result, or None if the action was deferred

    Raises:
        Any non-network failure from the operation
    """
    try:
        return await operation()
    except Exception as e:
        if classify(e).kind is not FailureKind.NETWORK:
            raise
        action_id = queue.add(operation, description)
        queue.logger.debug(f"Deferred '{description}' as {action_id}")
        return None
