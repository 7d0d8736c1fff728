"""Notification queue service — the contract used by the external delivery worker.

The worker polls pending tasks, delivers them (email / Slack, not handled
here) and reports back.  A failed task goes back to ``pending`` until it has
used up ``notification_max_attempts``; then it is parked as ``failed``.
"""


import logging
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from pipevault.core.config import settings
from pipevault.core.exceptions import NotFoundError, StateConflictError
from pipevault.db.base import atomic, read_snapshot
from pipevault.domain.notification import NotificationStatus, NotificationTask
from pipevault.repositories.notification import NotificationRepository

logger = logging.getLogger(__name__)


class NotificationQueueService:
    def __init__(self, session: AsyncSession):
        self._session = session
        self._repo = NotificationRepository(session)

    async def claim_pending(self, limit: int | None = None) -> list[NotificationTask]:
        """Oldest pending tasks first, at most *limit* (default: configured batch size)."""
        async with read_snapshot(self._session, "claim_pending"):
            return await self._repo.list_pending(limit or settings.notification_batch_size)

    async def mark_sent(self, task_id: str) -> NotificationTask:
        async with atomic(self._session, "mark_sent"):
            task = await self._get_pending(task_id)
            now = datetime.now(timezone.utc)
            await self._apply(
                task,
                status=NotificationStatus.SENT.value,
                attempts=task.attempts + 1,
                last_attempt_at=now,
                processed_at=now,
                last_error=None,
            )
            task = await self._repo.refresh_one(task_id)
        logger.info("Notification %s (%s) sent", task.id, task.type)
        return task

    async def mark_failed(self, task_id: str, error: str) -> NotificationTask:
        async with atomic(self._session, "mark_failed"):
            task = await self._get_pending(task_id)
            attempts = task.attempts + 1
            exhausted = attempts >= settings.notification_max_attempts
            now = datetime.now(timezone.utc)
            await self._apply(
                task,
                status=(
                    NotificationStatus.FAILED.value if exhausted else NotificationStatus.PENDING.value
                ),
                attempts=attempts,
                last_attempt_at=now,
                processed_at=now if exhausted else None,
                last_error=error,
            )
            task = await self._repo.refresh_one(task_id)
        if exhausted:
            logger.error("Notification %s gave up after %d attempts: %s", task.id, attempts, error)
        else:
            logger.warning("Notification %s attempt %d failed: %s", task.id, attempts, error)
        return task

    async def _get_pending(self, task_id: str) -> NotificationTask:
        task = await self._repo.refresh_one(task_id)
        if task is None:
            raise NotFoundError("NotificationTask", task_id)
        if task.status != NotificationStatus.PENDING.value:
            raise StateConflictError(
                "NotificationTask", task_id, task.status, NotificationStatus.PENDING.value
            )
        return task

    async def _apply(self, task: NotificationTask, **values) -> None:
        if not await self._repo.transition(task.id, expected_attempts=task.attempts, **values):
            raise StateConflictError(
                "NotificationTask", task.id, None, NotificationStatus.PENDING.value
            )
