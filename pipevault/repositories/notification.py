"""Notification queue repository."""

from __future__ import annotations

from typing import Any

from sqlalchemy import select, update

from pipevault.domain.notification import NotificationStatus, NotificationTask
from pipevault.repositories.base import BaseRepository


class NotificationRepository(BaseRepository[NotificationTask]):
    model = NotificationTask

    async def enqueue(self, notification_type: str, payload: dict[str, Any]) -> NotificationTask:
        return await self.create(
            type=notification_type,
            payload=payload,
            status=NotificationStatus.PENDING.value,
            attempts=0,
        )

    async def list_pending(self, limit: int) -> list[NotificationTask]:
        q = (
            select(NotificationTask)
            .where(NotificationTask.status == NotificationStatus.PENDING.value)
            .order_by(NotificationTask.created_at, NotificationTask.id)
            .limit(limit)
        )
        return list((await self._session.execute(q)).scalars().all())

    async def transition(
        self, task_id: str, *, expected_attempts: int, **values: Any
    ) -> bool:
        """Update a pending task unless another worker already touched it."""
        result = await self._session.execute(
            update(NotificationTask)
            .where(NotificationTask.id == task_id)
            .where(NotificationTask.status == NotificationStatus.PENDING.value)
            .where(NotificationTask.attempts == expected_attempts)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def refresh_one(self, task_id: str) -> NotificationTask | None:
        q = (
            select(NotificationTask)
            .where(NotificationTask.id == task_id)
            .execution_options(populate_existing=True)
        )
        return (await self._session.execute(q)).scalars().first()

