"""Notification queue endpoints for the delivery worker."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from pipevault.core.response import DataResponse
from pipevault.db.base import get_db
from pipevault.schemas.common import error_responses
from pipevault.schemas.notification import MarkFailedBody, NotificationTaskOut
from pipevault.services.notification import NotificationQueueService

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("/pending", response_model=DataResponse[list[NotificationTaskOut]])
async def list_pending(
    limit: Optional[int] = Query(default=None, ge=1, le=500, description="Batch size"),
    session: AsyncSession = Depends(get_db),
):
    """Oldest pending notifications first."""
    tasks = await NotificationQueueService(session).claim_pending(limit)
    return {"data": [NotificationTaskOut.model_validate(t) for t in tasks]}


@router.post(
    "/{task_id}/sent",
    response_model=DataResponse[NotificationTaskOut],
    responses=error_responses(404, 409, 503),
)
async def mark_sent(task_id: str, session: AsyncSession = Depends(get_db)):
    task = await NotificationQueueService(session).mark_sent(task_id)
    return {"data": NotificationTaskOut.model_validate(task)}


@router.post(
    "/{task_id}/failed",
    response_model=DataResponse[NotificationTaskOut],
    responses=error_responses(404, 409, 503),
)
async def mark_failed(
    task_id: str,
    body: MarkFailedBody,
    session: AsyncSession = Depends(get_db),
):
    """Record a failed delivery; the task is retried until attempts run out."""
    task = await NotificationQueueService(session).mark_failed(task_id, body.error)
    return {"data": NotificationTaskOut.model_validate(task)}
