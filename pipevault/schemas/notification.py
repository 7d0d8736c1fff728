"""Notification queue schemas."""


from datetime import datetime
from typing import Any

from pydantic import Field

from pipevault.schemas.common import CamelModel

class NotificationTaskOut(CamelModel):
    id: str
    type: str
    payload: dict[str, Any]
    status: str
    attempts: int
    last_attempt_at: datetime | None = None
    processed_at: datetime | None = None
    last_error: str | None = None
    created_at: datetime

class MarkFailedBody(CamelModel):
    error: str = Field(min_length=1)
