"""Audit log response model."""


from datetime import datetime
from typing import Any

from pipevault.schemas.common import CamelModel

class AuditLogEntryOut(CamelModel):
    id: str
    admin_user_id: str
    action: str
    entity_type: str
    entity_id: str
    details: dict[str, Any] | None = None
    created_at: datetime
