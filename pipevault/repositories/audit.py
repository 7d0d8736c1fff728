"""Audit log repository — append and read only."""


from typing import Any

from pipevault.domain.audit import AuditLogEntry
from pipevault.repositories.base import BaseRepository


class AuditLogRepository(BaseRepository[AuditLogEntry]):
    model = AuditLogEntry

    async def append(
        self,
        *,
        admin_user_id: str,
        action: str,
        entity_type: str,
        entity_id: str,
        details: dict[str, Any] | None = None,
    ) -> AuditLogEntry:
        return await self.create(
            admin_user_id=admin_user_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            details=details,
        )
