"""Audit log read service."""


from sqlalchemy.ext.asyncio import AsyncSession

from pipevault.core.pagination import PaginationParams
from pipevault.db.base import read_snapshot
from pipevault.domain.audit import AuditLogEntry
from pipevault.repositories.audit import AuditLogRepository

class AuditService:
    def __init__(self, session: AsyncSession):
        self._session = session
        self._repo = AuditLogRepository(session)

    async def list_entries(
        self,
        pagination: PaginationParams,
        entity_id: str | None = None,
        action: str | None = None,
    ) -> tuple[list[AuditLogEntry], int]:
        filters = {"entity_id": entity_id, "action": action}
        async with read_snapshot(self._session, "list_audit_entries"):
            return await self._repo.list(
                offset=pagination.offset,
                limit=pagination.limit,
                order_by="created_at",
                order=pagination.order,
                filters=filters,
            )
