"""Admin audit log endpoint."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from pipevault.core.pagination import PaginationParams
from pipevault.core.response import ListResponse, paginated
from pipevault.db.base import get_db
from pipevault.schemas.audit import AuditLogEntryOut
from pipevault.services.audit import AuditService

router = APIRouter(prefix="/audit-log", tags=["Audit"])


@router.get("", response_model=ListResponse[AuditLogEntryOut])
async def list_audit_entries(
    entity_id: Optional[str] = Query(default=None, alias="entityId"),
    action: Optional[str] = Query(default=None, description="e.g. APPROVE_REQUEST"),
    pagination: PaginationParams = Depends(),
    session: AsyncSession = Depends(get_db),
):
    """Audit entries, newest first (paginated)."""
    items, total = await AuditService(session).list_entries(
        pagination, entity_id=entity_id, action=action
    )
    return paginated(
        [AuditLogEntryOut.model_validate(e) for e in items],
        total, pagination.page, pagination.limit,
    )
