"""Rack endpoints: listing for the rack selector and manual occupancy correction."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from pipevault.core.response import DataResponse
from pipevault.db.base import get_db
from pipevault.routers.deps import acting_admin_id
from pipevault.schemas.approval import RackAdjustmentBody, RackAdjustmentResult, RackOut
from pipevault.schemas.common import error_responses
from pipevault.services.approval import ApprovalService
from pipevault.services.rack import RackService

router = APIRouter(prefix="/racks", tags=["Racks"])


@router.get("", response_model=DataResponse[list[RackOut]])
async def list_racks(session: AsyncSession = Depends(get_db)):
    return {"data": await RackService(session).list_racks()}


@router.post(
    "/{rack_id}/adjust",
    response_model=DataResponse[RackAdjustmentResult],
    responses=error_responses(403, 404, 409, 422, 503),
)
async def adjust_rack(
    rack_id: str,
    body: RackAdjustmentBody,
    admin_id: str | None = Depends(acting_admin_id),
    session: AsyncSession = Depends(get_db),
):
    """Overwrite a rack's occupied count. Requires a reason; always audited."""
    result = await ApprovalService(session).adjust_rack_occupancy(
        rack_id, admin_id, body.occupied, body.reason
    )
    return {"data": result}
