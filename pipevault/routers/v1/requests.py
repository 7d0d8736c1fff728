"""Storage request approval endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from pipevault.core.response import DataResponse
from pipevault.db.base import get_db
from pipevault.routers.deps import acting_admin_id
from pipevault.schemas.approval import (
    ApprovalResult,
    ApproveRequestBody,
    RejectionResult,
    RejectRequestBody,
)
from pipevault.schemas.common import error_responses
from pipevault.services.approval import ApprovalService

router = APIRouter(prefix="/requests", tags=["Storage Requests"])


@router.post(
    "/{request_id}/approve",
    response_model=DataResponse[ApprovalResult],
    responses=error_responses(403, 404, 409, 422, 503),
)
async def approve_request(
    request_id: str,
    body: ApproveRequestBody,
    admin_id: str | None = Depends(acting_admin_id),
    session: AsyncSession = Depends(get_db),
):
    """Approve a pending request and reserve rack capacity.

    Body: either `allocations` (`[{rackId, joints}]`) or `assignedRackIds`
    with `requiredJoints`, split evenly across the racks.
    """
    service = ApprovalService(session)
    if body.allocations:
        result = await service.approve_request(
            request_id, admin_id, body.allocations, body.notes
        )
    else:
        result = await service.approve_request(
            request_id,
            admin_id,
            notes=body.notes,
            rack_ids=body.assigned_rack_ids,
            required_joints=body.required_joints,
        )
    return {"data": result}


@router.post(
    "/{request_id}/reject",
    response_model=DataResponse[RejectionResult],
    responses=error_responses(403, 404, 409, 422, 503),
)
async def reject_request(
    request_id: str,
    body: RejectRequestBody,
    admin_id: str | None = Depends(acting_admin_id),
    session: AsyncSession = Depends(get_db),
):
    result = await ApprovalService(session).reject_request(request_id, admin_id, body.reason)
    return {"data": result}
