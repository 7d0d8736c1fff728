"""Approval service — atomic approve / reject of storage requests and rack adjustments.

Each public method is one unit of work.  The admin check, the status check,
the capacity check and every write (request, racks, audit entry,
notification) commit together or not at all.

Race handling does not rely on the pre-checks: the status change is a
conditional UPDATE on ``status = 'PENDING'`` and each rack increment is a
conditional UPDATE on ``occupied + n <= capacity``.  A concurrent loser sees
zero affected rows and gets StateConflictError / CapacityError; the
transaction is rolled back.  Only the request row and the touched rack rows
are locked, racks always in id order.

Rule: no FastAPI here.  Callers must not retry AuthorizationError,
NotFoundError, StateConflictError, CapacityError or ValidationError;
DataAccessError is transient.
"""


import logging
from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from pipevault.core.config import settings
from pipevault.core.exceptions import (
    AuthorizationError,
    CapacityError,
    NotFoundError,
    StateConflictError,
    ValidationError,
)
from pipevault.db.base import atomic
from pipevault.domain.audit import AuditAction
from pipevault.domain.notification import NotificationType
from pipevault.domain.rack import Rack
from pipevault.domain.storage_request import RequestStatus, StorageRequest
from pipevault.repositories.admin import AdminRepository
from pipevault.repositories.audit import AuditLogRepository
from pipevault.repositories.notification import NotificationRepository
from pipevault.repositories.rack import RackRepository
from pipevault.repositories.storage_request import StorageRequestRepository
from pipevault.schemas.approval import (
    ApprovalResult,
    RackAdjustmentResult,
    RackAllocation,
    RackAllocationResult,
    RejectionResult,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Allocation helpers
# ---------------------------------------------------------------------------

def split_evenly(rack_ids: Sequence[str], required_joints: int) -> list[RackAllocation]:
    """Spread *required_joints* over *rack_ids* in the given order.

    Every rack gets ``required // n``; the first ``required % n`` racks get
    one more.  E.g. 10 joints over 3 racks -> 4, 3, 3.
    """
    if not rack_ids:
        raise ValidationError("At least one rack must be assigned", entity_type="Rack")
    if required_joints <= 0:
        raise ValidationError("Required joints must be greater than zero")
    if required_joints < len(rack_ids):
        raise ValidationError(
            f"Cannot split {required_joints} joints across {len(rack_ids)} racks; "
            "assign fewer racks"
        )
    share, remainder = divmod(required_joints, len(rack_ids))
    return [
        RackAllocation(rack_id=rack_id, joints=share + (1 if idx < remainder else 0))
        for idx, rack_id in enumerate(rack_ids)
    ]


def _validate_allocations(allocations: Sequence[RackAllocation]) -> None:
    if not allocations:
        raise ValidationError("At least one rack must be assigned", entity_type="Rack")
    seen: set[str] = set()
    for allocation in allocations:
        if allocation.rack_id in seen:
            raise ValidationError(
                f"Rack {allocation.rack_id} is listed more than once",
                entity_type="Rack",
                entity_id=allocation.rack_id,
            )
        if allocation.joints <= 0:
            raise ValidationError(
                f"Allocation for rack {allocation.rack_id} must be greater than zero",
                entity_type="Rack",
                entity_id=allocation.rack_id,
            )
        seen.add(allocation.rack_id)


def _now() -> datetime:
    return datetime.now(timezone.utc)

# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

class ApprovalService:
    def __init__(self, session: AsyncSession):
        self._session = session
        self._admins = AdminRepository(session)
        self._requests = StorageRequestRepository(session)
        self._racks = RackRepository(session)
        self._audit = AuditLogRepository(session)
        self._notifications = NotificationRepository(session)

    # ------------------------------------------------------------------
    # Shared checks
    # ------------------------------------------------------------------

    async def _require_admin(self, admin_id: str | None) -> str:
        if not admin_id or not await self._admins.is_active_admin(admin_id):
            logger.warning("Rejected state change by non-admin principal %r", admin_id)
            raise AuthorizationError(admin_id)
        return admin_id

    async def _load_pending(self, request_id: str) -> tuple[StorageRequest, str]:
        row = await self._requests.get_with_company(request_id)
        if row is None:
            raise NotFoundError("StorageRequest", request_id)
        request, company_name = row
        if request.status != RequestStatus.PENDING.value:
            raise StateConflictError(
                "StorageRequest",
                request_id,
                request.status,
                RequestStatus.PENDING.value,
                reference=request.reference_id,
            )
        return request, company_name

    async def _transition(
        self, request: StorageRequest, new_status: RequestStatus, **values: Any
    ) -> None:
        moved = await self._requests.transition_status(
            request.id,
            expected=RequestStatus.PENDING.value,
            new=new_status.value,
            updated_at=_now(),
            **values,
        )
        if not moved:
            # Another admin handled it between our read and our write
            raise StateConflictError(
                "StorageRequest",
                request.id,
                None,
                RequestStatus.PENDING.value,
                reference=request.reference_id,
            )

    async def _load_racks(self, allocations: Sequence[RackAllocation]) -> dict[str, Rack]:
        racks = await self._racks.get_many(a.rack_id for a in allocations)
        for allocation in allocations:
            if allocation.rack_id not in racks:
                raise NotFoundError("Rack", allocation.rack_id)
        return racks

    # ------------------------------------------------------------------
    # Approve
    # ------------------------------------------------------------------

    async def approve_request(
        self,
        request_id: str,
        admin_id: str | None,
        allocations: Sequence[RackAllocation] | None = None,
        notes: str | None = None,
        *,
        rack_ids: Sequence[str] | None = None,
        required_joints: int | None = None,
    ) -> ApprovalResult:
        """PENDING -> APPROVED, reserving rack capacity, with audit + notification.

        Pass explicit *allocations*, or *rack_ids* plus *required_joints* to
        have the joints split evenly (see :func:`split_evenly`).
        """
        async with atomic(self._session, "approve_request"):
            result = await self._approve(
                request_id, admin_id, allocations, notes, rack_ids, required_joints
            )
        logger.info(
            "Request %s approved by %s: %s",
            result.reference_id, admin_id,
            ", ".join(f"{a.rack_id}+{a.joints}" for a in result.allocations),
        )
        return result

    async def _approve(
        self,
        request_id: str,
        admin_id: str | None,
        allocations: Sequence[RackAllocation] | None,
        notes: str | None,
        rack_ids: Sequence[str] | None,
        required_joints: int | None,
    ) -> ApprovalResult:
        admin_id = await self._require_admin(admin_id)
        request, company_name = await self._load_pending(request_id)
        if allocations is None:
            allocations = split_evenly(rack_ids or [], required_joints or 0)
        _validate_allocations(allocations)
        racks = await self._load_racks(allocations)

        # Pre-check in the caller's order so the error names the first bad rack
        for allocation in allocations:
            rack = racks[allocation.rack_id]
            if rack.occupied + allocation.joints > rack.capacity:
                raise CapacityError(rack.id, allocation.joints, rack.available, rack.name)

        now = _now()
        rack_ids = [a.rack_id for a in allocations]
        required_joints = sum(a.joints for a in allocations)

        await self._transition(
            request,
            RequestStatus.APPROVED,
            assigned_rack_ids=rack_ids,
            admin_notes=notes,
            approved_by=admin_id,
            approved_at=now,
        )

        for allocation in sorted(allocations, key=lambda a: a.rack_id):
            if not await self._racks.try_increment(allocation.rack_id, allocation.joints):
                fresh = (await self._racks.get_many([allocation.rack_id])).get(allocation.rack_id)
                available = fresh.available if fresh else 0
                raise CapacityError(
                    allocation.rack_id,
                    allocation.joints,
                    available,
                    fresh.name if fresh else None,
                )

        updated = await self._racks.get_many(rack_ids)
        rack_names = [updated[rid].name for rid in rack_ids]
        allocation_results = [
            RackAllocationResult(
                rack_id=a.rack_id,
                rack_name=updated[a.rack_id].name,
                joints=a.joints,
                occupied=updated[a.rack_id].occupied,
                capacity=updated[a.rack_id].capacity,
                available=updated[a.rack_id].available,
            )
            for a in allocations
        ]

        audit = await self._audit.append(
            admin_user_id=admin_id,
            action=AuditAction.APPROVE_REQUEST.value,
            entity_type="storage_request",
            entity_id=request.id,
            details={
                "referenceId": request.reference_id,
                "companyName": company_name,
                "assignedRacks": rack_names,
                "allocations": {a.rack_id: a.joints for a in allocations},
                "requiredJoints": required_joints,
                "notes": notes,
            },
        )
        notification = await self._notifications.enqueue(
            NotificationType.REQUEST_APPROVED.value,
            {
                "requestId": request.id,
                "referenceId": request.reference_id,
                "companyName": company_name,
                "userEmail": request.user_email,
                "subject": f"Storage Request Approved - {request.reference_id}",
                "assignedRacks": rack_names,
                "requiredJoints": required_joints,
                "notes": notes,
                "notificationType": "email",
            },
        )

        return ApprovalResult(
            request_id=request.id,
            reference_id=request.reference_id,
            company_id=request.company_id,
            status=RequestStatus.APPROVED.value,
            assigned_racks=rack_names,
            allocations=allocation_results,
            required_joints=required_joints,
            audit_entry_id=audit.id,
            notification_id=notification.id,
            message=(
                f"Request {request.reference_id} approved successfully. "
                f"Assigned to racks: {', '.join(rack_names)}"
            ),
        )

    # ------------------------------------------------------------------
    # Reject
    # ------------------------------------------------------------------

    async def reject_request(
        self, request_id: str, admin_id: str | None, reason: str
    ) -> RejectionResult:
        """PENDING -> REJECTED with audit + notification. Racks are not touched."""
        async with atomic(self._session, "reject_request"):
            result = await self._reject(request_id, admin_id, reason)
        logger.info("Request %s rejected by %s", result.reference_id, admin_id)
        return result

    async def _reject(
        self, request_id: str, admin_id: str | None, reason: str
    ) -> RejectionResult:
        admin_id = await self._require_admin(admin_id)
        request, company_name = await self._load_pending(request_id)
        reason = (reason or "").strip()
        if not reason:
            raise ValidationError(
                "A rejection reason is required",
                entity_type="StorageRequest",
                entity_id=request_id,
            )

        await self._transition(
            request,
            RequestStatus.REJECTED,
            rejection_reason=reason,
            rejected_by=admin_id,
            rejected_at=_now(),
        )
        audit = await self._audit.append(
            admin_user_id=admin_id,
            action=AuditAction.REJECT_REQUEST.value,
            entity_type="storage_request",
            entity_id=request.id,
            details={
                "referenceId": request.reference_id,
                "companyName": company_name,
                "rejectionReason": reason,
            },
        )
        notification = await self._notifications.enqueue(
            NotificationType.REQUEST_REJECTED.value,
            {
                "requestId": request.id,
                "referenceId": request.reference_id,
                "companyName": company_name,
                "userEmail": request.user_email,
                "subject": f"Storage Request Rejected - {request.reference_id}",
                "rejectionReason": reason,
                "notificationType": "email",
            },
        )

        return RejectionResult(
            request_id=request.id,
            reference_id=request.reference_id,
            company_id=request.company_id,
            status=RequestStatus.REJECTED.value,
            rejection_reason=reason,
            audit_entry_id=audit.id,
            notification_id=notification.id,
            message=f"Request {request.reference_id} rejected successfully",
        )

    # ------------------------------------------------------------------
    # Manual rack adjustment
    # ------------------------------------------------------------------

    async def adjust_rack_occupancy(
        self, rack_id: str, admin_id: str | None, occupied: int, reason: str
    ) -> RackAdjustmentResult:
        """Overwrite a rack's occupied count (corrections, reversals), audited."""
        async with atomic(self._session, "adjust_rack_occupancy"):
            result = await self._adjust(rack_id, admin_id, occupied, reason)
        logger.info(
            "Rack %s adjusted by %s: %d -> %d",
            rack_id, admin_id, result.old_occupied, result.new_occupied,
        )
        return result

    async def _adjust(
        self, rack_id: str, admin_id: str | None, occupied: int, reason: str
    ) -> RackAdjustmentResult:
        admin_id = await self._require_admin(admin_id)
        rack = (await self._racks.get_many([rack_id])).get(rack_id)
        if rack is None:
            raise NotFoundError("Rack", rack_id)

        reason = (reason or "").strip()
        min_length = settings.rack_adjustment_min_reason_length
        if len(reason) < min_length:
            raise ValidationError(
                f"A descriptive reason of at least {min_length} characters is required",
                entity_type="Rack",
                entity_id=rack_id,
            )
        if occupied < 0:
            raise ValidationError(
                "Occupancy cannot be negative", entity_type="Rack", entity_id=rack_id
            )
        if occupied > rack.capacity:
            raise CapacityError(rack.id, occupied, rack_name=rack.name, capacity=rack.capacity)

        old_occupied = rack.occupied
        if not await self._racks.try_set_occupied(rack_id, occupied):
            raise CapacityError(rack.id, occupied, rack_name=rack.name, capacity=rack.capacity)

        now = _now()
        audit = await self._audit.append(
            admin_user_id=admin_id,
            action=AuditAction.ADJUST_RACK.value,
            entity_type="rack",
            entity_id=rack_id,
            details={
                "rackName": rack.name,
                "oldOccupied": old_occupied,
                "newOccupied": occupied,
                "reason": reason,
            },
        )
        return RackAdjustmentResult(
            rack_id=rack_id,
            old_occupied=old_occupied,
            new_occupied=occupied,
            capacity=rack.capacity,
            adjusted_by=admin_id,
            adjusted_at=now,
            audit_entry_id=audit.id,
        )
