"""Tests for approve / reject of storage requests."""
import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from pipevault.core.exceptions import (
    AuthorizationError,
    CapacityError,
    DataAccessError,
    NotFoundError,
    StateConflictError,
    ValidationError,
)
from pipevault.domain import (
    AuditAction,
    AuditLogEntry,
    NotificationStatus,
    NotificationTask,
    NotificationType,
    Rack,
    RequestStatus,
    StorageRequest,
)
from pipevault.repositories.admin import AdminRepository
from pipevault.repositories.notification import NotificationRepository
from pipevault.schemas.approval import RackAllocation
from pipevault.services.approval import ApprovalService, split_evenly


@pytest.fixture()
async def pending(seed):
    await seed.admin("admin-1")
    company = await seed.company("Bravo Oil")
    request = await seed.request(company, RequestStatus.PENDING, reference_id="BRAVO-001")
    await seed.rack("A-A1-01", name="A1-01", capacity=100, occupied=20)
    await seed.rack("A-A1-02", name="A1-02", capacity=50, occupied=0)
    return request


async def _snapshot(session_factory, request_id):
    """Status, rack occupancy and side-effect counts, read in a fresh session."""
    async with session_factory() as s:
        status = (
            await s.execute(select(StorageRequest.status).where(StorageRequest.id == request_id))
        ).scalar_one()
        racks = dict((await s.execute(select(Rack.id, Rack.occupied))).all())
        audits = (await s.execute(select(func.count()).select_from(AuditLogEntry))).scalar_one()
        tasks = (await s.execute(select(func.count()).select_from(NotificationTask))).scalar_one()
    return status, racks, audits, tasks


# ---------------------------------------------------------------------------
# Even split
# ---------------------------------------------------------------------------

def test_split_evenly_gives_remainder_to_first_racks():
    allocations = split_evenly(["R1", "R2", "R3"], 10)
    assert [(a.rack_id, a.joints) for a in allocations] == [("R1", 4), ("R2", 3), ("R3", 3)]


def test_split_evenly_exact():
    assert [a.joints for a in split_evenly(["R1", "R2"], 30)] == [15, 15]


def test_split_evenly_rejects_more_racks_than_joints():
    with pytest.raises(ValidationError):
        split_evenly(["R1", "R2", "R3"], 2)


def test_split_evenly_requires_a_rack():
    with pytest.raises(ValidationError):
        split_evenly([], 10)


# ---------------------------------------------------------------------------
# Approve
# ---------------------------------------------------------------------------

async def test_approve_applies_all_effects(pending, session, session_factory):
    result = await ApprovalService(session).approve_request(
        pending.id,
        "admin-1",
        [RackAllocation(rack_id="A-A1-01", joints=30)],
        notes="Yard A",
    )

    assert result.success is True
    assert result.status == RequestStatus.APPROVED.value
    assert result.reference_id == "BRAVO-001"
    assert result.company_id == pending.company_id
    assert result.assigned_racks == ["A1-01"]
    assert result.required_joints == 30
    assert result.notification_queued is True
    assert result.allocations[0].occupied == 50
    assert result.allocations[0].available == 50

    status, racks, audits, tasks = await _snapshot(session_factory, pending.id)
    assert status == RequestStatus.APPROVED.value
    assert racks == {"A-A1-01": 50, "A-A1-02": 0}
    assert audits == 1
    assert tasks == 1

    async with session_factory() as s:
        request = await s.get(StorageRequest, pending.id)
        audit = (await s.execute(select(AuditLogEntry))).scalar_one()
        task = (await s.execute(select(NotificationTask))).scalar_one()
    assert request.assigned_rack_ids == ["A-A1-01"]
    assert request.admin_notes == "Yard A"
    assert request.approved_by == "admin-1"
    assert request.approved_at is not None
    assert audit.action == AuditAction.APPROVE_REQUEST.value
    assert audit.entity_id == pending.id
    assert audit.admin_user_id == "admin-1"
    assert audit.details["assignedRacks"] == ["A1-01"]
    assert audit.details["requiredJoints"] == 30
    assert task.id == result.notification_id
    assert task.type == NotificationType.REQUEST_APPROVED.value
    assert task.status == NotificationStatus.PENDING.value
    assert task.payload["subject"] == "Storage Request Approved - BRAVO-001"
    assert task.payload["userEmail"] == "customer@example.com"


async def test_approve_with_even_split(pending, session, session_factory):
    result = await ApprovalService(session).approve_request(
        pending.id, "admin-1", rack_ids=["A-A1-02", "A-A1-01"], required_joints=11
    )

    assert [(a.rack_id, a.joints) for a in result.allocations] == [
        ("A-A1-02", 6), ("A-A1-01", 5),
    ]
    _, racks, _, _ = await _snapshot(session_factory, pending.id)
    assert racks == {"A-A1-01": 25, "A-A1-02": 6}


async def test_approve_across_racks_is_exact(pending, session, session_factory):
    await ApprovalService(session).approve_request(
        pending.id,
        "admin-1",
        [
            RackAllocation(rack_id="A-A1-01", joints=80),
            RackAllocation(rack_id="A-A1-02", joints=50),
        ],
    )

    _, racks, audits, tasks = await _snapshot(session_factory, pending.id)
    assert racks == {"A-A1-01": 100, "A-A1-02": 50}
    assert audits == 1
    assert tasks == 1


async def test_capacity_error_names_first_short_rack(pending, session, session_factory):
    with pytest.raises(CapacityError) as exc:
        await ApprovalService(session).approve_request(
            pending.id,
            "admin-1",
            [
                RackAllocation(rack_id="A-A1-01", joints=81),
                RackAllocation(rack_id="A-A1-02", joints=51),
            ],
        )

    assert exc.value.entity_id == "A-A1-01"
    assert exc.value.details == {"requested": 81, "available": 80}
    assert exc.value.retryable is False

    status, racks, audits, tasks = await _snapshot(session_factory, pending.id)
    assert status == RequestStatus.PENDING.value
    assert racks == {"A-A1-01": 20, "A-A1-02": 0}
    assert (audits, tasks) == (0, 0)


async def test_second_rack_over_capacity_changes_nothing(pending, session, session_factory):
    with pytest.raises(CapacityError) as exc:
        await ApprovalService(session).approve_request(
            pending.id,
            "admin-1",
            [
                RackAllocation(rack_id="A-A1-01", joints=10),
                RackAllocation(rack_id="A-A1-02", joints=60),
            ],
        )

    assert exc.value.entity_id == "A-A1-02"
    _, racks, audits, tasks = await _snapshot(session_factory, pending.id)
    assert racks == {"A-A1-01": 20, "A-A1-02": 0}
    assert (audits, tasks) == (0, 0)


async def test_unknown_rack_is_not_found(pending, session):
    with pytest.raises(NotFoundError) as exc:
        await ApprovalService(session).approve_request(
            pending.id, "admin-1", [RackAllocation(rack_id="Z-99", joints=5)]
        )
    assert exc.value.entity_type == "Rack"
    assert exc.value.entity_id == "Z-99"


async def test_duplicate_rack_is_invalid(pending, session):
    with pytest.raises(ValidationError):
        await ApprovalService(session).approve_request(
            pending.id,
            "admin-1",
            [
                RackAllocation(rack_id="A-A1-01", joints=5),
                RackAllocation(rack_id="A-A1-01", joints=5),
            ],
        )


async def test_empty_allocation_is_invalid(pending, session):
    with pytest.raises(ValidationError):
        await ApprovalService(session).approve_request(pending.id, "admin-1", [])


async def test_unknown_request_is_not_found(pending, session):
    with pytest.raises(NotFoundError) as exc:
        await ApprovalService(session).approve_request(
            "missing", "admin-1", [RackAllocation(rack_id="A-A1-01", joints=5)]
        )
    assert exc.value.entity_type == "StorageRequest"


async def test_approving_twice_is_a_state_conflict(pending, session, session_factory):
    service = ApprovalService(session)
    allocation = [RackAllocation(rack_id="A-A1-01", joints=10)]
    await service.approve_request(pending.id, "admin-1", allocation)

    with pytest.raises(StateConflictError) as exc:
        await service.approve_request(pending.id, "admin-1", allocation)

    assert exc.value.details["currentStatus"] == RequestStatus.APPROVED.value
    _, racks, audits, tasks = await _snapshot(session_factory, pending.id)
    assert racks["A-A1-01"] == 30
    assert (audits, tasks) == (1, 1)


@pytest.mark.parametrize("status", [RequestStatus.PENDING, RequestStatus.APPROVED, RequestStatus.REJECTED])
async def test_non_admin_is_always_rejected(seed, session, session_factory, status):
    await seed.admin("admin-1")
    await seed.admin("retired", is_active=False)
    company = await seed.company("Bravo Oil")
    request = await seed.request(company, status)
    await seed.rack("A-A1-01", capacity=100)
    service = ApprovalService(session)

    for principal in ("customer-7", "retired", None, ""):
        with pytest.raises(AuthorizationError):
            await service.approve_request(
                request.id, principal, [RackAllocation(rack_id="A-A1-01", joints=5)]
            )
        with pytest.raises(AuthorizationError):
            await service.reject_request(request.id, principal, "Not enough detail")

    with pytest.raises(AuthorizationError):
        await service.approve_request("missing", "customer-7", [])

    final_status, racks, audits, tasks = await _snapshot(session_factory, request.id)
    assert final_status == status.value
    assert racks == {"A-A1-01": 0}
    assert (audits, tasks) == (0, 0)


@pytest.mark.parametrize("principal", [None, ""])
async def test_missing_principal_is_rejected_without_admin_lookup(
    pending, session, monkeypatch, principal
):
    async def _unexpected_lookup(self, user_id):
        raise AssertionError("admin lookup ran for a missing principal")

    monkeypatch.setattr(AdminRepository, "is_active_admin", _unexpected_lookup)

    with pytest.raises(AuthorizationError):
        await ApprovalService(session).approve_request(
            pending.id, principal, [RackAllocation(rack_id="A-A1-01", joints=5)]
        )


async def test_store_failure_rolls_everything_back(pending, session, session_factory, monkeypatch):
    async def _broken_enqueue(self, notification_type, payload):
        raise OperationalError("INSERT INTO notification_queue", {}, Exception("disk I/O error"))

    monkeypatch.setattr(NotificationRepository, "enqueue", _broken_enqueue)

    with pytest.raises(DataAccessError) as exc:
        await ApprovalService(session).approve_request(
            pending.id, "admin-1", [RackAllocation(rack_id="A-A1-01", joints=30)]
        )

    assert exc.value.retryable is True
    assert exc.value.status_code == 503
    status, racks, audits, tasks = await _snapshot(session_factory, pending.id)
    assert status == RequestStatus.PENDING.value
    assert racks == {"A-A1-01": 20, "A-A1-02": 0}
    assert (audits, tasks) == (0, 0)


async def test_request_can_be_approved_after_failed_attempt(pending, session, session_factory):
    service = ApprovalService(session)
    with pytest.raises(CapacityError):
        await service.approve_request(
            pending.id, "admin-1", [RackAllocation(rack_id="A-A1-02", joints=51)]
        )

    result = await service.approve_request(
        pending.id, "admin-1", [RackAllocation(rack_id="A-A1-02", joints=50)]
    )

    assert result.status == RequestStatus.APPROVED.value
    _, racks, audits, tasks = await _snapshot(session_factory, pending.id)
    assert racks["A-A1-02"] == 50
    assert (audits, tasks) == (1, 1)


# ---------------------------------------------------------------------------
# Reject
# ---------------------------------------------------------------------------

async def test_reject_leaves_racks_untouched(pending, session, session_factory):
    result = await ApprovalService(session).reject_request(
        pending.id, "admin-1", "Pipe grade not accepted"
    )

    assert result.status == RequestStatus.REJECTED.value
    assert result.rejection_reason == "Pipe grade not accepted"
    status, racks, audits, tasks = await _snapshot(session_factory, pending.id)
    assert status == RequestStatus.REJECTED.value
    assert racks == {"A-A1-01": 20, "A-A1-02": 0}
    assert (audits, tasks) == (1, 1)

    async with session_factory() as s:
        request = await s.get(StorageRequest, pending.id)
        audit = (await s.execute(select(AuditLogEntry))).scalar_one()
        task = (await s.execute(select(NotificationTask))).scalar_one()
    assert request.rejection_reason == "Pipe grade not accepted"
    assert request.rejected_by == "admin-1"
    assert audit.action == AuditAction.REJECT_REQUEST.value
    assert task.type == NotificationType.REQUEST_REJECTED.value


async def test_reject_requires_reason(pending, session, session_factory):
    with pytest.raises(ValidationError):
        await ApprovalService(session).reject_request(pending.id, "admin-1", "   ")

    status, _, audits, tasks = await _snapshot(session_factory, pending.id)
    assert status == RequestStatus.PENDING.value
    assert (audits, tasks) == (0, 0)


async def test_reject_after_approval_is_a_state_conflict(pending, session):
    service = ApprovalService(session)
    await service.approve_request(
        pending.id, "admin-1", [RackAllocation(rack_id="A-A1-01", joints=10)]
    )
    with pytest.raises(StateConflictError):
        await service.reject_request(pending.id, "admin-1", "Changed our mind")
