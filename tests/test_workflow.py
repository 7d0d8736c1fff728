"""Tests for the derived workflow state of a project."""
from datetime import datetime, timezone

from pipevault.schemas.company import (
    InventorySummary,
    LoadDocument,
    PipeDetails,
    ProjectLoad,
    ProjectSummary,
)
from pipevault.services.workflow import (
    calculate_progress,
    calculate_workflow_state,
    requires_admin_action,
)

NOW = datetime(2025, 3, 1, 8, 0, tzinfo=timezone.utc)


def _load(seq, status, direction="INBOUND", slot=None, parsed=True):
    documents = []
    if parsed is not None:
        documents.append(
            LoadDocument(
                id=f"doc-{direction}-{seq}",
                file_name="manifest.pdf",
                storage_path="documents/manifest.pdf",
                parsed_payload=[{"joint": 1}] if parsed else None,
                uploaded_at=NOW,
            )
        )
    return ProjectLoad(
        id=f"{direction}-{seq}",
        direction=direction,
        sequence_number=seq,
        status=status,
        scheduled_slot_start=slot,
        documents=documents,
    )


def _project(status="APPROVED", inbound=(), outbound=(), joints=0):
    return ProjectSummary(
        id="req-1",
        reference_id="REF-1",
        status=status,
        created_at=NOW,
        updated_at=NOW,
        pipe_details=PipeDetails(),
        inbound_loads=list(inbound),
        outbound_loads=list(outbound),
        inventory_summary=InventorySummary(total_joints=joints),
    )


def test_pending_request():
    project = _project(status="PENDING")
    state = calculate_workflow_state(project)
    assert state.state == "Pending Approval"
    assert state.badge_tone == "pending"
    assert requires_admin_action(project) is True
    assert calculate_progress(project) == 10


def test_rejected_request():
    project = _project(status="REJECTED")
    state = calculate_workflow_state(project)
    assert state.label == "Rejected"
    assert state.badge_tone == "danger"
    assert calculate_progress(project) == 0


def test_approved_without_loads_waits_on_first_delivery():
    project = _project()
    state = calculate_workflow_state(project)
    assert state.label == "Waiting on Load #1 to MPS"
    assert calculate_progress(project) == 20


def test_waits_on_first_unarrived_load_in_sequence():
    slot = datetime(2025, 4, 2, 9, 0, tzinfo=timezone.utc)
    project = _project(
        inbound=[
            _load(2, "SCHEDULED", slot=slot),
            _load(1, "ARRIVED"),
            _load(3, "NEW"),
        ]
    )
    state = calculate_workflow_state(project)
    assert state.label == "Waiting on Load #2 to MPS"
    assert state.next_action == "Load #2 scheduled for 2025-04-02"
    assert calculate_progress(project) == 33


def test_unscheduled_slot_reads_tbd():
    project = _project(inbound=[_load(1, "NEW")])
    assert calculate_workflow_state(project).next_action == "Load #1 scheduled for TBD"


def test_cancelled_loads_are_ignored():
    project = _project(
        inbound=[_load(1, "CANCELLED"), _load(2, "ARRIVED")],
        joints=10,
    )
    assert calculate_workflow_state(project).state == "In Storage"


def test_unprocessed_manifest_needs_admin():
    project = _project(inbound=[_load(1, "ARRIVED", parsed=False)], joints=10)
    state = calculate_workflow_state(project)
    assert state.state == "All Loads Received"
    assert state.label == "Processing Manifests"
    assert requires_admin_action(project) is True


def test_in_storage():
    project = _project(inbound=[_load(1, "COMPLETED")], joints=25)
    state = calculate_workflow_state(project)
    assert state.state == "In Storage"
    assert state.badge_tone == "success"
    assert requires_admin_action(project) is False
    assert calculate_progress(project) == 70


def test_waiting_on_pickup():
    project = _project(
        inbound=[_load(1, "ARRIVED")],
        outbound=[_load(1, "SCHEDULED", direction="OUTBOUND", parsed=None)],
        joints=25,
    )
    state = calculate_workflow_state(project)
    assert state.state == "Waiting on Load #N Pickup"
    assert state.label == "Waiting on Load #1 Pickup"


def test_all_pipe_returned_is_complete():
    project = _project(
        inbound=[_load(1, "ARRIVED")],
        outbound=[
            _load(1, "COMPLETED", direction="OUTBOUND", parsed=None),
            _load(2, "COMPLETED", direction="OUTBOUND", parsed=None),
        ],
        joints=0,
    )
    state = calculate_workflow_state(project)
    assert state.state == "Complete"
    assert state.label == "All Pipe Returned"
    assert calculate_progress(project) == 100


def test_pickup_in_progress_while_joints_remain():
    project = _project(
        inbound=[_load(1, "ARRIVED")],
        outbound=[_load(1, "COMPLETED", direction="OUTBOUND", parsed=None)],
        joints=5,
    )
    state = calculate_workflow_state(project)
    assert state.state == "Pickup Requested"
    assert calculate_progress(project) == 100
