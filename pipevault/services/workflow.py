"""Derived (read-only) workflow state of a project.

Only PENDING -> APPROVED / REJECTED is written by this service.  The later
operational states are computed here from the request status, its loads and
its inventory so the dashboard does not have to:

  Pending Approval -> Waiting on Load #N to MPS -> All Loads Received ->
  In Storage -> Pickup Requested -> Waiting on Load #N Pickup -> Complete

Everything here is a pure function of a :class:`ProjectSummary`.
"""


from pipevault.domain.storage_request import RequestStatus
from pipevault.domain.trucking import LoadStatus
from pipevault.schemas.company import ProjectLoad, ProjectSummary, WorkflowState

# Loads that have been created but have not reached the yard (or the customer) yet
_WAITING_LOAD_STATUSES = {
    LoadStatus.NEW.value,
    LoadStatus.APPROVED.value,
    LoadStatus.PENDING.value,
    LoadStatus.SCHEDULED.value,
    LoadStatus.IN_TRANSIT.value,
}
_ARRIVED_LOAD_STATUSES = {LoadStatus.ARRIVED.value, LoadStatus.COMPLETED.value}


def _by_sequence(loads: list[ProjectLoad]) -> list[ProjectLoad]:
    return sorted(
        (load for load in loads if load.status != LoadStatus.CANCELLED.value),
        key=lambda load: load.sequence_number,
    )


def _slot_label(load: ProjectLoad) -> str:
    if load.scheduled_slot_start is None:
        return "TBD"
    return load.scheduled_slot_start.date().isoformat()


def _all_arrived(inbound: list[ProjectLoad]) -> bool:
    return bool(inbound) and all(load.status in _ARRIVED_LOAD_STATUSES for load in inbound)


def _all_manifests_processed(inbound: list[ProjectLoad]) -> bool:
    return all(
        any(doc.parsed_payload for doc in load.documents) for load in inbound
    )


def calculate_workflow_state(project: ProjectSummary) -> WorkflowState:
    inbound = _by_sequence(project.inbound_loads)
    outbound = _by_sequence(project.outbound_loads)
    joints_in_storage = project.inventory_summary.total_joints

    if project.status == RequestStatus.PENDING.value:
        return WorkflowState(
            state="Pending Approval",
            label="Pending Admin Approval",
            badge_tone="pending",
            next_action="Admin must approve or reject this request",
        )

    if project.status == RequestStatus.REJECTED.value:
        return WorkflowState(state="Complete", label="Rejected", badge_tone="danger")

    if not inbound:
        return WorkflowState(
            state="Waiting on Load #N to MPS",
            label="Waiting on Load #1 to MPS",
            badge_tone="info",
            next_action="Customer must schedule first delivery",
        )

    next_inbound = next(
        (load for load in inbound if load.status in _WAITING_LOAD_STATUSES), None
    )
    if next_inbound is not None:
        number = next_inbound.sequence_number
        return WorkflowState(
            state="Waiting on Load #N to MPS",
            label=f"Waiting on Load #{number} to MPS",
            badge_tone="info",
            next_action=f"Load #{number} scheduled for {_slot_label(next_inbound)}",
        )

    all_arrived = _all_arrived(inbound)

    if all_arrived and not _all_manifests_processed(inbound):
        return WorkflowState(
            state="All Loads Received",
            label="Processing Manifests",
            badge_tone="info",
            next_action="Admin must upload and process manifest documents",
        )

    if all_arrived and joints_in_storage > 0 and not outbound:
        return WorkflowState(
            state="In Storage",
            label="In Storage",
            badge_tone="success",
            next_action="Inventory stored. Awaiting customer pickup request.",
        )

    if outbound:
        next_outbound = next(
            (load for load in outbound if load.status in _WAITING_LOAD_STATUSES), None
        )
        if next_outbound is not None:
            number = next_outbound.sequence_number
            return WorkflowState(
                state="Waiting on Load #N Pickup",
                label=f"Waiting on Load #{number} Pickup",
                badge_tone="info",
                next_action=f"Pickup scheduled for {_slot_label(next_outbound)}",
            )

        all_outbound_done = all(
            load.status == LoadStatus.COMPLETED.value for load in outbound
        )
        if all_outbound_done and joints_in_storage == 0:
            return WorkflowState(state="Complete", label="All Pipe Returned", badge_tone="success")

        return WorkflowState(
            state="Pickup Requested",
            label="Pickup in Progress",
            badge_tone="info",
            next_action="Outbound loads being prepared for pickup",
        )

    return WorkflowState(state="In Storage", label="In Storage", badge_tone="neutral")


def calculate_progress(project: ProjectSummary) -> int:
    """Rough 0-100 completion figure for progress bars."""
    if project.status == RequestStatus.REJECTED.value:
        return 0
    if project.status == RequestStatus.PENDING.value:
        return 10

    inbound = _by_sequence(project.inbound_loads)
    outbound = _by_sequence(project.outbound_loads)
    if not inbound:
        return 20

    arrived = sum(1 for load in inbound if load.status in _ARRIVED_LOAD_STATUSES)
    inbound_progress = 20 + (arrived / len(inbound)) * 40

    if project.inventory_summary.total_joints == 0 and not outbound:
        return round(inbound_progress)
    if not outbound:
        return 70

    completed = sum(1 for load in outbound if load.status == LoadStatus.COMPLETED.value)
    return round(70 + (completed / len(outbound)) * 30)


def requires_admin_action(project: ProjectSummary) -> bool:
    if project.status == RequestStatus.PENDING.value:
        return True
    inbound = _by_sequence(project.inbound_loads)
    return _all_arrived(inbound) and not _all_manifests_processed(inbound)
