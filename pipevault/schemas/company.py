"""Company summary and project tree response models."""


from datetime import date, datetime
from decimal import Decimal
from typing import Any

from pydantic import Field

from pipevault.schemas.common import CamelModel

# ---------------------------------------------------------------------------
# Dashboard tiles
# ---------------------------------------------------------------------------

class CompanySummary(CamelModel):
    id: str
    name: str
    domain: str
    total_requests: int = 0
    pending_requests: int = 0
    approved_requests: int = 0
    rejected_requests: int = 0
    total_inventory_items: int = 0
    in_storage_items: int = 0
    total_loads: int = 0
    inbound_loads: int = 0
    outbound_loads: int = 0
    new_loads: int = Field(default=0, description="Loads awaiting admin approval.")
    latest_activity: datetime | None = Field(
        default=None, description="Null only when the company has no requests and no loads."
    )

# ---------------------------------------------------------------------------
# Load & document tree
# ---------------------------------------------------------------------------

class LoadDocument(CamelModel):
    id: str
    file_name: str
    storage_path: str
    document_type: str | None = None
    parsed_payload: Any | None = None
    uploaded_by: str | None = None
    uploaded_at: datetime


class RackAssignment(CamelModel):
    rack_id: str
    rack_name: str | None = None
    joint_count: int = 0
    total_length_ft: Decimal = Decimal("0")
    total_weight_lbs: Decimal = Decimal("0")
    statuses: list[str] = Field(default_factory=list)
    assigned_at: datetime | None = None
    last_updated: datetime | None = None


class ProjectLoad(CamelModel):
    id: str
    direction: str
    sequence_number: int
    status: str
    scheduled_slot_start: datetime | None = None
    scheduled_slot_end: datetime | None = None
    total_joints_planned: int | None = None
    total_joints_completed: int | None = None
    total_weight_lbs_planned: Decimal | None = None
    total_weight_lbs_completed: Decimal | None = None
    approved_at: datetime | None = None
    completed_at: datetime | None = None
    trucking_company: str | None = None
    contact_name: str | None = None
    contact_phone: str | None = None
    notes: str | None = None
    documents: list[LoadDocument] = Field(default_factory=list)
    assigned_racks: list[RackAssignment] = Field(default_factory=list)

# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------

class InventorySummary(CamelModel):
    """Joints currently in storage for one project."""

    total_joints: int = 0
    total_length_ft: Decimal = Decimal("0")
    total_weight_lbs: Decimal = Decimal("0")
    rack_names: list[str] = Field(default_factory=list)


class PipeDetails(CamelModel):
    pipe_type: str | None = None
    pipe_grade: str | None = None
    outer_diameter: Decimal | None = None
    connection_type: str | None = None
    total_joints_estimate: int | None = None
    storage_start_date: date | None = None
    estimated_duration_months: int | None = None
    special_handling: str | None = None


class WorkflowState(CamelModel):
    state: str
    label: str
    badge_tone: str  # pending | info | success | danger | neutral
    next_action: str | None = None


class ProjectSummary(CamelModel):
    id: str
    reference_id: str
    status: str
    submitted_by: str | None = None
    contact_email: str | None = None
    contact_phone: str | None = None
    assigned_rack_ids: list[str] = Field(default_factory=list)
    admin_notes: str | None = None
    rejection_reason: str | None = None
    created_at: datetime
    updated_at: datetime
    pipe_details: PipeDetails
    inbound_loads: list[ProjectLoad] = Field(default_factory=list)
    outbound_loads: list[ProjectLoad] = Field(default_factory=list)
    inventory_summary: InventorySummary = Field(default_factory=InventorySummary)
    workflow: WorkflowState | None = None
    progress: int = 0
    requires_admin_action: bool = False

# ---------------------------------------------------------------------------
# Companies
# ---------------------------------------------------------------------------

class CompanyInfo(CamelModel):
    id: str
    name: str
    domain: str
    contact_email: str | None = None
    contact_phone: str | None = None


class CompanyDetail(CamelModel):
    company: CompanyInfo
    projects: list[ProjectSummary] = Field(default_factory=list)
