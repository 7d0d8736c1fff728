"""Approval workflow Pydantic schemas (request DTOs and response models)."""


from datetime import datetime

from pydantic import Field, model_validator

from pipevault.schemas.common import CamelModel

# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------

class RackAllocation(CamelModel):
    rack_id: str = Field(min_length=1)
    joints: int = Field(gt=0)


class ApproveRequestBody(CamelModel):
    """Either explicit ``allocations`` or ``assignedRackIds`` + ``requiredJoints``.

    With rack ids only, the joints are split evenly across the racks; the
    first racks absorb the remainder one joint each.
    """

    allocations: list[RackAllocation] | None = None
    assigned_rack_ids: list[str] | None = None
    required_joints: int | None = Field(default=None, gt=0)
    notes: str | None = None

    @model_validator(mode="after")
    def _one_allocation_form(self) -> "ApproveRequestBody":
        if self.allocations:
            return self
        if not self.assigned_rack_ids or self.required_joints is None:
            raise ValueError(
                "Provide either allocations or assignedRackIds with requiredJoints"
            )
        return self


class RejectRequestBody(CamelModel):
    reason: str = Field(min_length=1)


class RackAdjustmentBody(CamelModel):
    occupied: int
    reason: str

# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

class RackAllocationResult(CamelModel):
    rack_id: str
    rack_name: str
    joints: int
    occupied: int
    capacity: int
    available: int


class ApprovalResult(CamelModel):
    success: bool = True
    request_id: str
    reference_id: str
    company_id: str
    status: str
    assigned_racks: list[str]
    allocations: list[RackAllocationResult]
    required_joints: int
    audit_entry_id: str
    notification_id: str
    notification_queued: bool = True
    message: str


class RejectionResult(CamelModel):
    success: bool = True
    request_id: str
    reference_id: str
    company_id: str
    status: str
    rejection_reason: str
    audit_entry_id: str
    notification_id: str
    notification_queued: bool = True
    message: str


class RackAdjustmentResult(CamelModel):
    rack_id: str
    old_occupied: int
    new_occupied: int
    capacity: int
    adjusted_by: str
    adjusted_at: datetime
    audit_entry_id: str


class RackOut(CamelModel):
    id: str
    name: str
    area: str | None = None
    capacity: int
    occupied: int
    available: int
