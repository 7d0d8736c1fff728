"""Aggregation service — company summaries and the nested project tree.

Responsibilities:
  - Dashboard tiles: per-company counts in a single statement
  - Detail views: company -> project -> load -> document / rack inventory,
    built from one query per record set and grouped here by foreign key

The number of statements issued is fixed (1 for summaries, 5 for a tree)
no matter how many companies, projects or loads exist.  Nothing here
writes; every method is safe to call concurrently and repeatedly.
"""


import logging
from collections import defaultdict
from collections.abc import Sequence
from decimal import Decimal

from sqlalchemy import Row
from sqlalchemy.ext.asyncio import AsyncSession

from pipevault.core.exceptions import NotFoundError
from pipevault.db.base import read_snapshot
from pipevault.domain.company import Company
from pipevault.domain.inventory import InventoryStatus
from pipevault.domain.storage_request import StorageRequest
from pipevault.domain.trucking import LoadDirection, TruckingDocument, TruckingLoad
from pipevault.repositories.company import CompanyRepository
from pipevault.schemas.company import (
    CompanyDetail,
    CompanyInfo,
    CompanySummary,
    InventorySummary,
    LoadDocument,
    PipeDetails,
    ProjectLoad,
    ProjectSummary,
    RackAssignment,
)
from pipevault.services.workflow import (
    calculate_progress,
    calculate_workflow_state,
    requires_admin_action,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Row -> model builders
# ---------------------------------------------------------------------------

def _summary_from_row(row: Row) -> CompanySummary:
    activity = [ts for ts in (row.latest_request_at, row.latest_load_at) if ts is not None]
    return CompanySummary(
        id=row.id,
        name=row.name,
        domain=row.domain,
        total_requests=row.total_requests,
        pending_requests=row.pending_requests,
        approved_requests=row.approved_requests,
        rejected_requests=row.rejected_requests,
        total_inventory_items=row.total_inventory_items,
        in_storage_items=row.in_storage_items,
        total_loads=row.total_loads,
        inbound_loads=row.inbound_loads,
        outbound_loads=row.outbound_loads,
        new_loads=row.new_loads,
        latest_activity=max(activity) if activity else None,
    )


def _document(doc: TruckingDocument) -> LoadDocument:
    return LoadDocument.model_validate(doc)


def _load(
    load: TruckingLoad,
    documents: list[LoadDocument],
    racks: list[RackAssignment],
) -> ProjectLoad:
    return ProjectLoad(
        id=load.id,
        direction=load.direction,
        sequence_number=load.sequence_number,
        status=load.status,
        scheduled_slot_start=load.scheduled_slot_start,
        scheduled_slot_end=load.scheduled_slot_end,
        total_joints_planned=load.total_joints_planned,
        total_joints_completed=load.total_joints_completed,
        total_weight_lbs_planned=load.total_weight_lbs_planned,
        total_weight_lbs_completed=load.total_weight_lbs_completed,
        approved_at=load.approved_at,
        completed_at=load.completed_at,
        trucking_company=load.trucking_company,
        contact_name=load.contact_name,
        contact_phone=load.contact_phone,
        notes=load.notes,
        documents=documents,
        assigned_racks=racks,
    )


def _pipe_details(request: StorageRequest) -> PipeDetails:
    return PipeDetails(
        pipe_type=request.pipe_type,
        pipe_grade=request.pipe_grade,
        outer_diameter=request.outer_diameter,
        connection_type=request.connection_type,
        total_joints_estimate=request.total_joints_estimate,
        storage_start_date=request.storage_start_date,
        estimated_duration_months=request.estimated_duration_months,
        special_handling=request.special_handling,
    )

# ---------------------------------------------------------------------------
# Inventory grouping
# ---------------------------------------------------------------------------

def _group_rack_assignments(rows: Sequence[Row]) -> dict[str | None, list[RackAssignment]]:
    """Per-load rack assignments keyed by trucking_load_id (statuses merged)."""
    merged: dict[tuple[str | None, str], RackAssignment] = {}
    order: dict[str | None, list[tuple[str | None, str]]] = defaultdict(list)

    for row in rows:
        if row.rack_id is None:
            continue
        key = (row.trucking_load_id, row.rack_id)
        current = merged.get(key)
        if current is None:
            current = RackAssignment(
                rack_id=row.rack_id,
                rack_name=row.rack_name,
                assigned_at=row.assigned_at,
                last_updated=row.last_updated,
            )
            merged[key] = current
            order[row.trucking_load_id].append(key)
        current.joint_count += row.joint_count
        current.total_length_ft += Decimal(row.total_length_ft or 0)
        current.total_weight_lbs += Decimal(row.total_weight_lbs or 0)
        if row.status not in current.statuses:
            current.statuses = sorted([*current.statuses, row.status])
        if row.assigned_at is not None and (
            current.assigned_at is None or row.assigned_at < current.assigned_at
        ):
            current.assigned_at = row.assigned_at
        if row.last_updated is not None and (
            current.last_updated is None or row.last_updated > current.last_updated
        ):
            current.last_updated = row.last_updated

    return {load_id: [merged[key] for key in keys] for load_id, keys in order.items()}


def _group_inventory_summaries(rows: Sequence[Row]) -> dict[str, InventorySummary]:
    """In-storage totals keyed by storage_request_id."""
    summaries: dict[str, InventorySummary] = {}
    for row in rows:
        if row.status != InventoryStatus.IN_STORAGE.value:
            continue
        summary = summaries.setdefault(row.storage_request_id, InventorySummary())
        summary.total_joints += row.joint_count
        summary.total_length_ft += Decimal(row.total_length_ft or 0)
        summary.total_weight_lbs += Decimal(row.total_weight_lbs or 0)
        if row.rack_name and row.rack_name not in summary.rack_names:
            summary.rack_names = sorted([*summary.rack_names, row.rack_name])
    return summaries

# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

class AggregationService:
    def __init__(self, session: AsyncSession):
        self._session = session
        self._repo = CompanyRepository(session)

    async def list_company_summaries(self) -> list[CompanySummary]:
        """Tile data for every active customer company, ordered by name then id."""
        async with read_snapshot(self._session, "list_company_summaries"):
            rows = await self._repo.list_summary_rows()
        return [_summary_from_row(row) for row in rows]

    async def list_project_summaries(self) -> list[CompanyDetail]:
        """Full project tree for every active customer company."""
        async with read_snapshot(self._session, "list_project_summaries"):
            return await self._build_trees(None)

    async def get_company_detail(self, company_id: str) -> CompanyDetail:
        async with read_snapshot(self._session, "get_company_detail"):
            trees = await self._build_trees(company_id)
        if not trees:
            raise NotFoundError("Company", company_id)
        return trees[0]

    async def _build_trees(self, company_id: str | None) -> list[CompanyDetail]:
        companies = await self._repo.list_companies(company_id)
        if not companies:
            return []
        requests = await self._repo.list_requests(company_id)
        loads = await self._repo.list_loads(company_id)
        documents = await self._repo.list_documents(company_id)
        inventory_rows = await self._repo.list_inventory_groups(company_id)

        docs_by_load: dict[str, list[LoadDocument]] = defaultdict(list)
        for doc in documents:
            docs_by_load[doc.trucking_load_id].append(_document(doc))

        racks_by_load = _group_rack_assignments(inventory_rows)
        inventory_by_request = _group_inventory_summaries(inventory_rows)

        loads_by_request: dict[str, list[ProjectLoad]] = defaultdict(list)
        for load in loads:
            loads_by_request[load.storage_request_id].append(
                _load(load, docs_by_load.get(load.id, []), racks_by_load.get(load.id, []))
            )

        projects_by_company: dict[str, list[ProjectSummary]] = defaultdict(list)
        for request in requests:
            project_loads = loads_by_request.get(request.id, [])
            project = ProjectSummary(
                id=request.id,
                reference_id=request.reference_id,
                status=request.status,
                submitted_by=request.submitted_by,
                contact_email=request.contact_email,
                contact_phone=request.contact_phone,
                assigned_rack_ids=list(request.assigned_rack_ids or []),
                admin_notes=request.admin_notes,
                rejection_reason=request.rejection_reason,
                created_at=request.created_at,
                updated_at=request.updated_at,
                pipe_details=_pipe_details(request),
                inbound_loads=[
                    pl for pl in project_loads if pl.direction == LoadDirection.INBOUND.value
                ],
                outbound_loads=[
                    pl for pl in project_loads if pl.direction == LoadDirection.OUTBOUND.value
                ],
                inventory_summary=inventory_by_request.get(request.id, InventorySummary()),
            )
            project.workflow = calculate_workflow_state(project)
            project.progress = calculate_progress(project)
            project.requires_admin_action = requires_admin_action(project)
            projects_by_company[request.company_id].append(project)

        logger.debug(
            "Built project tree: %d companies, %d projects, %d loads, %d documents",
            len(companies), len(requests), len(loads), len(documents),
        )
        return [
            CompanyDetail(
                company=_company_info(company),
                projects=projects_by_company.get(company.id, []),
            )
            for company in companies
        ]


def _company_info(company: Company) -> CompanyInfo:
    return CompanyInfo.model_validate(company)
