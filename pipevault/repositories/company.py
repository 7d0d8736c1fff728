"""Company repository — summary aggregation and the record sets behind the project tree.

Every method here issues exactly one SELECT, whatever the number of
companies, requests or loads involved.  Callers group the flat rows by
foreign key; nothing in this module queries per parent row.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from sqlalchemy import Row, Select, case, func, select

from pipevault.domain.company import Company
from pipevault.domain.inventory import InventoryItem, InventoryStatus
from pipevault.domain.rack import Rack
from pipevault.domain.storage_request import RequestStatus, StorageRequest
from pipevault.domain.trucking import LoadDirection, LoadStatus, TruckingDocument, TruckingLoad
from pipevault.repositories.base import BaseRepository


def _count_where(condition) -> Any:
    return func.sum(case((condition, 1), else_=0))


class CompanyRepository(BaseRepository[Company]):
    model = Company

    # ------------------------------------------------------------------
    # Scoping
    # ------------------------------------------------------------------

    def active_company_ids(self, company_id: str | None = None) -> Select:
        """SELECT of company ids in scope.

        Without *company_id*: active customer companies only (hides the
        operator's own company, archived and soft-deleted companies).
        With *company_id*: that single company unless soft-deleted.
        """
        q = select(Company.id).where(Company.deleted_at.is_(None))
        if company_id is not None:
            return q.where(Company.id == company_id)
        return q.where(Company.is_customer.is_(True), Company.is_archived.is_(False))

    # ------------------------------------------------------------------
    # Summaries (one statement)
    # ------------------------------------------------------------------

    async def list_summary_rows(self) -> Sequence[Row]:
        """Per-company counts for every active customer company, ordered by name then id."""
        requests = (
            select(
                StorageRequest.company_id.label("company_id"),
                func.count().label("total_requests"),
                _count_where(StorageRequest.status == RequestStatus.PENDING.value).label(
                    "pending_requests"
                ),
                _count_where(StorageRequest.status == RequestStatus.APPROVED.value).label(
                    "approved_requests"
                ),
                _count_where(StorageRequest.status == RequestStatus.REJECTED.value).label(
                    "rejected_requests"
                ),
                func.max(StorageRequest.updated_at).label("latest_request_at"),
            )
            .where(StorageRequest.deleted_at.is_(None))
            .group_by(StorageRequest.company_id)
            .subquery("request_counts")
        )

        inventory = (
            select(
                InventoryItem.company_id.label("company_id"),
                func.count().label("total_inventory_items"),
                _count_where(InventoryItem.status == InventoryStatus.IN_STORAGE.value).label(
                    "in_storage_items"
                ),
            )
            .where(InventoryItem.deleted_at.is_(None))
            .group_by(InventoryItem.company_id)
            .subquery("inventory_counts")
        )

        loads = (
            select(
                StorageRequest.company_id.label("company_id"),
                func.count().label("total_loads"),
                _count_where(TruckingLoad.direction == LoadDirection.INBOUND.value).label(
                    "inbound_loads"
                ),
                _count_where(TruckingLoad.direction == LoadDirection.OUTBOUND.value).label(
                    "outbound_loads"
                ),
                _count_where(TruckingLoad.status == LoadStatus.NEW.value).label("new_loads"),
                func.max(TruckingLoad.updated_at).label("latest_load_at"),
            )
            .join(StorageRequest, StorageRequest.id == TruckingLoad.storage_request_id)
            .where(TruckingLoad.deleted_at.is_(None), StorageRequest.deleted_at.is_(None))
            .group_by(StorageRequest.company_id)
            .subquery("load_counts")
        )

        q = (
            select(
                Company.id,
                Company.name,
                Company.domain,
                func.coalesce(requests.c.total_requests, 0).label("total_requests"),
                func.coalesce(requests.c.pending_requests, 0).label("pending_requests"),
                func.coalesce(requests.c.approved_requests, 0).label("approved_requests"),
                func.coalesce(requests.c.rejected_requests, 0).label("rejected_requests"),
                func.coalesce(inventory.c.total_inventory_items, 0).label("total_inventory_items"),
                func.coalesce(inventory.c.in_storage_items, 0).label("in_storage_items"),
                func.coalesce(loads.c.total_loads, 0).label("total_loads"),
                func.coalesce(loads.c.inbound_loads, 0).label("inbound_loads"),
                func.coalesce(loads.c.outbound_loads, 0).label("outbound_loads"),
                func.coalesce(loads.c.new_loads, 0).label("new_loads"),
                requests.c.latest_request_at,
                loads.c.latest_load_at,
            )
            .outerjoin(requests, requests.c.company_id == Company.id)
            .outerjoin(inventory, inventory.c.company_id == Company.id)
            .outerjoin(loads, loads.c.company_id == Company.id)
            .where(Company.id.in_(self.active_company_ids()))
            .order_by(Company.name, Company.id)
        )
        return (await self._session.execute(q)).all()

    # ------------------------------------------------------------------
    # Project tree record sets (one statement each)
    # ------------------------------------------------------------------

    async def list_companies(self, company_id: str | None = None) -> list[Company]:
        q = (
            select(Company)
            .where(Company.id.in_(self.active_company_ids(company_id)))
            .order_by(Company.name, Company.id)
        )
        return list((await self._session.execute(q)).scalars().all())

    async def list_requests(self, company_id: str | None = None) -> list[StorageRequest]:
        q = (
            select(StorageRequest)
            .where(
                StorageRequest.company_id.in_(self.active_company_ids(company_id)),
                StorageRequest.deleted_at.is_(None),
            )
            .order_by(StorageRequest.created_at.desc(), StorageRequest.id)
        )
        return list((await self._session.execute(q)).scalars().all())

    async def list_loads(self, company_id: str | None = None) -> list[TruckingLoad]:
        q = (
            select(TruckingLoad)
            .join(StorageRequest, StorageRequest.id == TruckingLoad.storage_request_id)
            .where(
                StorageRequest.company_id.in_(self.active_company_ids(company_id)),
                StorageRequest.deleted_at.is_(None),
                TruckingLoad.deleted_at.is_(None),
            )
            .order_by(TruckingLoad.sequence_number, TruckingLoad.id)
        )
        return list((await self._session.execute(q)).scalars().all())

    async def list_documents(self, company_id: str | None = None) -> list[TruckingDocument]:
        q = (
            select(TruckingDocument)
            .join(TruckingLoad, TruckingLoad.id == TruckingDocument.trucking_load_id)
            .join(StorageRequest, StorageRequest.id == TruckingLoad.storage_request_id)
            .where(
                StorageRequest.company_id.in_(self.active_company_ids(company_id)),
                StorageRequest.deleted_at.is_(None),
                TruckingLoad.deleted_at.is_(None),
            )
            .order_by(TruckingDocument.uploaded_at.desc(), TruckingDocument.id)
        )
        return list((await self._session.execute(q)).scalars().all())

    async def list_inventory_groups(self, company_id: str | None = None) -> Sequence[Row]:
        """Inventory aggregated per (request, load, rack, status)."""
        q = (
            select(
                InventoryItem.storage_request_id,
                InventoryItem.trucking_load_id,
                InventoryItem.rack_id,
                Rack.name.label("rack_name"),
                InventoryItem.status,
                func.count().label("joint_count"),
                func.coalesce(func.sum(InventoryItem.length_ft), 0).label("total_length_ft"),
                func.coalesce(func.sum(InventoryItem.weight_lbs), 0).label("total_weight_lbs"),
                func.min(InventoryItem.created_at).label("assigned_at"),
                func.max(InventoryItem.updated_at).label("last_updated"),
            )
            .outerjoin(Rack, Rack.id == InventoryItem.rack_id)
            .where(
                InventoryItem.company_id.in_(self.active_company_ids(company_id)),
                InventoryItem.deleted_at.is_(None),
            )
            .group_by(
                InventoryItem.storage_request_id,
                InventoryItem.trucking_load_id,
                InventoryItem.rack_id,
                Rack.name,
                InventoryItem.status,
            )
            .order_by(Rack.name, InventoryItem.rack_id)
        )
        return (await self._session.execute(q)).all()
