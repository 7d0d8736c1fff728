"""Storage request repository."""

from __future__ import annotations

from typing import Any

from sqlalchemy import Row, select, update

from pipevault.domain.company import Company
from pipevault.domain.storage_request import StorageRequest
from pipevault.repositories.base import BaseRepository


class StorageRequestRepository(BaseRepository[StorageRequest]):
    model = StorageRequest

    async def get_with_company(self, request_id: str) -> Row | None:
        """Return ``(StorageRequest, company_name)`` or None."""
        q = (
            select(StorageRequest, Company.name)
            .join(Company, Company.id == StorageRequest.company_id)
            .where(StorageRequest.id == request_id)
            .where(StorageRequest.deleted_at.is_(None))
            .execution_options(populate_existing=True)
        )
        return (await self._session.execute(q)).first()

    async def transition_status(
        self, request_id: str, *, expected: str, new: str, **values: Any
    ) -> bool:
        """Move the request from *expected* to *new* status in one conditional UPDATE.

        Returns False when the request is no longer in *expected* status
        (another transaction got there first); nothing is written then.
        """
        result = await self._session.execute(
            update(StorageRequest)
            .where(StorageRequest.id == request_id)
            .where(StorageRequest.status == expected)
            .values(status=new, **values)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
