"""Rack repository — capacity-guarded occupancy writes.

The capacity check lives in the UPDATE's WHERE clause, so checking and
incrementing are one statement: a concurrent writer either sees the row
after our increment or blocks on the row lock until we commit.  Only the
touched rows are locked.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timezone

from sqlalchemy import update

from pipevault.domain.rack import Rack
from pipevault.repositories.base import BaseRepository


class RackRepository(BaseRepository[Rack]):
    model = Rack

    async def get_many(self, rack_ids: Iterable[str]) -> dict[str, Rack]:
        """Fetch racks by id, reading fresh values even if already in the session."""
        ids = list(rack_ids)
        if not ids:
            return {}
        q = (
            self._base_query()
            .where(Rack.id.in_(ids))
            .execution_options(populate_existing=True)
        )
        racks = (await self._session.execute(q)).scalars().all()
        return {rack.id: rack for rack in racks}

    async def try_increment(self, rack_id: str, joints: int) -> bool:
        """Add *joints* to ``occupied`` only if the rack stays within capacity.

        Returns False, and changes nothing, when the rack is missing or the
        increment would overflow it.
        """
        result = await self._session.execute(
            update(Rack)
            .where(Rack.id == rack_id)
            .where(Rack.deleted_at.is_(None))
            .where(Rack.occupied + joints <= Rack.capacity)
            .values(occupied=Rack.occupied + joints, updated_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def try_set_occupied(self, rack_id: str, occupied: int) -> bool:
        """Overwrite ``occupied`` if the new value fits the rack."""
        result = await self._session.execute(
            update(Rack)
            .where(Rack.id == rack_id)
            .where(Rack.deleted_at.is_(None))
            .where(Rack.capacity >= occupied)
            .values(occupied=occupied, updated_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def list_all(self) -> list[Rack]:
        q = self._base_query().order_by(Rack.name, Rack.id)
        return list((await self._session.execute(q)).scalars().all())
