"""Rack read service (rack selector data)."""


from sqlalchemy.ext.asyncio import AsyncSession

from pipevault.db.base import read_snapshot
from pipevault.repositories.rack import RackRepository
from pipevault.schemas.approval import RackOut

class RackService:
    def __init__(self, session: AsyncSession):
        self._session = session
        self._repo = RackRepository(session)

    async def list_racks(self) -> list[RackOut]:
        async with read_snapshot(self._session, "list_racks"):
            racks = await self._repo.list_all()
        return [
            RackOut(
                id=rack.id,
                name=rack.name,
                area=rack.area,
                capacity=rack.capacity,
                occupied=rack.occupied,
                available=rack.available,
            )
            for rack in racks
        ]
