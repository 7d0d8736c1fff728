"""Shared fixtures: a throwaway SQLite database per test plus seeding helpers."""
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from sqlalchemy import event

import pipevault.domain  # noqa: F401
from pipevault.db.base import Base, make_engine, make_session_factory
from pipevault.domain import (
    AdminUser,
    Company,
    InventoryItem,
    InventoryStatus,
    LoadDirection,
    LoadStatus,
    Rack,
    RequestStatus,
    StorageRequest,
    TruckingDocument,
    TruckingLoad,
)

BASE_TIME = datetime(2025, 3, 1, 8, 0, tzinfo=timezone.utc)


@pytest_asyncio.fixture()
async def engine(tmp_path):
    # A file database so concurrent sessions really use separate connections
    engine = make_engine(f"sqlite+aiosqlite:///{tmp_path / 'pipevault_test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return make_session_factory(engine)


@pytest_asyncio.fixture()
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture()
def statements(engine):
    """Every SQL statement sent to the driver while the test runs."""
    captured: list[str] = []

    def _capture(conn, cursor, statement, parameters, context, executemany):
        captured.append(statement)

    event.listen(engine.sync_engine, "before_cursor_execute", _capture)
    yield captured
    event.remove(engine.sync_engine, "before_cursor_execute", _capture)


class Seeder:
    """Inserts rows through a separate session and commits each one."""

    def __init__(self, session_factory):
        self._factory = session_factory
        self._counter = 0

    def _next(self) -> int:
        self._counter += 1
        return self._counter

    async def add(self, obj):
        async with self._factory() as session:
            session.add(obj)
            await session.commit()
        return obj

    async def admin(self, user_id: str = "admin-1", is_active: bool = True) -> AdminUser:
        n = self._next()
        return await self.add(
            AdminUser(
                user_id=user_id,
                email=f"{user_id}-{n}@mpsgroup.ca",
                name=f"Admin {n}",
                is_active=is_active,
            )
        )

    async def company(self, name: str, **kwargs) -> Company:
        domain = kwargs.pop("domain", f"{name.lower().replace(' ', '')}.com")
        return await self.add(Company(name=name, domain=domain, **kwargs))

    async def rack(self, rack_id: str, capacity: int = 100, occupied: int = 0, **kwargs) -> Rack:
        name = kwargs.pop("name", rack_id)
        return await self.add(
            Rack(id=rack_id, name=name, capacity=capacity, occupied=occupied, **kwargs)
        )

    async def request(
        self,
        company: Company,
        status: RequestStatus = RequestStatus.PENDING,
        reference_id: str | None = None,
        minutes: int = 0,
        **kwargs,
    ) -> StorageRequest:
        n = self._next()
        stamp = BASE_TIME + timedelta(minutes=minutes or n)
        return await self.add(
            StorageRequest(
                company_id=company.id,
                reference_id=reference_id or f"REF-{n:04d}",
                status=status.value,
                user_email=kwargs.pop("user_email", "customer@example.com"),
                created_at=stamp,
                updated_at=stamp,
                **kwargs,
            )
        )

    async def load(
        self,
        request: StorageRequest,
        direction: LoadDirection = LoadDirection.INBOUND,
        sequence_number: int = 1,
        status: LoadStatus = LoadStatus.NEW,
        **kwargs,
    ) -> TruckingLoad:
        return await self.add(
            TruckingLoad(
                storage_request_id=request.id,
                direction=direction.value,
                sequence_number=sequence_number,
                status=status.value,
                **kwargs,
            )
        )

    async def document(self, load: TruckingLoad, parsed_payload=None, **kwargs) -> TruckingDocument:
        n = self._next()
        return await self.add(
            TruckingDocument(
                trucking_load_id=load.id,
                file_name=kwargs.pop("file_name", f"manifest-{n}.pdf"),
                storage_path=kwargs.pop("storage_path", f"documents/manifest-{n}.pdf"),
                document_type=kwargs.pop("document_type", "manifest"),
                parsed_payload=parsed_payload,
                **kwargs,
            )
        )

    async def inventory(
        self,
        request: StorageRequest,
        count: int = 1,
        status: InventoryStatus = InventoryStatus.IN_STORAGE,
        rack: Rack | None = None,
        load: TruckingLoad | None = None,
    ) -> list[InventoryItem]:
        items = [
            InventoryItem(
                company_id=request.company_id,
                storage_request_id=request.id,
                trucking_load_id=load.id if load else None,
                rack_id=rack.id if rack else None,
                status=status.value,
                length_ft=40,
                weight_lbs=1000,
            )
            for _ in range(count)
        ]
        async with self._factory() as session:
            session.add_all(items)
            await session.commit()
        return items


@pytest.fixture()
def seed(session_factory) -> Seeder:
    return Seeder(session_factory)
