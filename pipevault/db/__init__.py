"""Database package — async SQLAlchemy engine, session factory, Base, unit of work."""
from pipevault.db.base import (
    Base,
    async_session_factory,
    atomic,
    engine,
    get_db,
    make_engine,
    make_session_factory,
    read_snapshot,
)

__all__ = [
    "Base",
    "async_session_factory",
    "atomic",
    "engine",
    "get_db",
    "make_engine",
    "make_session_factory",
    "read_snapshot",
]
