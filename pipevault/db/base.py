"""Async SQLAlchemy engine, session factory, declarative Base, unit of work and FastAPI dependency."""


import logging
from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy import event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from pipevault.core.config import settings
from pipevault.core.exceptions import DataAccessError

logger = logging.getLogger(__name__)

# Execution option naming the BEGIN mode SQLite connections start with
SQLITE_BEGIN = "sqlite_begin"
_SQLITE_BEGIN_MODES = ("DEFERRED", "IMMEDIATE")

# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------
def make_engine(database_url: str, *, echo: bool = False) -> AsyncEngine:
    """Create an async engine with the pool / driver options for *database_url*."""
    engine_kwargs: dict = {
        "pool_pre_ping": True,
        "echo": echo,
    }

    # SQLite (local dev, tests) doesn't support connection pooling parameters;
    # the busy timeout makes a second writer wait instead of failing at once
    if database_url.startswith("sqlite"):
        engine_kwargs["connect_args"] = {
            "check_same_thread": False,
            "timeout": settings.database_busy_timeout,
        }

    engine = create_async_engine(database_url, **engine_kwargs)
    if database_url.startswith("sqlite"):
        _install_sqlite_transactions(engine, wal=":memory:" not in database_url)
    return engine


def _install_sqlite_transactions(engine: AsyncEngine, *, wal: bool) -> None:
    """Take BEGIN away from the driver so transactions start where SQLAlchemy says.

    Readers open a deferred transaction and keep one WAL snapshot until it
    ends; writers open with BEGIN IMMEDIATE and queue on the busy handler.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        if wal:
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        mode = conn.get_execution_options().get(SQLITE_BEGIN, "DEFERRED")
        if mode not in _SQLITE_BEGIN_MODES:
            raise ValueError(f"unsupported SQLite BEGIN mode {mode!r}")
        conn.exec_driver_sql(f"BEGIN {mode}")


def _is_sqlite(session: AsyncSession) -> bool:
    return session.bind is not None and session.bind.dialect.name == "sqlite"


def make_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
        autocommit=False,
    )


engine = make_engine(settings.database_url, echo=settings.database_echo)

# ---------------------------------------------------------------------------
# Session factory
# ---------------------------------------------------------------------------
async_session_factory = make_session_factory(engine)

# ---------------------------------------------------------------------------
# Declarative Base
# ---------------------------------------------------------------------------
class Base(DeclarativeBase):
    """All ORM models inherit from this base."""

# ---------------------------------------------------------------------------
# Unit of work
# ---------------------------------------------------------------------------
@asynccontextmanager
async def atomic(session: AsyncSession, operation: str) -> AsyncIterator[AsyncSession]:
    """Run the enclosed writes as one transaction.

    Commits on success.  On any exception the whole transaction is rolled
    back; SQLAlchemy errors are re-raised as :class:`DataAccessError`,
    application errors propagate unchanged.
    """
    try:
        if _is_sqlite(session) and not session.in_transaction():
            await session.connection(execution_options={SQLITE_BEGIN: "IMMEDIATE"})
        yield session
        await session.commit()
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.error("%s failed and was rolled back: %s", operation, exc)
        raise DataAccessError(f"{operation} failed; no changes were applied", operation) from exc
    except Exception:
        await session.rollback()
        raise


@asynccontextmanager
async def read_snapshot(session: AsyncSession, operation: str) -> AsyncIterator[AsyncSession]:
    """Run the enclosed reads in one read transaction over a single snapshot.

    PostgreSQL reads at REPEATABLE READ; SQLite reads inside one deferred
    transaction on a WAL database.  A transaction the caller already holds
    is reused and left open.  Store failures surface as
    :class:`DataAccessError`.
    """
    owns_transaction = not session.in_transaction()
    try:
        if owns_transaction:
            options = (
                {SQLITE_BEGIN: "DEFERRED"}
                if _is_sqlite(session)
                else {"isolation_level": "REPEATABLE READ"}
            )
            await session.connection(execution_options=options)
        yield session
        if owns_transaction:
            await session.commit()
    except SQLAlchemyError as exc:
        if owns_transaction:
            await session.rollback()
        logger.error("%s failed: %s", operation, exc)
        raise DataAccessError(f"{operation} failed", operation) from exc
    except Exception:
        if owns_transaction:
            await session.rollback()
        raise

# ---------------------------------------------------------------------------
# FastAPI dependency
# ---------------------------------------------------------------------------
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield an async database session; roll back on error."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
