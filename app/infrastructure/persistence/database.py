"""
Database configuration and durable state store for chat runtime.

Provides:
- Database initialization (init_database, init_db, close_db)
- StateStore: the storage contract used by the actors
- SqlAlchemyStateStore: async SQLAlchemy implementation (last write wins per record)
"""
import abc
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from sqlalchemy import select, delete, event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker

from app.core.errors import PersistenceError
from .models import Base, ActorRecordModel

logger = logging.getLogger("chat-runtime.infrastructure.persistence.database")

# ==================== Database Configuration ====================

engine: Optional[AsyncEngine] = None
async_session_maker: Optional[async_sessionmaker[AsyncSession]] = None


def to_async_url(database_url: str) -> str:
    """Convert a sync SQLAlchemy URL into its async driver form."""
    if database_url.startswith("sqlite:///"):
        return database_url.replace("sqlite:///", "sqlite+aiosqlite:///")
    if database_url.startswith("postgresql://"):
        return database_url.replace("postgresql://", "postgresql+asyncpg://")
    return database_url


def init_database(database_url: str) -> async_sessionmaker[AsyncSession]:
    """
    Initialize database engine and session maker.

    Args:
        database_url: SQLAlchemy database URL

    Returns:
        Session factory bound to the new engine
    """
    global engine, async_session_maker

    # Ensure data directory exists for SQLite
    if database_url.startswith("sqlite:///") and ":memory:" not in database_url:
        db_path = database_url.replace("sqlite:///", "")
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    async_db_url = to_async_url(database_url)
    engine = create_async_engine(async_db_url, echo=False, future=True, pool_pre_ping=True)

    if "sqlite" in async_db_url:
        @event.listens_for(engine.sync_engine, "connect")
        def set_sqlite_pragma(dbapi_conn, connection_record):
            """Set SQLite pragmas for concurrent readers"""
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA busy_timeout=30000")  # 30 seconds
            cursor.close()

    async_session_maker = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    logger.info(f"Database initialized with URL: {database_url}")
    return async_session_maker


async def init_db():
    """Initialize database (create tables)"""
    if engine is None:
        raise RuntimeError("Database not initialized. Call init_database() first.")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.info("Database schema initialized")


async def close_db():
    """Close database connections"""
    if engine is not None:
        await engine.dispose()
        logger.info("Database connections closed")


# ==================== State Store ====================

class StateStore(abc.ABC):
    """
    Durable storage contract for actor state.

    Each actor key owns a few named records; a record is a JSON document
    that is always replaced as a whole.
    """

    @abc.abstractmethod
    async def load(self, namespace: str, key: str, record: str) -> Optional[Any]:
        """Return the stored document or None if the record does not exist."""

    @abc.abstractmethod
    async def save(self, namespace: str, key: str, record: str, value: Any) -> None:
        """Replace the record with value."""

    @abc.abstractmethod
    async def delete(self, namespace: str, key: str, record: str) -> None:
        """Remove the record; missing records are ignored."""


class SqlAlchemyStateStore(StateStore):
    """
    Async SQLAlchemy implementation of StateStore.

    Every call runs in its own transaction. SQLAlchemy and driver errors
    are reported as PersistenceError so the caller can retry.
    """

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self._session_maker = session_maker

    async def load(self, namespace: str, key: str, record: str) -> Optional[Any]:
        try:
            async with self._session_maker() as db:
                result = await db.execute(
                    select(ActorRecordModel).where(
                        ActorRecordModel.namespace == namespace,
                        ActorRecordModel.key == key,
                        ActorRecordModel.record == record,
                    )
                )
                row = result.scalar_one_or_none()
                return json.loads(row.payload) if row else None
        except (SQLAlchemyError, OSError, ValueError) as e:
            logger.error(f"Error loading {namespace}/{key}/{record}: {e}", exc_info=True)
            raise PersistenceError(operation="load", record=record, reason=str(e)) from e

    async def save(self, namespace: str, key: str, record: str, value: Any) -> None:
        try:
            payload = json.dumps(value)
            async with self._session_maker() as db:
                result = await db.execute(
                    select(ActorRecordModel).where(
                        ActorRecordModel.namespace == namespace,
                        ActorRecordModel.key == key,
                        ActorRecordModel.record == record,
                    )
                )
                row = result.scalar_one_or_none()
                if row:
                    row.payload = payload
                    row.updated_at = datetime.now(timezone.utc)
                else:
                    db.add(ActorRecordModel(namespace=namespace, key=key, record=record, payload=payload))
                await db.commit()
            logger.debug(f"Saved {namespace}/{key}/{record} ({len(payload)} bytes)")
        except (SQLAlchemyError, OSError, TypeError, ValueError) as e:
            logger.error(f"Error saving {namespace}/{key}/{record}: {e}", exc_info=True)
            raise PersistenceError(operation="save", record=record, reason=str(e)) from e

    async def delete(self, namespace: str, key: str, record: str) -> None:
        try:
            async with self._session_maker() as db:
                await db.execute(
                    delete(ActorRecordModel).where(
                        ActorRecordModel.namespace == namespace,
                        ActorRecordModel.key == key,
                        ActorRecordModel.record == record,
                    )
                )
                await db.commit()
            logger.debug(f"Deleted {namespace}/{key}/{record}")
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Error deleting {namespace}/{key}/{record}: {e}", exc_info=True)
            raise PersistenceError(operation="delete", record=record, reason=str(e)) from e
