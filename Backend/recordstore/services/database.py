import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Iterable, Iterator, List, Optional, Sequence

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from recordstore.core.exceptions import RecordStoreException, StorageError

logger = logging.getLogger(__name__)

Base = declarative_base()

# Upper bound on the number of IDs bound into a single IN (...) clause.
IN_CLAUSE_BATCH_SIZE = 500


def register_models() -> None:
    """Import all models so SQLAlchemy knows about every table."""
    from recordstore.models import cart_item, ensemble, musician, record, record_track, track, user  # noqa: F401


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ships with foreign keys off; cascades depend on them.
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """
    The process-wide storage handle: one async engine plus the session
    factory bound to it. Built once at startup, handed to request handlers
    through ``get_db`` and disposed on shutdown.
    """

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        self.engine = create_async_engine(url, echo=echo)
        if self.engine.dialect.name == "sqlite":
            event.listen(self.engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        self.session_factory = sessionmaker(self.engine, class_=AsyncSession, expire_on_commit=False)

    def session(self) -> AsyncSession:
        return self.session_factory()

    async def create_all(self) -> None:
        register_models()
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_all(self) -> None:
        register_models()
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def dispose(self) -> None:
        await self.engine.dispose()


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """
    Dependency that provides a database session.
    Session is automatically closed after the request; anything not
    committed by a ``transaction`` block is rolled back.

    Usage:
        @router.get("/records")
        async def list_records(db: AsyncSession = Depends(get_db)):
            ...
    """
    database: Database = request.app.state.database
    async with database.session() as session:
        yield session


@asynccontextmanager
async def transaction(session: AsyncSession) -> AsyncIterator[AsyncSession]:
    """
    All-or-nothing unit of work. Commits when the block finishes, rolls back
    on any exception. Engine errors surface as StorageError; the underlying
    error is only logged.
    """
    try:
        if session.in_transaction():
            # Close out the read-only transaction autobegun by earlier lookups.
            await session.commit()
        async with session.begin():
            yield session
    except RecordStoreException:
        raise
    except SQLAlchemyError as e:
        logger.error(f"Transaction rolled back: {e}")
        raise StorageError() from e


def chunked(ids: Iterable[Any], size: Optional[int] = None) -> Iterator[List[Any]]:
    """Yield de-duplicated IDs in order, ``size`` (default IN_CLAUSE_BATCH_SIZE) at a time."""
    size = size or IN_CLAUSE_BATCH_SIZE
    unique_ids = list(dict.fromkeys(ids))
    for start in range(0, len(unique_ids), size):
        yield unique_ids[start:start + size]


async def select_in(
    session: AsyncSession,
    stmt,
    column,
    ids: Iterable[Any],
    scalars: bool = False,
) -> Sequence[Any]:
    """
    Run ``stmt`` restricted to ``column IN ids`` and return all rows (or the
    first column of each row when ``scalars`` is set).
    The IDs are bound as parameters; large sets are split into chunks so a
    single statement never exceeds IN_CLAUSE_BATCH_SIZE parameters.
    """
    rows = []
    for chunk in chunked(ids):
        result = await session.execute(stmt.where(column.in_(chunk)))
        rows.extend(result.scalars().all() if scalars else result.all())
    return rows
