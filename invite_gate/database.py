import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional, Union

from sqlalchemy import event, text
from sqlalchemy.engine import URL, make_url
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import AsyncAdaptedQueuePool

from .config import Settings

logger = logging.getLogger(__name__)

Base = declarative_base()


def build_database_url(settings: Settings) -> URL:
    """
    DATABASE_URL when set, otherwise a postgresql+psycopg URL assembled from
    the discrete host/port/database/credential settings.
    """
    if settings.database_url is not None:
        return make_url(settings.database_url.get_secret_value())
    return URL.create(
        "postgresql+psycopg",
        username=settings.db_username,
        password=settings.db_password.get_secret_value(),
        host=settings.host,
        port=settings.port,
        database=settings.database,
    )


def _unquote_identifier(name: str) -> str:
    if len(name) >= 2 and name.startswith('"') and name.endswith('"'):
        return name[1:-1].replace('""', '"')
    return name


def _quote_search_path(search_path: str) -> str:
    schemas = [_unquote_identifier(s.strip()) for s in search_path.split(",") if s.strip()]
    return ", ".join('"%s"' % s.replace('"', '""') for s in schemas)


class Database:
    """
    Transactional store handle: one async engine (and its connection pool)
    plus the session factory bound to it.

    Built once at process start and disposed at shutdown. Every invite
    operation runs inside ``transaction()``, which checks a connection out of
    the pool for the duration of one unit of work and always returns it.
    """

    def __init__(
        self,
        url: Union[str, URL],
        pool_size: int = 5,
        max_overflow: int = 0,
        search_path: Optional[str] = None,
        ssl_mode: Optional[str] = None,
    ):
        self.url = make_url(url)
        self.is_sqlite = self.url.get_backend_name() == "sqlite"

        engine_kwargs = {"pool_pre_ping": True}
        connect_args = {}
        if self.is_sqlite:
            connect_args["timeout"] = 30
            if self.url.database not in (None, "", ":memory:"):
                engine_kwargs.update(poolclass=AsyncAdaptedQueuePool, pool_size=pool_size, max_overflow=max_overflow)
        else:
            engine_kwargs.update(pool_size=pool_size, max_overflow=max_overflow)
            if ssl_mode:
                connect_args["sslmode"] = ssl_mode

        logger.info(f"SQLAlchemy DB URL: {self.url.render_as_string(hide_password=True)}")
        self.engine = create_async_engine(self.url, connect_args=connect_args, **engine_kwargs)
        self.session_factory = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            autoflush=False,
            expire_on_commit=False,
        )

        if self.is_sqlite:
            self._sqlite_transactions()
        elif search_path:
            self._postgres_search_path(search_path)

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(
            build_database_url(settings),
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            search_path=settings.db_search_path,
            ssl_mode=settings.db_ssl_mode,
        )

    def _sqlite_transactions(self) -> None:
        """
        SQLite has no row locks, so ``SELECT ... FOR UPDATE`` compiles to a
        plain SELECT. Every transaction instead starts with BEGIN IMMEDIATE,
        which takes the database write lock up front; contenders wait up to
        busy_timeout instead of failing.
        """
        sync_engine = self.engine.sync_engine

        @event.listens_for(sync_engine, "connect")
        def _set_sqlite_pragmas(dbapi_connection, connection_record):
            # the driver must not emit its own BEGIN
            dbapi_connection.isolation_level = None
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA busy_timeout=30000;")
            cursor.execute("PRAGMA journal_mode=WAL;")
            cursor.execute("PRAGMA foreign_keys=ON;")
            cursor.close()

        @event.listens_for(sync_engine, "begin")
        def _begin_immediate(conn):
            conn.exec_driver_sql("BEGIN IMMEDIATE")

    def _postgres_search_path(self, search_path: str) -> None:
        quoted = _quote_search_path(search_path)

        @event.listens_for(self.engine.sync_engine, "connect", insert=True)
        def _set_search_path(dbapi_connection, connection_record):
            existing_autocommit = dbapi_connection.autocommit
            dbapi_connection.autocommit = True
            cursor = dbapi_connection.cursor()
            cursor.execute(f"SET SESSION search_path TO {quoted}")
            cursor.close()
            dbapi_connection.autocommit = existing_autocommit

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncSession]:
        """
        Yield a session inside a single transaction. Commits when the block
        exits cleanly, rolls back on any exception; the connection goes back
        to the pool on every path.
        """
        async with self.session_factory() as session:
            async with session.begin():
                yield session

    async def ping(self) -> bool:
        async with self.transaction() as session:
            result = await session.execute(text("SELECT 1"))
            return result.scalar() == 1

    async def create_all(self) -> None:
        """Create both tables directly; migrations own this in deployed environments."""
        from . import models  # noqa: F401  registers the tables on Base.metadata

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()
        logger.info("Database engine disposed")
