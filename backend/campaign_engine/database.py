"""
Row store access with SQLAlchemy (PostgreSQL in production, SQLite for local use).

The engine and session factory are owned by a RowStore instance that is passed
explicitly to every component; there is no module-level connection pool.
"""
import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine, event, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

from .config import Settings

logger = logging.getLogger(__name__)

# Base for models
Base = declarative_base()


def create_store_engine(settings: Settings) -> Engine:
    """Create the SQLAlchemy engine described by the settings."""
    url = settings.database_url

    if url.startswith("sqlite"):
        options = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            # A single shared connection keeps the in-memory database alive
            options["poolclass"] = StaticPool
        engine = create_engine(url, echo=settings.debug, **options)
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        return engine

    return create_engine(
        url,
        echo=settings.debug,
        pool_pre_ping=settings.db_pool_pre_ping,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
    )


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class RowStore:
    """
    Transactional handle over the relational row store.

    Each call to transaction() checks out one connection, runs the caller's
    statements inside a single transaction and releases the connection on
    every exit path.
    """

    def __init__(self, engine: Engine, settings: Settings):
        self.engine = engine
        self.settings = settings
        self._session_factory = sessionmaker(
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
            bind=engine,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "RowStore":
        return cls(create_store_engine(settings), settings)

    @property
    def supports_row_locks(self) -> bool:
        """True when the dialect honours FOR UPDATE / SKIP LOCKED."""
        return self.engine.dialect.name == "postgresql"

    @contextmanager
    def transaction(self, operation: str, lock_timeout_ms: Optional[int] = None) -> Iterator[Session]:
        """
        Run a block inside one transaction.

        Commits when the block exits normally; on any exception the whole
        transaction is rolled back, the failure is logged with the operation
        name and re-raised unchanged.
        """
        db = self._session_factory()
        try:
            self._apply_timeouts(db, lock_timeout_ms)
            yield db
            db.commit()
        except Exception as e:
            db.rollback()
            logger.error(f"[RowStore] {operation} rolled back: {e}")
            raise
        finally:
            db.close()

    def _apply_timeouts(self, db: Session, lock_timeout_ms: Optional[int]) -> None:
        if self.engine.dialect.name != "postgresql":
            return
        # set_config(..., true) scopes the value to the current transaction
        if self.settings.transaction_timeout_ms:
            db.execute(select(func.set_config(
                "statement_timeout", str(self.settings.transaction_timeout_ms), True
            )))
        if lock_timeout_ms:
            db.execute(select(func.set_config("lock_timeout", str(lock_timeout_ms), True)))

    def dispose(self) -> None:
        self.engine.dispose()


def init_db(store: RowStore) -> None:
    """Create all tables on the store's database."""
    from . import models  # noqa: F401  (registers the tables)
    Base.metadata.create_all(bind=store.engine)
    logger.info("Database tables created")
