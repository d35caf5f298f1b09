"""Database Session Manager — connection pool, scoped store transactions, health checks.

Invariants:
    - transaction() commits only when its block exits normally; every exception path rolls
      back before the session is closed (no partial commits leak)
    - SQLAlchemy exceptions never escape: StaleDataError -> ConcurrencyError,
      IntegrityError -> ConflictError(INTEGRITY), anything else -> DatabaseError
    - Domain errors raised inside the block propagate unchanged (after rollback)
    - Connection pool uses pool_pre_ping for stale connection detection

Design Decisions:
    - Singleton db_manager initialized on startup: FastAPI lifespan manages lifecycle
      (no global import side effects)
    - expire_on_commit=False: projections are built before commit, but ORM rows stay
      readable after it
    - SQLite gets foreign_keys=ON and check_same_thread=False (FastAPI runs sync routes in
      a threadpool); in-memory SQLite shares one connection through StaticPool
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import (
    DBAPIError, IntegrityError, OperationalError, SQLAlchemyError,
)
from sqlalchemy.orm import sessionmaker
from sqlalchemy.orm.exc import StaleDataError
from sqlalchemy.pool import StaticPool

from stockhub.core.errors import (
    ConcurrencyError, ConflictError, ConflictReason, DatabaseError,
)
from stockhub.db.base import Base
from stockhub.infrastructure.sql_store import SqlStoreTransaction

logger = logging.getLogger(__name__)


def _engine_options(
    database_url: str, pool_size: int, max_overflow: int, echo: bool,
) -> dict:
    url = make_url(database_url)
    options: dict = {"echo": echo, "pool_pre_ping": True}
    if url.get_backend_name() == "sqlite":
        options["connect_args"] = {"check_same_thread": False}
        if url.database in (None, "", ":memory:"):
            options["poolclass"] = StaticPool
        return options
    options.update(
        pool_size=pool_size, max_overflow=max_overflow, pool_recycle=3600,
    )
    return options


def _enable_sqlite_foreign_keys(engine: Engine) -> None:
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, _record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


class DatabaseSessionManager:
    """Manages sessions with pooling, scoped transactions, and health checks.

    Satisfies core.repository_protocols.TransactionalStore.
    """

    def __init__(
        self,
        database_url: str,
        pool_size: int = 20,
        max_overflow: int = 10,
        echo: bool = False,
    ):
        self.engine = create_engine(
            database_url,
            **_engine_options(database_url, pool_size, max_overflow, echo),
        )
        if self.engine.dialect.name == "sqlite":
            _enable_sqlite_foreign_keys(self.engine)
        self._session_factory = sessionmaker(
            self.engine, expire_on_commit=False,
        )

    @contextmanager
    def transaction(self) -> Iterator[SqlStoreTransaction]:
        """Provide one atomic unit of work; commit on success, rollback on failure."""
        session = self._session_factory()
        try:
            yield SqlStoreTransaction(session)
            session.commit()
        except StaleDataError as e:
            session.rollback()
            logger.warning(f"Optimistic version check failed: {e}")
            raise ConcurrencyError(
                "Resource was concurrently modified. Retry the operation.",
            )
        except IntegrityError as e:
            session.rollback()
            logger.error(f"DB integrity error: {e}")
            raise ConflictError(
                "Integrity constraint violated", ConflictReason.INTEGRITY,
            )
        except OperationalError as e:
            session.rollback()
            logger.error(f"DB operational error: {e}")
            raise DatabaseError("Connection or operational error", "execute")
        except DBAPIError as e:
            session.rollback()
            logger.error(f"DB driver error: {e}")
            raise DatabaseError("Database driver error", "query")
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"SQLAlchemy error: {e}")
            raise DatabaseError("Database operation failed", "unknown")
        except BaseException:
            session.rollback()
            raise
        finally:
            session.close()

    def create_schema(self) -> None:
        """Create all tables (development and tests; production uses alembic)."""
        Base.metadata.create_all(self.engine)

    def drop_schema(self) -> None:
        Base.metadata.drop_all(self.engine)

    def health_check(self) -> bool:
        """Check database connectivity (for readiness probes)."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"DB health check failed: {e}")
            return False

    def dispose(self) -> None:
        self.engine.dispose()


# Singleton (initialized on startup)
db_manager: DatabaseSessionManager | None = None


def init_db(database_url: str, **kwargs) -> DatabaseSessionManager:
    global db_manager
    db_manager = DatabaseSessionManager(database_url, **kwargs)
    return db_manager


def get_store() -> DatabaseSessionManager:
    """FastAPI dependency for the transactional store."""
    if not db_manager:
        raise RuntimeError("Database not initialized")
    return db_manager
