"""
Database access for the web app and the Celery workers.

One process-wide DatabaseManager owns the engine and the session factory.
SQLite (tests, local runs) shares a single connection through StaticPool so
in-memory databases survive across sessions; anything else gets a QueuePool
sized from settings.

Usage:
    from core.db import db

    db.initialize()
    with db.session() as session:
        sponsor = session.get(Sponsor, 1)
"""

from collections.abc import Generator
from contextlib import contextmanager
from typing import Any, Optional

from sqlalchemy import Engine, create_engine, event, text
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from .config import Settings, get_settings


class Base(DeclarativeBase):
    """Declarative base shared by every model."""


def _engine_options(url: str, settings: Settings) -> dict[str, Any]:
    if url.startswith("sqlite"):
        return {
            "poolclass": StaticPool,
            "connect_args": {"check_same_thread": False},
        }
    return {
        "poolclass": QueuePool,
        "pool_size": settings.db_pool_size,
        "max_overflow": settings.db_max_overflow,
        "pool_pre_ping": settings.db_pool_pre_ping,
    }


def _enforce_sqlite_foreign_keys(engine: Engine) -> None:
    # ON DELETE SET NULL on users.sponsor_id needs this
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


class DatabaseManager:
    """
    Singleton owner of the engine and session factory.

    The API initializes it on startup; Celery workers lazily on their first
    task. Tests reset() it between cases.
    """

    _instance: Optional["DatabaseManager"] = None

    engine: Engine
    SessionLocal: sessionmaker[Session]

    def __new__(cls) -> "DatabaseManager":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def initialize(self, database_url: str | None = None) -> None:
        """Create the engine. Later calls are no-ops until reset()."""
        if self._initialized:
            return

        settings = get_settings()
        url = database_url or settings.database_url

        self.engine = create_engine(url, echo=settings.debug, **_engine_options(url, settings))
        if self.engine.dialect.name == "sqlite":
            _enforce_sqlite_foreign_keys(self.engine)

        self.SessionLocal = sessionmaker(bind=self.engine, autoflush=False, expire_on_commit=False)
        self._initialized = True

    def create_all_tables(self) -> None:
        self._require_initialized()
        Base.metadata.create_all(bind=self.engine)

    def drop_all_tables(self) -> None:
        self._require_initialized()
        Base.metadata.drop_all(bind=self.engine)

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """Unit of work: commit on success, roll back on any exception."""
        self._require_initialized()
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def ping(self) -> bool:
        """True when a trivial query succeeds."""
        if not self._initialized:
            return False
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except Exception:
            return False
        return True

    def reset(self) -> None:
        if self._initialized:
            self.engine.dispose()
        self._initialized = False

    def _require_initialized(self) -> None:
        if not self._initialized:
            raise RuntimeError("DatabaseManager not initialized. Call initialize() first.")


db = DatabaseManager()


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency yielding a request-scoped session."""
    with db.session() as session:
        yield session


__all__ = ["Base", "DatabaseManager", "db", "get_db"]
