"""Database session configuration."""

from __future__ import annotations

from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from cobranza.core.settings import settings


class Base(DeclarativeBase):
    """Declarative base shared by all ORM models."""


def engine_options(url: str) -> dict[str, Any]:
    """Return driver options for ``url``.

    SQLite has no row-level lock timeout; the connection busy timeout bounds
    how long a writer waits for the database lock instead.
    """
    if url.startswith("sqlite"):
        return {
            "connect_args": {
                "check_same_thread": False,
                "timeout": settings.lock_timeout_seconds,
            }
        }
    return {"pool_pre_ping": True}


# Ensure model modules are imported so that metadata is populated when create_all runs.
import cobranza.models  # noqa: E402,F401

engine = create_engine(
    settings.effective_database_url,
    echo=settings.sql_debug,
    **engine_options(settings.effective_database_url),
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Yield a database session for dependency injection."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_session_factory() -> sessionmaker[Session]:
    """Return the factory used to open dedicated unit-of-work sessions."""
    return SessionLocal


def create_tables() -> None:
    """Create all database tables."""
    Base.metadata.create_all(bind=engine)
