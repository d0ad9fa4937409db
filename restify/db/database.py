"""
Database engine and session management.

Builds the SQLAlchemy engine from DATABASE_URL (SQLite file by default) and
exposes the FastAPI session dependency used by the generated endpoints.
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from restify.config import get_settings


def _engine_kwargs(url: str) -> dict:
    if not url.startswith("sqlite"):
        return {}
    kwargs = {"connect_args": {"check_same_thread": False}}
    # In-memory SQLite with StaticPool so the schema persists across connections
    if ":memory:" in url:
        kwargs["poolclass"] = StaticPool
    return kwargs


def build_engine(url: str | None = None):
    url = url or get_settings().database_url
    return create_engine(url, **_engine_kwargs(url))


engine = build_engine()

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(bind=None) -> None:
    """Create tables for every model registered on the declarative base."""
    from restify.db import models  # local import to avoid circular import at module load
    models.Base.metadata.create_all(bind=bind or engine)


def get_db():
    """Dependency to get a database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
