"""
Engine and session helpers for the assessment database.

SQLite (file or in-memory), MySQL and PostgreSQL are configured through
``DatabaseConfig``; tables are created from the ORM metadata.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from .config import DatabaseConfig, get_settings
from .logging import get_logger
from .models import Base

logger = get_logger(__name__)


def create_database_engine(config: DatabaseConfig | None = None) -> Engine:
    """
    Build an engine for the configured backend (settings when ``config`` is None).

    In-memory SQLite gets a single shared connection so every session and
    thread sees the same tables.
    """
    if config is None:
        config = get_settings().database

    url = config.get_connection_url()
    options = config.get_engine_options()
    if config.backend == "sqlite":
        options["connect_args"] = {"check_same_thread": False}
        if config.sqlite_path == ":memory:":
            options["poolclass"] = StaticPool

    logger.info("Creating %s database engine", config.backend)
    try:
        return create_engine(url, **options)
    except Exception as e:
        logger.error(f"Failed to create database engine: {str(e)}")
        raise


def create_session_factory(engine: Engine | None = None) -> sessionmaker:
    """
    Example:
        >>> SessionLocal = create_session_factory(create_database_engine())
        >>> with SessionLocal() as session:
        ...     pass
    """
    if engine is None:
        engine = create_database_engine()
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def initialise_database(engine: Engine) -> bool:
    """
    Create any missing tables.

    Returns True when every table was already present.
    """
    existing = set(inspect(engine).get_table_names())
    expected = [table.name for table in Base.metadata.sorted_tables]
    Base.metadata.create_all(engine)
    missing = [name for name in expected if name not in existing]
    if missing:
        logger.info("Created database tables: %s", ", ".join(missing))
    return not missing


@contextmanager
def session_scope(session_factory: sessionmaker) -> Iterator[Session]:
    """Commit when the block succeeds, roll back and re-raise when it fails."""
    session = session_factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
