from __future__ import annotations

from collections.abc import Generator

from fastapi import Depends, Request
from sqlalchemy.orm import Session, sessionmaker

from leadership.application.result_cache import ResultCache
from leadership.infrastructure.config import DatabaseConfig, get_settings
from leadership.infrastructure.csv_sink import CsvResultSink
from leadership.infrastructure.db import create_database_engine, create_session_factory


def get_db_config(request: Request) -> DatabaseConfig:
    config = getattr(request.app.state, "db_config", None)
    if config is None:
        config = get_settings().database
        request.app.state.db_config = config
    return config


def get_session_factory(request: Request) -> sessionmaker[Session]:
    config = get_db_config(request)
    cached_factory = getattr(request.app.state, "session_factory", None)
    cached_config = getattr(request.app.state, "session_factory_config", None)

    current_config_dict = config.model_dump()

    if cached_factory is not None and cached_config == current_config_dict:
        return cached_factory

    engine = create_database_engine(config)
    session_factory = create_session_factory(engine)

    request.app.state.session_factory = session_factory
    request.app.state.session_factory_config = current_config_dict

    return session_factory


def get_db_session(request: Request) -> Generator[Session, None, None]:
    session_factory = get_session_factory(request)
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


def get_csv_sink(request: Request) -> CsvResultSink:
    sink = getattr(request.app.state, "csv_sink", None)
    if sink is None:
        sink = CsvResultSink(get_settings().csv.path)
        request.app.state.csv_sink = sink
    return sink


def get_result_cache(request: Request) -> ResultCache:
    cache = getattr(request.app.state, "result_cache", None)
    if cache is None:
        settings = get_settings().app
        cache = ResultCache(settings.cache_path, default_key=settings.cache_key)
        request.app.state.result_cache = cache
    return cache


def get_submission_session_factory(request: Request) -> sessionmaker[Session] | None:
    """Session factory for full submissions, or None when the database is disabled."""
    if not get_settings().app.enable_database:
        return None
    return get_session_factory(request)


def get_enabled_csv_sink(
    csv_sink: CsvResultSink = Depends(get_csv_sink),
) -> CsvResultSink | None:
    """The CSV sink, or None when CSV storage is disabled."""
    if not get_settings().csv.enabled:
        return None
    return csv_sink
