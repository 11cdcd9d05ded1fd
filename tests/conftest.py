from __future__ import annotations

import os

os.environ.setdefault("ENVIRONMENT", "test")

import pytest
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from leadership.domain.catalog import QUESTIONS
from leadership.infrastructure.config import DatabaseConfig
from leadership.infrastructure.db import (
    create_database_engine,
    create_session_factory,
    initialise_database,
)


def memory_engine(create_tables: bool = True) -> Engine:
    engine = create_database_engine(DatabaseConfig(backend="sqlite", sqlite_path=":memory:"))
    if create_tables:
        initialise_database(engine)
    return engine


@pytest.fixture
def engine() -> Engine:
    return memory_engine()


@pytest.fixture
def SessionLocal(engine: Engine) -> sessionmaker[Session]:
    return create_session_factory(engine)


@pytest.fixture
def all_fours() -> dict[str, int]:
    return {q.id: 4 for q in QUESTIONS}


@pytest.fixture
def mixed_answers() -> dict[str, int]:
    """75 / 65 / 95 / 30 / 80 per dimension, average 69."""
    values = {
        "q1_1": 4, "q1_2": 4, "q1_3": 3, "q1_4": 4,
        "q2_1": 3, "q2_2": 3, "q2_3": 3, "q2_4": 4,
        "q3_1": 5, "q3_2": 5, "q3_3": 5, "q3_4": 4,
        "q4_1": 2, "q4_2": 1, "q4_3": 2, "q4_4": 1,
        "q5_1": 4, "q5_2": 4, "q5_3": 4, "q5_4": 4,
    }
    return values


@pytest.fixture
def broken_session_factory() -> sessionmaker[Session]:
    """Sessions on a database without tables, so every query fails."""
    return create_session_factory(memory_engine(create_tables=False))
