from __future__ import annotations

import re
from logging.config import fileConfig

from alembic import context  # type: ignore[attr-defined]
from alembic.script import ScriptDirectory
from sqlalchemy import create_engine, pool

from leadership.infrastructure.config import get_settings
from leadership.infrastructure.models import Base

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _database_url() -> str:
    # An explicit -x / ini url wins over the DB_* settings
    return config.get_main_option("sqlalchemy.url") or get_settings().database.get_connection_url()


def _numbered_revision_ids(context, revision, directives) -> None:  # type: ignore[no-untyped-def]
    """Name new revisions ``NNNN_message_slug`` following the highest existing number."""
    cmd_opts = getattr(config, "cmd_opts", None)
    if not directives or (cmd_opts and getattr(cmd_opts, "rev_id", None)):
        return
    numbers = [
        int(m.group(1))
        for rev in ScriptDirectory.from_config(config).walk_revisions()
        if (m := re.match(r"^(\d+)", rev.revision or ""))
    ]
    script = directives[0]
    slug = re.sub(r"[^a-z0-9]+", "_", (script.message or "").lower()).strip("_") or "revision"
    script.rev_id = f"{max(numbers, default=0) + 1:04d}_{slug}"


def _configure(**kwargs) -> None:  # type: ignore[no-untyped-def]
    context.configure(
        target_metadata=target_metadata,
        process_revision_directives=_numbered_revision_ids,
        **kwargs,
    )


def run_migrations_offline() -> None:
    _configure(url=_database_url(), literal_binds=True, dialect_opts={"paramstyle": "named"})
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    engine = create_engine(_database_url(), poolclass=pool.NullPool)
    with engine.connect() as connection:
        _configure(connection=connection)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
