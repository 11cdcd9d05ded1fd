from __future__ import annotations

import uvicorn

from leadership.infrastructure.config import get_settings
from leadership.infrastructure.csv_sink import CsvResultSink
from leadership.infrastructure.db import create_database_engine, initialise_database
from leadership.infrastructure.logging import get_logger, setup_logging

logger = get_logger(__name__)


def configure_logging() -> None:
    config = get_settings().logging
    setup_logging(
        level=config.level,
        log_file=config.file_path,
        structured=config.structured,
        enable_console=config.console_enabled,
        max_bytes=config.max_bytes,
        backup_count=config.backup_count,
    )


def prepare_storage() -> None:
    """Create database tables and the CSV header before the first request."""
    settings = get_settings()
    if settings.app.enable_database:
        initialise_database(create_database_engine(settings.database))
    if settings.csv.enabled:
        CsvResultSink(settings.csv.path).ensure_file()


def main() -> None:
    configure_logging()
    try:
        prepare_storage()
    except Exception as exc:  # pragma: no cover - developer helper
        logger.warning(f"[run-server] Storage not ready: {exc}")

    server = get_settings().server
    uvicorn.run(
        "leadership.web.main:app",
        host=server.host,
        port=server.port,
        reload=server.reload,
    )


if __name__ == "__main__":
    main()
