from __future__ import annotations

from pathlib import Path

import pytest

from leadership.infrastructure.config import reset_settings
from leadership.infrastructure.csv_sink import HEADER_COLUMNS
from leadership.infrastructure.logging import configure_test_logging
from scripts import run_server


@pytest.fixture
def storage_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.setenv("DB_BACKEND", "sqlite")
    monkeypatch.setenv("DB_SQLITE_PATH", str(tmp_path / "db" / "leadership.db"))
    monkeypatch.setenv("CSV_PATH", str(tmp_path / "storage" / "results.csv"))
    monkeypatch.setenv("SERVER_HOST", "127.0.0.1")
    monkeypatch.setenv("SERVER_PORT", "8123")
    monkeypatch.setenv("LOG_FILE_PATH", str(tmp_path / "logs" / "server.log"))
    monkeypatch.setenv("LOG_CONSOLE_ENABLED", "false")
    reset_settings()
    yield tmp_path
    configure_test_logging()
    reset_settings()


def test_prepare_storage_creates_tables_and_header(storage_env: Path) -> None:
    run_server.prepare_storage()

    assert (storage_env / "db" / "leadership.db").exists()
    csv_text = (storage_env / "storage" / "results.csv").read_text(encoding="utf-8")
    assert csv_text.splitlines() == [",".join(HEADER_COLUMNS)]


def test_main_runs_uvicorn_with_server_settings(
    storage_env: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    calls: list[tuple[str, dict]] = []

    def fake_run(app: str, **kwargs) -> None:
        calls.append((app, kwargs))

    monkeypatch.setattr(run_server.uvicorn, "run", fake_run)

    run_server.main()

    assert calls == [
        ("leadership.web.main:app", {"host": "127.0.0.1", "port": 8123, "reload": False})
    ]
    assert (storage_env / "storage" / "results.csv").exists()
    assert (storage_env / "logs" / "server.log").exists()
