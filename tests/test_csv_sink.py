from __future__ import annotations

import threading
from datetime import datetime
from pathlib import Path

import pytest

from leadership.infrastructure.csv_sink import (
    HEADER_COLUMNS,
    CsvResultSink,
    build_csv_line,
    encode_answers,
    format_date,
)
from leadership.infrastructure.exceptions import CsvWriteError, PersistenceError

HEADER = (
    "Manager Name,Assessment Date,Average Score,Raising Expectations,Increasing Urgency,"
    "Intensifying Commitment,Transforming Conversations,Data-Driven Leadership,Question Answers"
)

SCORES = {
    "raising_expectations": 75,
    "increasing_urgency": 65,
    "intensifying_commitment": 95,
    "transforming_conversations": 30,
    "data_driven_leadership": 80,
}


def test_header_matches_existing_exports():
    assert ",".join(HEADER_COLUMNS) == HEADER


def test_format_date_is_unpadded():
    assert format_date(datetime(2025, 3, 7)) == "3/7/2025"
    assert format_date(datetime(2024, 12, 25, 23, 59)) == "12/25/2024"


def test_encode_answers_swaps_commas():
    assert encode_answers({"q1_1": 4, "q1_2": 5}) == '{"q1_1":4;"q1_2":5}'


def test_build_csv_line():
    line = build_csv_line("Ana", datetime(2025, 3, 7), 69, SCORES, {"q1_1": 4, "q1_2": 5})
    assert line == 'Ana,3/7/2025,69%,75%,65%,95%,30%,80%,{"q1_1":4;"q1_2":5}'


def test_blank_manager_becomes_anonymous():
    line = build_csv_line(None, datetime(2025, 1, 2), 80, SCORES, {})
    assert line.startswith("Anonymous,1/2/2025,80%,")
    assert build_csv_line("   ", datetime(2025, 1, 2), 80, SCORES, {}).startswith("Anonymous,")


def test_missing_dimension_written_as_na():
    line = build_csv_line("Ana", datetime(2025, 3, 7), 80, {"raising_expectations": 80}, {"q1_1": 4})
    assert line == 'Ana,3/7/2025,80%,80%,N/A,N/A,N/A,N/A,{"q1_1":4}'


def test_manager_name_with_comma_is_quoted():
    line = build_csv_line("Smith, Ana", datetime(2025, 3, 7), 80, SCORES, {})
    assert line.startswith('"Smith, Ana",3/7/2025,')


class TestCsvResultSink:
    def test_header_written_once(self, tmp_path: Path):
        sink = CsvResultSink(tmp_path / "storage" / "results.csv")
        assert sink.ensure_file() is True
        assert sink.ensure_file() is False

        sink.append("Ana", datetime(2025, 3, 7), 69, SCORES, {"q1_1": 4})
        sink.append("Ben", datetime(2025, 3, 8), 80, SCORES, {"q1_1": 5})

        lines = sink.read_text().splitlines()
        assert lines[0] == HEADER
        assert len(lines) == 3
        assert lines[2].startswith("Ben,3/8/2025,80%,")

    def test_read_creates_missing_file(self, tmp_path: Path):
        sink = CsvResultSink(tmp_path / "results.csv")
        assert sink.read_text() == HEADER + "\n"
        assert sink.path.exists()

    def test_append_returns_line(self, tmp_path: Path):
        sink = CsvResultSink(tmp_path / "results.csv")
        line = sink.append("Ana", datetime(2025, 3, 7), 69, SCORES, {"q1_1": 4})
        assert sink.read_text().endswith(line + "\n")

    def test_load_frame(self, tmp_path: Path):
        sink = CsvResultSink(tmp_path / "results.csv")
        assert sink.load_frame().empty

        sink.append("Ana", datetime(2025, 3, 7), 69, SCORES, {"q1_1": 4, "q1_2": 5})
        sink.append("Smith, Ben", datetime(2025, 3, 8), 80, SCORES, {"q1_1": 5})
        frame = sink.load_frame()

        assert list(frame.columns) == list(HEADER_COLUMNS)
        assert frame["Manager Name"].tolist() == ["Ana", "Smith, Ben"]
        assert frame.iloc[0]["Average Score"] == "69%"
        assert frame.iloc[0]["Question Answers"] == '{"q1_1":4;"q1_2":5}'

    def test_unwritable_path_raises_persistence_error(self, tmp_path: Path):
        # The path is a directory, so opening it for append fails
        sink = CsvResultSink(tmp_path)
        with pytest.raises(CsvWriteError) as exc_info:
            sink.append("Ana", datetime(2025, 3, 7), 69, SCORES, {})
        assert isinstance(exc_info.value, PersistenceError)
        assert exc_info.value.path == str(tmp_path)

    def test_concurrent_appends_do_not_interleave(self, tmp_path: Path):
        sink = CsvResultSink(tmp_path / "results.csv")

        def worker(i: int) -> None:
            for _ in range(10):
                sink.append(f"Manager {i}", datetime(2025, 3, 7), 50, SCORES, {"q1_1": 3})

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(5)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        lines = sink.read_text().splitlines()
        assert len(lines) == 51
        assert all(line.count(",") == 8 for line in lines[1:])
