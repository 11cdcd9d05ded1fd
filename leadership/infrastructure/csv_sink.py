"""
Append-only CSV sink for submitted assessment results.

One header line is written when the file is created; every saved assessment
then appends exactly one line. The layout is shared with spreadsheets built
from earlier exports, so column order and formatting are fixed.
"""

from __future__ import annotations

import json
import threading
from collections.abc import Mapping, Sequence
from datetime import datetime
from io import StringIO
from pathlib import Path

import pandas as pd

from .exceptions import CsvWriteError
from .logging import get_logger

logger = get_logger(__name__)

DIMENSION_COLUMNS: tuple[tuple[str, str], ...] = (
    ("raising_expectations", "Raising Expectations"),
    ("increasing_urgency", "Increasing Urgency"),
    ("intensifying_commitment", "Intensifying Commitment"),
    ("transforming_conversations", "Transforming Conversations"),
    ("data_driven_leadership", "Data-Driven Leadership"),
)

HEADER_COLUMNS: tuple[str, ...] = (
    "Manager Name",
    "Assessment Date",
    "Average Score",
    *(label for _, label in DIMENSION_COLUMNS),
    "Question Answers",
)

DEFAULT_MANAGER_NAME = "Anonymous"
MISSING_SCORE = "N/A"


def format_date(value: datetime) -> str:
    """Month/day/year without zero padding, e.g. ``3/7/2025``."""
    return f"{value.month}/{value.day}/{value.year}"


def encode_answers(answers: Mapping[str, int]) -> str:
    """Compact JSON with commas swapped for semicolons so the line stays one field."""
    return json.dumps(dict(answers), separators=(",", ":")).replace(",", ";")


def _manager_field(name: str | None) -> str:
    cleaned = " ".join((name or "").split()) or DEFAULT_MANAGER_NAME
    if "," in cleaned or '"' in cleaned:
        return '"' + cleaned.replace('"', '""') + '"'
    return cleaned


def build_csv_line(
    manager_name: str | None,
    assessed_at: datetime,
    average_score: int,
    dimension_scores: Mapping[str, int],
    answers: Mapping[str, int],
) -> str:
    """
    Render one result line (without trailing newline).

    Example:
        >>> build_csv_line("Ana", datetime(2025, 3, 7), 80, {"raising_expectations": 80}, {"q1_1": 4})
        'Ana,3/7/2025,80%,80%,N/A,N/A,N/A,N/A,{"q1_1":4}'
    """
    cells = [
        _manager_field(manager_name),
        format_date(assessed_at),
        f"{average_score}%",
    ]
    for dimension_id, _label in DIMENSION_COLUMNS:
        score = dimension_scores.get(dimension_id)
        cells.append(MISSING_SCORE if score is None else f"{score}%")
    cells.append(encode_answers(answers))
    return ",".join(cells)


class CsvResultSink:
    """Thread-safe appender for the results file."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._lock = threading.Lock()

    def _ensure_file_locked(self) -> bool:
        if self.path.exists():
            return False
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(",".join(HEADER_COLUMNS) + "\n", encoding="utf-8")
        logger.info("Created results file at %s", self.path)
        return True

    def ensure_file(self) -> bool:
        """Create the file with its header line. Returns True if it was created."""
        try:
            with self._lock:
                return self._ensure_file_locked()
        except OSError as e:
            raise CsvWriteError(f"Cannot create results file: {e}", str(self.path)) from e

    def append(
        self,
        manager_name: str | None,
        assessed_at: datetime,
        average_score: int,
        dimension_scores: Mapping[str, int],
        answers: Mapping[str, int],
    ) -> str:
        """Append one result line and return it."""
        line = build_csv_line(manager_name, assessed_at, average_score, dimension_scores, answers)
        try:
            with self._lock:
                self._ensure_file_locked()
                with self.path.open("a", encoding="utf-8") as fh:
                    fh.write(line + "\n")
        except OSError as e:
            logger.error("Failed to append results to %s: %s", self.path, e)
            raise CsvWriteError(f"Cannot append to results file: {e}", str(self.path)) from e

        logger.info("Saved results for %s to %s", manager_name or DEFAULT_MANAGER_NAME, self.path)
        return line

    def read_text(self) -> str:
        """Whole file contents, header included."""
        try:
            with self._lock:
                self._ensure_file_locked()
                return self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise CsvWriteError(f"Cannot read results file: {e}", str(self.path)) from e

    def load_frame(self, columns: Sequence[str] = HEADER_COLUMNS) -> pd.DataFrame:
        """Parse the results file into a DataFrame (one row per saved assessment)."""
        text = self.read_text()
        lines = [line for line in text.splitlines()[1:] if line.strip()]
        if not lines:
            return pd.DataFrame(columns=list(columns))

        frame = pd.read_csv(
            StringIO("\n".join(lines)),
            header=None,
            names=list(columns),
            dtype=str,
            keep_default_na=False,
        )
        return frame
