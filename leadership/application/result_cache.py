"""
Snapshot store for the last computed assessment result.

A new submission overwrites the snapshot under its key; a reset clears it.
When ``path`` is given the snapshots are mirrored to a JSON file so a
restart keeps the last result.
"""

from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import Any

from ..domain.models import AssessmentResult
from ..infrastructure.logging import get_logger

logger = get_logger(__name__)

DEFAULT_CACHE_KEY = "leadershipResults"


class ResultCache:
    def __init__(self, path: str | Path | None = None, default_key: str = DEFAULT_CACHE_KEY):
        self.path = Path(path) if path else None
        self.default_key = default_key
        self._lock = threading.Lock()
        self._entries: dict[str, dict[str, Any]] = self._read_file()

    def _read_file(self) -> dict[str, dict[str, Any]]:
        if self.path is None or not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable result cache %s: %s", self.path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring malformed result cache %s", self.path)
            return {}
        return data

    def _write_file(self) -> None:
        if self.path is None:
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(self._entries), encoding="utf-8")
        except OSError as e:
            # The in-memory snapshot is still valid
            logger.error("Failed to write result cache %s: %s", self.path, e)

    def save(self, result: AssessmentResult, key: str | None = None) -> None:
        with self._lock:
            self._entries[key or self.default_key] = result.to_dict()
            self._write_file()

    def load(self, key: str | None = None) -> AssessmentResult | None:
        with self._lock:
            raw = self._entries.get(key or self.default_key)
        if raw is None:
            return None
        try:
            return AssessmentResult.from_dict(raw)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Discarding unreadable cached result for %s: %s", key, e)
            return None

    def clear(self, key: str | None = None) -> bool:
        """Remove the snapshot. Returns True if one existed."""
        with self._lock:
            existed = self._entries.pop(key or self.default_key, None) is not None
            if existed:
                self._write_file()
        return existed
