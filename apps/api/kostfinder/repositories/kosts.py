"""Access helpers for the bundled kost JSON file."""
from __future__ import annotations

import json
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Iterable

_registry_lock = threading.Lock()
_path_locks: dict[Path, threading.Lock] = {}


def _lock_for(path: Path) -> threading.Lock:
    key = path.resolve()
    with _registry_lock:
        return _path_locks.setdefault(key, threading.Lock())


class KostStore:
    """Reads and rewrites the whole JSON array on every call.

    Reads and appends on the same file are serialized, and writes replace the
    file atomically so a reader never sees a partially written array.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._lock = _lock_for(self.path)

    def read_raw(self) -> str:
        with self._lock:
            return self.path.read_text(encoding="utf-8")

    def read_all(self) -> list[dict[str, Any]]:
        with self._lock:
            return self._load()

    def append(self, entries: Iterable[dict[str, Any]]) -> int:
        """Append ``entries`` and write the file back; returns how many were added."""

        new_records = list(entries)
        with self._lock:
            records = self._load()
            records.extend(new_records)
            self._write(records)
        return len(new_records)

    def _load(self) -> list[dict[str, Any]]:
        data = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(data, list):
            raise ValueError(f"{self.path} does not contain a JSON array")
        return data

    def _write(self, records: list[dict[str, Any]]) -> None:
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(records, handle, indent=2, ensure_ascii=False)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
