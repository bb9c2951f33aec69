"""JSON-backed key-value store for records that carry a sector id."""
from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

LOGGER = logging.getLogger(__name__)


class RecordStoreError(RuntimeError):
    """Raised when a store operation targets a missing or duplicate record."""


class JSONRecordStore:
    """Persist records keyed by entity id in a single JSON document."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._lock = threading.Lock()
        self._data = self._load()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> Dict[str, Dict[str, Any]]:
        if not self._path.exists():
            return {}
        try:
            with self._path.open("r", encoding="utf-8") as handle:
                payload = json.load(handle)
        except (OSError, json.JSONDecodeError):
            LOGGER.warning("Failed to load records from %s; starting empty", self._path)
            return {}
        if not isinstance(payload, dict):
            LOGGER.warning("Record payload at %s was not a mapping; starting empty", self._path)
            return {}
        return {
            str(record_id): dict(record)
            for record_id, record in payload.items()
            if isinstance(record, dict)
        }

    def _write(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.parent / f"{self._path.name}.tmp"
        with tmp_path.open("w", encoding="utf-8") as handle:
            json.dump(self._data, handle, indent=2, sort_keys=True, ensure_ascii=False)
        tmp_path.replace(self._path)

    def find(self, record_id: str) -> Optional[Dict[str, Any]]:
        """Return a copy of the record stored under ``record_id``."""

        with self._lock:
            record = self._data.get(record_id)
            return dict(record) if record is not None else None

    def find_all(self) -> List[Tuple[str, Dict[str, Any]]]:
        """Return ``(id, record)`` pairs for every stored record."""

        with self._lock:
            return [(record_id, dict(record)) for record_id, record in self._data.items()]

    def create(self, record_id: str, record: Mapping[str, Any]) -> Dict[str, Any]:
        """Store a new record.

        Raises:
            RecordStoreError: If ``record_id`` already exists.
        """
        with self._lock:
            if record_id in self._data:
                raise RecordStoreError(f"record {record_id} already exists")
            self._data[record_id] = dict(record)
            self._write()
            return dict(self._data[record_id])

    def update(self, record_id: str, changes: Mapping[str, Any]) -> Dict[str, Any]:
        """Merge ``changes`` into an existing record.

        Raises:
            RecordStoreError: If ``record_id`` does not exist.
        """
        with self._lock:
            if record_id not in self._data:
                raise RecordStoreError(f"record {record_id} does not exist")
            self._data[record_id].update(changes)
            self._write()
            return dict(self._data[record_id])

    def delete(self, record_id: str) -> bool:
        """Remove a record, returning whether it existed."""

        with self._lock:
            if self._data.pop(record_id, None) is None:
                return False
            self._write()
            return True


__all__ = ["JSONRecordStore", "RecordStoreError"]
