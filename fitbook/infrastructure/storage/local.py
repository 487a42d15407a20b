"""
Local mirror store.

Each table is one JSON text blob on disk, named
"<namespace>_<table>.json". Used when no remote database is configured,
so the app works out of the box for a single coach.

A missing or corrupt blob is never an error: the table's seed records are
returned instead and the corruption is logged.
"""

from __future__ import annotations

import copy
import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Optional

from .base import Record, check_table

logger = logging.getLogger(__name__)


class LocalMirrorStore:
    """
    RecordStore backed by JSON files in a directory.

    Writes are read-modify-write of the whole blob under a process lock,
    then an atomic rename, so a crash never leaves half a file behind.
    """

    def __init__(
        self,
        data_dir: Path | str,
        namespace: str = "fitbook",
        seeds: Optional[dict[str, list[Record]]] = None,
    ) -> None:
        self._dir = Path(data_dir)
        self._namespace = namespace
        self._seeds = seeds or {}
        self._lock = threading.Lock()

        self._dir.mkdir(parents=True, exist_ok=True)

        logger.info(
            "Initialized local mirror store",
            extra={"data_dir": str(self._dir), "namespace": namespace}
        )

    def _path(self, table: str) -> Path:
        return self._dir / f"{self._namespace}_{check_table(table)}.json"

    def has_blob(self, table: str) -> bool:
        """Whether the table was ever written. Until then reads return its seeds."""
        return self._path(table).exists()

    def _default(self, table: str) -> list[Record]:
        return copy.deepcopy(self._seeds.get(table, []))

    def _read(self, table: str) -> list[Record]:
        path = self._path(table)
        if not path.exists():
            return self._default(table)

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.error(
                "Corrupt local blob, using defaults",
                extra={"table": table, "path": str(path), "error": str(e)}
            )
            return self._default(table)

        if data is None:
            return self._default(table)
        if not isinstance(data, list):
            logger.error(
                "Local blob is not a list, using defaults",
                extra={"table": table, "type": type(data).__name__}
            )
            return self._default(table)
        return data

    def _write(self, table: str, records: list[Record]) -> None:
        path = self._path(table)
        fd, tmp_path = tempfile.mkstemp(dir=self._dir, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(records, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    # -----------------------------------------------------------------------
    # RecordStore
    # -----------------------------------------------------------------------

    def list(self, table: str) -> list[Record]:
        with self._lock:
            return self._read(table)

    def add(self, table: str, record: Record) -> None:
        with self._lock:
            records = self._read(table)
            records.append(record)
            self._write(table, records)

    def update(self, table: str, record: Record) -> None:
        with self._lock:
            records = self._read(table)
            updated = [record if r.get("id") == record.get("id") else r for r in records]
            self._write(table, updated)

    def delete(self, table: str, record_id: str) -> None:
        with self._lock:
            records = self._read(table)
            self._write(table, [r for r in records if r.get("id") != record_id])

    def upsert(self, table: str, records: list[Record]) -> None:
        with self._lock:
            current = self._read(table)
            incoming = {r.get("id"): r for r in records}
            merged = [incoming.pop(r.get("id"), r) for r in current]
            merged.extend(incoming.values())
            self._write(table, merged)
