"""Flat-file storage backend.

This backend stores each table as one serialized document under
`<data_dir>/<table><ext>` (YAML by default). Rows are held in memory and the
table's document is rewritten after every change. It provides atomic writes
by writing to a temporary file then renaming.
"""
from __future__ import annotations
import logging
import os
from pathlib import Path
from typing import Dict, Optional, Tuple

import yaml

from .base import StorageError
from .memory_backend import MemoryStorage, Row
from .schema import Table
from .serializer import Serializer, YAMLSerializer

logger = logging.getLogger(__name__)


class FileStorageBackend(MemoryStorage):
    name = "file"

    def __init__(
        self,
        data_dir: str | Path = "./data",
        serializer: Optional[Serializer] = None,
        enforce_foreign_keys: bool = False,
        cascade_deletes: bool = False,
    ) -> None:
        super().__init__(enforce_foreign_keys=enforce_foreign_keys, cascade_deletes=cascade_deletes)
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.serializer: Serializer = serializer or YAMLSerializer()

    def _path_for(self, name: str) -> Path:
        safe_name = name.replace("/", "_")
        return self.data_dir / f"{safe_name}{self.serializer.file_extension}"

    def _read(self, table: Table) -> Dict[Tuple[str, ...], Row]:
        path = self._path_for(table.name)
        if not path.exists():
            return {}
        with open(path, "rb") as f:
            doc = self.serializer.load(f.read()) or {}
        if not isinstance(doc, dict):
            raise ValueError(f"{path} does not hold a table document")
        raw_rows = doc.get("rows") or []
        if not isinstance(raw_rows, list):
            raise ValueError(f"{path}: rows must be a list")
        rows: Dict[Tuple[str, ...], Row] = {}
        for raw in raw_rows:
            if not isinstance(raw, dict):
                logger.warning("Skipping malformed row in %s: %r", path, raw)
                continue
            row = {str(k): str(v) for k, v in raw.items() if v is not None}
            try:
                rows[self._key_tuple(table, row)] = row
            except KeyError:
                logger.warning("Skipping row without full key in %s: %r", path, raw)
        logger.debug("FileStorageBackend loaded %s (%d rows)", path, len(rows))
        return rows

    def _load(self, table: Table) -> Dict[Tuple[str, ...], Row]:
        if not self._path_for(table.name).exists():
            try:
                self._write(table.name, {})
            except OSError as e:
                logger.error("Failed to create table file for %s: %s", table.name, e)
            return {}
        try:
            return self._read(table)
        except (OSError, ValueError, yaml.YAMLError) as e:
            # Leave a damaged file untouched; the table starts empty and the
            # next successful write replaces it.
            logger.error("Failed to load table %s: %s", table.name, e)
            return {}

    def _write(self, name: str, rows: Dict[Tuple[str, ...], Row]) -> None:
        table = self._tables[name]
        doc = {
            "table": name,
            "columns": [c.name for c in table.columns],
            "rows": list(rows.values()),
        }
        path = self._path_for(name)
        tmp = path.with_suffix(path.suffix + ".tmp")
        with open(tmp, "wb") as f:
            f.write(self.serializer.dump(doc))
            f.flush()
            os.fsync(f.fileno())
        tmp.replace(path)

    def _persist(self, name: str) -> None:
        try:
            self._write(name, self._rows[name])
        except (OSError, ValueError) as e:
            raise StorageError("write", f"{self._path_for(name)}: {e}") from e

    def _discard(self, name: str) -> None:
        # Drop unsaved in-memory changes by re-reading the last written state.
        table = self._tables.get(name)
        if table is None:
            return
        try:
            self._rows[name] = self._read(table)
        except (OSError, ValueError, yaml.YAMLError) as e:
            logger.error("Failed to reload table %s: %s", name, e)

    def configure(self, **options) -> None:
        super().configure(**options)
        data_dir = options.get("data_dir") or options.get("path")
        if data_dir:
            self.data_dir = Path(data_dir)
            self.data_dir.mkdir(parents=True, exist_ok=True)
