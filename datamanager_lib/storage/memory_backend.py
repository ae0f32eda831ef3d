"""Simple memory-backed storage backend

This backend stores rows in memory as a data structure
`[<table>][<key tuple>] -> {column: text}`. The file backend builds on it and
persists each table after every change.
"""
from __future__ import annotations

import logging
from threading import RLock
from typing import Dict, List, Optional, Sequence, Tuple

from .base import StorageBackend, StorageError
from .schema import Column, ColumnEntry, Result, Table, UpdateColumnEntry, as_key_map, split_entries

logger = logging.getLogger(__name__)

Row = Dict[str, str]


class MemoryStorage(StorageBackend):
    name = "memory"

    def __init__(self, enforce_foreign_keys: bool = False, cascade_deletes: bool = False) -> None:
        super().__init__(enforce_foreign_keys=enforce_foreign_keys, cascade_deletes=cascade_deletes)
        self._lock = RLock()
        self._tables: Dict[str, Table] = {}
        self._rows: Dict[str, Dict[Tuple[str, ...], Row]] = {}

    # Persistence hooks, no-ops in memory.

    def _load(self, table: Table) -> Dict[Tuple[str, ...], Row]:
        return {}

    def _persist(self, name: str) -> None:
        return

    def _discard(self, name: str) -> None:
        return

    # Helpers

    def _table(self, name: str, operation: str) -> Table:
        table = self._tables.get(name)
        if table is None:
            raise StorageError(operation, f"unknown table {name!r}")
        return table

    @staticmethod
    def _key_tuple(table: Table, key_map: Dict[str, str]) -> Tuple[str, ...]:
        return tuple(key_map[c.name] for c in table.key_columns)

    def _matching(self, name: str, criteria: Dict[str, str]) -> List[Tuple[Tuple[str, ...], Row]]:
        return [
            (k, row) for k, row in self._rows[name].items()
            if all(row.get(col) == val for col, val in criteria.items())
        ]

    def _missing_parent(self, table: Table, row: Row) -> Optional[str]:
        """Return the name of the first referenced table missing its parent row."""
        for parent, pairs in table.foreign_keys().items():
            if parent not in self._tables:
                return parent
            criteria = {pcol: row[lcol] for lcol, pcol in pairs}
            if not self._matching(parent, criteria):
                return parent
        return None

    def _referencing_table(self, name: str, rows: List[Row]) -> Optional[str]:
        """Return the name of the first table holding rows that reference `rows`."""
        for child in self._tables.values():
            pairs = child.foreign_keys().get(name)
            if not pairs:
                continue
            for row in rows:
                if self._matching(child.name, {lcol: row[pcol] for lcol, pcol in pairs}):
                    return child.name
        return None

    def _cascade(self, name: str, removed: List[Row], touched: set) -> None:
        for child in self._tables.values():
            pairs = child.foreign_keys().get(name)
            if not pairs:
                continue
            for row in removed:
                criteria = {lcol: row[pcol] for lcol, pcol in pairs}
                orphans = self._matching(child.name, criteria)
                for k, _ in orphans:
                    del self._rows[child.name][k]
                if orphans:
                    touched.add(child.name)
                    logger.debug("Cascade removed %d rows from %s", len(orphans), child.name)
                    self._cascade(child.name, [r for _, r in orphans], touched)

    # StorageBackend

    def create_table(self, name: str, columns: Sequence[Column]) -> None:
        with self._lock:
            if name in self._tables:
                return
            table = Table(name, tuple(columns))
            self._tables[name] = table
            self._rows[name] = self._load(table)
            logger.debug("Created table %s", name)

    def upsert(self, table: str, entries: Sequence[UpdateColumnEntry]) -> bool:
        with self._lock:
            try:
                t = self._table(table, "upsert")
                keys, values = split_entries(entries)
                key_map = as_key_map(keys)
                if set(key_map) != {c.name for c in t.key_columns}:
                    logger.error("Upsert into %s with incomplete key %s", table, sorted(key_map))
                    return False
                unknown = [e.column for e in values if e.column not in {c.name for c in t.columns}]
                if unknown:
                    logger.error("Upsert into %s with unknown columns %s", table, unknown)
                    return False
                k = self._key_tuple(t, key_map)
                row = dict(self._rows[table].get(k) or key_map)
                for e in values:
                    row[e.column] = e.value
                if self.enforce_foreign_keys:
                    missing = self._missing_parent(t, row)
                    if missing is not None:
                        logger.warning("Rejected upsert into %s: no parent row in %s", table, missing)
                        return False
                self._rows[table][k] = row
                self._persist(table)
                return True
            except StorageError as e:
                logger.error("Upsert into %s failed: %s", table, e)
                self._discard(table)
                return False

    def delete(self, table: str, keys: Sequence[ColumnEntry]) -> bool:
        with self._lock:
            touched = {table}
            try:
                self._table(table, "delete")
                matches = self._matching(table, as_key_map(keys))
                if matches and self.enforce_foreign_keys and not self.cascade_deletes:
                    child = self._referencing_table(table, [row for _, row in matches])
                    if child is not None:
                        logger.warning("Rejected delete from %s: rows in %s still reference it", table, child)
                        return False
                for k, _ in matches:
                    del self._rows[table][k]
                if self.cascade_deletes and matches:
                    self._cascade(table, [row for _, row in matches], touched)
                for name in touched:
                    self._persist(name)
                return True
            except StorageError as e:
                logger.error("Delete from %s failed: %s", table, e)
                for name in touched:
                    self._discard(name)
                return False

    def lookup(self, table: str, column: str, keys: Sequence[ColumnEntry]) -> Result:
        with self._lock:
            t = self._table(table, "lookup")
            if column not in {c.name for c in t.columns}:
                self._unknown_column(table, column)
            for _, row in self._matching(table, as_key_map(keys)):
                if row.get(column) is not None:
                    return Result.of(row[column])
            return Result.empty()

    def lookup_all(self, table: str, column: str, keys: Sequence[ColumnEntry]) -> List[str]:
        with self._lock:
            t = self._table(table, "lookup_all")
            if column not in {c.name for c in t.columns}:
                self._unknown_column(table, column)
            return [
                row[column] for _, row in self._matching(table, as_key_map(keys))
                if row.get(column) is not None
            ]

    def exists(self, table: str, keys: Sequence[ColumnEntry]) -> bool:
        with self._lock:
            self._table(table, "exists")
            return bool(self._matching(table, as_key_map(keys)))

    @staticmethod
    def _unknown_column(table: str, column: str) -> None:
        raise StorageError("lookup", f"unknown column {column!r} in {table!r}")
