"""SQLite storage backend.

Every table is created with TEXT columns, a PRIMARY KEY over its key columns
and composite FOREIGN KEY clauses for its references. Foreign keys are only
enforced when the backend is configured to (``PRAGMA foreign_keys``); cascade
deletes are performed by the backend itself so they behave the same whether
or not enforcement is on.
"""
from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from threading import RLock
from typing import Any, Dict, List, Sequence, Tuple

from .base import StorageBackend, StorageError
from .schema import Column, ColumnEntry, Result, Table, UpdateColumnEntry, split_entries

logger = logging.getLogger(__name__)


def _quote(identifier: str) -> str:
    return '"' + identifier.replace('"', '""') + '"'


def _where(keys: Sequence[ColumnEntry]) -> Tuple[str, List[str]]:
    if not keys:
        return "", []
    clause = " AND ".join(f"{_quote(k.column)} = ?" for k in keys)
    return f" WHERE {clause}", [k.value for k in keys]


def create_table_sql(table: Table) -> str:
    parts = []
    for c in table.columns:
        parts.append(f"{_quote(c.name)} TEXT" + (" NOT NULL" if c.is_key else ""))
    if table.key_columns:
        keys = ", ".join(_quote(c.name) for c in table.key_columns)
        parts.append(f"PRIMARY KEY ({keys})")
    for parent, pairs in table.foreign_keys().items():
        local = ", ".join(_quote(lcol) for lcol, _ in pairs)
        remote = ", ".join(_quote(pcol) for _, pcol in pairs)
        parts.append(f"FOREIGN KEY ({local}) REFERENCES {_quote(parent)} ({remote})")
    return f"CREATE TABLE IF NOT EXISTS {_quote(table.name)} (\n  " + ",\n  ".join(parts) + "\n)"


class SQLiteStorageBackend(StorageBackend):
    """Persistent backend on a single SQLite file.

    Parameters:
        path: Path to the database file. Use ``":memory:"`` for an in-memory
              database (useful for testing).
    """

    name = "sqlite"

    def __init__(
        self,
        path: str | Path = "data/datamanager.sqlite",
        enforce_foreign_keys: bool = False,
        cascade_deletes: bool = False,
    ) -> None:
        super().__init__(enforce_foreign_keys=enforce_foreign_keys, cascade_deletes=cascade_deletes)
        self.path = str(path)
        if self.path != ":memory:":
            Path(self.path).parent.mkdir(parents=True, exist_ok=True)
        self._lock = RLock()
        self._tables: Dict[str, Table] = {}
        self._conn: sqlite3.Connection = sqlite3.connect(self.path, check_same_thread=False)
        self._apply_pragmas()

    def _apply_pragmas(self) -> None:
        with self._lock:
            self._conn.execute(f"PRAGMA foreign_keys = {'ON' if self.enforce_foreign_keys else 'OFF'}")

    def configure(self, **options) -> None:
        super().configure(**options)
        self._apply_pragmas()

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    def __enter__(self) -> "SQLiteStorageBackend":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.close()
        return False

    def _check_column(self, table: str, column: str, operation: str) -> None:
        # SQLite reads an unknown double-quoted identifier as a string literal
        t = self._tables.get(table)
        if t is not None and column not in {c.name for c in t.columns}:
            raise StorageError(operation, f"unknown column {column!r} in {table!r}")

    def _table_exists(self, name: str) -> bool:
        row = self._conn.execute(
            "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = ?", (name,)
        ).fetchone()
        return row is not None

    def _delete_children(self, name: str, keys: Sequence[ColumnEntry]) -> None:
        """Delete rows referencing the rows of `name` matched by `keys`, depth first."""
        for child in self._tables.values():
            pairs = child.foreign_keys().get(name)
            if not pairs:
                continue
            where, params = _where(keys)
            parent_cols = ", ".join(_quote(pcol) for _, pcol in pairs)
            parents = self._conn.execute(
                f"SELECT DISTINCT {parent_cols} FROM {_quote(name)}{where}", params
            ).fetchall()
            for values in parents:
                child_keys = [
                    ColumnEntry(lcol, child.column(lcol).type, value)
                    for (lcol, _), value in zip(pairs, values)
                ]
                self._delete_children(child.name, child_keys)
                cwhere, cparams = _where(child_keys)
                cur = self._conn.execute(f"DELETE FROM {_quote(child.name)}{cwhere}", cparams)
                if cur.rowcount:
                    logger.debug("Cascade removed %d rows from %s", cur.rowcount, child.name)

    # StorageBackend

    def create_table(self, name: str, columns: Sequence[Column]) -> None:
        table = Table(name, tuple(columns))
        with self._lock:
            self._tables.setdefault(name, table)
            if self._table_exists(name):
                return
            with self._conn:
                self._conn.execute(create_table_sql(table))
            logger.debug("Created table %s", name)

    def upsert(self, table: str, entries: Sequence[UpdateColumnEntry]) -> bool:
        keys, values = split_entries(entries)
        columns = [e.column for e in keys] + [e.column for e in values]
        params: List[Any] = [e.value for e in keys] + [e.value for e in values]
        sql = (
            f"INSERT INTO {_quote(table)} ({', '.join(_quote(c) for c in columns)}) "
            f"VALUES ({', '.join('?' for _ in columns)})"
        )
        if values:
            conflict = ", ".join(_quote(e.column) for e in keys)
            updates = ", ".join(f"{_quote(e.column)} = excluded.{_quote(e.column)}" for e in values)
            sql += f" ON CONFLICT ({conflict}) DO UPDATE SET {updates}"
        else:
            sql += " ON CONFLICT DO NOTHING"
        try:
            with self._lock, self._conn:
                self._conn.execute(sql, params)
            return True
        except (sqlite3.Error, ValueError) as e:
            logger.error("Upsert into %s failed: %s", table, e)
            return False

    def delete(self, table: str, keys: Sequence[ColumnEntry]) -> bool:
        where, params = _where(keys)
        try:
            with self._lock, self._conn:
                if self.cascade_deletes:
                    self._delete_children(table, keys)
                self._conn.execute(f"DELETE FROM {_quote(table)}{where}", params)
            return True
        except (sqlite3.Error, ValueError) as e:
            logger.error("Delete from %s failed: %s", table, e)
            return False

    def lookup(self, table: str, column: str, keys: Sequence[ColumnEntry]) -> Result:
        self._check_column(table, column, "lookup")
        where, params = _where(keys)
        try:
            with self._lock:
                row = self._conn.execute(
                    f"SELECT {_quote(column)} FROM {_quote(table)}{where}"
                    f"{' AND' if where else ' WHERE'} {_quote(column)} IS NOT NULL LIMIT 1",
                    params,
                ).fetchone()
        except (sqlite3.Error, ValueError) as e:
            raise StorageError("lookup", str(e)) from e
        if row is None:
            return Result.empty()
        return Result.of(str(row[0]))

    def lookup_all(self, table: str, column: str, keys: Sequence[ColumnEntry]) -> List[str]:
        self._check_column(table, column, "lookup_all")
        where, params = _where(keys)
        try:
            with self._lock:
                rows = self._conn.execute(
                    f"SELECT {_quote(column)} FROM {_quote(table)}{where}"
                    f"{' AND' if where else ' WHERE'} {_quote(column)} IS NOT NULL ORDER BY rowid",
                    params,
                ).fetchall()
        except (sqlite3.Error, ValueError) as e:
            raise StorageError("lookup_all", str(e)) from e
        return [str(r[0]) for r in rows]

    def exists(self, table: str, keys: Sequence[ColumnEntry]) -> bool:
        where, params = _where(keys)
        try:
            with self._lock:
                row = self._conn.execute(
                    f"SELECT 1 FROM {_quote(table)}{where} LIMIT 1", params
                ).fetchone()
        except (sqlite3.Error, ValueError) as e:
            raise StorageError("exists", str(e)) from e
        return row is not None
