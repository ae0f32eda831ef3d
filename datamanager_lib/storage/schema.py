"""Table/column model shared by every storage backend.

Tables are ordered column lists. Key columns jointly form a row's unique
identity; foreign keys only record an intended link to another table, the
backend decides whether to enforce it.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .codec import ColumnType


@dataclass(frozen=True)
class ForeignKey:
    table: str
    column: str


@dataclass(frozen=True)
class Column:
    name: str
    type: ColumnType
    is_key: bool = False
    foreign_key: Optional[ForeignKey] = None


@dataclass(frozen=True)
class Table:
    name: str
    columns: Tuple[Column, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "columns", tuple(self.columns))
        names = [c.name for c in self.columns]
        if len(set(names)) != len(names):
            raise ValueError(f"Duplicate column names in table {self.name!r}")
        for c in self.columns:
            if c.is_key and c.type is not ColumnType.STRING_KEY:
                raise ValueError(f"Key column {c.name!r} in {self.name!r} must be STRING_KEY")

    @property
    def key_columns(self) -> List[Column]:
        return [c for c in self.columns if c.is_key]

    @property
    def value_columns(self) -> List[Column]:
        return [c for c in self.columns if not c.is_key]

    def column(self, name: str) -> Column:
        for c in self.columns:
            if c.name == name:
                return c
        raise KeyError(name)

    def foreign_keys(self) -> Dict[str, List[Tuple[str, str]]]:
        """Group foreign key columns by referenced table.

        Returns ``{parent_table: [(local_column, parent_column), ...]}`` in
        column order, so a multi-column reference is a single link.
        """
        links: Dict[str, List[Tuple[str, str]]] = {}
        for c in self.columns:
            if c.foreign_key is not None:
                links.setdefault(c.foreign_key.table, []).append((c.name, c.foreign_key.column))
        return links


@dataclass(frozen=True)
class ColumnEntry:
    """A (column, type, literal value) triple addressing a row."""

    column: str
    type: ColumnType
    value: str


@dataclass(frozen=True)
class UpdateColumnEntry(ColumnEntry):
    """A column entry used to write a row; `is_key` marks its identity."""

    is_key: bool = False


@dataclass(frozen=True)
class Result:
    """Outcome of a point lookup: empty, or a single stored string."""

    _value: Optional[str] = None

    @staticmethod
    def empty() -> "Result":
        return Result()

    @staticmethod
    def of(value: str) -> "Result":
        return Result(value)

    @property
    def is_empty(self) -> bool:
        return self._value is None

    @property
    def value(self) -> str:
        if self._value is None:
            raise KeyError("empty result")
        return self._value


def split_entries(entries: Iterable[UpdateColumnEntry]) -> Tuple[List[UpdateColumnEntry], List[UpdateColumnEntry]]:
    """Partition write entries into (key entries, value entries)."""
    keys: List[UpdateColumnEntry] = []
    values: List[UpdateColumnEntry] = []
    for e in entries:
        (keys if e.is_key else values).append(e)
    return keys, values


def as_key_map(entries: Sequence[ColumnEntry]) -> Dict[str, str]:
    return {e.column: e.value for e in entries}


def define_table(backend, table: Table) -> None:
    """Declare `table` on `backend`; a no-op when the table already exists."""
    backend.create_table(table.name, list(table.columns))
