"""Storage backend interface definitions.

Defines the StorageBackend abstract class every storage engine implements.
Backends operate on a table name plus explicit column entries, never on
ad-hoc queries, and store every value as text.
"""
from __future__ import annotations
from abc import ABC, abstractmethod
from typing import List, Sequence

from .schema import Column, ColumnEntry, Result, UpdateColumnEntry


class StorageError(RuntimeError):
    """Raised by read operations when the backend cannot serve the request."""

    def __init__(self, operation: str, detail: str = "") -> None:
        self.operation = operation
        msg = f"Storage error during '{operation}'"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


class StorageBackend(ABC):
    """Abstract storage backend.

    Implementations must be thread-safe if used concurrently.

    Referential policy is owned by the backend and off by default:
    `enforce_foreign_keys` rejects writes whose referenced parent row is
    missing, `cascade_deletes` removes referencing rows with their parent.
    """

    name = "abstract"

    def __init__(self, enforce_foreign_keys: bool = False, cascade_deletes: bool = False) -> None:
        self.enforce_foreign_keys = enforce_foreign_keys
        self.cascade_deletes = cascade_deletes

    @abstractmethod
    def create_table(self, name: str, columns: Sequence[Column]) -> None:
        """Create table `name` unless it already exists.

        Must check for existence first and be safe to call repeatedly.
        """

    @abstractmethod
    def upsert(self, table: str, entries: Sequence[UpdateColumnEntry]) -> bool:
        """Insert a row or update the non-key columns of the row whose key
        entries match.

        Returns False on any backend failure; never raises.
        """

    @abstractmethod
    def delete(self, table: str, keys: Sequence[ColumnEntry]) -> bool:
        """Delete all rows matching `keys`. Zero matches is still success."""

    @abstractmethod
    def lookup(self, table: str, column: str, keys: Sequence[ColumnEntry]) -> Result:
        """Return `column` of the unique row matching `keys`, or an empty Result.

        Raises StorageError when the backend fails.
        """

    @abstractmethod
    def lookup_all(self, table: str, column: str, keys: Sequence[ColumnEntry]) -> List[str]:
        """Return `column` of every row matching the (partial) key subset."""

    @abstractmethod
    def exists(self, table: str, keys: Sequence[ColumnEntry]) -> bool:
        """Return True if a row matches `keys`."""

    def configure(self, **options) -> None:
        """Apply runtime options; unknown options are ignored."""
        if "enforce_foreign_keys" in options:
            self.enforce_foreign_keys = bool(options["enforce_foreign_keys"])
        if "cascade_deletes" in options:
            self.cascade_deletes = bool(options["cascade_deletes"])

    def close(self) -> None:
        return
