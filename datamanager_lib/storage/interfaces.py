from typing import Protocol, List, Sequence, runtime_checkable

from .schema import Column, ColumnEntry, Result, UpdateColumnEntry


@runtime_checkable
class StorageProtocol(Protocol):
    """Storage backend protocol mirroring `datamanager_lib.storage.StorageBackend`.

    Implementations should follow the semantics documented on the abstract
    base class in `datamanager_lib.storage.base` (False instead of raising on
    writes, StorageError on failed reads, idempotent table creation).
    """

    def create_table(self, name: str, columns: Sequence[Column]) -> None: ...

    def upsert(self, table: str, entries: Sequence[UpdateColumnEntry]) -> bool: ...

    def delete(self, table: str, keys: Sequence[ColumnEntry]) -> bool: ...

    def lookup(self, table: str, column: str, keys: Sequence[ColumnEntry]) -> Result: ...

    def lookup_all(self, table: str, column: str, keys: Sequence[ColumnEntry]) -> List[str]: ...

    def exists(self, table: str, keys: Sequence[ColumnEntry]) -> bool: ...

    def configure(self, **options) -> None: ...

    def close(self) -> None: ...
