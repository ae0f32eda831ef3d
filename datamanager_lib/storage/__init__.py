"""Storage abstraction package for DataManager."""

from pathlib import Path
from typing import Any, Optional

from .base import StorageBackend, StorageError
from .codec import ColumnType, DecodeError
from .file_backend import FileStorageBackend
from .memory_backend import MemoryStorage
from .schema import Column, ColumnEntry, ForeignKey, Result, Table, UpdateColumnEntry, define_table
from .serializer import get_serializer
from .sqlite_backend import SQLiteStorageBackend

BACKENDS = ("file", "memory", "sqlite")


def create_storage(
    backend: str = "file",
    data_dir: str = "data",
    serializer: str = "yaml",
    sqlite_path: Optional[str] = None,
    enforce_foreign_keys: bool = False,
    cascade_deletes: bool = False,
    **options: Any,
) -> StorageBackend:
    """Create a storage backend by name.

    - ``memory``: rows live in process memory only.
    - ``file``: one document per table under `data_dir`, written with the
      named serializer (``yaml`` or ``json``).
    - ``sqlite``: a single database file, `sqlite_path` or
      ``<data_dir>/datamanager.sqlite``.
    """
    policy = dict(enforce_foreign_keys=enforce_foreign_keys, cascade_deletes=cascade_deletes)
    if backend == "memory":
        storage: StorageBackend = MemoryStorage(**policy)
    elif backend == "file":
        storage = FileStorageBackend(data_dir=data_dir, serializer=get_serializer(serializer), **policy)
    elif backend == "sqlite":
        path = sqlite_path or str(Path(data_dir) / "datamanager.sqlite")
        storage = SQLiteStorageBackend(path=path, **policy)
    else:
        raise ValueError(f"Unknown storage backend {backend!r}; expected one of {BACKENDS}")
    if options:
        storage.configure(**options)
    return storage


__all__ = [
    "BACKENDS",
    "Column",
    "ColumnEntry",
    "ColumnType",
    "DecodeError",
    "FileStorageBackend",
    "ForeignKey",
    "MemoryStorage",
    "Result",
    "SQLiteStorageBackend",
    "StorageBackend",
    "StorageError",
    "Table",
    "UpdateColumnEntry",
    "create_storage",
    "define_table",
]
