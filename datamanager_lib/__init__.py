"""datamanager_lib: typed, scoped key-value storage for plugins.

Plugins keep strings, numbers, booleans and string lists per plugin, per
player, per group or per group member, on whichever storage backend the
host configured.
"""

from datamanager_lib.data import (
    DataManager,
    GlobalScope,
    GroupMemberScope,
    GroupScope,
    PlayerScope,
    scope_for,
)
from datamanager_lib.storage import ColumnType, DecodeError, StorageError, create_storage

__all__ = [
    "ColumnType",
    "DataManager",
    "DecodeError",
    "GlobalScope",
    "GroupMemberScope",
    "GroupScope",
    "PlayerScope",
    "StorageError",
    "create_storage",
    "scope_for",
]
