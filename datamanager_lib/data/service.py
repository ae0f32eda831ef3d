"""DataManager: typed, scoped plugin data on top of any storage backend."""
from __future__ import annotations

import logging
import uuid
from typing import Any, List, Optional, Sequence

from datamanager_lib.storage.base import StorageError
from datamanager_lib.storage.codec import ColumnType, DecodeError, decode, encode, infer_value_type, value_type_from
from datamanager_lib.storage.interfaces import StorageProtocol
from datamanager_lib.storage.schema import ColumnEntry, UpdateColumnEntry, define_table

from .interfaces import DataManagerProtocol
from .scopes import GroupScope, GlobalScope, PlayerId, PlayerScope, Scope, player_key
from .tables import (
    ALL_TABLES,
    COLUMN_DATA,
    COLUMN_GROUP,
    COLUMN_PLAYER,
    TABLE_GROUP_MEMBERS,
    TABLE_GROUPS,
    value_table,
)

logger = logging.getLogger(__name__)


class DataManager(DataManagerProtocol):
    """Store and read plugin data in four scopes without knowing the backend.

    Mutating calls return a success flag and never raise for backend faults.
    Reads return ``None`` when no row exists (or the backend failed); a row
    whose text cannot be decoded raises `DecodeError` unless `strict_decode`
    is off, in which case it is logged and treated as absent.
    """

    def __init__(self, storage: StorageProtocol, strict_decode: bool = True):
        self._storage = storage
        self.strict_decode = strict_decode

    @property
    def storage(self) -> StorageProtocol:
        return self._storage

    def setup(self) -> None:
        """Declare every table; safe to call more than once."""
        for table in ALL_TABLES:
            define_table(self._storage, table)
        logger.info("DataManager tables ready (%d tables)", len(ALL_TABLES))

    # Scoped values

    def set(self, scope: Scope, data_key: str, value: Any, value_type: Any = None) -> bool:
        try:
            vt = value_type_from(value_type) if value_type is not None else infer_value_type(value)
            text = encode(value, vt)
        except (TypeError, ValueError) as e:
            logger.warning("Not storing %s/%s: %s", scope, data_key, e)
            return False
        table = value_table(scope.kind, vt)
        entries = scope.key_entries(data_key) + [UpdateColumnEntry(COLUMN_DATA, vt, text, False)]
        ok = self._storage.upsert(table.name, entries)
        if not ok:
            logger.warning("Failed to store %s in %s for %s", data_key, table.name, scope)
        return ok

    def get(self, scope: Scope, data_key: str, value_type: Any) -> Optional[Any]:
        vt = value_type_from(value_type)
        table = value_table(scope.kind, vt)
        try:
            result = self._storage.lookup(table.name, COLUMN_DATA, scope.key_entries(data_key))
        except StorageError as e:
            logger.warning("Lookup of %s in %s failed: %s", data_key, table.name, e)
            return None
        if result.is_empty:
            return None
        try:
            return decode(result.value, vt)
        except DecodeError:
            if self.strict_decode:
                raise
            logger.warning("Corrupt %s value for %s in %s; treating as absent", vt.value, data_key, table.name)
            return None

    def delete(self, scope: Scope, data_key: str, value_type: Any) -> bool:
        table = value_table(scope.kind, value_type_from(value_type))
        return self._storage.delete(table.name, scope.key_entries(data_key))

    def get_string(self, scope: Scope, data_key: str) -> Optional[str]:
        return self.get(scope, data_key, ColumnType.STRING_VALUE)

    def get_int(self, scope: Scope, data_key: str) -> Optional[int]:
        return self.get(scope, data_key, ColumnType.INT)

    def get_long(self, scope: Scope, data_key: str) -> Optional[int]:
        return self.get(scope, data_key, ColumnType.LONG)

    def get_float(self, scope: Scope, data_key: str) -> Optional[float]:
        return self.get(scope, data_key, ColumnType.FLOAT)

    def get_double(self, scope: Scope, data_key: str) -> Optional[float]:
        return self.get(scope, data_key, ColumnType.DOUBLE)

    def get_boolean(self, scope: Scope, data_key: str) -> Optional[bool]:
        return self.get(scope, data_key, ColumnType.BOOLEAN)

    def get_list(self, scope: Scope, data_key: str) -> Optional[List[str]]:
        return self.get(scope, data_key, ColumnType.STRING_LIST)

    # Groups

    def add_group(self, group: str, plugin: str) -> bool:
        return self._storage.upsert(TABLE_GROUPS, GroupScope(plugin, group).key_entries())

    def delete_group(self, group: str, plugin: str) -> bool:
        return self._storage.delete(TABLE_GROUPS, GroupScope(plugin, group).key_entries())

    def is_group(self, group: str, plugin: str) -> bool:
        return self._exists(TABLE_GROUPS, GroupScope(plugin, group).key_entries())

    def get_groups(self, plugin: str, player: Optional[PlayerId] = None) -> List[str]:
        """Groups of a plugin, or the groups `player` is a member of."""
        if player is None:
            table, keys = TABLE_GROUPS, GlobalScope(plugin).key_entries()
        else:
            table, keys = TABLE_GROUP_MEMBERS, PlayerScope(plugin, player).key_entries()
        try:
            return self._storage.lookup_all(table, COLUMN_GROUP, keys)
        except StorageError as e:
            logger.warning("Listing groups of %s failed: %s", plugin, e)
            return []

    # Members

    def _member_keys(self, player: PlayerId, group: str, plugin: str) -> List[UpdateColumnEntry]:
        return GroupScope(plugin, group).key_entries() + [
            UpdateColumnEntry(COLUMN_PLAYER, ColumnType.STRING_KEY, player_key(player), True)
        ]

    def add_member(self, player: PlayerId, group: str, plugin: str) -> bool:
        return self._storage.upsert(TABLE_GROUP_MEMBERS, self._member_keys(player, group, plugin))

    def remove_member(self, player: PlayerId, group: str, plugin: str) -> bool:
        return self._storage.delete(TABLE_GROUP_MEMBERS, self._member_keys(player, group, plugin))

    def is_member(self, player: PlayerId, group: str, plugin: str) -> bool:
        return self._exists(TABLE_GROUP_MEMBERS, self._member_keys(player, group, plugin))

    def get_member_ids(self, group: str, plugin: str) -> Optional[List[uuid.UUID]]:
        """Ids of the group's members, or None when no member rows exist."""
        try:
            ids = self._storage.lookup_all(
                TABLE_GROUP_MEMBERS, COLUMN_PLAYER, GroupScope(plugin, group).key_entries()
            )
        except StorageError as e:
            logger.warning("Listing members of %s/%s failed: %s", plugin, group, e)
            return None
        if not ids:
            return None
        members = []
        for raw in ids:
            try:
                members.append(uuid.UUID(raw))
            except ValueError:
                logger.warning("Skipping malformed member id %r in %s/%s", raw, plugin, group)
        return members

    def _exists(self, table: str, keys: Sequence[ColumnEntry]) -> bool:
        try:
            return self._storage.exists(table, keys)
        except StorageError as e:
            logger.warning("Existence check in %s failed: %s", table, e)
            return False

