"""Scope descriptors: which context a piece of data is attached to.

A scope is one of four small frozen dataclasses. Each knows its kind and
builds the key entries identifying a row, always in the order PluginKey,
Group, Player, DataKey.
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import List, Optional, Union

from datamanager_lib.storage.codec import ColumnType
from datamanager_lib.storage.schema import UpdateColumnEntry

from .tables import COLUMN_DATA_KEY, COLUMN_GROUP, COLUMN_PLAYER, COLUMN_PLUGIN_KEY, ScopeKind

PlayerId = Union[uuid.UUID, str]


def player_key(player: PlayerId) -> str:
    """Canonical text of a player id; raises ValueError for malformed ids."""
    if isinstance(player, uuid.UUID):
        return str(player)
    try:
        return str(uuid.UUID(str(player)))
    except ValueError:
        raise ValueError(f"Invalid player id {player!r}") from None


def _key(column: str, value: str) -> UpdateColumnEntry:
    return UpdateColumnEntry(column, ColumnType.STRING_KEY, value, True)


@dataclass(frozen=True)
class GlobalScope:
    plugin: str

    kind = ScopeKind.GLOBAL

    def key_entries(self, data_key: Optional[str] = None) -> List[UpdateColumnEntry]:
        entries = [_key(COLUMN_PLUGIN_KEY, self.plugin)]
        if data_key is not None:
            entries.append(_key(COLUMN_DATA_KEY, data_key))
        return entries


@dataclass(frozen=True)
class PlayerScope:
    plugin: str
    player: PlayerId

    kind = ScopeKind.PLAYER

    def __post_init__(self) -> None:
        object.__setattr__(self, "player", player_key(self.player))

    def key_entries(self, data_key: Optional[str] = None) -> List[UpdateColumnEntry]:
        entries = [_key(COLUMN_PLUGIN_KEY, self.plugin), _key(COLUMN_PLAYER, self.player)]
        if data_key is not None:
            entries.append(_key(COLUMN_DATA_KEY, data_key))
        return entries


@dataclass(frozen=True)
class GroupScope:
    plugin: str
    group: str

    kind = ScopeKind.GROUP

    def key_entries(self, data_key: Optional[str] = None) -> List[UpdateColumnEntry]:
        entries = [_key(COLUMN_PLUGIN_KEY, self.plugin), _key(COLUMN_GROUP, self.group)]
        if data_key is not None:
            entries.append(_key(COLUMN_DATA_KEY, data_key))
        return entries


@dataclass(frozen=True)
class GroupMemberScope:
    plugin: str
    group: str
    player: PlayerId

    kind = ScopeKind.GROUP_MEMBER

    def __post_init__(self) -> None:
        object.__setattr__(self, "player", player_key(self.player))

    def key_entries(self, data_key: Optional[str] = None) -> List[UpdateColumnEntry]:
        entries = [
            _key(COLUMN_PLUGIN_KEY, self.plugin),
            _key(COLUMN_GROUP, self.group),
            _key(COLUMN_PLAYER, self.player),
        ]
        if data_key is not None:
            entries.append(_key(COLUMN_DATA_KEY, data_key))
        return entries


Scope = Union[GlobalScope, PlayerScope, GroupScope, GroupMemberScope]


def scope_for(plugin: str, player: Optional[PlayerId] = None, group: Optional[str] = None) -> Scope:
    """Pick the narrowest scope the given identifiers describe."""
    if group is not None and player is not None:
        return GroupMemberScope(plugin, group, player)
    if group is not None:
        return GroupScope(plugin, group)
    if player is not None:
        return PlayerScope(plugin, player)
    return GlobalScope(plugin)
