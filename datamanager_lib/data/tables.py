"""Fixed table layout for scoped plugin data.

Table and column names are the contract between the data manager and every
backend holding its data; changing them orphans existing rows.
"""
from __future__ import annotations

from enum import Enum
from typing import Dict, List, Tuple

from datamanager_lib.storage.codec import VALUE_TYPES, ColumnType
from datamanager_lib.storage.schema import Column, ForeignKey, Table

TABLE_PREFIX = "VersuchDrei_DataManager_"

COLUMN_PLAYER = "Player"
COLUMN_GROUP = "Group"
COLUMN_PLUGIN_KEY = "PluginKey"
COLUMN_DATA_KEY = "DataKey"
# "Value" is a keyword in most SQL dialects
COLUMN_DATA = "Data"


class ScopeKind(str, Enum):
    GLOBAL = "global"
    PLAYER = "player"
    GROUP = "group"
    GROUP_MEMBER = "group_member"


_SCOPE_PREFIX = {
    ScopeKind.GLOBAL: "",
    ScopeKind.PLAYER: "Player",
    ScopeKind.GROUP: "Group",
    ScopeKind.GROUP_MEMBER: "GroupMember",
}

_TYPE_SUFFIX = {
    ColumnType.STRING_VALUE: "Strings",
    ColumnType.INT: "Ints",
    ColumnType.LONG: "Longs",
    ColumnType.FLOAT: "Floats",
    ColumnType.DOUBLE: "Doubles",
    ColumnType.BOOLEAN: "Booleans",
    ColumnType.STRING_LIST: "Lists",
}

TABLE_GROUPS = TABLE_PREFIX + "Groups"
TABLE_GROUP_MEMBERS = TABLE_PREFIX + "GroupMembers"


def _plugin_column(references_group: bool) -> Column:
    fk = ForeignKey(TABLE_GROUPS, COLUMN_PLUGIN_KEY) if references_group else None
    return Column(COLUMN_PLUGIN_KEY, ColumnType.STRING_KEY, True, fk)


def _group_column() -> Column:
    return Column(COLUMN_GROUP, ColumnType.STRING_KEY, True, ForeignKey(TABLE_GROUPS, COLUMN_GROUP))


def key_columns(kind: ScopeKind) -> List[Column]:
    """Key columns of a scope, in the order PluginKey, Group, Player."""
    grouped = kind in (ScopeKind.GROUP, ScopeKind.GROUP_MEMBER)
    cols = [_plugin_column(grouped)]
    if grouped:
        cols.append(_group_column())
    if kind in (ScopeKind.PLAYER, ScopeKind.GROUP_MEMBER):
        cols.append(Column(COLUMN_PLAYER, ColumnType.STRING_KEY, True))
    return cols


def table_name(kind: ScopeKind, value_type: ColumnType) -> str:
    return f"{TABLE_PREFIX}{_SCOPE_PREFIX[kind]}{_TYPE_SUFFIX[value_type]}"


def _value_table(kind: ScopeKind, value_type: ColumnType) -> Table:
    return Table(
        table_name(kind, value_type),
        tuple(key_columns(kind)) + (
            Column(COLUMN_DATA_KEY, ColumnType.STRING_KEY, True),
            Column(COLUMN_DATA, value_type),
        ),
    )


GROUPS = Table(TABLE_GROUPS, (
    Column(COLUMN_PLUGIN_KEY, ColumnType.STRING_KEY, True),
    Column(COLUMN_GROUP, ColumnType.STRING_KEY, True),
))

GROUP_MEMBERS = Table(TABLE_GROUP_MEMBERS, (
    _plugin_column(True),
    _group_column(),
    Column(COLUMN_PLAYER, ColumnType.STRING_KEY, True),
))

VALUE_TABLES: Dict[Tuple[ScopeKind, ColumnType], Table] = {
    (kind, vt): _value_table(kind, vt) for kind in ScopeKind for vt in VALUE_TYPES
}

# Setup order: global and player tables, the structural tables, then the
# tables referencing Groups.
ALL_TABLES: List[Table] = (
    [VALUE_TABLES[(ScopeKind.GLOBAL, vt)] for vt in VALUE_TYPES]
    + [VALUE_TABLES[(ScopeKind.PLAYER, vt)] for vt in VALUE_TYPES]
    + [GROUPS, GROUP_MEMBERS]
    + [VALUE_TABLES[(ScopeKind.GROUP, vt)] for vt in VALUE_TYPES]
    + [VALUE_TABLES[(ScopeKind.GROUP_MEMBER, vt)] for vt in VALUE_TYPES]
)


def value_table(kind: ScopeKind, value_type: ColumnType) -> Table:
    try:
        return VALUE_TABLES[(kind, value_type)]
    except KeyError:
        raise ValueError(f"No table for {kind.value} scope and {value_type!r}") from None
