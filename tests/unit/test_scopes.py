import uuid

import pytest

from datamanager_lib.data.scopes import (
    GlobalScope,
    GroupMemberScope,
    GroupScope,
    PlayerScope,
    player_key,
    scope_for,
)
from datamanager_lib.data.tables import (
    ALL_TABLES,
    GROUP_MEMBERS,
    GROUPS,
    VALUE_TABLES,
    ScopeKind,
    table_name,
    value_table,
)
from datamanager_lib.storage.codec import VALUE_TYPES, ColumnType

PLAYER = uuid.UUID("12345678-1234-5678-1234-567812345678")


def test_table_names():
    assert table_name(ScopeKind.GLOBAL, ColumnType.INT) == "VersuchDrei_DataManager_Ints"
    assert table_name(ScopeKind.PLAYER, ColumnType.STRING_VALUE) == "VersuchDrei_DataManager_PlayerStrings"
    assert table_name(ScopeKind.GROUP, ColumnType.BOOLEAN) == "VersuchDrei_DataManager_GroupBooleans"
    assert table_name(ScopeKind.GROUP_MEMBER, ColumnType.STRING_LIST) == "VersuchDrei_DataManager_GroupMemberLists"
    assert GROUPS.name == "VersuchDrei_DataManager_Groups"
    assert GROUP_MEMBERS.name == "VersuchDrei_DataManager_GroupMembers"


def test_all_tables_registered_once():
    names = [t.name for t in ALL_TABLES]
    assert len(names) == len(ScopeKind) * len(VALUE_TYPES) + 2
    assert len(set(names)) == len(names)
    assert len(VALUE_TABLES) == 28


def test_parents_are_set_up_before_referencing_tables():
    seen = set()
    for t in ALL_TABLES:
        for parent in t.foreign_keys():
            assert parent in seen
        seen.add(t.name)


def test_key_column_order():
    t = value_table(ScopeKind.GROUP_MEMBER, ColumnType.LONG)
    assert [c.name for c in t.key_columns] == ["PluginKey", "Group", "Player", "DataKey"]
    assert [c.name for c in t.value_columns] == ["Data"]
    assert t.column("Data").type is ColumnType.LONG


def test_group_scoped_tables_reference_groups():
    for kind in (ScopeKind.GROUP, ScopeKind.GROUP_MEMBER):
        t = value_table(kind, ColumnType.STRING_VALUE)
        assert t.foreign_keys() == {GROUPS.name: [("PluginKey", "PluginKey"), ("Group", "Group")]}
    assert value_table(ScopeKind.PLAYER, ColumnType.INT).foreign_keys() == {}
    assert GROUP_MEMBERS.foreign_keys() == {GROUPS.name: [("PluginKey", "PluginKey"), ("Group", "Group")]}


def test_value_table_rejects_string_key():
    with pytest.raises(ValueError):
        value_table(ScopeKind.GLOBAL, ColumnType.STRING_KEY)


def test_player_key_normalises_and_validates():
    assert player_key(PLAYER) == str(PLAYER)
    assert player_key(str(PLAYER).upper()) == str(PLAYER)
    with pytest.raises(ValueError):
        player_key("not-a-uuid")


def test_key_entries_order_and_values():
    entries = GroupMemberScope("plug", "g", PLAYER).key_entries("k")
    assert [(e.column, e.value) for e in entries] == [
        ("PluginKey", "plug"), ("Group", "g"), ("Player", str(PLAYER)), ("DataKey", "k"),
    ]
    assert all(e.is_key and e.type is ColumnType.STRING_KEY for e in entries)
    assert [e.column for e in GlobalScope("plug").key_entries()] == ["PluginKey"]


def test_scope_for_picks_narrowest_scope():
    assert scope_for("p") == GlobalScope("p")
    assert scope_for("p", player=PLAYER) == PlayerScope("p", PLAYER)
    assert scope_for("p", group="g") == GroupScope("p", "g")
    assert scope_for("p", player=str(PLAYER), group="g") == GroupMemberScope("p", "g", PLAYER)
    assert scope_for("p", player=PLAYER).kind is ScopeKind.PLAYER


def test_scope_with_invalid_player_raises():
    with pytest.raises(ValueError):
        PlayerScope("p", "bogus")
