from .interfaces import DataManagerProtocol
from .scopes import GlobalScope, GroupMemberScope, GroupScope, PlayerScope, Scope, scope_for
from .service import DataManager
from .tables import ALL_TABLES, ScopeKind, table_name, value_table

__all__ = [
    "ALL_TABLES",
    "DataManager",
    "DataManagerProtocol",
    "GlobalScope",
    "GroupMemberScope",
    "GroupScope",
    "PlayerScope",
    "Scope",
    "ScopeKind",
    "scope_for",
    "table_name",
    "value_table",
]
