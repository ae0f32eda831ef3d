from __future__ import annotations

from typing import Any, List, Optional, Protocol, runtime_checkable
import uuid

from .scopes import PlayerId, Scope


@runtime_checkable
class DataManagerProtocol(Protocol):
    """Public surface of the scoped data store used by plugins and the API."""

    def setup(self) -> None: ...

    def set(self, scope: Scope, data_key: str, value: Any, value_type: Any = None) -> bool: ...

    def get(self, scope: Scope, data_key: str, value_type: Any) -> Optional[Any]: ...

    def delete(self, scope: Scope, data_key: str, value_type: Any) -> bool: ...

    def add_group(self, group: str, plugin: str) -> bool: ...

    def delete_group(self, group: str, plugin: str) -> bool: ...

    def is_group(self, group: str, plugin: str) -> bool: ...

    def get_groups(self, plugin: str, player: Optional[PlayerId] = None) -> List[str]: ...

    def add_member(self, player: PlayerId, group: str, plugin: str) -> bool: ...

    def remove_member(self, player: PlayerId, group: str, plugin: str) -> bool: ...

    def is_member(self, player: PlayerId, group: str, plugin: str) -> bool: ...

    def get_member_ids(self, group: str, plugin: str) -> Optional[List[uuid.UUID]]: ...
