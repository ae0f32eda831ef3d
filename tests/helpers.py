from pathlib import Path
from typing import Any
from starlette.testclient import TestClient
from datamanager_lib.services.container import ServiceContainer
from datamanager_lib.storage import StorageBackend, create_storage


def register_service_on_client(client: TestClient, name: str, instance: Any) -> None:
    """Register a service instance into the app's DI container for tests.

    Replaces whatever `create_app` registered under `name`, creating the
    container first when the app has none.

    Usage in tests:
        from tests.helpers import register_service_on_client
        register_service_on_client(client, 'data_manager', fake_manager)
    """
    container = getattr(client.app.state, 'container', None)
    if container is None:
        container = ServiceContainer()
        client.app.state.container = container

    container.register_singleton(name, instance)


def make_storage(kind: str, tmp_path: Path, **policy: Any) -> StorageBackend:
    """Build a backend of `kind` whose files (if any) live under `tmp_path`."""
    if kind == "memory":
        return create_storage(backend="memory", **policy)
    if kind == "file":
        return create_storage(backend="file", data_dir=str(tmp_path / "tables"), **policy)
    if kind == "file-json":
        return create_storage(backend="file", data_dir=str(tmp_path / "tables"), serializer="json", **policy)
    if kind == "sqlite":
        return create_storage(backend="sqlite", sqlite_path=str(tmp_path / "dm.sqlite"), **policy)
    raise ValueError(f"Unknown backend kind {kind!r}")
