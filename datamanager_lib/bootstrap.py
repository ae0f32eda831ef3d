"""Bootstrap helpers for DataManager startup.

Composes the storage backend named by the configuration and declares every
table once before any read/write traffic. Factoring this out keeps
`datamanager_lib.main` focused on building the FastAPI application.
"""
import logging

from datamanager_lib.config.config import StoreConfig
from datamanager_lib.data.service import DataManager
from datamanager_lib.storage import StorageBackend, create_storage

logger = logging.getLogger(__name__)


def create_backend(config: StoreConfig) -> StorageBackend:
    return create_storage(
        backend=config.backend,
        data_dir=config.data_dir,
        serializer=config.serializer,
        sqlite_path=config.sqlite_path,
        enforce_foreign_keys=config.enforce_foreign_keys,
        cascade_deletes=config.cascade_group_delete,
    )


def bootstrap_data_manager(config: StoreConfig) -> DataManager:
    """Create the backend, wrap it in a DataManager and create all tables."""
    storage = create_backend(config)
    logger.info(
        "Using %s storage (foreign keys %s, cascade %s)",
        config.backend,
        "enforced" if config.enforce_foreign_keys else "not enforced",
        "on" if config.cascade_group_delete else "off",
    )
    manager = DataManager(storage, strict_decode=config.strict_decode)
    manager.setup()
    return manager
