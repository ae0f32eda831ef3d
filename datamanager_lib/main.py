"""Application factory for the DataManager FastAPI app.

This module exposes `create_app(config: StoreConfig) -> FastAPI` which
performs all setup (logging, storage composition, table creation and router
registration). Avoids performing side-effects at import time so tests can
construct isolated apps.

To create an app for production or local runs:

    from datamanager_lib.main import create_app
    from datamanager_lib.config.config import load_config
    app = create_app(load_config())
"""
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI

from datamanager_lib.bootstrap import bootstrap_data_manager
from datamanager_lib.config.config import StoreConfig, load_config
from datamanager_lib.logging_config import configure_logging
from datamanager_lib.services import ServiceContainer


def create_app(config: Optional[StoreConfig] = None, config_path: Optional[Path] = None) -> FastAPI:
    """Create and return a configured FastAPI application.

    Without `config` the store configuration is loaded from `config_path`
    (default `data/config/datamanager.yml`). The log level always comes
    from the effective configuration.
    """
    if config is None:
        config = load_config(config_path)
    logger = configure_logging(config_path, log_level=config.log_level)

    data_manager = bootstrap_data_manager(config)

    container = ServiceContainer()
    container.register_singleton("config", config)
    container.register_singleton("storage", data_manager.storage)
    container.register_singleton("data_manager", data_manager)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        logger.info("Shutting down DataManager; closing storage")
        container.close()

    app = FastAPI(title="DataManager", lifespan=lifespan)
    # Runtime code resolves services from this container.
    app.state.container = container

    # Router registration: import routers here to avoid import-time side-effects
    from datamanager_lib.data.api import router as data_router
    from datamanager_lib.server.api import router as server_router

    app.include_router(data_router, prefix='/api')
    app.include_router(server_router, prefix='/api')

    return app
