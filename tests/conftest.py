"""Pytest configuration helpers for test collection.

Ensure the project root is on sys.path so tests can import the package
without requiring PYTHONPATH to be set externally, and provide shared
storage and app fixtures.
"""
import sys
from pathlib import Path

import pytest


def pytest_configure(config):
    # Insert repo root (one level up from tests/) to sys.path
    repo_root = Path(__file__).resolve().parents[1]
    sys.path.insert(0, str(repo_root))


@pytest.fixture(params=["memory", "file", "file-json", "sqlite"])
def storage(request, tmp_path):
    from tests.helpers import make_storage

    s = make_storage(request.param, tmp_path)
    yield s
    s.close()


@pytest.fixture
def manager(storage):
    from datamanager_lib.data import DataManager

    dm = DataManager(storage)
    dm.setup()
    return dm


@pytest.fixture
def client(tmp_path):
    from fastapi.testclient import TestClient
    from datamanager_lib.config.config import StoreConfig
    from datamanager_lib.main import create_app

    app = create_app(StoreConfig(backend="memory"), config_path=tmp_path / "datamanager.yml")
    with TestClient(app) as c:
        yield c
