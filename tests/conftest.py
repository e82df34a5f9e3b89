from __future__ import annotations

import pytest

from distribution_service.config import get_settings
from distribution_service.dispatcher import DataService
from distribution_service.repositories import EntityStore
from distribution_service.storage import SnapshotStorage, create_storage_engine


@pytest.fixture(autouse=True)
def clear_settings_cache(monkeypatch):
    monkeypatch.setenv("STORAGE_URL", "sqlite://")
    monkeypatch.setenv("READ_LATENCY_MS", "0")
    monkeypatch.setenv("WRITE_LATENCY_MS", "0")
    monkeypatch.setenv("UPDATE_LATENCY_MS", "0")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def settings():
    return get_settings()


@pytest.fixture
def engine():
    engine = create_storage_engine("sqlite://")
    yield engine
    engine.dispose()


@pytest.fixture
def storage(engine):
    return SnapshotStorage(engine, prefix="tm_", schema_version="1.0")


@pytest.fixture
def store(storage):
    return EntityStore(storage)


@pytest.fixture
def service(store, settings, storage):
    return DataService(store, settings=settings, storage=storage)
