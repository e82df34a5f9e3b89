"""Factory wiring storage, the entity store and the dispatcher together."""

from __future__ import annotations

from typing import Optional

from sqlalchemy.engine import Engine

from distribution_service import __version__
from distribution_service.config import Settings, get_settings
from distribution_service.dispatcher import DataService
from distribution_service.logging import configure_logging, logger
from distribution_service.repositories import EntityStore
from distribution_service.storage import SnapshotStorage, create_storage_engine


def create_storage(settings: Settings, engine: Optional[Engine] = None) -> SnapshotStorage:
    storage_settings = settings.storage
    return SnapshotStorage(
        engine or create_storage_engine(storage_settings.url),
        prefix=storage_settings.prefix,
        enabled=storage_settings.enabled,
        quota_bytes=storage_settings.quota_bytes,
        schema_version=storage_settings.schema_version,
    )


def create_service(settings: Optional[Settings] = None, engine: Optional[Engine] = None) -> DataService:
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    storage = create_storage(settings, engine)
    store = EntityStore.open(storage)
    logger.info(
        "Data service ready",
        app=settings.app_name,
        version=__version__,
        schema_version=settings.storage.schema_version,
    )
    return DataService(store, settings=settings, storage=storage)


__all__ = ["create_service", "create_storage"]
