"""Storage engine helpers using SQLModel."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from distribution_service.config import get_settings

_engine: Engine | None = None


def create_storage_engine(url: str) -> Engine:
    if url.startswith("sqlite"):
        options: dict = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            # one shared connection, otherwise every session sees an empty database
            options["poolclass"] = StaticPool
        return create_engine(url, **options)
    return create_engine(url)


def get_engine() -> Engine:
    global _engine
    if _engine is None:
        settings = get_settings()
        _engine = create_storage_engine(settings.storage.url)
    return _engine


def init_storage(engine: Engine | None = None) -> None:
    SQLModel.metadata.create_all(engine or get_engine())


@contextmanager
def session_scope(engine: Engine | None = None) -> Iterator[Session]:
    session = Session(engine or get_engine())
    try:
        yield session
        session.commit()
    except Exception:  # pragma: no cover - re-raised upstream
        session.rollback()
        raise
    finally:
        session.close()
