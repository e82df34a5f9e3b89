"""Snapshot persistence."""

from __future__ import annotations

from distribution_service.storage.engine import create_storage_engine, get_engine, init_storage, session_scope
from distribution_service.storage.snapshot import SnapshotStorage

__all__ = ["SnapshotStorage", "create_storage_engine", "get_engine", "init_storage", "session_scope"]
