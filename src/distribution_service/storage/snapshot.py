"""Versioned snapshot storage over namespaced key-value slots."""

from __future__ import annotations

import json
import time
from typing import Any

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import col, select

from distribution_service.config import get_settings
from distribution_service.logging import logger
from distribution_service.storage.engine import get_engine, init_storage, session_scope
from distribution_service.storage.models import StorageSlot, utc_now


class SnapshotStorage:
    """Save and load opaque documents tagged with the running schema version.

    Every write wraps the document in ``{"version", "timestamp", "data"}``.
    Reads that find a different version wipe every slot under the prefix and
    hand back the caller's default. Failures never escape: ``save`` reports
    them as ``False`` and ``load`` falls back to the default.
    """

    def __init__(
        self,
        engine: Engine | None = None,
        *,
        prefix: str | None = None,
        enabled: bool | None = None,
        quota_bytes: int | None = None,
        schema_version: str | None = None,
    ) -> None:
        settings = get_settings().storage
        self.prefix = settings.prefix if prefix is None else prefix
        self.enabled = settings.enabled if enabled is None else enabled
        self.quota_bytes = settings.quota_bytes if quota_bytes is None else quota_bytes
        self.schema_version = settings.schema_version if schema_version is None else schema_version
        self._engine = engine or get_engine()
        if self.enabled:
            init_storage(self._engine)

    def key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    def save(self, key: str, data: Any) -> bool:
        if not self.enabled:
            return False

        try:
            payload = json.dumps(
                {
                    "version": self.schema_version,
                    "timestamp": int(time.time() * 1000),
                    "data": data,
                }
            )
        except (TypeError, ValueError) as exc:
            logger.error("Snapshot serialization failed", key=key, error=str(exc))
            return False

        full_key = self.key(key)
        size = len(payload.encode("utf-8"))
        try:
            used = self._bytes_used(exclude=full_key)
            if used + size > self.quota_bytes:
                logger.error(
                    "Snapshot exceeds storage quota",
                    key=key,
                    size=size,
                    used=used,
                    quota=self.quota_bytes,
                )
                return False

            with session_scope(self._engine) as session:
                slot = session.get(StorageSlot, full_key)
                if slot is None:
                    slot = StorageSlot(slot_key=full_key, payload=payload)
                else:
                    slot.payload = payload
                    slot.saved_at = utc_now()
                session.add(slot)
        except SQLAlchemyError as exc:
            logger.error("Storage save error", key=key, error=str(exc))
            return False
        return True

    def load(self, key: str, default: Any = None) -> Any:
        if not self.enabled:
            return default

        try:
            with session_scope(self._engine) as session:
                slot = session.get(StorageSlot, self.key(key))
                raw = slot.payload if slot is not None else None
        except SQLAlchemyError as exc:
            logger.error("Storage load error", key=key, error=str(exc))
            return default

        if raw is None:
            return default

        try:
            envelope = json.loads(raw)
        except ValueError:
            logger.warning("Discarding corrupt storage slot", key=key)
            return default
        if not isinstance(envelope, dict) or "data" not in envelope:
            logger.warning("Discarding malformed storage slot", key=key)
            return default

        stored_version = envelope.get("version")
        if stored_version != self.schema_version:
            logger.warning(
                "Storage version mismatch, clearing old data",
                stored=stored_version,
                expected=self.schema_version,
            )
            self.clear_all()
            return default

        return envelope["data"]

    def remove(self, key: str) -> None:
        if not self.enabled:
            return
        try:
            with session_scope(self._engine) as session:
                slot = session.get(StorageSlot, self.key(key))
                if slot is not None:
                    session.delete(slot)
        except SQLAlchemyError as exc:
            logger.error("Storage remove error", key=key, error=str(exc))

    def exists(self, key: str) -> bool:
        if not self.enabled:
            return False
        try:
            with session_scope(self._engine) as session:
                return session.get(StorageSlot, self.key(key)) is not None
        except SQLAlchemyError as exc:
            logger.error("Storage lookup error", key=key, error=str(exc))
            return False

    def keys(self) -> list[str]:
        """Return the unprefixed keys of every slot in this namespace."""
        if not self.enabled:
            return []
        with session_scope(self._engine) as session:
            rows = session.exec(select(StorageSlot).where(self._in_namespace()))
            return sorted(row.slot_key[len(self.prefix):] for row in rows)

    def clear_all(self) -> int:
        if not self.enabled:
            return 0
        try:
            with session_scope(self._engine) as session:
                rows = list(session.exec(select(StorageSlot).where(self._in_namespace())))
                for row in rows:
                    session.delete(row)
        except SQLAlchemyError as exc:
            logger.error("Storage clear error", prefix=self.prefix, error=str(exc))
            return 0
        return len(rows)

    def usage(self) -> dict[str, int]:
        if not self.enabled:
            return {"used": 0, "total": 0}
        return {
            "used": round(self._bytes_used() / 1024),
            "total": round(self.quota_bytes / 1024),
        }

    def _in_namespace(self):
        return col(StorageSlot.slot_key).startswith(self.prefix, autoescape=True)

    def _bytes_used(self, exclude: str | None = None) -> int:
        with session_scope(self._engine) as session:
            rows = session.exec(select(StorageSlot).where(self._in_namespace()))
            return sum(
                len(row.payload.encode("utf-8"))
                for row in rows
                if row.slot_key != exclude
            )


__all__ = ["SnapshotStorage"]
