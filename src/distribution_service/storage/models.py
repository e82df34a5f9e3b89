"""Durable key-value slot table."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, Text
from sqlmodel import Field, SQLModel


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class StorageSlot(SQLModel, table=True):
    """One namespaced slot holding a serialized JSON envelope."""

    __tablename__ = "storage_slot"

    slot_key: str = Field(primary_key=True)
    payload: str = Field(sa_column=Column(Text, nullable=False))
    saved_at: datetime = Field(default_factory=utc_now)
