"""The entity store: every repository plus whole-graph persistence."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator, Mapping, Optional

from pydantic import ValidationError

from distribution_service.logging import logger
from distribution_service.repositories.base import Repository
from distribution_service.repositories.collections import build_repositories
from distribution_service.repositories.seed import build_seed_graph
from distribution_service.storage import SnapshotStorage


class EntityStore:
    """Owns all collections and writes the entire graph after each mutation.

    Passed explicitly to the dispatcher; there is no module-level store.
    """

    STORE_KEY = "store"

    def __init__(self, storage: Optional[SnapshotStorage] = None, graph: Optional[Mapping[str, Any]] = None):
        self.storage = storage
        self._repositories = build_repositories()
        for repository in self._repositories.values():
            repository.bind(self)
        self._deferred = 0
        self._dirty = False
        self.load_graph(graph if graph is not None else build_seed_graph())

    @classmethod
    def from_graph(cls, graph: Mapping[str, Any], storage: Optional[SnapshotStorage] = None) -> "EntityStore":
        return cls(storage, graph)

    @classmethod
    def open(cls, storage: SnapshotStorage, default: Optional[Mapping[str, Any]] = None) -> "EntityStore":
        """Build a store from the persisted graph, or from ``default`` when none is usable."""
        default_graph = default if default is not None else build_seed_graph()
        graph = storage.load(cls.STORE_KEY, default_graph)
        try:
            return cls(storage, graph)
        except (ValidationError, TypeError, AttributeError) as exc:
            logger.warning("Persisted graph is unusable, starting from defaults", error=str(exc))
            return cls(storage, default_graph)

    def __getattr__(self, name: str) -> Repository:
        repositories = self.__dict__.get("_repositories", {})
        if name in repositories:
            return repositories[name]
        raise AttributeError(name)

    def repository(self, name: str) -> Repository:
        return self._repositories[name]

    # Graph I/O

    def to_graph(self) -> dict[str, Any]:
        exported = {name: repo.export() for name, repo in self._repositories.items()}
        return {
            "collections": {name: data["records"] for name, data in exported.items()},
            "next_ids": {name: data["next_id"] for name, data in exported.items()},
        }

    def load_graph(self, graph: Mapping[str, Any]) -> None:
        collections = graph.get("collections") or {}
        next_ids = graph.get("next_ids") or {}
        for name, repository in self._repositories.items():
            repository.load(collections.get(name) or [], next_ids.get(name))

    def persist(self) -> bool:
        if self._deferred:
            self._dirty = True
            return True
        if self.storage is None:
            return False
        saved = self.storage.save(self.STORE_KEY, self.to_graph())
        if not saved:
            logger.warning("Store snapshot was not persisted; continuing in memory")
        return saved

    def reset(self, graph: Optional[Mapping[str, Any]] = None) -> None:
        self.load_graph(graph if graph is not None else build_seed_graph())
        self.persist()

    @contextmanager
    def unit_of_work(self) -> Iterator["EntityStore"]:
        """Group several mutations: one write on success, in-memory rollback on error."""
        backup = self.to_graph()
        self._deferred += 1
        try:
            yield self
        except Exception:
            self._deferred -= 1
            self.load_graph(backup)
            if not self._deferred:
                self._dirty = False
            raise
        self._deferred -= 1
        if not self._deferred and self._dirty:
            self._dirty = False
            self.persist()


__all__ = ["EntityStore"]
