"""Entity repositories and the store that owns them."""

from distribution_service.repositories.base import Embed, Repository, same_id
from distribution_service.repositories.collections import build_repositories
from distribution_service.repositories.seed import build_seed_graph
from distribution_service.repositories.store import EntityStore

__all__ = ["Embed", "EntityStore", "Repository", "build_repositories", "build_seed_graph", "same_id"]
