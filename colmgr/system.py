"""Integrated system wiring stores, backends and managers from configuration.

Provides a unified interface for:
- Object creation and lookup
- Collection membership changes
- Member listings and collection search
"""

from __future__ import annotations

import logging

from colmgr.collections.lister import CollectionLister
from colmgr.collections.membership import MembershipManager
from colmgr.config import ColmgrConfig
from colmgr.query.base import QueryBackend
from colmgr.query.local import LocalQueryBackend
from colmgr.query.sparql import SparqlQueryBackend
from colmgr.relations.base import RelationshipStore
from colmgr.relations.memory import MemoryRelationshipStore
from colmgr.relations.sqlite import SQLiteRelationshipStore
from colmgr.repository import ObjectRepository

logger = logging.getLogger(__name__)


def create_store(config: ColmgrConfig) -> RelationshipStore:
    """Create the relationship store named by the configuration."""
    if config.store == "memory":
        return MemoryRelationshipStore()

    storage_path = config.storage_path()
    storage_path.mkdir(parents=True, exist_ok=True)
    return SQLiteRelationshipStore(storage_path / "relations.db")


def create_query_backend(
    config: ColmgrConfig, store: RelationshipStore
) -> QueryBackend:
    """Create the query backend named by the configuration.

    The SPARQL backend reads from a remote resource index, while membership
    changes are written to the local store. Changes only show up in listings
    once the remote index has them.
    """
    if config.query_backend == "sparql":
        logger.warning(
            f"Listings and search read from {config.sparql_endpoint}; changes "
            f"written to the local {config.store} store will not appear there"
        )
        return SparqlQueryBackend(config.sparql_endpoint, timeout=config.sparql_timeout)
    return LocalQueryBackend(store)


class CollectionSystem:
    """Complete collection system integrating all components.

    Objects and membership always live in the relationship store. Listings
    and search go through the query backend, which only sees those changes
    when it is the local backend over the same store.
    """

    def __init__(
        self,
        config: ColmgrConfig | None = None,
        store: RelationshipStore | None = None,
        backend: QueryBackend | None = None,
    ):
        """Initialize collection system.

        Args:
            config: Settings; defaults apply when omitted
            store: Relationship store; created from config when omitted
            backend: Query backend; created from config when omitted
        """
        self.config = config or ColmgrConfig()
        self.store = store if store is not None else create_store(self.config)
        self.backend = (
            backend
            if backend is not None
            else create_query_backend(self.config, self.store)
        )

        self.objects = ObjectRepository(self.store)
        self.membership = MembershipManager(self.store)
        self.lister = CollectionLister(self.backend, self.config)

        logger.debug(
            f"Collection system ready (store={self.config.store}, "
            f"query_backend={self.config.query_backend})"
        )

    def close(self) -> None:
        """Close the backend and store."""
        self.backend.close()
        self.store.close()

    def __enter__(self) -> CollectionSystem:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
