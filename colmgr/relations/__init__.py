"""Pluggable relationship stores.

Provides unified interface for reading and writing relationship triples:

- **MemoryRelationshipStore**: In-memory triples for testing
- **SQLiteRelationshipStore**: Embedded database with insertion ordering

All stores support pattern matching and transactions. ``store.for_object``
returns an accessor bound to one repository object.
"""

from .base import ObjectRelationships, RelationshipStore
from .memory import MemoryRelationshipStore
from .sqlite import SQLiteRelationshipStore

__all__ = [
    "RelationshipStore",
    "ObjectRelationships",
    "MemoryRelationshipStore",
    "SQLiteRelationshipStore",
]
