"""Base relationship store interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager

from colmgr.core.models import RelationshipTriple
from colmgr.core.pids import validate_pid
from colmgr.core.vocabulary import resolve_namespace


class RelationshipStore(ABC):
    """Abstract store of relationship triples keyed by subject PID.

    Triples are kept in insertion order and duplicates are allowed;
    callers that need uniqueness check before adding.
    """

    @abstractmethod
    def match(
        self,
        subject: str | None = None,
        predicate_uri: str | None = None,
        predicate_name: str | None = None,
        value: str | None = None,
    ) -> list[RelationshipTriple]:
        """Find triples matching a pattern.

        Args:
            subject: Subject PID, or None for any
            predicate_uri: Full namespace URI, or None for any
            predicate_name: Predicate name, or None for any
            value: Object value, or None for any

        Returns:
            Matching triples in insertion order
        """
        pass

    @abstractmethod
    def _add(self, triple: RelationshipTriple) -> None:
        """Append a triple."""
        pass

    @abstractmethod
    def _remove(
        self,
        subject: str,
        predicate_uri: str,
        predicate_name: str,
        value: str | None,
    ) -> int:
        """Remove matching triples and return how many were removed."""
        pass

    @abstractmethod
    def exists(self, subject: str) -> bool:
        """Check whether any triple has this subject."""
        pass

    @abstractmethod
    def subjects(self) -> list[str]:
        """Get all distinct subjects in insertion order."""
        pass

    @abstractmethod
    def purge(self, subject: str) -> int:
        """Remove every triple of a subject."""
        pass

    @abstractmethod
    def close(self) -> None:
        """Release store resources."""
        pass

    def add(
        self,
        subject: str,
        predicate_uri: str,
        predicate_name: str,
        value: str,
        literal: bool = False,
    ) -> None:
        """Add a relationship triple.

        Args:
            subject: Subject PID
            predicate_uri: Namespace URI or alias
            predicate_name: Predicate name
            value: Target PID or literal
            literal: Whether the value is a plain literal
        """
        self._add(
            RelationshipTriple(
                subject=validate_pid(subject),
                predicate_uri=resolve_namespace(predicate_uri),
                predicate_name=predicate_name,
                value=value,
                literal=literal,
            )
        )

    def remove(
        self,
        subject: str,
        predicate_uri: str,
        predicate_name: str,
        value: str | None = None,
    ) -> int:
        """Remove relationship triples.

        Removing a relationship that does not exist is a no-op.

        Args:
            subject: Subject PID
            predicate_uri: Namespace URI or alias
            predicate_name: Predicate name
            value: Target value, or None to remove all values

        Returns:
            Number of triples removed
        """
        return self._remove(
            validate_pid(subject),
            resolve_namespace(predicate_uri),
            predicate_name,
            value,
        )

    def get(
        self,
        subject: str,
        predicate_uri: str,
        predicate_name: str,
        value: str | None = None,
    ) -> list[RelationshipTriple]:
        """Get relationships of a subject, optionally filtered by value."""
        return self.match(
            subject=validate_pid(subject),
            predicate_uri=resolve_namespace(predicate_uri),
            predicate_name=predicate_name,
            value=value,
        )

    def for_object(self, pid: str) -> ObjectRelationships:
        """Get an accessor bound to one object."""
        return ObjectRelationships(self, pid)

    def supports_transactions(self) -> bool:
        """Check if store supports transactions."""
        return False

    @contextmanager
    def begin_transaction(self) -> Iterator[None]:
        """Begin a transaction (if supported)."""
        yield

    def __enter__(self) -> RelationshipStore:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class ObjectRelationships:
    """Relationship accessor for a single repository object."""

    def __init__(self, store: RelationshipStore, pid: str):
        self.store = store
        self.pid = validate_pid(pid)

    def get(
        self, predicate_uri: str, predicate_name: str, value: str | None = None
    ) -> list[RelationshipTriple]:
        """Get triples of a predicate, optionally only those with a value."""
        return self.store.get(self.pid, predicate_uri, predicate_name, value)

    def add(
        self,
        predicate_uri: str,
        predicate_name: str,
        value: str,
        literal: bool = False,
    ) -> None:
        """Add a triple without checking for duplicates."""
        self.store.add(self.pid, predicate_uri, predicate_name, value, literal)

    def remove(
        self, predicate_uri: str, predicate_name: str, value: str | None = None
    ) -> int:
        """Remove matching triples; absent triples are ignored."""
        return self.store.remove(self.pid, predicate_uri, predicate_name, value)

    def values(self, predicate_uri: str, predicate_name: str) -> list[str]:
        """Get the target values of a predicate."""
        return [t.value for t in self.get(predicate_uri, predicate_name)]

    def __repr__(self) -> str:
        return f"ObjectRelationships({self.pid!r})"
