"""In-memory relationship store for testing and lightweight scenarios."""

from contextlib import contextmanager

from colmgr.core.models import RelationshipTriple

from .base import RelationshipStore


class MemoryRelationshipStore(RelationshipStore):
    """In-memory triple list with snapshot transactions."""

    def __init__(self):
        self._triples: list[RelationshipTriple] = []
        self._transaction_triples: list[RelationshipTriple] | None = None
        self._in_transaction = False

    def match(
        self,
        subject: str | None = None,
        predicate_uri: str | None = None,
        predicate_name: str | None = None,
        value: str | None = None,
    ) -> list[RelationshipTriple]:
        """Find triples matching a pattern."""
        return [
            t
            for t in self._get_triples()
            if (subject is None or t.subject == subject)
            and (predicate_uri is None or t.predicate_uri == predicate_uri)
            and (predicate_name is None or t.predicate_name == predicate_name)
            and (value is None or t.value == value)
        ]

    def _add(self, triple: RelationshipTriple) -> None:
        self._get_triples().append(triple)

    def _remove(
        self,
        subject: str,
        predicate_uri: str,
        predicate_name: str,
        value: str | None,
    ) -> int:
        triples = self._get_triples()
        kept = [
            t
            for t in triples
            if not (
                t.subject == subject
                and t.predicate_uri == predicate_uri
                and t.predicate_name == predicate_name
                and (value is None or t.value == value)
            )
        ]
        removed = len(triples) - len(kept)
        triples[:] = kept
        return removed

    def exists(self, subject: str) -> bool:
        """Check whether any triple has this subject."""
        return any(t.subject == subject for t in self._get_triples())

    def subjects(self) -> list[str]:
        """Get all distinct subjects in insertion order."""
        return list(dict.fromkeys(t.subject for t in self._get_triples()))

    def purge(self, subject: str) -> int:
        """Remove every triple of a subject."""
        triples = self._get_triples()
        kept = [t for t in triples if t.subject != subject]
        removed = len(triples) - len(kept)
        triples[:] = kept
        return removed

    def close(self) -> None:
        """Close store (no-op for memory)."""
        pass

    def supports_transactions(self) -> bool:
        """Memory store supports transactions."""
        return True

    @contextmanager
    def begin_transaction(self):
        """Begin a transaction."""
        if self._in_transaction:
            raise RuntimeError("Already in a transaction")

        self._in_transaction = True
        self._transaction_triples = list(self._triples)

        try:
            yield
            self._commit()
        except Exception:
            self._rollback()
            raise

    def _get_triples(self) -> list[RelationshipTriple]:
        """Get the active triple list."""
        if self._in_transaction and self._transaction_triples is not None:
            return self._transaction_triples
        return self._triples

    def _commit(self) -> None:
        """Commit the transaction."""
        if self._transaction_triples is not None:
            self._triples = self._transaction_triples
        self._transaction_triples = None
        self._in_transaction = False

    def _rollback(self) -> None:
        """Rollback the transaction."""
        self._transaction_triples = None
        self._in_transaction = False

    def __len__(self) -> int:
        return len(self._triples)
