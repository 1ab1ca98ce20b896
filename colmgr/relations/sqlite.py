"""SQLite relationship store for persistent local repositories."""

import sqlite3
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from colmgr.core.models import RelationshipTriple

from .base import RelationshipStore


class SQLiteRelationshipStore(RelationshipStore):
    """SQLite-backed triple table.

    Rows keep an autoincrement id so insertion order survives round trips.
    """

    def __init__(self, db_path: Path | str):
        self.db_path = Path(db_path) if str(db_path) != ":memory:" else db_path
        self._lock = threading.RLock()
        self._transaction_active = threading.local()
        self.conn: sqlite3.Connection | None = sqlite3.connect(
            str(self.db_path), check_same_thread=False
        )
        self.connection.row_factory = sqlite3.Row
        self.initialize()

    @property
    def connection(self) -> sqlite3.Connection:
        """Get the connection, ensuring it exists."""
        if self.conn is None:
            raise RuntimeError("Database connection not initialized")
        return self.conn

    def initialize(self) -> None:
        """Create database schema."""
        self.connection.execute("PRAGMA journal_mode=WAL")
        self.connection.executescript("""
            CREATE TABLE IF NOT EXISTS triples (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                subject TEXT NOT NULL,
                predicate_uri TEXT NOT NULL,
                predicate_name TEXT NOT NULL,
                value TEXT NOT NULL,
                literal INTEGER NOT NULL DEFAULT 0
            );

            CREATE INDEX IF NOT EXISTS idx_triples_subject
                ON triples(subject, predicate_name);
            CREATE INDEX IF NOT EXISTS idx_triples_value
                ON triples(predicate_name, value);
        """)
        self.connection.commit()

    def match(
        self,
        subject: str | None = None,
        predicate_uri: str | None = None,
        predicate_name: str | None = None,
        value: str | None = None,
    ) -> list[RelationshipTriple]:
        """Find triples matching a pattern."""
        where_clause, params = self._where(
            subject=subject,
            predicate_uri=predicate_uri,
            predicate_name=predicate_name,
            value=value,
        )
        with self._lock:
            cursor = self.connection.execute(
                "SELECT subject, predicate_uri, predicate_name, value, literal "
                f"FROM triples WHERE {where_clause} ORDER BY id",
                params,
            )
            return [
                RelationshipTriple(
                    subject=row["subject"],
                    predicate_uri=row["predicate_uri"],
                    predicate_name=row["predicate_name"],
                    value=row["value"],
                    literal=bool(row["literal"]),
                )
                for row in cursor
            ]

    def _add(self, triple: RelationshipTriple) -> None:
        with self._lock:
            self.connection.execute(
                "INSERT INTO triples "
                "(subject, predicate_uri, predicate_name, value, literal) "
                "VALUES (?, ?, ?, ?, ?)",
                (
                    triple.subject,
                    triple.predicate_uri,
                    triple.predicate_name,
                    triple.value,
                    int(triple.literal),
                ),
            )
            self._maybe_commit()

    def _remove(
        self,
        subject: str,
        predicate_uri: str,
        predicate_name: str,
        value: str | None,
    ) -> int:
        where_clause, params = self._where(
            subject=subject,
            predicate_uri=predicate_uri,
            predicate_name=predicate_name,
            value=value,
        )
        with self._lock:
            cursor = self.connection.execute(
                f"DELETE FROM triples WHERE {where_clause}", params
            )
            self._maybe_commit()
            return cursor.rowcount

    def exists(self, subject: str) -> bool:
        """Check whether any triple has this subject."""
        with self._lock:
            cursor = self.connection.execute(
                "SELECT 1 FROM triples WHERE subject = ? LIMIT 1", (subject,)
            )
            return cursor.fetchone() is not None

    def subjects(self) -> list[str]:
        """Get all distinct subjects in insertion order."""
        with self._lock:
            cursor = self.connection.execute(
                "SELECT subject FROM triples GROUP BY subject ORDER BY MIN(id)"
            )
            return [row["subject"] for row in cursor]

    def purge(self, subject: str) -> int:
        """Remove every triple of a subject."""
        with self._lock:
            cursor = self.connection.execute(
                "DELETE FROM triples WHERE subject = ?", (subject,)
            )
            self._maybe_commit()
            return cursor.rowcount

    def close(self) -> None:
        """Close database connection."""
        if self.conn:
            self.connection.close()
            self.conn = None

    def supports_transactions(self) -> bool:
        """SQLite supports transactions."""
        return True

    @contextmanager
    def begin_transaction(self) -> Iterator[None]:
        """Transaction context manager."""
        with self._lock:
            self._transaction_active.active = True
            in_transaction = self.connection.in_transaction

            if not in_transaction:
                self.connection.execute("BEGIN")

            try:
                yield
                if not in_transaction:
                    self.connection.commit()
            except Exception:
                if not in_transaction:
                    self.connection.rollback()
                raise
            finally:
                self._transaction_active.active = False

    def count(self) -> int:
        """Get the number of stored triples."""
        with self._lock:
            cursor = self.connection.execute("SELECT COUNT(*) AS count FROM triples")
            return cursor.fetchone()["count"]

    def _maybe_commit(self) -> None:
        if not getattr(self._transaction_active, "active", False):
            self.connection.commit()

    @staticmethod
    def _where(**filters: str | None) -> tuple[str, list[str]]:
        """Build a WHERE clause from the non-None filters."""
        conditions = []
        params = []
        for column, value in filters.items():
            if value is not None:
                conditions.append(f"{column} = ?")
                params.append(value)
        return (" AND ".join(conditions) if conditions else "1=1"), params
