"""Repository objects stored as property triples.

Object properties (label, owner, state, content models and the last
modification time) live in the same relationship store as membership, under
the ``fedora-model`` and ``fedora-view`` namespaces, so the query backends
can join them in a single query.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime, timezone

from colmgr.core.exceptions import InvalidArgument, NotFound
from colmgr.core.models import RepositoryObject, parse_timestamp
from colmgr.core.pids import validate_pid
from colmgr.core.vocabulary import (
    COLLECTION_CONTENT_MODEL,
    FEDORA_MODEL_URI,
    FEDORA_VIEW_URI,
    HAS_MODEL,
    LABEL,
    LAST_MODIFIED_DATE,
    OWNER_ID,
    STATE,
    ObjectState,
)
from colmgr.relations.base import RelationshipStore

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    """Current UTC time truncated to milliseconds."""
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=(now.microsecond // 1000) * 1000)


def format_timestamp(value: datetime) -> str:
    """Format a timestamp the way the resource index stores it."""
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


class ObjectRepository:
    """Creates, reads and purges repository objects."""

    def __init__(self, store: RelationshipStore):
        """Initialize with the relationship store holding object triples.

        Args:
            store: Relationship store
        """
        self.store = store

    def create_object(
        self,
        pid: str,
        label: str,
        owner: str | None = None,
        models: Iterable[str] = (),
        state: ObjectState | str = ObjectState.ACTIVE,
    ) -> RepositoryObject:
        """Create a new repository object.

        Args:
            pid: Object PID
            label: Object label
            owner: Optional owner ID
            models: Content model PIDs
            state: Initial object state

        Returns:
            Created object

        Raises:
            InvalidArgument: If the PID is malformed or already in use
        """
        pid = validate_pid(pid)
        if self.store.exists(pid):
            raise InvalidArgument("pid", f"object {pid} already exists")
        if isinstance(state, str):
            state = ObjectState.from_value(state)
        models = [validate_pid(model) for model in models]

        with self.store.begin_transaction():
            self.store.add(pid, FEDORA_MODEL_URI, LABEL, label, literal=True)
            if owner:
                self.store.add(pid, FEDORA_MODEL_URI, OWNER_ID, owner, literal=True)
            self.store.add(pid, FEDORA_MODEL_URI, STATE, state.uri)
            for model in models:
                self.store.add(pid, FEDORA_MODEL_URI, HAS_MODEL, model)
            self._set_modified(pid, utcnow())

        logger.info(f"Created object {pid}")
        return self.get_object(pid)

    def get_object(self, pid: str) -> RepositoryObject:
        """Load an object from its triples.

        An object without a state triple has no state. Listings in view
        mode only show objects whose state is explicitly Active.

        Raises:
            NotFound: If no triples exist for the PID
        """
        pid = validate_pid(pid)
        triples = self.store.match(subject=pid)
        if not triples:
            raise NotFound(pid)

        properties: dict[str, list[str]] = {}
        for triple in triples:
            properties.setdefault(triple.predicate, []).append(triple.value)

        def first(namespace: str, name: str) -> str | None:
            values = properties.get(namespace + name)
            return values[0] if values else None

        state = first(FEDORA_MODEL_URI, STATE)
        return RepositoryObject(
            pid=pid,
            label=first(FEDORA_MODEL_URI, LABEL),
            owner=first(FEDORA_MODEL_URI, OWNER_ID),
            models=tuple(properties.get(FEDORA_MODEL_URI + HAS_MODEL, [])),
            state=ObjectState.from_value(state).value if state else None,
            modified=parse_timestamp(first(FEDORA_VIEW_URI, LAST_MODIFIED_DATE)),
        )

    def exists(self, pid: str) -> bool:
        """Check whether an object exists."""
        return self.store.exists(validate_pid(pid))

    def is_collection(self, pid: str) -> bool:
        """Check whether an object has the collection content model."""
        return bool(
            self.store.get(pid, FEDORA_MODEL_URI, HAS_MODEL, COLLECTION_CONTENT_MODEL)
        )

    def set_label(self, pid: str, label: str) -> RepositoryObject:
        """Replace an object's label."""
        pid = self._require(pid)
        with self.store.begin_transaction():
            self.store.remove(pid, FEDORA_MODEL_URI, LABEL)
            self.store.add(pid, FEDORA_MODEL_URI, LABEL, label, literal=True)
            self._set_modified(pid, utcnow())
        return self.get_object(pid)

    def set_state(self, pid: str, state: ObjectState | str) -> RepositoryObject:
        """Change an object's lifecycle state."""
        pid = self._require(pid)
        if isinstance(state, str):
            state = ObjectState.from_value(state)
        with self.store.begin_transaction():
            self.store.remove(pid, FEDORA_MODEL_URI, STATE)
            self.store.add(pid, FEDORA_MODEL_URI, STATE, state.uri)
            self._set_modified(pid, utcnow())
        return self.get_object(pid)

    def touch(self, pid: str, when: datetime | None = None) -> None:
        """Record a modification of an object."""
        self._set_modified(validate_pid(pid), when or utcnow())

    def purge_object(self, pid: str) -> None:
        """Delete an object and all of its outgoing triples.

        Raises:
            NotFound: If the object does not exist
        """
        pid = self._require(pid)
        removed = self.store.purge(pid)
        logger.info(f"Purged object {pid} ({removed} triples)")

    def _require(self, pid: str) -> str:
        pid = validate_pid(pid)
        if not self.store.exists(pid):
            raise NotFound(pid)
        return pid

    def _set_modified(self, pid: str, when: datetime) -> None:
        self.store.remove(pid, FEDORA_VIEW_URI, LAST_MODIFIED_DATE)
        self.store.add(
            pid,
            FEDORA_VIEW_URI,
            LAST_MODIFIED_DATE,
            format_timestamp(when),
            literal=True,
        )
