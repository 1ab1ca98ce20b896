"""Collection membership management.

This module implements:
- Idempotent add/remove of collection membership relations
- Parent collection discovery across current and legacy predicates
- Sharing and migrating members between collections
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from colmgr.core.exceptions import NotFound
from colmgr.core.models import RepositoryObject
from colmgr.core.pids import validate_pid
from colmgr.core.vocabulary import (
    FEDORA_RELS_EXT_URI,
    IS_MEMBER_OF_COLLECTION,
    MEMBERSHIP_PREDICATES,
)
from colmgr.relations.base import ObjectRelationships, RelationshipStore
from colmgr.repository import ObjectRepository

logger = logging.getLogger(__name__)

ObjectRef = RepositoryObject | str


def pid_of(obj: ObjectRef) -> str:
    """Get a validated PID from an object or a PID string."""
    if isinstance(obj, RepositoryObject):
        return validate_pid(obj.id)
    return validate_pid(obj)


def _stored_values(
    relations: ObjectRelationships, predicate: str, collection_pid: str
) -> set[str]:
    """Stored membership targets that name a collection, ignoring padding."""
    return {
        value
        for value in relations.values(FEDORA_RELS_EXT_URI, predicate)
        if value.strip() == collection_pid
    }


class MembershipManager:
    """Manages isMemberOfCollection relations between objects and collections."""

    def __init__(self, store: RelationshipStore):
        """Initialize membership manager.

        Args:
            store: Relationship store holding the objects' triples
        """
        self.store = store
        self.objects = ObjectRepository(store)

    def add_to_collection(self, member: ObjectRef, collection: ObjectRef) -> bool:
        """Make an object a member of a collection.

        Calling this again for the same pair leaves a single relation.

        Args:
            member: Object to add
            collection: Target collection

        Returns:
            True if a relation was added, False if it already existed

        Raises:
            InvalidArgument: If either PID is malformed
            NotFound: If either object does not exist
        """
        member_pid, collection_pid = self._resolve(member, collection)
        return self._add(member_pid, collection_pid)

    def remove_from_collection(self, member: ObjectRef, collection: ObjectRef) -> bool:
        """Remove an object from a collection.

        Both the current and the legacy ``isMemberOf`` predicate are cleared,
        since objects may have been linked under either. Removing a relation
        that does not exist succeeds. The collection itself need not exist,
        so links to a purged collection can still be cleared.

        Returns:
            True if any relation was removed

        Raises:
            InvalidArgument: If either PID is malformed
            NotFound: If the member does not exist
        """
        member_pid = self._require(pid_of(member))
        collection_pid = pid_of(collection)
        return self._remove(member_pid, collection_pid)

    def is_member(self, member: ObjectRef, collection: ObjectRef) -> bool:
        """Check whether an object belongs to a collection under any predicate."""
        return pid_of(collection) in self.get_parent_pids(member)

    def get_parent_pids(self, obj: ObjectRef) -> list[str]:
        """Get the collections an object belongs to.

        Returns:
            Deduplicated, non-blank parent PIDs; isMemberOfCollection
            targets come first
        """
        relations = self.store.for_object(pid_of(obj))
        parents: dict[str, None] = {}
        for predicate in MEMBERSHIP_PREDICATES:
            for value in relations.values(FEDORA_RELS_EXT_URI, predicate):
                value = value.strip() if value else ""
                if value:
                    parents.setdefault(value, None)
        return list(parents)

    def get_other_parents(
        self, obj: ObjectRef, excluded_parent: ObjectRef
    ) -> list[str]:
        """Get an object's parents other than one collection.

        An excluded parent the object does not belong to is ignored.
        """
        excluded = pid_of(excluded_parent)
        return [pid for pid in self.get_parent_pids(obj) if pid != excluded]

    def migrate(
        self, member: ObjectRef, source: ObjectRef, target: ObjectRef
    ) -> bool:
        """Move an object from one collection to another.

        The source collection need not exist; the target must.

        Returns:
            True if the membership changed
        """
        member_pid = self._require(pid_of(member))
        source_pid = pid_of(source)
        target_pid = self._require(pid_of(target))
        with self.store.begin_transaction():
            changed = self._migrate(member_pid, source_pid, target_pid)
        return changed

    def share_members(self, members: Iterable[ObjectRef], target: ObjectRef) -> int:
        """Add several objects to an additional collection.

        Returns:
            Number of relations added
        """
        target_pid = self._require(pid_of(target))
        member_pids = [self._require(pid_of(m)) for m in members]
        added = 0
        with self.store.begin_transaction():
            for member_pid in member_pids:
                if self._add(member_pid, target_pid):
                    added += 1
        logger.info(f"Shared {added} of {len(member_pids)} objects with {target_pid}")
        return added

    def migrate_members(
        self, members: Iterable[ObjectRef], source: ObjectRef, target: ObjectRef
    ) -> int:
        """Move several objects from one collection to another.

        Returns:
            Number of objects whose membership changed
        """
        source_pid = pid_of(source)
        target_pid = self._require(pid_of(target))
        member_pids = [self._require(pid_of(m)) for m in members]
        moved = 0
        with self.store.begin_transaction():
            for member_pid in member_pids:
                if self._migrate(member_pid, source_pid, target_pid):
                    moved += 1
        logger.info(
            f"Migrated {moved} of {len(member_pids)} objects "
            f"from {source_pid} to {target_pid}"
        )
        return moved

    def _add(self, member_pid: str, collection_pid: str) -> bool:
        relations = self.store.for_object(member_pid)
        if _stored_values(relations, IS_MEMBER_OF_COLLECTION, collection_pid):
            logger.debug(f"{member_pid} already in {collection_pid}")
            return False
        relations.add(FEDORA_RELS_EXT_URI, IS_MEMBER_OF_COLLECTION, collection_pid)
        self.objects.touch(member_pid)
        logger.info(f"Added {member_pid} to collection {collection_pid}")
        return True

    def _remove(self, member_pid: str, collection_pid: str) -> bool:
        relations = self.store.for_object(member_pid)
        removed = 0
        for predicate in MEMBERSHIP_PREDICATES:
            for value in _stored_values(relations, predicate, collection_pid):
                removed += relations.remove(FEDORA_RELS_EXT_URI, predicate, value)
        if not removed:
            logger.debug(f"{member_pid} not in {collection_pid}")
            return False
        self.objects.touch(member_pid)
        logger.info(f"Removed {member_pid} from collection {collection_pid}")
        return True

    def _migrate(self, member_pid: str, source_pid: str, target_pid: str) -> bool:
        if source_pid == target_pid:
            return False
        added = self._add(member_pid, target_pid)
        removed = self._remove(member_pid, source_pid)
        return added or removed

    def _resolve(self, member: ObjectRef, collection: ObjectRef) -> tuple[str, str]:
        member_pid = pid_of(member)
        collection_pid = pid_of(collection)
        return self._require(member_pid), self._require(collection_pid)

    def _require(self, pid: str) -> str:
        if not self.store.exists(pid):
            raise NotFound(pid)
        return pid
