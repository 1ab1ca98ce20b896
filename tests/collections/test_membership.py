"""Tests for collection membership management."""

from datetime import datetime, timezone

import pytest

from colmgr.core.exceptions import InvalidArgument, NotFound
from colmgr.core.vocabulary import FEDORA_RELS_EXT_URI


def member_triples(store, member, collection, predicate="isMemberOfCollection"):
    return store.get(member, FEDORA_RELS_EXT_URI, predicate, collection)


class TestAddToCollection:
    """Test adding members."""

    def test_add(self, repository, membership, store):
        """Adding creates an isMemberOfCollection triple."""
        assert membership.add_to_collection("test:item1", "test:1") is True
        assert len(member_triples(store, "test:item1", "test:1")) == 1

    def test_add_twice_is_idempotent(self, repository, membership, store):
        """A second add leaves exactly one triple."""
        membership.add_to_collection("test:item1", "test:1")
        assert membership.add_to_collection("test:item1", "test:1") is False

        assert len(member_triples(store, "test:item1", "test:1")) == 1

    def test_accepts_objects(self, repository, membership):
        """Repository objects can be passed instead of PIDs."""
        member = repository.get_object("test:item1")
        collection = repository.get_object("test:1")

        membership.add_to_collection(member, collection)
        assert membership.is_member(member, collection)

    def test_add_touches_member(self, repository, membership):
        """Adding records a modification of the member."""
        long_ago = datetime(2000, 1, 1, tzinfo=timezone.utc)
        repository.touch("test:item1", long_ago)

        membership.add_to_collection("test:item1", "test:1")

        assert repository.get_object("test:item1").modified > long_ago

    def test_missing_collection(self, repository, membership, store):
        """Adding to a missing collection raises NotFound and changes nothing."""
        with pytest.raises(NotFound):
            membership.add_to_collection("test:item1", "test:nope")
        assert membership.get_parent_pids("test:item1") == []

    def test_missing_member(self, repository, membership):
        """Adding a missing member raises NotFound."""
        with pytest.raises(NotFound):
            membership.add_to_collection("test:nope", "test:1")

    def test_invalid_pid(self, repository, membership):
        """Malformed PIDs raise InvalidArgument."""
        with pytest.raises(InvalidArgument):
            membership.add_to_collection("not a pid", "test:1")


class TestRemoveFromCollection:
    """Test removing members."""

    def test_remove(self, repository, membership, store):
        """Removing deletes the membership triple."""
        membership.add_to_collection("test:item1", "test:1")

        assert membership.remove_from_collection("test:item1", "test:1") is True
        assert member_triples(store, "test:item1", "test:1") == []

    def test_remove_absent_is_noop(self, repository, membership):
        """Removing a non-member succeeds without change."""
        assert membership.remove_from_collection("test:item1", "test:1") is False

    @pytest.mark.parametrize(
        "predicates",
        [
            ["isMemberOfCollection"],
            ["isMemberOf"],
            ["isMemberOfCollection", "isMemberOf"],
        ],
    )
    def test_cleans_up_every_predicate(self, repository, membership, store, predicates):
        """After removal the collection is no longer a parent."""
        for predicate in predicates:
            store.add("test:item1", FEDORA_RELS_EXT_URI, predicate, "test:1")
        store.add("test:item1", FEDORA_RELS_EXT_URI, "isMemberOf", "test:2")

        membership.remove_from_collection("test:item1", "test:1")

        assert membership.get_parent_pids("test:item1") == ["test:2"]

    def test_removes_duplicate_triples(self, repository, membership, store):
        """Duplicate membership triples are all removed."""
        store.add("test:item1", FEDORA_RELS_EXT_URI, "isMemberOfCollection", "test:1")
        store.add("test:item1", FEDORA_RELS_EXT_URI, "isMemberOfCollection", "test:1")

        membership.remove_from_collection("test:item1", "test:1")
        assert not membership.is_member("test:item1", "test:1")

    @pytest.mark.parametrize("predicate", ["isMemberOfCollection", "isMemberOf"])
    def test_removes_padded_targets(self, repository, membership, store, predicate):
        """Targets stored with surrounding whitespace are removed too."""
        store.add("test:item1", FEDORA_RELS_EXT_URI, predicate, "test:1 ")
        store.add("test:item1", FEDORA_RELS_EXT_URI, predicate, "\ttest:1")
        assert membership.get_parent_pids("test:item1") == ["test:1"]

        assert membership.remove_from_collection("test:item1", "test:1") is True

        assert membership.get_parent_pids("test:item1") == []
        assert store.get("test:item1", FEDORA_RELS_EXT_URI, predicate) == []

    def test_padded_target_counts_as_member(self, repository, membership, store):
        """Adding next to a padded target does not create a second link."""
        store.add("test:item1", FEDORA_RELS_EXT_URI, "isMemberOfCollection", "test:1 ")

        assert membership.add_to_collection("test:item1", "test:1") is False
        assert len(member_triples(store, "test:item1", "test:1 ")) == 1

    def test_remove_from_purged_collection(self, repository, membership):
        """Links to a purged collection can still be removed."""
        membership.add_to_collection("test:item1", "test:2")
        repository.purge_object("test:2")
        assert membership.get_parent_pids("test:item1") == ["test:2"]

        assert membership.remove_from_collection("test:item1", "test:2") is True
        assert membership.get_parent_pids("test:item1") == []

    def test_remove_missing_member(self, repository, membership):
        """Removing for a missing member raises NotFound."""
        with pytest.raises(NotFound):
            membership.remove_from_collection("test:nope", "test:1")


class TestParentPids:
    """Test parent discovery."""

    def test_union_of_predicates(self, repository, membership, store):
        """Parents under both predicates are returned."""
        store.add("test:item1", FEDORA_RELS_EXT_URI, "isMemberOfCollection", "test:1")
        store.add("test:item1", FEDORA_RELS_EXT_URI, "isMemberOf", "test:2")

        assert set(membership.get_parent_pids("test:item1")) == {"test:1", "test:2"}

    def test_deduplicates_and_drops_blanks(self, repository, membership, store):
        """Duplicate and blank targets never appear."""
        store.add("test:item1", FEDORA_RELS_EXT_URI, "isMemberOfCollection", "test:1")
        store.add("test:item1", FEDORA_RELS_EXT_URI, "isMemberOfCollection", "test:1")
        store.add("test:item1", FEDORA_RELS_EXT_URI, "isMemberOf", "test:1")
        store.add("test:item1", FEDORA_RELS_EXT_URI, "isMemberOf", "")
        store.add("test:item1", FEDORA_RELS_EXT_URI, "isMemberOf", "   ")

        parents = membership.get_parent_pids("test:item1")
        assert parents == ["test:1"]

    def test_no_parents(self, repository, membership):
        """Objects outside any collection have no parents."""
        assert membership.get_parent_pids("test:item1") == []


class TestOtherParents:
    """Test parent exclusion."""

    def test_excludes_parent(self, repository, membership):
        """The excluded parent is left out."""
        membership.add_to_collection("test:item1", "test:1")
        membership.add_to_collection("test:item1", "test:2")

        assert membership.get_other_parents("test:item1", "test:1") == ["test:2"]

    def test_absent_parent_is_noop(self, repository, membership):
        """Excluding a non-parent returns all parents."""
        membership.add_to_collection("test:item1", "test:1")

        assert membership.get_other_parents(
            "test:item1", "other:coll"
        ) == membership.get_parent_pids("test:item1")

    def test_accepts_object(self, repository, membership):
        """The excluded parent may be an object."""
        membership.add_to_collection("test:item1", "test:1")
        parent = repository.get_object("test:1")

        assert membership.get_other_parents("test:item1", parent) == []


class TestMigrateAndShare:
    """Test moving and sharing members."""

    def test_migrate(self, repository, membership):
        """Migrating moves membership from source to target."""
        membership.add_to_collection("test:item1", "test:1")

        assert membership.migrate("test:item1", "test:1", "test:2") is True
        assert membership.get_parent_pids("test:item1") == ["test:2"]

    def test_migrate_same_collection(self, repository, membership):
        """Migrating to the source collection changes nothing."""
        membership.add_to_collection("test:item1", "test:1")

        assert membership.migrate("test:item1", "test:1", "test:1") is False
        assert membership.get_parent_pids("test:item1") == ["test:1"]

    def test_migrate_missing_target(self, repository, membership):
        """A missing target aborts before any change."""
        membership.add_to_collection("test:item1", "test:1")

        with pytest.raises(NotFound):
            membership.migrate("test:item1", "test:1", "test:nope")
        assert membership.get_parent_pids("test:item1") == ["test:1"]

    def test_migrate_from_purged_collection(self, repository, membership):
        """A purged source collection does not block migration."""
        membership.add_to_collection("test:item1", "test:2")
        repository.purge_object("test:2")

        assert membership.migrate("test:item1", "test:2", "test:1") is True
        assert membership.get_parent_pids("test:item1") == ["test:1"]

    def test_share_members(self, repository, membership):
        """Sharing adds each member once."""
        membership.add_to_collection("test:item1", "other:coll")

        added = membership.share_members(
            ["test:item1", "test:item2", "test:item3"], "other:coll"
        )

        assert added == 2
        for pid in ["test:item1", "test:item2", "test:item3"]:
            assert membership.is_member(pid, "other:coll")

    def test_share_with_missing_member(self, repository, membership):
        """A missing member aborts the batch before any change."""
        with pytest.raises(NotFound):
            membership.share_members(["test:item1", "test:nope"], "test:1")
        assert not membership.is_member("test:item1", "test:1")

    def test_migrate_members(self, repository, membership):
        """Batch migration keeps other parents."""
        membership.share_members(["test:item1", "test:item2"], "test:1")
        membership.add_to_collection("test:item2", "other:coll")

        moved = membership.migrate_members(
            ["test:item1", "test:item2"], "test:1", "test:2"
        )

        assert moved == 2
        assert membership.get_parent_pids("test:item1") == ["test:2"]
        assert set(membership.get_parent_pids("test:item2")) == {"other:coll", "test:2"}

