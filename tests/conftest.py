"""Pytest configuration and fixtures."""

import os

import pytest

from colmgr.collections.membership import MembershipManager
from colmgr.core.vocabulary import COLLECTION_CONTENT_MODEL, ObjectState
from colmgr.query.local import LocalQueryBackend
from colmgr.relations.memory import MemoryRelationshipStore
from colmgr.repository import ObjectRepository


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch, tmp_path):
    """Isolate environment variables and config lookup for each test.

    This prevents a developer's own colmgr config or data directory from
    leaking into test runs.
    """
    original_env = os.environ.copy()
    for key in list(os.environ):
        if key.startswith("COLMGR_"):
            monkeypatch.delenv(key)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.chdir(tmp_path)

    yield

    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def store():
    """Empty in-memory relationship store."""
    return MemoryRelationshipStore()


@pytest.fixture
def objects(store):
    """Object repository over the test store."""
    return ObjectRepository(store)


@pytest.fixture
def membership(store):
    """Membership manager over the test store."""
    return MembershipManager(store)


@pytest.fixture
def backend(store):
    """Local query backend over the test store."""
    return LocalQueryBackend(store)


@pytest.fixture
def repository(objects):
    """Repository with two collections and a few items.

    - ``test:1`` "Foo Bears" and ``test:2`` "Other" are collections
    - ``test:item1`` .. ``test:item3`` are active items
    - ``test:inactive`` is an inactive item
    - ``other:coll`` is a collection in a second namespace
    """
    objects.create_object(
        "test:1", label="Foo Bears", owner="admin", models=[COLLECTION_CONTENT_MODEL]
    )
    objects.create_object(
        "test:2", label="Other", owner="admin", models=[COLLECTION_CONTENT_MODEL]
    )
    objects.create_object(
        "other:coll",
        label="Polar Bears",
        owner="curator",
        models=[COLLECTION_CONTENT_MODEL],
    )
    objects.create_object("test:item1", label="Alpha", owner="alice")
    objects.create_object("test:item2", label="Beta", owner="bob")
    objects.create_object("test:item3", label="Gamma")
    objects.create_object(
        "test:inactive", label="Dormant", state=ObjectState.INACTIVE
    )
    return objects
