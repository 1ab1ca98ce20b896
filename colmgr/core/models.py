"""Models for repository objects, relationships and member listings.

All models are immutable msgspec structs. Repository objects are projections
of the triples held by a relationship store; member records and pages are
projections of query results and have no identity of their own.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Any

import msgspec


class RelationshipTriple(msgspec.Struct, frozen=True):
    """A single relationship edge from a repository object."""

    subject: str
    predicate_uri: str
    predicate_name: str
    value: str
    literal: bool = False

    @property
    def predicate(self) -> str:
        """Full predicate URI."""
        return self.predicate_uri + self.predicate_name

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "subject": self.subject,
            "predicate": self.predicate,
            "value": self.value,
            "literal": self.literal,
        }


class RepositoryObject(msgspec.Struct, frozen=True, kw_only=True):
    """A repository object as seen through its relationship triples."""

    pid: str
    label: str | None = None
    owner: str | None = None
    models: tuple[str, ...] = ()
    state: str | None = "Active"
    modified: datetime | None = None

    @property
    def id(self) -> str:
        """Alias for the PID."""
        return self.pid

    @property
    def namespace(self) -> str:
        """Namespace part of the PID."""
        return self.pid.split(":", 1)[0]

    def has_model(self, model: str) -> bool:
        """Check whether the object declares a content model."""
        return model in self.models

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization.

        Returns:
            Dictionary representation
        """
        return {
            "pid": self.pid,
            "label": self.label,
            "owner": self.owner,
            "models": list(self.models),
            "state": self.state,
            "modified": self.modified.isoformat() if self.modified else None,
        }


class MemberRecord(msgspec.Struct, frozen=True, kw_only=True):
    """One row of a collection member listing."""

    pid: str
    title: str | None = None
    owner: str | None = None
    modified: datetime | None = None

    @property
    def display_title(self) -> str:
        """Title to show, falling back to the PID."""
        return self.title or self.pid


class PageResult(msgspec.Struct, frozen=True, kw_only=True):
    """A page of member records plus the unpaged total."""

    total: int
    items: list[MemberRecord] = msgspec.field(default_factory=list)
    page: int = 0
    limit: int = 0

    @property
    def pages(self) -> int:
        """Number of pages needed to cover all results."""
        if self.limit <= 0:
            return 0
        return math.ceil(self.total / self.limit)

    @property
    def has_next(self) -> bool:
        """Whether another page follows this one."""
        return self.page + 1 < self.pages

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "total": self.total,
            "page": self.page,
            "limit": self.limit,
            "pages": self.pages,
            "items": [msgspec.to_builtins(item) for item in self.items],
        }


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an xsd:dateTime literal as stored by the resource index."""
    if not value:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None
