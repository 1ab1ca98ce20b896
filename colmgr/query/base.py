"""Base query backend interface."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any

from colmgr.core.exceptions import InvalidArgument
from colmgr.core.models import MemberRecord, PageResult, parse_timestamp
from colmgr.core.pids import validate_pid
from colmgr.core.vocabulary import (
    FEDORA_MODEL_URI,
    FEDORA_RELS_EXT_URI,
    FEDORA_VIEW_URI,
    LABEL,
    LAST_MODIFIED_DATE,
    MEMBERSHIP_PREDICATES,
    OWNER_ID,
    STATE,
    ObjectState,
)

from .builder import Predicate, QueryBuilder, SelectQuery, Term

logger = logging.getLogger(__name__)


class FilterMode(Enum):
    """Which members a listing may show."""

    VIEW = "view"
    MANAGE = "manage"

    @classmethod
    def parse(cls, value: FilterMode | str | None) -> FilterMode:
        """Accept a mode, its name, or None for the default."""
        if value is None:
            return cls.VIEW
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise InvalidArgument("filter mode", f"unknown mode {value!r}") from None


def build_members_query(
    collection_pid: str,
    filter_mode: FilterMode = FilterMode.VIEW,
) -> QueryBuilder:
    """Build the query listing a collection's members.

    Members linked under either membership predicate are included. Outside
    of manage mode only active objects are listed.
    """
    collection = Term.pid(collection_pid)
    builder = (
        QueryBuilder()
        .select("object", "title", "owner", "modified")
        .where_any(
            "object",
            [Predicate(FEDORA_RELS_EXT_URI, name) for name in MEMBERSHIP_PREDICATES],
            collection,
        )
    )
    if filter_mode is FilterMode.VIEW:
        builder.where(
            "object", Predicate(FEDORA_MODEL_URI, STATE), Term.uri(ObjectState.ACTIVE.uri)
        )
    return (
        builder.optional("object", Predicate(FEDORA_MODEL_URI, LABEL), "title")
        .optional("object", Predicate(FEDORA_MODEL_URI, OWNER_ID), "owner")
        .optional("object", Predicate(FEDORA_VIEW_URI, LAST_MODIFIED_DATE), "modified")
        .order_by("title", "object")
    )


class QueryBackend(ABC):
    """Abstract interface for query backends."""

    name = "query"

    @abstractmethod
    def select(self, query: SelectQuery) -> list[dict[str, str]]:
        """Execute a select query.

        Args:
            query: Structured query

        Returns:
            One binding dictionary per solution; unbound variables are absent

        Raises:
            BackendUnavailable: If the query service fails
        """
        pass

    @abstractmethod
    def count(self, query: SelectQuery) -> int:
        """Count the solutions of a query, ignoring limit and offset.

        Raises:
            BackendUnavailable: If the query service fails
        """
        pass

    def close(self) -> None:
        """Release backend resources."""
        pass

    def query_members(
        self,
        collection_pid: str,
        page: int = 0,
        limit: int = 12,
        filter_mode: FilterMode | str | None = FilterMode.VIEW,
    ) -> PageResult:
        """List one page of a collection's members.

        Args:
            collection_pid: Collection PID
            page: Zero-based page number
            limit: Page size
            filter_mode: Visibility mode

        Returns:
            The page plus the total member count

        Raises:
            InvalidArgument: If page, limit or PID are malformed
            BackendUnavailable: If the query service fails
        """
        if not isinstance(page, int) or isinstance(page, bool) or page < 0:
            raise InvalidArgument("page", f"must be a non-negative integer, got {page!r}")
        if not isinstance(limit, int) or isinstance(limit, bool) or limit <= 0:
            raise InvalidArgument("limit", f"must be a positive integer, got {limit!r}")
        collection_pid = validate_pid(collection_pid)
        mode = FilterMode.parse(filter_mode)

        builder = build_members_query(collection_pid, mode)
        total = self.count(builder.query)
        query = builder.page(limit, page * limit).build()
        rows = self.select(query) if page * limit < total else []

        logger.debug(
            f"{self.name}: {collection_pid} page {page} "
            f"({len(rows)} of {total} members, mode {mode.value})"
        )
        return PageResult(
            total=total,
            items=[self._member(row) for row in rows],
            page=page,
            limit=limit,
        )

    @staticmethod
    def _member(row: dict[str, Any]) -> MemberRecord:
        return MemberRecord(
            pid=row["object"],
            title=row.get("title"),
            owner=row.get("owner"),
            modified=parse_timestamp(row.get("modified")),
        )
