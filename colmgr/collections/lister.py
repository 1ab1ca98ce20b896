"""Collection search and member listing over a query backend."""

from __future__ import annotations

import logging
from collections.abc import Callable

from colmgr.config import ColmgrConfig
from colmgr.core.exceptions import InvalidArgument
from colmgr.core.models import PageResult
from colmgr.core.pids import is_valid_pid, namespace_of
from colmgr.core.vocabulary import (
    COLLECTION_CONTENT_MODEL,
    FEDORA_MODEL_URI,
    HAS_MODEL,
    LABEL,
)
from colmgr.query.base import FilterMode, QueryBackend
from colmgr.query.builder import Predicate, QueryBuilder, SelectQuery, Term

logger = logging.getLogger(__name__)


class NamespacePolicy:
    """Decides which PID namespaces are accessible."""

    def __init__(self, restrict: bool = False, allowed: list[str] | None = None):
        """Initialize policy.

        Args:
            restrict: Whether to restrict access at all
            allowed: Accessible namespaces; trailing colons are ignored
        """
        self.restrict = restrict
        self.allowed = {
            ns.strip().rstrip(":") for ns in (allowed or []) if ns.strip().rstrip(":")
        }

    @classmethod
    def from_config(cls, config: ColmgrConfig) -> NamespacePolicy:
        """Build the policy from configuration."""
        return cls(config.restrict_namespaces, config.allowed_namespaces)

    def __call__(self, pid: str) -> bool:
        """Check whether a PID's namespace is accessible."""
        if not self.restrict:
            return True
        if not is_valid_pid(pid):
            return False
        return namespace_of(pid) in self.allowed


def build_collections_query(text_filter: str = "") -> SelectQuery:
    """Build the query for collection objects matching a text filter."""
    builder = (
        QueryBuilder()
        .select("object", "label")
        .where(
            "object",
            Predicate(FEDORA_MODEL_URI, HAS_MODEL),
            Term.pid(COLLECTION_CONTENT_MODEL),
        )
        .where("object", Predicate(FEDORA_MODEL_URI, LABEL), "label")
    )
    if text_filter.strip():
        builder.matching(text_filter, "label", "object")
    return builder.order_by("label", "object").build()


class CollectionLister:
    """Searches collections and pages through their members."""

    def __init__(
        self,
        backend: QueryBackend,
        config: ColmgrConfig | None = None,
        namespace_accessible: Callable[[str], bool] | None = None,
    ):
        """Initialize collection lister.

        Args:
            backend: Query backend to run queries on
            config: Paging and namespace settings
            namespace_accessible: Optional access policy; defaults to the
                namespace restriction in the config
        """
        self.backend = backend
        self.config = config or ColmgrConfig()
        self.namespace_accessible = namespace_accessible or NamespacePolicy.from_config(
            self.config
        )

    def search_collections(self, text_filter: str = "") -> dict[str, str]:
        """Find accessible collections whose label or PID contains text.

        Matching is case-insensitive and literal; the text is never
        interpreted as query syntax.

        Args:
            text_filter: Substring to look for; blank matches everything

        Returns:
            Mapping of PID to ``"<label> (<pid>)"``
        """
        rows = self.backend.select(build_collections_query(text_filter))

        results: dict[str, str] = {}
        for row in rows:
            pid = row.get("object")
            if not pid or pid in results:
                continue
            if not self.namespace_accessible(pid):
                logger.debug(f"Skipping inaccessible collection {pid}")
                continue
            results[pid] = f"{row.get('label') or pid} ({pid})"

        logger.debug(f"Collection search {text_filter!r}: {len(results)} matches")
        return results

    def list_members(
        self,
        collection_pid: str,
        page: int = 0,
        limit: int | None = None,
        filter_mode: FilterMode | str | None = FilterMode.VIEW,
    ) -> PageResult:
        """List one page of a collection's members.

        Args:
            collection_pid: Collection PID
            page: Zero-based page number
            limit: Page size; defaults to the configured page size
            filter_mode: Visibility mode

        Raises:
            InvalidArgument: If the limit exceeds the configured maximum
        """
        limit = self.config.page_size if limit is None else limit
        if isinstance(limit, int) and limit > self.config.max_page_size:
            raise InvalidArgument(
                "limit", f"{limit} exceeds maximum page size {self.config.max_page_size}"
            )
        return self.backend.query_members(collection_pid, page, limit, filter_mode)
