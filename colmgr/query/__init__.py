"""Query backends and the structured query builder."""

from .base import FilterMode, QueryBackend, build_members_query
from .builder import (
    Predicate,
    QueryBuilder,
    SelectQuery,
    Term,
    TextFilter,
    TriplePattern,
    Variable,
    render_sparql,
)
from .local import LocalQueryBackend
from .sparql import SparqlQueryBackend

__all__ = [
    "FilterMode",
    "QueryBackend",
    "LocalQueryBackend",
    "SparqlQueryBackend",
    "build_members_query",
    # Builder
    "QueryBuilder",
    "SelectQuery",
    "TriplePattern",
    "TextFilter",
    "Predicate",
    "Term",
    "Variable",
    "render_sparql",
]
