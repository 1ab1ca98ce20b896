"""Query backend evaluating structured queries against a local store."""

from __future__ import annotations

import logging

from colmgr.relations.base import RelationshipStore

from .base import QueryBackend
from .builder import SelectQuery, Term, TriplePattern, Variable

logger = logging.getLogger(__name__)

Solution = dict[str, str]


class LocalQueryBackend(QueryBackend):
    """Evaluates queries directly over a relationship store.

    Patterns are joined left to right, then unions, then optionals, then
    filters. Ordering puts unbound values first, as SPARQL does.
    """

    name = "local"

    def __init__(self, store: RelationshipStore):
        self.store = store

    def select(self, query: SelectQuery) -> list[dict[str, str]]:
        """Execute a select query against the store."""
        solutions = self._solve(query)
        if query.order_by:
            solutions.sort(
                key=lambda s: tuple(
                    (name in s, s.get(name, "")) for name in query.order_by
                )
            )
        projected = [
            {name: s[name] for name in query.variables if name in s} for s in solutions
        ]
        if query.distinct:
            projected = _distinct(projected)

        end = None if query.limit is None else query.offset + query.limit
        return projected[query.offset : end]

    def count(self, query: SelectQuery) -> int:
        """Count distinct solutions of the unpaged query."""
        return len(self.select(query.unpaged()))

    def _solve(self, query: SelectQuery) -> list[Solution]:
        solutions: list[Solution] = [{}]

        for pattern in query.patterns:
            solutions = [
                extended for s in solutions for extended in self._extend(s, pattern)
            ]
        for alternatives in query.unions:
            solutions = [
                extended
                for s in solutions
                for pattern in alternatives
                for extended in self._extend(s, pattern)
            ]
        for pattern in query.optionals:
            joined: list[Solution] = []
            for s in solutions:
                extended = self._extend(s, pattern)
                joined.extend(extended or [s])
            solutions = joined
        for text_filter in query.filters:
            solutions = [
                s
                for s in solutions
                if text_filter.matches([s.get(name) for name in text_filter.variables])
            ]

        logger.debug(f"Evaluated query: {len(solutions)} solutions")
        return solutions

    def _extend(self, solution: Solution, pattern: TriplePattern) -> list[Solution]:
        """Join one solution with every triple matching a pattern."""
        subject = _bound(solution, pattern.subject)
        value = _bound(solution, pattern.object)
        results = []
        for triple in self.store.match(
            subject=subject,
            predicate_uri=pattern.predicate.uri,
            predicate_name=pattern.predicate.name,
            value=value,
        ):
            extended = dict(solution)
            if isinstance(pattern.subject, Variable):
                extended[pattern.subject.name] = triple.subject
            if isinstance(pattern.object, Variable):
                if extended.get(pattern.object.name, triple.value) != triple.value:
                    continue
                extended[pattern.object.name] = triple.value
            results.append(extended)
        return results


def _bound(solution: Solution, node: Variable | Term) -> str | None:
    if isinstance(node, Term):
        return node.value
    return solution.get(node.name)


def _distinct(rows: list[dict[str, str]]) -> list[dict[str, str]]:
    seen: set[tuple] = set()
    unique = []
    for row in rows:
        key = tuple(sorted(row.items()))
        if key not in seen:
            seen.add(key)
            unique.append(row)
    return unique
