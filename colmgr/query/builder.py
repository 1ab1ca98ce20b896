"""Structured queries over relationship triples.

Queries are built as data, never by pasting user text into a template.
Backends either evaluate the structure directly or render it with
:func:`render_sparql`, which escapes every literal and validates every PID
before it reaches the query string.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from enum import Enum

from colmgr.core.exceptions import InvalidArgument
from colmgr.core.pids import to_uri
from colmgr.core.vocabulary import resolve_namespace

VARIABLE_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# Characters with special meaning in XPath/SPARQL regular expressions
REGEX_SPECIAL = set("\\.*+?^$|()[]{}-")

# Characters that may not appear inside an IRI reference
IRI_FORBIDDEN = set('<>"{}|^`\\')

STRING_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "'": "\\'",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\b": "\\b",
    "\f": "\\f",
}


class TermKind(Enum):
    """Kinds of constant terms."""

    PID = "pid"
    URI = "uri"
    LITERAL = "literal"


@dataclass(frozen=True)
class Variable:
    """A query variable such as ``?object``."""

    name: str

    def __post_init__(self):
        if not VARIABLE_PATTERN.match(self.name):
            raise InvalidArgument("variable", f"{self.name!r} is not a valid name")

    def __str__(self) -> str:
        return f"?{self.name}"


@dataclass(frozen=True)
class Term:
    """A constant in a triple pattern."""

    value: str
    kind: TermKind = TermKind.PID

    @classmethod
    def pid(cls, pid: str) -> Term:
        """Reference a repository object."""
        to_uri(pid)
        return cls(pid.strip(), TermKind.PID)

    @classmethod
    def uri(cls, uri: str) -> Term:
        """Reference an arbitrary resource URI."""
        return cls(uri, TermKind.URI)

    @classmethod
    def literal(cls, text: str) -> Term:
        """A plain literal value."""
        return cls(text, TermKind.LITERAL)


@dataclass(frozen=True)
class Predicate:
    """A predicate split into namespace URI and name."""

    uri: str
    name: str

    @classmethod
    def of(cls, namespace: str, name: str) -> Predicate:
        """Build a predicate, resolving namespace aliases."""
        return cls(resolve_namespace(namespace), name)

    @property
    def full(self) -> str:
        """Full predicate URI."""
        return self.uri + self.name


Node = Variable | Term


@dataclass(frozen=True)
class TriplePattern:
    """A subject-predicate-object pattern."""

    subject: Node
    predicate: Predicate
    object: Node

    def variables(self) -> list[str]:
        """Names of variables used by this pattern."""
        return [n.name for n in (self.subject, self.object) if isinstance(n, Variable)]


@dataclass(frozen=True)
class TextFilter:
    """Case-insensitive literal substring match over several variables.

    A solution passes if any of the variables contains the text.
    """

    text: str
    variables: tuple[str, ...]

    def matches(self, values: list[str | None]) -> bool:
        """Evaluate the filter against bound values."""
        needle = self.text.casefold()
        return any(v is not None and needle in v.casefold() for v in values)


@dataclass
class SelectQuery:
    """A SELECT query over relationship triples."""

    variables: list[str]
    patterns: list[TriplePattern] = field(default_factory=list)
    unions: list[list[TriplePattern]] = field(default_factory=list)
    optionals: list[TriplePattern] = field(default_factory=list)
    filters: list[TextFilter] = field(default_factory=list)
    order_by: list[str] = field(default_factory=list)
    limit: int | None = None
    offset: int = 0
    distinct: bool = True

    def unpaged(self) -> SelectQuery:
        """Copy of this query without limit and offset."""
        return replace(self, limit=None, offset=0)


class QueryBuilder:
    """Fluent interface for building select queries."""

    def __init__(self):
        self.query = SelectQuery(variables=[])

    def select(self, *variables: str) -> QueryBuilder:
        """Choose the projected variables."""
        for name in variables:
            Variable(name)
        self.query.variables.extend(variables)
        return self

    def where(
        self,
        subject: Node | str,
        predicate: Predicate,
        obj: Node | str,
    ) -> QueryBuilder:
        """Add a required pattern. Bare strings are variable names."""
        self.query.patterns.append(_pattern(subject, predicate, obj))
        return self

    def where_any(
        self,
        subject: Node | str,
        predicates: list[Predicate],
        obj: Node | str,
    ) -> QueryBuilder:
        """Require a match under any one of several predicates."""
        self.query.unions.append([_pattern(subject, p, obj) for p in predicates])
        return self

    def optional(
        self,
        subject: Node | str,
        predicate: Predicate,
        obj: Node | str,
    ) -> QueryBuilder:
        """Add an optional pattern."""
        self.query.optionals.append(_pattern(subject, predicate, obj))
        return self

    def matching(self, text: str, *variables: str) -> QueryBuilder:
        """Filter on a literal substring of any of the variables."""
        if not variables:
            raise InvalidArgument("filter", "at least one variable is required")
        for name in variables:
            Variable(name)
        self.query.filters.append(TextFilter(text=text, variables=tuple(variables)))
        return self

    def order_by(self, *variables: str) -> QueryBuilder:
        """Sort solutions by variables, ascending."""
        self.query.order_by.extend(variables)
        return self

    def page(self, limit: int, offset: int = 0) -> QueryBuilder:
        """Restrict to a slice of the solutions."""
        if limit <= 0:
            raise InvalidArgument("limit", f"must be positive, got {limit}")
        if offset < 0:
            raise InvalidArgument("offset", f"must not be negative, got {offset}")
        self.query.limit = limit
        self.query.offset = offset
        return self

    def build(self) -> SelectQuery:
        """Build the final query."""
        if not self.query.variables:
            raise InvalidArgument("query", "no variables selected")
        return self.query


def _pattern(subject: Node | str, predicate: Predicate, obj: Node | str) -> TriplePattern:
    return TriplePattern(
        subject=Variable(subject) if isinstance(subject, str) else subject,
        predicate=predicate,
        object=Variable(obj) if isinstance(obj, str) else obj,
    )


def escape_string(text: str) -> str:
    """Escape text for use inside a double-quoted SPARQL string."""
    return "".join(STRING_ESCAPES.get(ch, ch) for ch in text)


def escape_regex(text: str) -> str:
    """Escape text so a SPARQL regex treats it as a literal."""
    return "".join("\\" + ch if ch in REGEX_SPECIAL else ch for ch in text)


def render_node(node: Node) -> str:
    """Render a variable or constant."""
    if isinstance(node, Variable):
        return str(node)
    if node.kind is TermKind.PID:
        return _iri(to_uri(node.value))
    if node.kind is TermKind.URI:
        return _iri(node.value)
    return f'"{escape_string(node.value)}"'


def _iri(value: str) -> str:
    if any(ch in IRI_FORBIDDEN or ch.isspace() for ch in value):
        raise InvalidArgument("uri", f"{value!r} is not a valid IRI")
    return f"<{value}>"


def render_pattern(pattern: TriplePattern) -> str:
    """Render a triple pattern."""
    return (
        f"{render_node(pattern.subject)} <{pattern.predicate.full}> "
        f"{render_node(pattern.object)}"
    )


def render_filter(text_filter: TextFilter) -> str:
    """Render a text filter as a case-insensitive regex over each variable."""
    pattern = escape_string(escape_regex(text_filter.text))
    clauses = [
        f'regex(str(?{name}), "{pattern}", "i")' for name in text_filter.variables
    ]
    return f"FILTER({' || '.join(clauses)})"


def render_sparql(query: SelectQuery) -> str:
    """Render a select query as SPARQL text."""
    head = "SELECT DISTINCT" if query.distinct else "SELECT"
    projection = " ".join(f"?{name}" for name in query.variables)
    lines = [f"{head} {projection}", "WHERE {"]

    for pattern in query.patterns:
        lines.append(f"  {render_pattern(pattern)} .")
    for alternatives in query.unions:
        lines.append(
            "  " + " UNION ".join(f"{{ {render_pattern(p)} }}" for p in alternatives)
        )
    for pattern in query.optionals:
        lines.append(f"  OPTIONAL {{ {render_pattern(pattern)} }}")
    for text_filter in query.filters:
        lines.append(f"  {render_filter(text_filter)}")
    lines.append("}")

    if query.order_by:
        lines.append("ORDER BY " + " ".join(f"?{name}" for name in query.order_by))
    if query.limit is not None:
        lines.append(f"LIMIT {int(query.limit)}")
    if query.offset:
        lines.append(f"OFFSET {int(query.offset)}")
    return "\n".join(lines)


def render_count(query: SelectQuery) -> str:
    """Render a query counting the unpaged solutions of another."""
    inner = render_sparql(replace(query.unpaged(), order_by=[]))
    indented = "\n".join(f"  {line}" for line in inner.splitlines())
    return f"SELECT (COUNT(*) AS ?count)\nWHERE {{\n{indented}\n}}"
