"""Tests for the SPARQL query backend using a mocked HTTP transport."""

from urllib.parse import parse_qs

import httpx
import pytest

from colmgr.collections.lister import CollectionLister
from colmgr.core.exceptions import BackendUnavailable
from colmgr.query.sparql import SPARQL_RESULTS_JSON, SparqlQueryBackend

ENDPOINT = "http://fedora.test/sparql"


def uri(pid):
    return {"type": "uri", "value": f"info:fedora/{pid}"}


def literal(value):
    return {"type": "literal", "value": value}


def results(*bindings):
    return {"head": {"vars": []}, "results": {"bindings": list(bindings)}}


class FakeEndpoint:
    """Answers count and select queries from canned bindings."""

    def __init__(self, rows, total=None):
        self.rows = rows
        self.total = len(rows) if total is None else total
        self.queries = []
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        query = parse_qs(request.content.decode())["query"][0]
        self.requests.append(request)
        self.queries.append(query)
        if query.startswith("SELECT (COUNT(*) AS ?count)"):
            count = {"type": "literal", "value": str(self.total)}
            return httpx.Response(200, json=results({"count": count}))
        return httpx.Response(200, json=results(*self.rows))


def make_backend(handler):
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return SparqlQueryBackend(ENDPOINT, client=client)


class TestQueryMembers:
    """Test member listing over SPARQL."""

    def test_parses_bindings(self):
        """URI bindings lose their prefix; literals are kept."""
        endpoint = FakeEndpoint(
            [
                {
                    "object": uri("test:item1"),
                    "title": literal("Alpha"),
                    "owner": literal("alice"),
                    "modified": literal("2024-05-06T07:08:09.123Z"),
                },
                {"object": uri("test:item2")},
            ]
        )
        backend = make_backend(endpoint)

        result = backend.query_members("test:1", limit=10)

        assert result.total == 2
        assert [m.pid for m in result.items] == ["test:item1", "test:item2"]
        assert result.items[0].title == "Alpha"
        assert result.items[0].modified.year == 2024
        assert result.items[1].title is None

    def test_requests(self):
        """A count and a paged select are posted as form data."""
        endpoint = FakeEndpoint([{"object": uri("test:item3")}], total=25)
        backend = make_backend(endpoint)

        backend.query_members("test:1", page=2, limit=10)

        assert len(endpoint.queries) == 2
        count_query, select_query = endpoint.queries
        assert "LIMIT" not in count_query
        assert "LIMIT 10" in select_query
        assert "OFFSET 20" in select_query
        request = endpoint.requests[1]
        assert request.method == "POST"
        assert request.headers["Accept"] == SPARQL_RESULTS_JSON
        assert str(request.url) == ENDPOINT

    def test_skips_select_past_end(self):
        """No select is sent when the page starts beyond the total."""
        endpoint = FakeEndpoint([], total=3)
        backend = make_backend(endpoint)

        result = backend.query_members("test:1", page=1, limit=10)

        assert result.items == []
        assert result.total == 3
        assert len(endpoint.queries) == 1


class TestSearch:
    """Test collection search over SPARQL."""

    def test_filter_text_is_escaped(self):
        """Hostile filter text reaches the endpoint only as a literal."""
        endpoint = FakeEndpoint([])
        lister = CollectionLister(make_backend(endpoint))

        assert lister.search_collections('"); DROP ALL; #') == {}

        query = endpoint.queries[0]
        assert '\\"\\\\); DROP ALL; #' in query
        assert 'regex(str(?label), "' in query

    def test_formats_labels(self):
        """Results map PIDs to labelled display strings."""
        endpoint = FakeEndpoint(
            [{"object": uri("test:1"), "label": literal("Foo Bears")}]
        )
        lister = CollectionLister(make_backend(endpoint))

        assert lister.search_collections("bear") == {"test:1": "Foo Bears (test:1)"}


class TestErrors:
    """Test failure mapping."""

    @pytest.mark.parametrize("status", [400, 500, 503])
    def test_http_error(self, status):
        """Error responses become BackendUnavailable."""
        backend = make_backend(lambda request: httpx.Response(status))

        with pytest.raises(BackendUnavailable) as exc_info:
            backend.query_members("test:1")
        assert exc_info.value.backend == "sparql"
        assert str(status) in exc_info.value.reason

    def test_timeout(self):
        """Timeouts become BackendUnavailable."""

        def handler(request):
            raise httpx.ReadTimeout("too slow", request=request)

        with pytest.raises(BackendUnavailable, match="timed out"):
            make_backend(handler).query_members("test:1")

    def test_connection_error(self):
        """Transport failures become BackendUnavailable."""

        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(BackendUnavailable, match="refused"):
            make_backend(handler).query_members("test:1")

    def test_invalid_json(self):
        """Non-JSON bodies become BackendUnavailable."""
        backend = make_backend(lambda request: httpx.Response(200, text="<html>"))

        with pytest.raises(BackendUnavailable, match="invalid JSON"):
            backend.query_members("test:1")

    def test_malformed_payload(self):
        """Payloads without bindings become BackendUnavailable."""
        backend = make_backend(lambda request: httpx.Response(200, json={"ok": True}))

        with pytest.raises(BackendUnavailable, match="malformed"):
            backend.query_members("test:1")

    def test_missing_count(self):
        """An empty count result is a backend failure."""
        backend = make_backend(lambda request: httpx.Response(200, json=results()))

        with pytest.raises(BackendUnavailable, match="no result"):
            backend.query_members("test:1")


class TestClose:
    """Test client ownership."""

    def test_does_not_close_shared_client(self):
        """A client passed in stays open."""
        client = httpx.Client(transport=httpx.MockTransport(FakeEndpoint([])))
        SparqlQueryBackend(ENDPOINT, client=client).close()
        assert not client.is_closed

    def test_closes_own_client(self):
        """A client the backend created is closed with it."""
        backend = SparqlQueryBackend(ENDPOINT)
        backend.close()
        assert backend.client.is_closed
