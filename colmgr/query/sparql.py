"""SPARQL query backend for a remote resource index."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from colmgr.core.exceptions import BackendUnavailable
from colmgr.core.pids import from_uri

from .base import QueryBackend
from .builder import SelectQuery, render_count, render_sparql

logger = logging.getLogger(__name__)

SPARQL_RESULTS_JSON = "application/sparql-results+json"


class SparqlQueryBackend(QueryBackend):
    """Runs queries against a SPARQL 1.1 endpoint over HTTP.

    Queries are rendered from their structured form, so user text only ever
    reaches the endpoint as an escaped literal.
    """

    name = "sparql"

    def __init__(
        self,
        endpoint: str,
        timeout: float = 30.0,
        client: httpx.Client | None = None,
    ):
        """Initialize the backend.

        Args:
            endpoint: SPARQL endpoint URL
            timeout: Request timeout in seconds
            client: Optional preconfigured HTTP client
        """
        self.endpoint = endpoint
        self._owns_client = client is None
        self.client = client or httpx.Client(timeout=timeout, follow_redirects=True)

    def select(self, query: SelectQuery) -> list[dict[str, str]]:
        """Execute a select query on the endpoint."""
        return self._bindings(render_sparql(query))

    def count(self, query: SelectQuery) -> int:
        """Count the unpaged solutions of a query on the endpoint."""
        rows = self._bindings(render_count(query))
        if not rows or "count" not in rows[0]:
            raise BackendUnavailable(self.name, "count query returned no result")
        try:
            return int(rows[0]["count"])
        except ValueError:
            raise BackendUnavailable(
                self.name, f"non-numeric count {rows[0]['count']!r}"
            ) from None

    def close(self) -> None:
        """Close the HTTP client if this backend created it."""
        if self._owns_client:
            self.client.close()

    def _bindings(self, sparql: str) -> list[dict[str, str]]:
        """POST a query and flatten the JSON result bindings."""
        logger.debug(f"SPARQL query to {self.endpoint}:\n{sparql}")
        try:
            response = self.client.post(
                self.endpoint,
                data={"query": sparql},
                headers={"Accept": SPARQL_RESULTS_JSON},
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.TimeoutException:
            logger.warning(f"Timeout querying {self.endpoint}")
            raise BackendUnavailable(self.name, "request timed out") from None
        except httpx.HTTPStatusError as e:
            logger.error(f"HTTP {e.response.status_code} from {self.endpoint}")
            raise BackendUnavailable(
                self.name, f"HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"Error querying {self.endpoint}: {e}")
            raise BackendUnavailable(self.name, str(e)) from e
        except ValueError as e:
            raise BackendUnavailable(self.name, f"invalid JSON response: {e}") from e

        return self._parse(payload)

    def _parse(self, payload: Any) -> list[dict[str, str]]:
        try:
            bindings = payload["results"]["bindings"]
            rows = []
            for binding in bindings:
                row = {}
                for name, node in binding.items():
                    value = node["value"]
                    row[name] = from_uri(value) if node.get("type") == "uri" else value
                rows.append(row)
            return rows
        except (KeyError, TypeError) as e:
            raise BackendUnavailable(
                self.name, f"malformed result payload: {e}"
            ) from e
