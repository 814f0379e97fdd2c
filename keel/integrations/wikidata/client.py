"""
Wikidata SPARQL client.

Implements exactly 2 primitives:
1. execute(query) -> list of row bindings
2. count(query) -> int (single ?count binding)

Endpoint: GET https://query.wikidata.org/sparql?query=...&format=json
Response: {"head": {...}, "results": {"bindings": [{var: {"type", "value"}}]}}

No retries here. Retry policy belongs to the caller, which knows whether
a retry should target the same or a new offset.
"""

from __future__ import annotations

import logging
import time
from typing import Any

import requests

logger = logging.getLogger(__name__)

Binding = dict[str, dict[str, Any]]


class UpstreamQueryError(Exception):
    """Raised when the SPARQL endpoint fails or returns a malformed response."""

    def __init__(self, message: str, status_code: int | None = None, body: str | None = None):
        self.status_code = status_code
        self.body = body[:500] if body else None  # Trim body for logging
        super().__init__(message)


class WikidataClient:
    """
    HTTP client for the Wikidata Query Service.

    Every request carries a fixed identifying User-Agent, as required by
    the Wikimedia user-agent policy.
    """

    def __init__(
        self,
        user_agent: str,
        endpoint: str = "https://query.wikidata.org/sparql",
        timeout_s: float = 30.0,
        session: requests.Session | None = None,
    ):
        if not user_agent:
            raise ValueError("A User-Agent is required for Wikidata requests")
        self.endpoint = endpoint
        self.timeout_s = timeout_s
        self._session = session or requests.Session()
        self._session.headers.update({
            "Accept": "application/sparql-results+json",
            "User-Agent": user_agent,
        })

    def execute(self, query: str) -> list[Binding]:
        """
        Execute a SPARQL query.

        Args:
            query: SPARQL query string

        Returns:
            List of row bindings (variable -> {"type", "value", ...})

        Raises:
            UpstreamQueryError: On transport error, non-success status,
                or a response without results.bindings
        """
        call_start_ms = time.monotonic() * 1000
        logger.info("SPARQL_CALL_START endpoint=%s query_chars=%d", self.endpoint, len(query))

        try:
            response = self._session.get(
                self.endpoint,
                params={"query": query, "format": "json"},
                timeout=self.timeout_s,
            )
        except requests.exceptions.Timeout as e:
            duration_ms = int(time.monotonic() * 1000 - call_start_ms)
            logger.error(
                "SPARQL_CALL_END status=TIMEOUT duration_ms=%d error=%s",
                duration_ms,
                str(e),
            )
            raise UpstreamQueryError(
                f"SPARQL query timed out after {self.timeout_s}s"
            ) from e
        except requests.RequestException as e:
            duration_ms = int(time.monotonic() * 1000 - call_start_ms)
            logger.error(
                "SPARQL_CALL_END status=ERROR duration_ms=%d error=%s",
                duration_ms,
                str(e),
            )
            raise UpstreamQueryError(f"SPARQL request failed: {e}") from e

        duration_ms = int(time.monotonic() * 1000 - call_start_ms)

        if not response.ok:
            logger.error(
                "SPARQL_CALL_END status=HTTP_ERROR duration_ms=%d http_status=%d error=%s",
                duration_ms,
                response.status_code,
                response.text[:200],
            )
            raise UpstreamQueryError(
                f"SPARQL query failed: HTTP {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            bindings = response.json()["results"]["bindings"]
        except (ValueError, KeyError, TypeError) as e:
            logger.error(
                "SPARQL_CALL_END status=MALFORMED duration_ms=%d http_status=%d",
                duration_ms,
                response.status_code,
            )
            raise UpstreamQueryError(
                f"Malformed SPARQL response (HTTP {response.status_code}): {e}",
                status_code=response.status_code,
                body=response.text,
            ) from e

        if not isinstance(bindings, list):
            raise UpstreamQueryError(
                f"Malformed SPARQL response (HTTP {response.status_code}): bindings is not a list",
                status_code=response.status_code,
            )

        logger.info(
            "SPARQL_CALL_END status=OK duration_ms=%d rows=%d",
            duration_ms,
            len(bindings),
        )
        return bindings

    def count(self, query: str) -> int:
        """
        Execute a COUNT query and return the ?count value.

        Returns 0 when the endpoint returns no rows.

        Raises:
            UpstreamQueryError: If the request fails or ?count is not an integer
        """
        rows = self.execute(query)
        if not rows:
            return 0
        try:
            return int(rows[0]["count"]["value"])
        except (KeyError, TypeError, ValueError) as e:
            raise UpstreamQueryError(f"Malformed count binding: {rows[0]!r}") from e
