"""
Wikipedia REST summary client.

Endpoint: GET https://en.wikipedia.org/api/rest_v1/page/summary/{title}
Response: {"title": ..., "extract": ..., "description": ...}

A 404 is the normal "no article" outcome and returns None. Every other
failure raises SummaryFetchError; callers decide whether that is fatal.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from urllib.parse import quote

import requests

logger = logging.getLogger(__name__)

# encodeURIComponent leaves these unescaped
_TITLE_SAFE_CHARS = "-_.!~*'()"


class SummaryFetchError(Exception):
    """Raised when the summary endpoint fails for a reason other than 404."""

    def __init__(self, message: str, status_code: int | None = None, body: str | None = None):
        self.status_code = status_code
        self.body = body[:500] if body else None
        super().__init__(message)


@dataclass
class WikipediaSummary:
    """Plain-text summary of one article."""

    title: str
    extract: str
    description: str | None = None

    @classmethod
    def from_api_response(cls, data: dict, fallback_title: str = "") -> "WikipediaSummary":
        return cls(
            title=data.get("title") or fallback_title,
            extract=data.get("extract") or "",
            description=data.get("description") or None,
        )


def encode_title(title: str) -> str:
    """Article title -> URL path segment (spaces become underscores)."""
    return quote(title.replace(" ", "_"), safe=_TITLE_SAFE_CHARS)


class WikipediaClient:
    """HTTP client for the Wikipedia REST summary endpoint."""

    def __init__(
        self,
        user_agent: str,
        base_url: str = "https://en.wikipedia.org/api/rest_v1/page/summary",
        timeout_s: float = 30.0,
        session: requests.Session | None = None,
    ):
        if not user_agent:
            raise ValueError("A User-Agent is required for Wikipedia requests")
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s
        self._session = session or requests.Session()
        self._session.headers.update({
            "Accept": "application/json",
            "User-Agent": user_agent,
        })

    def summary_url(self, title: str) -> str:
        return f"{self.base_url}/{encode_title(title)}"

    def fetch_summary(self, title: str) -> WikipediaSummary | None:
        """
        Fetch the summary for an article title.

        Returns:
            WikipediaSummary, or None when the article does not exist (404)

        Raises:
            SummaryFetchError: On transport error, other non-success status,
                or a non-JSON body
        """
        if not title or not title.strip():
            raise ValueError("Article title is required")

        url = self.summary_url(title)
        call_start_ms = time.monotonic() * 1000
        logger.info("SUMMARY_CALL_START title=%s", title)

        try:
            response = self._session.get(url, timeout=self.timeout_s)
        except requests.RequestException as e:
            duration_ms = int(time.monotonic() * 1000 - call_start_ms)
            logger.warning(
                "SUMMARY_CALL_END status=ERROR duration_ms=%d error=%s",
                duration_ms,
                str(e),
            )
            raise SummaryFetchError(f"Summary request failed: {e}") from e

        duration_ms = int(time.monotonic() * 1000 - call_start_ms)

        if response.status_code == 404:
            logger.info("SUMMARY_CALL_END status=NOT_FOUND duration_ms=%d", duration_ms)
            return None

        if not response.ok:
            logger.warning(
                "SUMMARY_CALL_END status=HTTP_ERROR duration_ms=%d http_status=%d",
                duration_ms,
                response.status_code,
            )
            raise SummaryFetchError(
                f"Summary fetch failed: HTTP {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise SummaryFetchError(
                f"Malformed summary response (HTTP {response.status_code})",
                status_code=response.status_code,
                body=response.text,
            ) from e

        if not isinstance(data, dict):
            raise SummaryFetchError(
                f"Malformed summary response (HTTP {response.status_code})",
                status_code=response.status_code,
            )

        logger.info("SUMMARY_CALL_END status=OK duration_ms=%d", duration_ms)
        return WikipediaSummary.from_api_response(data, fallback_title=title)
