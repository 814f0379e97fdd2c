"""
Unit tests for the Wikipedia summary client.

Uses mocked HTTP (no network calls).
"""

from unittest.mock import MagicMock

import pytest
import requests

from keel.integrations.wikipedia.client import (
    SummaryFetchError,
    WikipediaClient,
    WikipediaSummary,
    encode_title,
)


def _session(status_code=200, payload=None, ok=None):
    session = MagicMock()
    session.headers = {}
    response = MagicMock()
    response.status_code = status_code
    response.ok = (200 <= status_code < 300) if ok is None else ok
    response.json.return_value = payload
    response.text = "body"
    session.get.return_value = response
    return session


class TestTitleEncoding:
    """Tests for encode_title."""

    def test_spaces_become_underscores(self):
        assert encode_title("USS Cole (DDG-67)") == "USS_Cole_(DDG-67)"

    def test_reserved_characters_escaped(self):
        assert encode_title("HMS A/B & C") == "HMS_A%2FB_%26_C"

    def test_non_ascii_utf8(self):
        assert encode_title("Île-de-France") == "%C3%8Ele-de-France"


class TestFetchSummary:
    """Tests for fetch_summary."""

    def test_success(self):
        session = _session(payload={
            "title": "USS Cole (DDG-67)",
            "extract": "USS Cole is a destroyer. She was attacked in 2000.",
            "description": "Arleigh Burke-class destroyer",
        })
        client = WikipediaClient(user_agent="KeelTest/1.0", session=session)

        summary = client.fetch_summary("USS Cole (DDG-67)")

        assert summary == WikipediaSummary(
            title="USS Cole (DDG-67)",
            extract="USS Cole is a destroyer. She was attacked in 2000.",
            description="Arleigh Burke-class destroyer",
        )
        assert session.get.call_args[0][0] == (
            "https://en.wikipedia.org/api/rest_v1/page/summary/USS_Cole_(DDG-67)"
        )
        assert session.headers["User-Agent"] == "KeelTest/1.0"

    def test_not_found_returns_none(self):
        client = WikipediaClient(user_agent="KeelTest/1.0", session=_session(status_code=404))
        assert client.fetch_summary("No Such Ship") is None

    def test_server_error_raises(self):
        client = WikipediaClient(user_agent="KeelTest/1.0", session=_session(status_code=500))
        with pytest.raises(SummaryFetchError, match="500") as exc_info:
            client.fetch_summary("USS Cole")
        assert exc_info.value.status_code == 500

    def test_network_error_raises(self):
        session = _session()
        session.get.side_effect = requests.ConnectionError("dns failure")
        client = WikipediaClient(user_agent="KeelTest/1.0", session=session)
        with pytest.raises(SummaryFetchError, match="dns failure"):
            client.fetch_summary("USS Cole")

    def test_missing_description_is_none(self):
        client = WikipediaClient(
            user_agent="KeelTest/1.0",
            session=_session(payload={"title": "X", "extract": "Text."}),
        )
        assert client.fetch_summary("X").description is None

    def test_blank_title_rejected(self):
        client = WikipediaClient(user_agent="KeelTest/1.0", session=_session())
        with pytest.raises(ValueError):
            client.fetch_summary("  ")
