"""
Wikipedia integration for trivia clues.

Provides:
- WikipediaClient: REST summary endpoint client
- WikipediaSummary: parsed summary payload
- SummaryFetchError: raised on non-404 failures
"""

from keel.integrations.wikipedia.client import (
    SummaryFetchError,
    WikipediaClient,
    WikipediaSummary,
)

__all__ = [
    "SummaryFetchError",
    "WikipediaClient",
    "WikipediaSummary",
]
