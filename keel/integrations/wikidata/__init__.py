"""
Wikidata integration for vessel selection.

Provides:
- WikidataClient: HTTP client for the SPARQL endpoint
- UpstreamQueryError: raised on any endpoint failure
- Query builders (import from .queries directly)
"""

from keel.integrations.wikidata.client import (
    Binding,
    UpstreamQueryError,
    WikidataClient,
)

__all__ = [
    "Binding",
    "UpstreamQueryError",
    "WikidataClient",
]
