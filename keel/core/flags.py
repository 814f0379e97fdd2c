"""
Flag readers for pipeline configuration.

Every reader pulls from Django settings with a safe default so that code
paths work in tests without any environment configuration. Invalid values
are logged and replaced by the default rather than raised.
"""

from __future__ import annotations

import logging
from typing import Literal

from django.conf import settings

logger = logging.getLogger("keel.core.flags")

SegmentationBackend = Literal["local", "remote", "none"]

DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; KeelGame/1.0; +https://github.com/keel-game)"
DEFAULT_TIMEOUT_S = 30.0
DEFAULT_LINEART_MAX_WIDTH = 800


def get_user_agent() -> str:
    """User-Agent sent on every outbound request."""
    return getattr(settings, "KEEL_USER_AGENT", "") or DEFAULT_USER_AGENT


def get_http_timeout_s() -> float:
    """
    Per-request timeout for outbound HTTP calls, in seconds.

    A timed-out call fails through the calling stage's ordinary error path.
    """
    raw = getattr(settings, "KEEL_HTTP_TIMEOUT_S", DEFAULT_TIMEOUT_S)
    try:
        timeout = float(raw)
    except (TypeError, ValueError):
        logger.warning("Invalid KEEL_HTTP_TIMEOUT_S=%r, defaulting to %s", raw, DEFAULT_TIMEOUT_S)
        return DEFAULT_TIMEOUT_S
    if timeout <= 0:
        logger.warning("Non-positive KEEL_HTTP_TIMEOUT_S=%r, defaulting to %s", raw, DEFAULT_TIMEOUT_S)
        return DEFAULT_TIMEOUT_S
    return timeout


def get_segmentation_backend() -> SegmentationBackend:
    """
    Get the background segmentation backend.

    Returns:
        "local" - rembg model in-process (default)
        "remote" - HTTP background-removal API
        "none" - skip segmentation, render the whole photograph
    """
    backend = str(getattr(settings, "KEEL_SEGMENTATION_BACKEND", "local")).lower().strip()
    if backend not in ("local", "remote", "none"):
        logger.warning(
            "Invalid KEEL_SEGMENTATION_BACKEND=%r, defaulting to none",
            backend,
        )
        return "none"
    return backend  # type: ignore[return-value]


def get_segmentation_api_config() -> tuple[str, str]:
    """Return (api_url, api_key) for the remote segmentation backend."""
    return (
        getattr(settings, "KEEL_SEGMENTATION_API_URL", ""),
        getattr(settings, "KEEL_SEGMENTATION_API_KEY", ""),
    )


def get_lineart_max_width() -> int:
    """Maximum width of the normalized photograph before line-art rendering."""
    raw = getattr(settings, "KEEL_LINEART_MAX_WIDTH", DEFAULT_LINEART_MAX_WIDTH)
    try:
        width = int(raw)
    except (TypeError, ValueError):
        logger.warning(
            "Invalid KEEL_LINEART_MAX_WIDTH=%r, defaulting to %d",
            raw,
            DEFAULT_LINEART_MAX_WIDTH,
        )
        return DEFAULT_LINEART_MAX_WIDTH
    return width if width > 0 else DEFAULT_LINEART_MAX_WIDTH
