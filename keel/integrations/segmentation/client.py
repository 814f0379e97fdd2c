"""
Background segmentation backends.

Each backend takes an RGBA Pillow image and returns an RGBA image of the
same subject with background pixels made transparent. Backends raise
SegmentationError on any failure; the line-art pipeline recovers from it
by rendering the un-segmented image.

Backends:
- local: rembg (optional extra "segmentation"), model loaded on first use
- remote: remove.bg compatible API (multipart POST, X-Api-Key header)
"""

from __future__ import annotations

import importlib.util
import io
import logging
import time
from typing import Protocol

import requests
from PIL import Image

logger = logging.getLogger(__name__)


class SegmentationError(Exception):
    """Raised when a segmentation backend cannot produce a mask."""

    def __init__(self, message: str, status_code: int | None = None, original_error: Exception | None = None):
        self.status_code = status_code
        self.original_error = original_error
        super().__init__(message)


class BackgroundRemover(Protocol):
    """Anything that can make an image's background transparent."""

    def remove_background(self, image: Image.Image) -> Image.Image:
        ...


class LocalBackgroundRemover:
    """
    In-process segmentation using rembg.

    The rembg session (and its ONNX model) is created lazily on the first
    call and reused afterwards.
    """

    def __init__(self, model_name: str = "u2net"):
        self.model_name = model_name
        self._session = None

    def _get_session(self):
        if self._session is None:
            try:
                from rembg import new_session
            except ImportError as e:
                raise SegmentationError(
                    "rembg is not installed (install the 'segmentation' extra)",
                    original_error=e,
                ) from e
            try:
                self._session = new_session(self.model_name)
            except Exception as e:
                # model download or onnxruntime load
                raise SegmentationError(
                    f"Could not load segmentation model {self.model_name!r}: {e}",
                    original_error=e,
                ) from e
        return self._session

    def remove_background(self, image: Image.Image) -> Image.Image:
        session = self._get_session()

        start = time.monotonic()
        try:
            from rembg import remove

            result = remove(image, session=session)
            if not isinstance(result, Image.Image):
                result = Image.open(io.BytesIO(result))
            result = result.convert("RGBA")
        except Exception as e:
            raise SegmentationError(f"Local segmentation failed: {e}", original_error=e) from e

        logger.info(
            "Local segmentation complete",
            extra={"model": self.model_name, "duration_ms": int((time.monotonic() - start) * 1000)},
        )
        return result


class RemoteBackgroundRemover:
    """HTTP background-removal API client (remove.bg request shape)."""

    def __init__(
        self,
        api_url: str,
        api_key: str,
        timeout_s: float = 30.0,
        session: requests.Session | None = None,
    ):
        if not api_url:
            raise ValueError("api_url is required")
        if not api_key:
            raise ValueError("api_key is required")
        self.api_url = api_url
        self.timeout_s = timeout_s
        self._session = session or requests.Session()
        self._session.headers.update({"X-Api-Key": api_key})

    def remove_background(self, image: Image.Image) -> Image.Image:
        buffer = io.BytesIO()
        image.save(buffer, format="PNG")

        call_start_ms = time.monotonic() * 1000
        logger.info("SEGMENTATION_CALL_START url=%s", self.api_url)
        try:
            response = self._session.post(
                self.api_url,
                files={"image_file": ("image.png", buffer.getvalue(), "image/png")},
                data={"size": "auto", "format": "png"},
                timeout=self.timeout_s,
            )
        except requests.RequestException as e:
            logger.warning("SEGMENTATION_CALL_END status=ERROR error=%s", str(e))
            raise SegmentationError(f"Segmentation request failed: {e}", original_error=e) from e

        duration_ms = int(time.monotonic() * 1000 - call_start_ms)
        if not response.ok:
            logger.warning(
                "SEGMENTATION_CALL_END status=HTTP_ERROR duration_ms=%d http_status=%d",
                duration_ms,
                response.status_code,
            )
            raise SegmentationError(
                f"Segmentation failed: HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            result = Image.open(io.BytesIO(response.content))
            result.load()
        except (OSError, Image.DecompressionBombError) as e:
            raise SegmentationError("Segmentation API returned an undecodable image", original_error=e) from e

        logger.info("SEGMENTATION_CALL_END status=OK duration_ms=%d", duration_ms)
        return result.convert("RGBA")


def build_background_remover(
    backend: str,
    api_url: str = "",
    api_key: str = "",
    timeout_s: float = 30.0,
) -> BackgroundRemover | None:
    """
    Build the configured segmentation backend.

    Returns None (pipeline renders un-segmented) when the backend is "none",
    when "remote" lacks a URL or key, or when "local" is selected but rembg
    is not installed.
    """
    if backend == "none":
        return None

    if backend == "remote":
        if not api_url or not api_key:
            logger.warning("Remote segmentation selected but KEEL_SEGMENTATION_API_URL/KEY not set")
            return None
        return RemoteBackgroundRemover(api_url=api_url, api_key=api_key, timeout_s=timeout_s)

    if backend == "local":
        if importlib.util.find_spec("rembg") is None:
            logger.warning("Local segmentation selected but rembg is not installed")
            return None
        return LocalBackgroundRemover()

    logger.warning("Unknown segmentation backend %r, segmentation disabled", backend)
    return None
