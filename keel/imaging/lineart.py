"""Line-art rendering: photograph -> flattened black/white silhouette PNG.

Stages, in order:
1. download_image      raw bytes (DownloadError on failure)
2. normalize_image     decode, cap width, RGBA (ImageDecodeError on failure)
3. segment_background  optional; failures fall back to the unsegmented image
4. to_grayscale
5. smooth_edges        bilateral filter
6. binarize            Gaussian-weighted adaptive threshold
7. apply_alpha_mask    transparent (background) -> white, everything opaque
8. encode_png_base64

Stages 4-8 are pure array transforms.
"""

from __future__ import annotations

import base64
import io
import logging
import time
from dataclasses import dataclass

import numpy as np
import requests
from numpy.typing import NDArray
from PIL import Image, ImageOps
from skimage.filters import threshold_local
from skimage.restoration import denoise_bilateral

from keel.integrations.segmentation.client import BackgroundRemover, SegmentationError

logger = logging.getLogger(__name__)

PNG_DATA_URI_PREFIX = "data:image/png;base64,"

# 8-bit channel range; filter parameters are given in 8-bit units and scaled
# onto skimage's [0, 1] float intensities.
_MAX_INTENSITY = 255.0

WHITE = 255
OPAQUE = 255


class LineArtError(Exception):
    """Base class for fatal line-art failures."""


class DownloadError(LineArtError):
    """Raised when the source photograph cannot be downloaded."""

    def __init__(self, message: str, status_code: int | None = None, url: str | None = None):
        self.status_code = status_code
        self.url = url
        super().__init__(message)


class ImageDecodeError(LineArtError):
    """Raised when downloaded bytes are not a decodable image."""


@dataclass(frozen=True)
class LineArtConfig:
    """
    Rendering parameters.

    Attributes:
        max_width: Width cap after normalization; narrower images are never upscaled
        bilateral_diameter: Bilateral window size in pixels
        bilateral_sigma_color: Color similarity sigma, 8-bit units
        bilateral_sigma_space: Spatial sigma, pixels
        block_size: Adaptive threshold neighbourhood, odd and >= 3
        offset: Constant subtracted from the local threshold, 8-bit units
        alpha_threshold: Pixels with alpha below this are background
    """

    max_width: int = 800
    bilateral_diameter: int = 9
    bilateral_sigma_color: float = 75.0
    bilateral_sigma_space: float = 75.0
    block_size: int = 11
    offset: float = 2.0
    alpha_threshold: int = 128

    def __post_init__(self) -> None:
        if self.max_width <= 0:
            raise ValueError(f"max_width must be positive, got {self.max_width}")
        if self.bilateral_diameter < 1:
            raise ValueError(f"bilateral_diameter must be >= 1, got {self.bilateral_diameter}")
        if self.block_size < 3 or self.block_size % 2 == 0:
            raise ValueError(f"block_size must be odd and >= 3, got {self.block_size}")
        if not 0 <= self.alpha_threshold <= 255:
            raise ValueError(f"alpha_threshold must be in [0, 255], got {self.alpha_threshold}")

    @property
    def gaussian_sigma(self) -> float:
        """Gaussian sigma derived from block size (OpenCV's getGaussianKernel rule)."""
        return 0.3 * ((self.block_size - 1) * 0.5 - 1) + 0.8


DEFAULT_CONFIG = LineArtConfig()


@dataclass(frozen=True)
class LineArt:
    """Rendered silhouette plus whether background removal took effect."""

    png_base64: str
    segmented: bool

    @property
    def data_uri(self) -> str:
        return to_data_uri(self.png_base64)


# ── Stage 1-3: I/O and normalization ──


def download_image(
    url: str,
    session: requests.Session | None = None,
    timeout_s: float = 30.0,
    user_agent: str | None = None,
) -> bytes:
    """Download raw image bytes. Redirects are followed (Special:FilePath redirects)."""
    http = session or requests.Session()
    headers = {"User-Agent": user_agent} if user_agent else None

    start = time.monotonic()
    logger.info("IMAGE_DOWNLOAD_START url=%s", url)
    try:
        response = http.get(url, headers=headers, timeout=timeout_s)
    except requests.RequestException as e:
        logger.error("IMAGE_DOWNLOAD_END status=ERROR error=%s", str(e))
        raise DownloadError(f"Image download failed: {e}", url=url) from e

    if not response.ok:
        logger.error("IMAGE_DOWNLOAD_END status=HTTP_ERROR http_status=%d", response.status_code)
        raise DownloadError(
            f"Image download failed: HTTP {response.status_code}",
            status_code=response.status_code,
            url=url,
        )

    content = response.content
    logger.info(
        "IMAGE_DOWNLOAD_END status=OK duration_ms=%d bytes=%d",
        int((time.monotonic() - start) * 1000),
        len(content),
    )
    return content


def normalize_image(raw: bytes, max_width: int = DEFAULT_CONFIG.max_width) -> Image.Image:
    """Decode, apply EXIF orientation, cap width (aspect preserved), convert to RGBA."""
    try:
        image = Image.open(io.BytesIO(raw))
        image.load()
    except (OSError, Image.DecompressionBombError) as e:
        raise ImageDecodeError(f"Cannot decode image: {e}") from e

    image = ImageOps.exif_transpose(image)

    if image.width > max_width:
        height = max(1, round(image.height * max_width / image.width))
        image = image.resize((max_width, height), Image.Resampling.LANCZOS)

    return image.convert("RGBA")


def segment_background(image: Image.Image, remover: BackgroundRemover | None) -> tuple[Image.Image, bool]:
    """
    Make background pixels transparent.

    Returns:
        (image, segmented). Without a remover, or when it fails, the input
        is returned unchanged with segmented=False.
    """
    if remover is None:
        logger.info("Segmentation disabled, rendering unsegmented image")
        return image, False

    try:
        result = remover.remove_background(image)
    except SegmentationError as e:
        logger.warning(
            "Segmentation failed, rendering unsegmented image",
            extra={"error": str(e), "http_status": e.status_code},
        )
        return image, False
    except Exception as e:
        # Backends outside this package may not wrap their errors
        logger.warning(
            "Segmentation backend raised %s, rendering unsegmented image",
            type(e).__name__,
            extra={"error": str(e)},
        )
        return image, False

    result = result.convert("RGBA")
    if result.size != image.size:
        result = result.resize(image.size, Image.Resampling.LANCZOS)
    return result, True


# ── Stage 4-8: pure transforms ──


def to_grayscale(image: Image.Image) -> NDArray[np.uint8]:
    """Luma (ITU-R 601) of the color channels; alpha is ignored here."""
    return np.asarray(image.convert("RGB").convert("L"), dtype=np.uint8)


def smooth_edges(gray: NDArray[np.uint8], config: LineArtConfig = DEFAULT_CONFIG) -> NDArray[np.float64]:
    """Edge-preserving bilateral smoothing. Returns floats in [0, 1]."""
    return denoise_bilateral(
        gray.astype(np.float64) / _MAX_INTENSITY,
        win_size=config.bilateral_diameter,
        sigma_color=config.bilateral_sigma_color / _MAX_INTENSITY,
        sigma_spatial=config.bilateral_sigma_space,
        mode="edge",
    )


def binarize(smoothed: NDArray[np.float64], config: LineArtConfig = DEFAULT_CONFIG) -> NDArray[np.uint8]:
    """
    Adaptive threshold: white where a pixel is brighter than its
    Gaussian-weighted neighbourhood minus the offset, black elsewhere.
    """
    threshold = threshold_local(
        smoothed,
        block_size=config.block_size,
        method="gaussian",
        offset=config.offset / _MAX_INTENSITY,
        param=config.gaussian_sigma,
    )
    return np.where(smoothed > threshold, WHITE, 0).astype(np.uint8)


def apply_alpha_mask(
    binary: NDArray[np.uint8],
    alpha: NDArray[np.uint8],
    threshold: int = DEFAULT_CONFIG.alpha_threshold,
) -> NDArray[np.uint8]:
    """
    Flatten binarized luminance and segmentation alpha into opaque RGBA.

    Background (alpha < threshold) becomes white; subject pixels keep their
    binarized value. Every output pixel is fully opaque.
    """
    if binary.shape != alpha.shape:
        raise ValueError(f"Shape mismatch: binary {binary.shape} vs alpha {alpha.shape}")

    luminance = np.where(alpha < threshold, WHITE, binary).astype(np.uint8)
    rgba = np.empty((*luminance.shape, 4), dtype=np.uint8)
    rgba[..., 0] = luminance
    rgba[..., 1] = luminance
    rgba[..., 2] = luminance
    rgba[..., 3] = OPAQUE
    return rgba


def encode_png_base64(rgba: NDArray[np.uint8]) -> str:
    """Composite onto white, encode as PNG, base64 (no data-URI prefix)."""
    foreground = Image.fromarray(rgba)
    canvas = Image.new("RGBA", foreground.size, (WHITE, WHITE, WHITE, OPAQUE))
    canvas.alpha_composite(foreground)

    buffer = io.BytesIO()
    canvas.convert("RGB").save(buffer, format="PNG", optimize=True)
    return base64.b64encode(buffer.getvalue()).decode("ascii")


def to_data_uri(png_base64: str) -> str:
    return PNG_DATA_URI_PREFIX + png_base64


# ── Composition ──


def render_line_art_from_bytes(
    raw: bytes,
    config: LineArtConfig = DEFAULT_CONFIG,
    remover: BackgroundRemover | None = None,
) -> LineArt:
    """Run stages 2-8 over already-downloaded bytes."""
    start = time.monotonic()
    image = normalize_image(raw, max_width=config.max_width)
    segmented_image, segmented = segment_background(image, remover)

    alpha = np.asarray(segmented_image.getchannel("A"), dtype=np.uint8)
    gray = to_grayscale(segmented_image)
    smoothed = smooth_edges(gray, config)
    binary = binarize(smoothed, config)
    flattened = apply_alpha_mask(binary, alpha, config.alpha_threshold)
    encoded = encode_png_base64(flattened)

    logger.info(
        "Line art rendered",
        extra={
            "width": segmented_image.width,
            "height": segmented_image.height,
            "segmented": segmented,
            "duration_ms": int((time.monotonic() - start) * 1000),
            "encoded_chars": len(encoded),
        },
    )
    return LineArt(png_base64=encoded, segmented=segmented)


def render_line_art(
    url: str,
    config: LineArtConfig = DEFAULT_CONFIG,
    remover: BackgroundRemover | None = None,
    session: requests.Session | None = None,
    timeout_s: float = 30.0,
    user_agent: str | None = None,
) -> LineArt:
    """
    Download a photograph and render it as line art.

    Returns:
        LineArt with the base64-encoded PNG and the segmentation outcome

    Raises:
        DownloadError: Download failed
        ImageDecodeError: Bytes are not an image
    """
    raw = download_image(url, session=session, timeout_s=timeout_s, user_agent=user_agent)
    return render_line_art_from_bytes(raw, config=config, remover=remover)
