"""
Background segmentation collaborators for the line-art pipeline.

Provides:
- BackgroundRemover: protocol implemented by every backend
- LocalBackgroundRemover: in-process rembg model
- RemoteBackgroundRemover: HTTP background-removal API
- build_background_remover: factory driven by KEEL_SEGMENTATION_BACKEND
- SegmentationError: raised by any backend failure
"""

from keel.integrations.segmentation.client import (
    BackgroundRemover,
    LocalBackgroundRemover,
    RemoteBackgroundRemover,
    SegmentationError,
    build_background_remover,
)

__all__ = [
    "BackgroundRemover",
    "LocalBackgroundRemover",
    "RemoteBackgroundRemover",
    "SegmentationError",
    "build_background_remover",
]
