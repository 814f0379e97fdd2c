"""
Unit tests for background segmentation backends.

Remote backend uses mocked HTTP; the local backend runs against a stubbed
rembg module (no model download in tests).
"""

import base64
import io
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
import requests
from PIL import Image

from keel.imaging.lineart import render_line_art_from_bytes
from keel.integrations.segmentation.client import (
    LocalBackgroundRemover,
    RemoteBackgroundRemover,
    SegmentationError,
    build_background_remover,
)
from tests.fixtures.images import make_photo


def _png_bytes(image: Image.Image) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def _fake_rembg(new_session=None, remove=None):
    return SimpleNamespace(
        new_session=new_session or MagicMock(return_value="u2net-session"),
        remove=remove or MagicMock(),
    )


@pytest.fixture
def photo_bytes():
    return make_photo(32, 24)


class TestBuildBackgroundRemover:
    """Tests for the backend factory."""

    def test_none_backend(self):
        assert build_background_remover("none") is None

    def test_remote_without_key_is_disabled(self):
        assert build_background_remover("remote", api_url="https://seg.test", api_key="") is None

    def test_remote_configured(self):
        remover = build_background_remover("remote", api_url="https://seg.test", api_key="k")
        assert isinstance(remover, RemoteBackgroundRemover)

    @patch("keel.integrations.segmentation.client.importlib.util.find_spec", return_value=None)
    def test_local_without_rembg_is_disabled(self, _mock_find_spec):
        assert build_background_remover("local") is None

    @patch("keel.integrations.segmentation.client.importlib.util.find_spec", return_value=object())
    def test_local_with_rembg(self, _mock_find_spec):
        assert isinstance(build_background_remover("local"), LocalBackgroundRemover)

    def test_unknown_backend_is_disabled(self):
        assert build_background_remover("magic") is None


class TestLocalBackgroundRemover:
    """Tests for LocalBackgroundRemover against a stubbed rembg."""

    def test_returns_rgba_cutout_and_reuses_session(self):
        cutout = Image.new("RGB", (8, 6), (10, 20, 30))
        rembg = _fake_rembg(remove=MagicMock(return_value=cutout))

        remover = LocalBackgroundRemover(model_name="u2net")
        with patch.dict("sys.modules", {"rembg": rembg}):
            first = remover.remove_background(Image.new("RGBA", (8, 6)))
            remover.remove_background(Image.new("RGBA", (8, 6)))

        assert first.mode == "RGBA"
        assert first.size == (8, 6)
        rembg.new_session.assert_called_once_with("u2net")
        assert rembg.remove.call_args[1]["session"] == "u2net-session"

    def test_decodes_byte_output(self):
        cutout = Image.new("RGBA", (5, 4), (0, 0, 0, 0))
        rembg = _fake_rembg(remove=MagicMock(return_value=_png_bytes(cutout)))

        with patch.dict("sys.modules", {"rembg": rembg}):
            result = LocalBackgroundRemover().remove_background(Image.new("RGBA", (5, 4)))

        assert result.size == (5, 4)
        assert result.getpixel((0, 0))[3] == 0

    def test_remove_failure_raises_segmentation_error(self):
        rembg = _fake_rembg(remove=MagicMock(side_effect=RuntimeError("onnxruntime: bad input")))

        with patch.dict("sys.modules", {"rembg": rembg}):
            with pytest.raises(SegmentationError, match="bad input") as exc_info:
                LocalBackgroundRemover().remove_background(Image.new("RGBA", (4, 4)))
        assert isinstance(exc_info.value.original_error, RuntimeError)

    def test_model_load_failure_raises_segmentation_error(self):
        rembg = _fake_rembg(new_session=MagicMock(side_effect=ConnectionError("could not download u2net.onnx")))

        with patch.dict("sys.modules", {"rembg": rembg}):
            with pytest.raises(SegmentationError, match="u2net.onnx") as exc_info:
                LocalBackgroundRemover().remove_background(Image.new("RGBA", (4, 4)))
        assert isinstance(exc_info.value.original_error, ConnectionError)
        rembg.remove.assert_not_called()

    def test_missing_rembg_raises_segmentation_error(self):
        with patch.dict("sys.modules", {"rembg": None}):
            with pytest.raises(SegmentationError, match="not installed"):
                LocalBackgroundRemover().remove_background(Image.new("RGBA", (4, 4)))

    def test_model_load_failure_still_renders_unsegmented(self, photo_bytes):
        rembg = _fake_rembg(new_session=MagicMock(side_effect=ConnectionError("could not download u2net.onnx")))

        with patch.dict("sys.modules", {"rembg": rembg}):
            line_art = render_line_art_from_bytes(photo_bytes, remover=LocalBackgroundRemover())

        assert line_art.segmented is False
        assert Image.open(io.BytesIO(base64.b64decode(line_art.png_base64))).format == "PNG"

    def test_remove_failure_still_renders_unsegmented(self, photo_bytes):
        rembg = _fake_rembg(remove=MagicMock(side_effect=RuntimeError("onnxruntime: bad input")))

        with patch.dict("sys.modules", {"rembg": rembg}):
            line_art = render_line_art_from_bytes(photo_bytes, remover=LocalBackgroundRemover())

        assert line_art.segmented is False
        assert Image.open(io.BytesIO(base64.b64decode(line_art.png_base64))).format == "PNG"


class TestRemoteBackgroundRemover:
    """Tests for RemoteBackgroundRemover."""

    def test_posts_png_and_decodes_result(self):
        source = Image.new("RGBA", (8, 6), (10, 20, 30, 255))
        cutout = Image.new("RGBA", (8, 6), (10, 20, 30, 0))

        session = MagicMock()
        session.headers = {}
        response = MagicMock()
        response.ok = True
        response.status_code = 200
        response.content = _png_bytes(cutout)
        session.post.return_value = response

        remover = RemoteBackgroundRemover(api_url="https://seg.test/v1", api_key="secret", session=session)
        result = remover.remove_background(source)

        assert session.headers["X-Api-Key"] == "secret"
        call = session.post.call_args
        assert call[0][0] == "https://seg.test/v1"
        assert "image_file" in call[1]["files"]
        assert result.mode == "RGBA"
        assert result.size == (8, 6)
        assert result.getpixel((0, 0))[3] == 0

    def test_http_error_raises_segmentation_error(self):
        session = MagicMock()
        session.headers = {}
        response = MagicMock()
        response.ok = False
        response.status_code = 402
        session.post.return_value = response

        remover = RemoteBackgroundRemover(api_url="https://seg.test", api_key="k", session=session)
        with pytest.raises(SegmentationError) as exc_info:
            remover.remove_background(Image.new("RGBA", (4, 4)))
        assert exc_info.value.status_code == 402

    def test_network_error_raises_segmentation_error(self):
        session = MagicMock()
        session.headers = {}
        session.post.side_effect = requests.ConnectionError("refused")

        remover = RemoteBackgroundRemover(api_url="https://seg.test", api_key="k", session=session)
        with pytest.raises(SegmentationError, match="refused"):
            remover.remove_background(Image.new("RGBA", (4, 4)))

    def test_undecodable_body_raises_segmentation_error(self):
        session = MagicMock()
        session.headers = {}
        response = MagicMock()
        response.ok = True
        response.status_code = 200
        response.content = b"not an image"
        session.post.return_value = response

        remover = RemoteBackgroundRemover(api_url="https://seg.test", api_key="k", session=session)
        with pytest.raises(SegmentationError, match="undecodable"):
            remover.remove_background(Image.new("RGBA", (4, 4)))

    def test_requires_key(self):
        with pytest.raises(ValueError):
            RemoteBackgroundRemover(api_url="https://seg.test", api_key="")
