"""
Resizer tests.

Run:
    pytest backend/tests/test_resizer.py -v
"""

from io import BytesIO

import pytest
from PIL import Image, ImageOps

from image_proxy.errors import ResizeError, UnsupportedFileTypeError
from image_proxy.resizer import Resizer, sniff_content_type


class TestSniffContentType:

    @pytest.mark.parametrize("fmt, mime", [
        ("JPEG", "image/jpeg"),
        ("PNG", "image/png"),
        ("GIF", "image/gif"),
        ("WEBP", "image/webp"),
        ("BMP", "image/bmp"),
    ])
    def test_image_formats(self, make_image, fmt, mime):
        assert sniff_content_type(make_image(fmt)) == mime

    def test_unknown(self):
        assert sniff_content_type(b"hello world") == "application/octet-stream"
        assert sniff_content_type(b"") == "application/octet-stream"


class TestResize:

    @pytest.mark.parametrize("fmt, mime", [
        ("JPEG", "image/jpeg"),
        ("PNG", "image/png"),
        ("GIF", "image/gif"),
    ])
    def test_fill_keeps_format(self, make_image, fmt, mime):
        data, out_mime = Resizer().resize(make_image(fmt, size=(120, 80)), 30, 40)

        assert out_mime == mime
        img = Image.open(BytesIO(data))
        assert img.format == fmt
        assert img.size == (30, 40)

    def test_upscale(self, make_image):
        data, _ = Resizer().resize(make_image("PNG", size=(10, 10)), 100, 50)
        assert Image.open(BytesIO(data)).size == (100, 50)

    def test_unsupported_format(self, make_image):
        with pytest.raises(UnsupportedFileTypeError) as exc_info:
            Resizer().resize(make_image("BMP"), 10, 10)
        assert "jpeg, png, gif" in str(exc_info.value)
        assert exc_info.value.mime_type == "image/bmp"

    def test_not_an_image(self):
        with pytest.raises(UnsupportedFileTypeError):
            Resizer().resize(b"<html></html>", 10, 10)

    def test_corrupt_image(self, make_image):
        truncated = make_image("PNG", size=(50, 50))[:40]
        with pytest.raises(ResizeError) as exc_info:
            Resizer().resize(truncated, 10, 10)
        assert str(exc_info.value) == "resize problem occurred"

    def test_box_too_large_for_pillow(self, make_image):
        with pytest.raises(ResizeError):
            Resizer().resize(make_image("JPEG"), 10 ** 20, 10)

    def test_out_of_memory(self, make_image, monkeypatch):
        def fit(*args, **kwargs):
            raise MemoryError()

        monkeypatch.setattr(ImageOps, "fit", fit)
        with pytest.raises(ResizeError):
            Resizer().resize(make_image("JPEG"), 10, 10)
