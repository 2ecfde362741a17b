"""
Image Resizer

Decodes a source image, fills the requested box (scale, then center crop
with Lanczos resampling) and encodes the result in the source format.

Supported formats: JPEG, PNG, GIF.
"""

import logging
from io import BytesIO
from typing import Tuple

from PIL import Image, ImageOps

from .errors import ResizeError, UnsupportedFileTypeError

logger = logging.getLogger(__name__)

SNIFF_LENGTH = 512

# Magic bytes -> MIME type
SIGNATURES = [
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"BM", "image/bmp"),
    (b"\x00\x00\x01\x00", "image/x-icon"),
]

# MIME type -> Pillow encoder
ENCODERS = {
    "image/jpeg": "JPEG",
    "image/png": "PNG",
    "image/gif": "GIF",
}


def sniff_content_type(header: bytes) -> str:
    """Detect the MIME type from the first bytes of a file."""
    header = header[:SNIFF_LENGTH]
    for magic, mime in SIGNATURES:
        if header.startswith(magic):
            return mime
    if header[:4] == b"RIFF" and header[8:12] == b"WEBP":
        return "image/webp"
    return "application/octet-stream"


class Resizer:
    """
    Produces resized variants of source images.

    Usage:
        resizer = Resizer()
        data, mime_type = resizer.resize(source_bytes, 300, 200)
    """

    def __init__(self, jpeg_quality: int = 75):
        self.jpeg_quality = jpeg_quality

    def resize(self, data: bytes, width: int, height: int) -> Tuple[bytes, str]:
        """
        Fill ``width`` x ``height`` with the source image.

        Returns:
            Tuple of (encoded image, MIME type)

        Raises:
            UnsupportedFileTypeError: source is not JPEG, PNG or GIF
            ResizeError: decoding, resizing or encoding failed
        """
        mime_type = sniff_content_type(data)
        logger.debug(f"[Resizer] Found mimeType: {mime_type}")
        save_format = ENCODERS.get(mime_type)
        if save_format is None:
            raise UnsupportedFileTypeError(mime_type)

        try:
            img = Image.open(BytesIO(data))
            img.load()

            if img.mode == "P":
                img = img.convert("RGBA")
            if save_format == "JPEG" and img.mode not in ("RGB", "L", "CMYK"):
                img = img.convert("RGB")

            resized = ImageOps.fit(
                img,
                (width, height),
                method=Image.Resampling.LANCZOS,
                centering=(0.5, 0.5),
            )

            output = BytesIO()
            save_kwargs = {"format": save_format}
            if save_format == "JPEG":
                save_kwargs["quality"] = self.jpeg_quality
            resized.save(output, **save_kwargs)
        except (OSError, ValueError, OverflowError, MemoryError, Image.DecompressionBombError) as e:
            logger.error(f"[Resizer] Failed to resize image: {e}")
            raise ResizeError() from e

        logger.debug(f"[Resizer] {img.size[0]}x{img.size[1]} -> {width}x{height} ({output.tell()} bytes)")
        return output.getvalue(), mime_type
