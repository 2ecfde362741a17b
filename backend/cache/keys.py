"""
Cache key derivation.

A key identifies one resized variant of a source image. It is used directly
as the blob filename, so it must be fixed-length and filesystem safe.
"""

import hashlib
import logging

logger = logging.getLogger(__name__)

KEY_LENGTH = 64


def cache_key(external_url: str, width: int, height: int) -> str:
    """
    Derive the cache key for ``(external_url, width, height)``.

    SHA-512 over ``"<url>/<width>x<height>"``, hex encoded and cut to
    64 lowercase characters.
    """
    source = f"{external_url}/{int(width)}x{int(height)}"
    key = hashlib.sha512(source.encode("utf-8")).hexdigest()[:KEY_LENGTH]
    logger.debug(f"[CacheKey] {source} -> {key}")
    return key
