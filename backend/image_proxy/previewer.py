"""
Previewer

Request pipeline tying the fetcher, the resizer and the disk cache together:

    parse -> cache lookup -> hit:  serve
                          -> miss: fetch -> resize & store -> serve

A variant is registered in the cache only after it has been fully encoded
and written, so a failed resize never leaves an empty blob behind that
would be served as a hit.
"""

import logging
import os
import tempfile
from dataclasses import dataclass
from typing import Optional, Tuple

from starlette.concurrency import run_in_threadpool

from cache import CacheError, CacheFileError, DiskLRUCache, cache_key

from .fetcher import Fetcher, Headers
from .resizer import Resizer, sniff_content_type
from .url_params import URLParams

logger = logging.getLogger(__name__)


@dataclass
class Preview:
    """A resized image ready to be served."""
    key: str
    content: bytes
    content_type: str
    cache_hit: bool


class Previewer:
    """
    Produces and serves resized previews, memoized in a DiskLRUCache.

    Usage:
        previewer = Previewer(cache, Fetcher(), Resizer())
        preview = await previewer.get_preview(parse_url(path), request.headers)
    """

    def __init__(self, cache: DiskLRUCache, fetcher: Fetcher, resizer: Resizer):
        self.cache = cache
        self.fetcher = fetcher
        self.resizer = resizer

    @staticmethod
    def get_cache_key(params: URLParams) -> str:
        return cache_key(params.external_url, params.width, params.height)

    def has_file(self, key: str) -> bool:
        """A hit needs both an index entry and its blob on disk."""
        _, found = self.cache.get(key)
        return found and self.cache.has_file_path(key)

    async def get_preview(self, params: URLParams, headers: Optional[Headers] = None) -> Preview:
        """
        Serve the variant described by ``params``, producing it on a miss.

        Raises:
            PreviewerError: fetch or resize failed
            CacheError: the blob could not be written or read
        """
        key = self.get_cache_key(params)
        logger.debug(f"[Previewer] Checking item {key} in cache")

        if await run_in_threadpool(self.has_file, key):
            try:
                content, content_type = await run_in_threadpool(self.read_file, key)
                logger.debug(f"[Previewer] Cache hit: {params.external_url[:60]}")
                return Preview(key=key, content=content, content_type=content_type, cache_hit=True)
            except CacheFileError as e:
                # Evicted between lookup and read
                logger.warning(f"[Previewer] Cached file vanished, fetching again: {e}")

        logger.debug("[Previewer] File was not found in cache, fetching the content...")
        result = await self.fetcher.fetch(params.upstream_url, headers)
        # Served from memory, the blob may already be evicted by another request
        content, content_type = await run_in_threadpool(self.resize_and_store, key, result.content, params)
        logger.info(f"[Previewer] Proxied: {params.external_url[:60]} ({len(content)} bytes)")
        return Preview(key=key, content=content, content_type=content_type, cache_hit=False)

    def resize_and_store(self, key: str, data: bytes, params: URLParams) -> Tuple[bytes, str]:
        """
        Resize ``data`` and register the result under ``key``.

        The encoded image goes to a hidden temp file in the cache directory,
        is renamed onto the blob name, and only then added to the index.

        Returns:
            Tuple of (encoded image, MIME type)
        """
        encoded, mime_type = self.resizer.resize(data, params.width, params.height)

        cache_dir = self.cache.get_dir()
        target = self.cache.file_path(key)
        try:
            cache_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=".tmp-", dir=cache_dir)
        except OSError as e:
            raise CacheFileError(f"failed to create temp file: {e}", cache_dir) from e

        try:
            with os.fdopen(fd, "wb") as f:
                f.write(encoded)
            os.replace(tmp_path, target)
        except OSError as e:
            self._discard(tmp_path)
            raise CacheFileError(f"failed to write cache file: {e}", target) from e

        try:
            self.cache.set(key, key)
        except CacheError:
            # An eviction failure still leaves the new entry indexed
            if key not in self.cache:
                self._discard(target)
            raise

        logger.debug(f"[Previewer] Stored {key} ({mime_type}, {len(encoded)} bytes)")
        return encoded, mime_type

    def read_file(self, key: str) -> Tuple[bytes, str]:
        """Read a blob and sniff its content type."""
        with self.cache.get_file(key, "rb") as f:
            content = f.read()
        return content, sniff_content_type(content)

    @staticmethod
    def _discard(path) -> None:
        try:
            os.remove(path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.error(f"[Previewer] Failed to remove {path}: {e}")
