"""
Disk LRU Cache
磁盘 LRU 缓存

Capacity-bounded cache of resized image blobs stored on local disk.

- In-memory index (key -> list node) plus a recency list
- Every indexed entry is backed by a file in the cache directory
- LRU eviction deletes the evicted entry's file
- Existing files are adopted into the index at startup

Cache structure (flat):
cache_dir/
├── 3f9a...e1   (64 hex chars, one file per variant)
├── 81c0...7d
└── .tmp-xxxx   (hidden files are ignored)
"""

import logging
import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from threading import Lock
from typing import Any, Dict, IO, Iterator, List, Optional, Tuple, Union

from .errors import CacheError, CacheFileError, IncorrectPayloadError
from .recency_list import ListNode, RecencyList

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 10
DEFAULT_CACHE_DIR = ".cache"

# Blob reference: a path relative to the cache directory
BlobRef = Union[str, "os.PathLike[str]"]


@dataclass
class CacheEntry:
    """Key and blob reference stored in a recency list node."""
    key: str
    value: BlobRef


class DiskLRUCache:
    """
    Thread-safe LRU cache whose entries are files on disk.

    A single lock guards the (index, recency list) pair for the whole of
    ``get``, ``set`` and ``clear``. Blob creation and deletion happen while
    the lock is held.

    Usage:
        cache = DiskLRUCache(capacity=10, directory=".cache")
        key = cache_key(url, width, height)
        cache.set(key, key)
        with cache.get_file(key, "rb") as f:
            data = f.read()
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY, directory: Union[str, Path] = DEFAULT_CACHE_DIR):
        """
        Create the cache and adopt blobs already present in ``directory``.

        Args:
            capacity: Maximum number of entries (>= 1)
            directory: Cache root directory, created if missing

        Raises:
            ValueError: capacity is lower than 1
            CacheError: the directory can't be created or scanned
        """
        if capacity < 1:
            raise ValueError(f"cache capacity must be >= 1, got {capacity}")

        self.capacity = capacity
        self.directory = Path(directory)

        self._items: Dict[str, ListNode] = {}
        self._queue = RecencyList()
        self._lock = Lock()

        self._init_cache_dir()
        self._reconcile()

    # ============================================
    # Startup
    # ============================================

    def _init_cache_dir(self) -> None:
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise CacheError(f"failed to create cache directory {self.directory}: {e}") from e
        logger.info(f"[DiskCache] Cache directory: {self.directory}")

    def _scan_blobs(self) -> Iterator[Tuple[str, str]]:
        """Yield ``(key, relative path)`` for every regular, non-hidden file."""
        try:
            with os.scandir(self.directory) as it:
                entries = list(it)
        except OSError as e:
            raise CacheError(f"failed to scan cache directory {self.directory}: {e}") from e

        for entry in entries:
            if entry.name.startswith("."):
                continue
            if not entry.is_file(follow_symlinks=False):
                continue
            yield entry.name, entry.name

    def _reconcile(self) -> None:
        """
        Rebuild the index from files already on disk.

        Files are adopted in enumeration order; when there are more files
        than capacity the overflow is evicted like any other ``set``.
        """
        adopted = 0
        for key, path in self._scan_blobs():
            self.set(key, path)
            adopted += 1
        if adopted:
            logger.info(f"[DiskCache] Adopted {adopted} cached files ({len(self)} indexed)")

    # ============================================
    # Index operations
    # ============================================

    def get(self, key: str) -> Tuple[Optional[BlobRef], bool]:
        """
        Look up ``key``.

        On a hit the entry becomes the most recently used one. Never touches
        the disk.

        Returns:
            Tuple of (blob reference, found)
        """
        with self._lock:
            node = self._items.get(key)
            if node is None:
                return None, False
            self._queue.move_to_front(node)
            return node.value.value, True

    def set(self, key: str, value: BlobRef) -> bool:
        """
        Register ``value`` as the blob reference for ``key``.

        An existing key is refreshed: it moves to the front and its value is
        replaced, no blob is created or deleted. A new key gets its blob
        created (unless the file already exists), is inserted at the front,
        and the least recently used entries are evicted while the cache is
        over capacity.

        Returns:
            True if the key was already present

        Raises:
            IncorrectPayloadError: value is not a relative blob path
            CacheFileError: blob creation or deletion failed
        """
        blob_path = self._blob_path(value)

        with self._lock:
            node = self._items.get(key)
            if node is not None:
                node.value.value = value
                self._queue.move_to_front(node)
                return True

            # Index is only touched once the blob exists
            self._create_blob(blob_path)
            self._items[key] = self._queue.push_front(CacheEntry(key=key, value=value))
            self._evict_overflow()
            return False

    def clear(self) -> int:
        """
        Drop the whole index and delete the cache directory.

        Returns:
            Number of entries dropped from the index
        """
        with self._lock:
            count = len(self._items)
            self._items = {}
            self._queue = RecencyList()
            try:
                shutil.rmtree(self.directory)
            except FileNotFoundError:
                pass
            except OSError as e:
                raise CacheFileError(f"failed to remove cache directory: {e}", self.directory) from e
            logger.info(f"[DiskCache] Cleared {count} entries from {self.directory}")
            return count

    def keys(self) -> List[str]:
        """Snapshot of keys, most recently used first."""
        with self._lock:
            return [entry.key for entry in self._queue]

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def __contains__(self, key: str) -> bool:
        # Membership test only, does not count as a use
        with self._lock:
            return key in self._items

    def stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        with self._lock:
            return {
                "total_entries": len(self._items),
                "capacity": self.capacity,
                "directory": str(self.directory),
                "keys": [entry.key for entry in self._queue],
            }

    # ============================================
    # Blob files
    # ============================================

    def get_dir(self) -> Path:
        return self.directory

    def file_path(self, key: str) -> Path:
        """Path of the blob named after ``key``."""
        return self.directory / key

    def has_file_path(self, key: str) -> bool:
        """Check the blob exists on disk, regardless of the index."""
        return self.file_path(key).is_file()

    def get_file(self, key: str, mode: str = "rb") -> IO:
        """
        Open the blob for ``key``.

        Recency is not affected. Use ``"rb"`` to serve and ``"ab"`` / ``"wb"``
        to populate.

        Raises:
            CacheFileError: the file can't be opened
        """
        fpath = self.file_path(key)
        logger.debug(f"[DiskCache] Opening {fpath} ({mode})")
        try:
            return open(fpath, mode)
        except OSError as e:
            raise CacheFileError(f"failed to open cache file: {e}", fpath) from e

    def _blob_path(self, value: Any) -> Path:
        if not isinstance(value, (str, os.PathLike)):
            raise IncorrectPayloadError(value)
        rel = Path(value)
        if rel.is_absolute() or not rel.parts or ".." in rel.parts:
            raise IncorrectPayloadError(value)
        return self.directory / rel

    def _create_blob(self, fpath: Path) -> None:
        if fpath.exists():
            return
        try:
            fpath.parent.mkdir(parents=True, exist_ok=True)
            fpath.touch(exist_ok=True)
        except OSError as e:
            raise CacheFileError(f"failed to create cache file: {e}", fpath) from e
        logger.debug(f"[DiskCache] Created {fpath}")

    def _remove_blob(self, fpath: Path) -> None:
        try:
            fpath.unlink()
        except FileNotFoundError:
            logger.warning(f"[DiskCache] Cache file already missing: {fpath}")
        except OSError as e:
            raise CacheFileError(f"failed to remove cache file: {e}", fpath) from e
        else:
            logger.debug(f"[DiskCache] Removed {fpath}")

    def _evict_overflow(self) -> None:
        """
        Evict from the back until the cache fits its capacity.

        The index record is dropped only after the blob is gone, so a failed
        delete leaves the entry indexed and it is retried on the next ``set``.
        """
        while len(self._queue) > self.capacity:
            node = self._queue.back()
            entry: CacheEntry = node.value
            self._remove_blob(self._blob_path(entry.value))
            del self._items[entry.key]
            self._queue.remove(node)
            logger.info(f"[DiskCache] LRU evicted: {entry.key}")
