"""
Disk Cache Module
磁盘缓存模块

Capacity-bounded LRU cache for resized image variants,
backed by one file per variant in a local directory.
"""

from .disk_cache import DiskLRUCache, CacheEntry
from .errors import CacheError, CacheFileError, IncorrectPayloadError
from .keys import cache_key
from .recency_list import RecencyList, ListNode
from .routes import router as cache_router

__all__ = [
    "DiskLRUCache",
    "CacheEntry",
    "CacheError",
    "CacheFileError",
    "IncorrectPayloadError",
    "cache_key",
    "RecencyList",
    "ListNode",
    "cache_router",
]
