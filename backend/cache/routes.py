"""
Cache API Routes
缓存 API 路由

Provides HTTP endpoints for inspecting and resetting the disk cache:
- GET    /api/cache/stats   - Get cache statistics
- GET    /api/cache/{key}   - Check a single cache entry
- POST   /api/cache/clear   - Clear all cache entries
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel

from .disk_cache import DiskLRUCache
from .errors import CacheError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/cache", tags=["cache"])


# ============================================
# Request/Response Models
# ============================================

class CacheStatsResponse(BaseModel):
    """Response model for stats endpoint"""
    total_entries: int
    capacity: int
    directory: str
    keys: List[str]

class CacheEntryResponse(BaseModel):
    """Response model for entry endpoint"""
    key: str
    indexed: bool
    file_exists: bool
    size_bytes: int


def get_cache(request: Request) -> DiskLRUCache:
    """Dependency: the cache instance owned by the application."""
    return request.app.state.cache


# ============================================
# API Endpoints
# ============================================

@router.get("/stats", response_model=CacheStatsResponse)
def get_cache_stats(cache: DiskLRUCache = Depends(get_cache)):
    """
    Get cache statistics
    获取缓存统计信息

    Keys are listed most recently used first.
    """
    return CacheStatsResponse(**cache.stats())


@router.post("/clear")
def clear_cache(cache: DiskLRUCache = Depends(get_cache)):
    """
    Clear all cache entries
    清空所有缓存

    Use with caution - this deletes the whole cache directory.
    """
    try:
        count = cache.clear()
    except CacheError as e:
        logger.error(f"[CacheAPI] Failed to clear cache: {e}")
        raise HTTPException(status_code=500, detail=str(e))
    return {
        "success": True,
        "message": f"Cleared {count} cache entries",
        "deleted_count": count,
    }


@router.get("/{key}", response_model=CacheEntryResponse)
def get_cache_entry(key: str, cache: DiskLRUCache = Depends(get_cache)):
    """
    Check a single cache entry
    查询单个缓存条目

    Does not count as a use of the entry.
    """
    indexed = key in cache
    try:
        size_bytes = cache.file_path(key).stat().st_size
        file_exists = True
    except FileNotFoundError:
        size_bytes = 0
        file_exists = False

    if not indexed and not file_exists:
        raise HTTPException(status_code=404, detail=f"Cache entry '{key}' not found")
    return CacheEntryResponse(
        key=key,
        indexed=indexed,
        file_exists=file_exists,
        size_bytes=size_bytes,
    )
