"""
Image Proxy API Routes

Provides endpoints for:
- Resizing external images (with disk cache)
- Health check
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse, Response

from cache import CacheError

from .errors import PreviewerError
from .previewer import Previewer
from .url_params import parse_url

logger = logging.getLogger(__name__)

ERR_CACHE_FILE = "problem with cache file occurred"

# ============================================
# Router
# ============================================

router = APIRouter(tags=["Image Proxy"])


def get_previewer(request: Request) -> Previewer:
    """Dependency: the previewer owned by the application."""
    return request.app.state.previewer


# ============================================
# Endpoints
# ============================================

@router.get("/fill/{external_path:path}")
async def resize_image(request: Request, previewer: Previewer = Depends(get_previewer)):
    """
    Resize an external image to fill the requested box.

    This endpoint:
    1. Checks if the variant is already cached
    2. If not, fetches the source from http://<external url>
    3. Resizes it and stores the result in the cache
    4. Returns the image with the sniffed content-type

    Example:
        GET /fill/300/200/www.audubon.org/sites/default/files/barred-owl.jpg
    """
    try:
        params = parse_url(request.url.path, request.app.state.config.max_dimension)
    except PreviewerError as e:
        logger.error(f"[ImageProxy] {e}: {request.url.path[:80]}")
        raise HTTPException(status_code=e.status_code, detail=str(e))
    logger.debug(f"[ImageProxy] Parsed url params {params}")

    try:
        preview = await previewer.get_preview(params, request.headers)
    except PreviewerError as e:
        logger.error(f"[ImageProxy] Preview failed ({e.status_code}): {e}")
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except CacheError as e:
        logger.error(f"[ImageProxy] {ERR_CACHE_FILE}: {e}")
        raise HTTPException(status_code=500, detail=ERR_CACHE_FILE)

    return Response(
        content=preview.content,
        media_type=preview.content_type,
        headers={
            "X-Cache": "HIT" if preview.cache_hit else "MISS",
            "Cache-Control": "public, max-age=86400",
        },
    )


@router.get("/health-check")
async def health_check():
    """Health check endpoint."""
    return JSONResponse(content={"OK": True})
