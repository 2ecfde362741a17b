"""
Image previewer server entry point.

Builds the application: one DiskLRUCache, Fetcher, Resizer and Previewer per
process, shared with the request handlers through ``app.state``.

Usage:
    image-previewer --config config.json
    python -m server.main
"""

import argparse
import logging
import sys
from contextlib import asynccontextmanager
from typing import List, Optional

import httpx
import uvicorn
from fastapi import FastAPI

from cache import CacheError, DiskLRUCache, cache_router
from image_proxy import Fetcher, Previewer, Resizer
from image_proxy import router as image_proxy_router

from .config import Config, ConfigError, load_config
from .logging_setup import get_log_level, setup_logging

logger = logging.getLogger(__name__)


def create_app(config: Optional[Config] = None, http_client: Optional[httpx.AsyncClient] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        config: Settings, loaded from the environment when omitted
        http_client: Client used for upstream requests (a new one when omitted)

    Raises:
        CacheError: the cache directory can't be prepared or scanned
    """
    config = config or load_config()

    cache = DiskLRUCache(capacity=config.cache_size, directory=config.cache_dir)
    fetcher = Fetcher(
        client=http_client,
        max_file_size=config.max_file_size,
        timeout=config.fetch_timeout,
    )
    previewer = Previewer(cache, fetcher, Resizer())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await fetcher.close()

    app = FastAPI(title="Image Previewer", lifespan=lifespan)
    app.state.config = config
    app.state.cache = cache
    app.state.previewer = previewer

    app.include_router(image_proxy_router)
    app.include_router(cache_router)

    logger.debug(f"[Server] Config: {config}")
    return app


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Image previewer")
    parser.add_argument("--config", default="", help="Path to a JSON config file")
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config or None)
    except ConfigError as e:
        setup_logging("error")
        logger.critical(f"[Server] Application cannot start: {e}")
        return 1

    setup_logging(config.log_level)

    try:
        app = create_app(config)
    except CacheError as e:
        logger.critical(f"[Server] Application cannot start: {e}")
        return 1

    logger.info(f"[Server] Listening at {config.host}:{config.port}")
    uvicorn.run(
        app,
        host=config.host,
        port=config.port,
        log_level=logging.getLevelName(get_log_level(config.log_level)).lower(),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
