"""
Upstream image fetcher.

Downloads source images over HTTP with httpx. The body is streamed so the
maximum file size is enforced while reading, not after.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Mapping, Optional, Tuple, Union

import httpx

from .errors import FetchError, ImageTooLargeError, UpstreamStatusError

logger = logging.getLogger(__name__)

DEFAULT_MAX_FILE_SIZE = 5 * 1024 * 1024
DEFAULT_TIMEOUT = 30.0

# Not forwarded to the upstream server
SKIP_HEADERS = {
    "host",
    "connection",
    "keep-alive",
    "proxy-authenticate",
    "proxy-authorization",
    "te",
    "trailers",
    "transfer-encoding",
    "upgrade",
    "content-length",
    "accept-encoding",
}

Headers = Union[Mapping[str, str], Iterable[Tuple[str, str]]]


@dataclass
class FetchResult:
    """Body and metadata of a successful upstream response."""
    url: str
    content: bytes
    content_type: str
    status_code: int


def forwardable_headers(headers: Optional[Headers]) -> List[Tuple[str, str]]:
    """Drop hop-by-hop headers and Host from the client request headers."""
    if not headers:
        return []
    items = headers.items() if hasattr(headers, "items") else headers
    return [(k, v) for k, v in items if k.lower() not in SKIP_HEADERS]


class Fetcher:
    """
    Fetches images from external servers.

    Usage:
        fetcher = Fetcher(max_file_size=5 * 1024 * 1024)
        result = await fetcher.fetch("http://example.com/image.jpg")
        await fetcher.close()
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        max_file_size: int = DEFAULT_MAX_FILE_SIZE,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.max_file_size = max_file_size
        self._owns_client = client is None
        self.http_client = client or httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=True,
            headers={"Accept": "image/*,*/*;q=0.8"},
        )

    async def close(self) -> None:
        """Close the HTTP client if this fetcher created it."""
        if self._owns_client:
            await self.http_client.aclose()

    async def fetch(self, url: str, headers: Optional[Headers] = None) -> FetchResult:
        """
        Download ``url``.

        Args:
            url: Absolute upstream URL
            headers: Client request headers to forward

        Raises:
            UpstreamStatusError: upstream answered with status >= 400
            ImageTooLargeError: body is larger than max_file_size
            FetchError: network error or timeout
        """
        logger.info(f"[Fetcher] Fetching: {url[:80]}")
        try:
            async with self.http_client.stream("GET", url, headers=forwardable_headers(headers)) as response:
                logger.debug(f"[Fetcher] Upstream answered {response.status_code} for {url[:60]}")
                if response.status_code >= 400:
                    raise UpstreamStatusError(response.status_code, response.reason_phrase)

                declared = response.headers.get("content-length", "")
                if declared.isdigit() and int(declared) > self.max_file_size:
                    raise ImageTooLargeError(f"Image too large (max {self.max_file_size} bytes)")

                body = bytearray()
                async for chunk in response.aiter_bytes():
                    body.extend(chunk)
                    if len(body) > self.max_file_size:
                        raise ImageTooLargeError(f"Image too large (max {self.max_file_size} bytes)")

                content_type = response.headers.get("content-type", "").split(";")[0].strip().lower()
                status_code = response.status_code

        except httpx.TimeoutException:
            logger.error(f"[Fetcher] Timeout: {url[:60]}")
            raise FetchError("Image fetch timeout", status_code=504)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error(f"[Fetcher] Fetch error: {e}")
            raise FetchError(f"Failed to fetch image: {e}")

        logger.debug(f"[Fetcher] Received {len(body)} bytes from {url[:60]}")
        return FetchResult(
            url=url,
            content=bytes(body),
            content_type=content_type,
            status_code=status_code,
        )
