"""
Preview URL parsing.

Expected path format:
    /fill/<width>/<height>/<external url>

Example:
    /fill/300/200/www.audubon.org/sites/default/files/barred-owl.jpg
"""

import re
from dataclasses import dataclass

from .errors import InvalidURIError

URL_PATTERN = re.compile(r"^/(fill)/(\d+)/(\d+)/(.+)$")

# Largest accepted width or height
MAX_DIMENSION = 10000


@dataclass(frozen=True)
class URLParams:
    """Parsed preview request."""
    method: str
    width: int
    height: int
    external_url: str

    @property
    def filename(self) -> str:
        """Last path segment of the source URL."""
        return self.external_url.rstrip("/").split("/")[-1]

    @property
    def upstream_url(self) -> str:
        return f"http://{self.external_url}"


def parse_url(path: str, max_dimension: int = MAX_DIMENSION) -> URLParams:
    """
    Parse a request path into URLParams.

    Raises:
        InvalidURIError: path doesn't match the pattern, or a dimension is 0
            or above ``max_dimension``
    """
    match = URL_PATTERN.match(path)
    if not match:
        raise InvalidURIError()

    method, width, height, external_url = match.groups()
    try:
        width, height = int(width), int(height)
    except ValueError:
        # Digit strings past the int conversion limit
        raise InvalidURIError(f"invalid URI. Width and height must not exceed {max_dimension}")
    if width == 0 or height == 0:
        raise InvalidURIError("invalid URI. Width and height must be positive")
    if width > max_dimension or height > max_dimension:
        raise InvalidURIError(f"invalid URI. Width and height must not exceed {max_dimension}")

    return URLParams(
        method=method,
        width=width,
        height=height,
        external_url=external_url,
    )
