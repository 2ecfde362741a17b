"""
Cache error types.

- CacheError: base class for everything raised by the disk cache
- IncorrectPayloadError: value passed to ``set`` is not a blob reference
- CacheFileError: blob create/delete/open failed on the filesystem
"""


class CacheError(Exception):
    """Base class for disk cache errors."""


class IncorrectPayloadError(CacheError, TypeError):
    """Raised when a cache value is not a relative blob path."""

    def __init__(self, value):
        super().__init__(f"incorrect file path: {value!r}")
        self.value = value


class CacheFileError(CacheError):
    """Raised when a cache blob can't be created, removed or opened."""

    def __init__(self, message: str, path=None):
        super().__init__(message)
        self.path = path
