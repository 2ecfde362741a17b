"""
Image proxy error types.

Each error carries the HTTP status code the routes answer with.
"""


class PreviewerError(Exception):
    """Base class for errors raised while producing a preview."""

    status_code = 500

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code


class InvalidURIError(PreviewerError):
    status_code = 400

    def __init__(self, message: str = "invalid URI. Expected format is: /<method>/<width>/<height>/<external url>"):
        super().__init__(message)


class FetchError(PreviewerError):
    """Upstream could not be reached."""
    status_code = 502


class UpstreamStatusError(PreviewerError):
    """Upstream answered with a status >= 400."""

    def __init__(self, status_code: int, reason: str = ""):
        super().__init__(f"{status_code} {reason}".strip(), status_code=status_code)


class ImageTooLargeError(PreviewerError):
    status_code = 413


class UnsupportedFileTypeError(PreviewerError):
    status_code = 400

    def __init__(self, mime_type: str = ""):
        super().__init__("file type is not supported. Supported file types: jpeg, png, gif")
        self.mime_type = mime_type


class ResizeError(PreviewerError):
    status_code = 400

    def __init__(self, message: str = "resize problem occurred"):
        super().__init__(message)
