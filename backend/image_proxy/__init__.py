"""
Image Proxy Module

Fetches external images, resizes them to the requested dimensions
and serves the result, memoizing every variant in the disk cache.

Features:
- /fill/<width>/<height>/<external url> endpoint
- Scale and center-crop with Lanczos resampling (JPEG, PNG, GIF)
- Upstream body size limit and request header forwarding
"""

from .routes_fastapi import router
from .previewer import Previewer, Preview
from .fetcher import Fetcher
from .resizer import Resizer

__all__ = ["router", "Previewer", "Preview", "Fetcher", "Resizer"]
