"""
Image previewer test configuration.

Fixtures:
- cache_dir: empty cache directory per test
- make_image: encode a solid-color test image
- upstream: fake image server backed by httpx.MockTransport
- client: FastAPI TestClient wired to the fake upstream

Run:
    pytest backend/tests -v
"""

import sys
from io import BytesIO
from pathlib import Path

import httpx
import pytest
from fastapi.testclient import TestClient
from PIL import Image

# Add backend directory to the Python path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

from server.config import Config
from server.main import create_app


# ============================================
# Image helpers
# ============================================

def encode_image(fmt: str = "JPEG", size=(64, 48), color=(200, 30, 30)) -> bytes:
    """Encode a solid-color image in ``fmt``."""
    mode = "RGBA" if fmt == "PNG" else "RGB"
    img = Image.new(mode, size, color)
    if fmt == "GIF":
        img = img.convert("P")
    output = BytesIO()
    img.save(output, format=fmt)
    return output.getvalue()


@pytest.fixture
def make_image():
    return encode_image


# ============================================
# Cache fixtures
# ============================================

@pytest.fixture
def cache_dir(tmp_path):
    """Cache directory path (not created)."""
    return tmp_path / "cache"


# ============================================
# Fake upstream
# ============================================

class FakeUpstream:
    """
    In-memory image server.

    Routes map a path to (status, body, content-type). Every request is
    recorded so tests can tell cache hits from fetches.
    """

    def __init__(self):
        self.routes = {}
        self.requests = []

    def add(self, path: str, body: bytes, status: int = 200, content_type: str = "image/jpeg"):
        self.routes[path] = (status, body, content_type)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path not in self.routes:
            return httpx.Response(404, text="not found")
        status, body, content_type = self.routes[request.url.path]
        return httpx.Response(status, content=body, headers={"content-type": content_type})

    def fetch_count(self, path: str) -> int:
        return sum(1 for r in self.requests if r.url.path == path)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def upstream():
    return FakeUpstream()


@pytest.fixture
def app_config(cache_dir):
    return Config(cache_dir=str(cache_dir), cache_size=4, log_level="debug")


@pytest.fixture
def client(app_config, upstream):
    """TestClient for an app whose upstream is the fake image server."""
    app = create_app(app_config, http_client=upstream.client())
    with TestClient(app) as test_client:
        yield test_client


# ============================================
# Helper Functions
# ============================================

def assert_cache_consistent(cache):
    """
    Check the cache invariants.

    - index keys and recency list entries are the same set, no duplicates
    - size within capacity
    - every indexed entry has its file on disk
    """
    keys = cache.keys()
    assert len(keys) == len(set(keys)), f"Duplicate keys in recency list: {keys}"
    assert set(keys) == set(cache._items), "Index and recency list diverged"
    assert len(keys) <= cache.capacity, f"Cache over capacity: {len(keys)} > {cache.capacity}"
    for key in keys:
        assert cache.has_file_path(key), f"Indexed key without file: {key}"
