import copy
import hashlib
import json
from pathlib import Path
from unittest.mock import patch

import pytest

from wasm_runtime.cache import CacheStore
from wasm_runtime.config import Settings
from wasm_runtime.errors import NetworkError
from wasm_runtime.loader import RuntimeLoader
from wasm_runtime.sources import GitHubReleasesSource, JsDelivrSource

FIXTURES_DIR = Path(__file__).parent.parent / "fixtures_data" / "manifests"

WASM_BYTES = b"\x00asm\x01\x00\x00\x00python"
WASM_SHA256 = hashlib.sha256(WASM_BYTES).hexdigest()


class FakeNetwork:
    """Stands in for the HTTP helpers: URL -> payload or exception."""

    def __init__(self):
        self.responses = {}
        self.calls = []

    def add(self, url, value):
        self.responses[url] = value

    async def _respond(self, url, timeout=None):
        self.calls.append(url)
        if url not in self.responses:
            raise NetworkError(url, "HTTP 404 Not Found", status=404)
        value = self.responses[url]
        if isinstance(value, Exception):
            raise value
        return copy.deepcopy(value)

    async def fetch_json(self, url, timeout=None):
        return await self._respond(url, timeout)

    async def fetch_bytes(self, url, timeout=None):
        return await self._respond(url, timeout)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep developer environment overrides out of the tests"""
    for name in ("CACHE_DIR", "SOURCES", "RELEASES_BASE", "CDN_BASE", "TIMEOUT", "LOG_LEVEL"):
        monkeypatch.delenv(f"WASM_RUNTIME_{name}", raising=False)


@pytest.fixture
def global_manifest_data():
    return json.loads((FIXTURES_DIR / "manifest.json").read_text())


@pytest.fixture
def python_manifest_data():
    """Python manifest whose 3.11.7 entry matches WASM_BYTES"""
    data = json.loads((FIXTURES_DIR / "runtimes" / "python" / "manifest.json").read_text())
    data["versions"]["3.11.7"]["sha256"] = WASM_SHA256
    data["versions"]["3.11.7"]["size"] = len(WASM_BYTES)
    return data


@pytest.fixture
def cache(tmp_path):
    return CacheStore(tmp_path / "cache")


@pytest.fixture
def github():
    return GitHubReleasesSource()


@pytest.fixture
def jsdelivr():
    return JsDelivrSource()


@pytest.fixture
def loader(cache, github, jsdelivr):
    return RuntimeLoader(cache=cache, sources=[github, jsdelivr], settings=Settings())


@pytest.fixture
def network():
    fake = FakeNetwork()
    with patch("wasm_runtime.loader.fetch_json", new=fake.fetch_json), \
         patch("wasm_runtime.loader.fetch_bytes", new=fake.fetch_bytes):
        yield fake


@pytest.fixture
def wasm_bytes():
    return WASM_BYTES


@pytest.fixture
def wasm_sha256():
    return WASM_SHA256
