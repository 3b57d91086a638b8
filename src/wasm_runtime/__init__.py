"""Download, verify and cache WebAssembly language runtimes."""

__version__ = "0.1.0"

from wasm_runtime.cache import CacheStore, default_cache_dir
from wasm_runtime.errors import (
    CacheDirError,
    IntegrityCheckError,
    InvalidLanguageError,
    InvalidVersionError,
    ManifestNotFoundError,
    ManifestParseError,
    NetworkError,
    RuntimeNotFoundError,
    VersionNotFoundError,
    WasmRuntimeError,
)
from wasm_runtime.loader import RuntimeLoader
from wasm_runtime.manifest import (
    GlobalManifest,
    RuntimeInfo,
    RuntimeManifest,
    RuntimeVersion,
)
from wasm_runtime.sources import CdnSource, GitHubReleasesSource, JsDelivrSource
from wasm_runtime.types import Language, Runtime

__all__ = [
    "__version__",
    "CacheStore",
    "default_cache_dir",
    "CacheDirError",
    "IntegrityCheckError",
    "InvalidLanguageError",
    "InvalidVersionError",
    "ManifestNotFoundError",
    "ManifestParseError",
    "NetworkError",
    "RuntimeNotFoundError",
    "VersionNotFoundError",
    "WasmRuntimeError",
    "RuntimeLoader",
    "GlobalManifest",
    "RuntimeInfo",
    "RuntimeManifest",
    "RuntimeVersion",
    "CdnSource",
    "GitHubReleasesSource",
    "JsDelivrSource",
    "Language",
    "Runtime",
]
