"""Runtime acquisition: cache lookup, manifest resolution and CDN fallback."""
import asyncio
import weakref
from typing import Awaitable, Callable, List, Optional, Sequence, Tuple, TypeVar

from wasm_runtime.cache import CacheStore
from wasm_runtime.config import Settings
from wasm_runtime.constants import LATEST_SELECTOR, LTS_SELECTOR
from wasm_runtime.errors import (
    IntegrityCheckError,
    ManifestNotFoundError,
    ManifestParseError,
    NetworkError,
    VersionNotFoundError,
    WasmRuntimeError,
)
from wasm_runtime.logging import get_logger
from wasm_runtime.manifest import GlobalManifest, RuntimeManifest
from wasm_runtime.sources import CdnSource
from wasm_runtime.types import Language, Runtime
from wasm_runtime.utils.fetching import fetch_bytes, fetch_json
from wasm_runtime.utils.generic import sha256_bytes

logger = get_logger(__name__)

T = TypeVar("T")

# Failures that move the fallback loop on to the next source
SOURCE_ERRORS = (NetworkError, ManifestParseError)


class RuntimeLoader:
    """Resolves (language, version) to a verified runtime on local disk."""

    def __init__(
        self,
        cache: Optional[CacheStore] = None,
        sources: Optional[Sequence[CdnSource]] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or Settings.from_env()
        self.cache = cache or CacheStore(self.settings.cache_dir)
        self.sources: List[CdnSource] = (
            list(sources) if sources is not None else self.settings.build_sources()
        )
        # Entries disappear once no download holds or awaits the lock
        self._locks: "weakref.WeakValueDictionary[Tuple[Language, str], asyncio.Lock]" = (
            weakref.WeakValueDictionary()
        )

    def _lock_for(self, language: Language, version: str) -> asyncio.Lock:
        key = (language, version)
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock

    async def _first_success(
        self,
        what: str,
        attempt: Callable[[CdnSource], Awaitable[T]],
        fallback: Callable[[], WasmRuntimeError],
    ) -> T:
        """Try each source in order and return the first result.

        Per-source failures are logged and remembered; only the last one is
        raised once every source has been tried.
        """
        last_error: Optional[WasmRuntimeError] = None
        for source in self.sources:
            try:
                return await attempt(source)
            except SOURCE_ERRORS as e:
                logger.warning({
                    "event": "source_failed",
                    "what": what,
                    "source": source.name,
                    "error": str(e),
                })
                last_error = e

        raise last_error or fallback()

    async def _fetch_global_manifest(self) -> GlobalManifest:
        async def attempt(source: CdnSource) -> GlobalManifest:
            url = source.global_manifest_url()
            data = await fetch_json(url, timeout=self.settings.timeout)
            return GlobalManifest.from_dict(data, url)

        return await self._first_success(
            "global_manifest",
            attempt,
            lambda: WasmRuntimeError("Failed to fetch manifest"),
        )

    async def fetch_runtime_manifest(self, language: Language) -> RuntimeManifest:
        async def attempt(source: CdnSource) -> RuntimeManifest:
            url = source.runtime_manifest_url(language)
            data = await fetch_json(url, timeout=self.settings.timeout)
            return RuntimeManifest.from_dict(data, url)

        return await self._first_success(
            f"{language}_manifest",
            attempt,
            lambda: ManifestNotFoundError(language.canonical_name),
        )

    async def list_available(self) -> GlobalManifest:
        return await self._fetch_global_manifest()

    async def get_latest_version(self, language: Language) -> str:
        manifest = await self._fetch_global_manifest()
        info = manifest.get_language(language.canonical_name)
        if info is None:
            raise ManifestNotFoundError(language.canonical_name)
        return info.latest

    async def get_lts_version(self, language: Language) -> str:
        manifest = await self._fetch_global_manifest()
        info = manifest.get_language(language.canonical_name)
        if info is None:
            raise ManifestNotFoundError(language.canonical_name)
        if info.lts is None:
            raise VersionNotFoundError(language.canonical_name, LTS_SELECTOR)
        return info.lts

    async def resolve_version(self, language: Language, selector: str) -> str:
        """Turn "latest", "lts" or an exact version into an exact version."""
        if selector == LATEST_SELECTOR:
            return await self.get_latest_version(language)
        if selector == LTS_SELECTOR:
            return await self.get_lts_version(language)
        return selector

    async def get_runtime(self, language: Language, version: str) -> Runtime:
        """Return the cached runtime if present, downloading it otherwise."""
        cached = self.cache.get(language, version)
        if cached:
            logger.info({
                "event": "using_cached_runtime",
                "language": language.canonical_name,
                "version": version,
                "path": str(cached.path),
            })
            return cached

        return await self.download_runtime(language, version)

    async def download_runtime(self, language: Language, version: str) -> Runtime:
        """Download, verify and cache a runtime, ignoring any cached copy.

        A digest mismatch aborts immediately; the remaining sources are
        not tried.
        """
        async with self._lock_for(language, version):
            manifest = await self.fetch_runtime_manifest(language)
            version_info = manifest.get_version(version)
            if version_info is None:
                raise VersionNotFoundError(language.canonical_name, version)

            async def attempt(source: CdnSource) -> Runtime:
                url = source.download_url(language, version)
                logger.info({
                    "event": "downloading_runtime",
                    "language": language.canonical_name,
                    "version": version,
                    "source": source.name,
                    "url": url,
                })
                data = await fetch_bytes(url, timeout=self.settings.timeout)

                actual = sha256_bytes(data)
                if actual != version_info.sha256:
                    logger.error({
                        "event": "integrity_check_failed",
                        "language": language.canonical_name,
                        "version": version,
                        "source": source.name,
                        "expected": version_info.sha256,
                        "actual": actual,
                    })
                    raise IntegrityCheckError(version_info.sha256, actual)

                return self.cache.store(language, version, data)

            return await self._first_success(
                f"{language}_{version}_download",
                attempt,
                lambda: WasmRuntimeError("All CDN sources failed"),
            )

    def clear_cache(self, language: Language, version: str) -> None:
        self.cache.clear(language, version)

    def clear_all_cache(self) -> None:
        self.cache.clear_all()

    def list_cached(self) -> List[Runtime]:
        return self.cache.list()
