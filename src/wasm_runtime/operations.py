"""High-level operations consumed by front ends (MCP tools, scripts)."""

from typing import Any, Dict, Optional

from wasm_runtime.constants import LATEST_SELECTOR
from wasm_runtime.errors import ManifestNotFoundError, VersionNotFoundError
from wasm_runtime.loader import RuntimeLoader
from wasm_runtime.logging import get_logger
from wasm_runtime.manifest import RuntimeInfo
from wasm_runtime.types import Language, Runtime

logger = get_logger(__name__)


async def fetch_runtime(
    loader: RuntimeLoader,
    language: str,
    version: str = LATEST_SELECTOR,
    force: bool = False,
) -> Runtime:
    """Get a runtime by language name and version selector.

    Args:
        loader: Loader to fetch through
        language: Language name or alias
        version: Exact version, "latest" or "lts"
        force: Drop any cached copy before fetching

    Returns:
        The verified runtime
    """
    lang = Language.parse(language)
    resolved = await loader.resolve_version(lang, version)

    if force:
        logger.info({
            "event": "forced_refetch",
            "language": lang.canonical_name,
            "version": resolved,
        })
        loader.clear_cache(lang, resolved)

    return await loader.get_runtime(lang, resolved)


async def list_runtimes(
    loader: RuntimeLoader, language: Optional[str] = None
) -> Dict[str, RuntimeInfo]:
    """Published runtimes per language, in language declaration order."""
    manifest = await loader.list_available()
    languages = [Language.parse(language)] if language else Language.all()

    return {
        lang.canonical_name: info
        for lang in languages
        if (info := manifest.get_language(lang.canonical_name)) is not None
    }


async def runtime_info(
    loader: RuntimeLoader, language: str, version: Optional[str] = None
) -> Dict[str, Any]:
    """Language metadata, plus per-version details when a version is given."""
    lang = Language.parse(language)
    manifest = await loader.list_available()
    info = manifest.get_language(lang.canonical_name)
    if info is None:
        raise ManifestNotFoundError(lang.canonical_name)

    result: Dict[str, Any] = {"language": lang.canonical_name, **info.to_dict()}
    if version is None:
        return result

    runtime_manifest = await loader.fetch_runtime_manifest(lang)
    version_info = runtime_manifest.get_version(version)
    if version_info is None:
        raise VersionNotFoundError(lang.canonical_name, version)

    result["version_details"] = {"version": version, **version_info.to_dict()}
    return result


def cache_contents(loader: RuntimeLoader) -> Dict[str, Any]:
    runtimes = loader.list_cached()
    return {
        "location": str(loader.cache.cache_dir),
        "runtimes": [
            {**runtime.to_dict(), "valid_wasm": loader.cache.has_wasm_magic(runtime.path)}
            for runtime in runtimes
        ],
        "count": len(runtimes),
        "total_size": sum(runtime.size for runtime in runtimes),
    }


def clear_cached(loader: RuntimeLoader, language: str, version: str) -> None:
    loader.clear_cache(Language.parse(language), version)


def clear_all_cached(loader: RuntimeLoader) -> None:
    loader.clear_all_cache()
