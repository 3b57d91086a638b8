"""CDN sources serving manifests and runtime binaries.

Sources are tried in priority order by the loader; each one only knows
how to lay out its URLs.
"""

from abc import ABC, abstractmethod
from typing import Dict, Optional, Type

from wasm_runtime.constants import (
    GITHUB_RELEASES_BASE,
    JSDELIVR_BASE,
    LATEST_PATH,
    MANIFEST_FILE,
    RUNTIMES_PATH,
    WASM_EXT,
)
from wasm_runtime.types import Language


class CdnSource(ABC):
    """A remote origin for manifests and binaries."""

    name: str = ""
    default_base_url: str = ""

    def __init__(self, base_url: Optional[str] = None):
        self.base_url = (base_url or self.default_base_url).rstrip("/")

    @abstractmethod
    def global_manifest_url(self) -> str:
        ...

    @abstractmethod
    def runtime_manifest_url(self, language: Language) -> str:
        ...

    @abstractmethod
    def download_url(self, language: Language, version: str) -> str:
        ...

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(base_url={self.base_url!r})"


class GitHubReleasesSource(CdnSource):
    """Release assets attached to tagged GitHub releases."""

    name = "github"
    default_base_url = GITHUB_RELEASES_BASE

    def global_manifest_url(self) -> str:
        return f"{self.base_url}/{LATEST_PATH}/{MANIFEST_FILE}"

    def runtime_manifest_url(self, language: Language) -> str:
        return f"{self.base_url}/{LATEST_PATH}/{RUNTIMES_PATH}/{language.canonical_name}/{MANIFEST_FILE}"

    def download_url(self, language: Language, version: str) -> str:
        return f"{self.base_url}/v{version}/{language.canonical_name}-{version}{WASM_EXT}"


class JsDelivrSource(CdnSource):
    """jsDelivr mirror of the repository tree."""

    name = "jsdelivr"
    default_base_url = JSDELIVR_BASE

    def global_manifest_url(self) -> str:
        return f"{self.base_url}/{MANIFEST_FILE}"

    def runtime_manifest_url(self, language: Language) -> str:
        return f"{self.base_url}/{RUNTIMES_PATH}/{language.canonical_name}/{MANIFEST_FILE}"

    def download_url(self, language: Language, version: str) -> str:
        return f"{self.base_url}/{RUNTIMES_PATH}/{language.canonical_name}/{version}{WASM_EXT}"


SOURCE_TYPES: Dict[str, Type[CdnSource]] = {
    GitHubReleasesSource.name: GitHubReleasesSource,
    JsDelivrSource.name: JsDelivrSource,
}


def source_from_name(name: str, base_url: Optional[str] = None) -> CdnSource:
    source_type = SOURCE_TYPES.get(name.strip().lower())
    if source_type is None:
        raise ValueError(f"Unknown CDN source: {name}")
    return source_type(base_url)
