"""Environment-driven settings."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Mapping, Optional, Tuple

from wasm_runtime.constants import DEFAULT_SOURCE_ORDER
from wasm_runtime.logging import DEFAULT_LOG_LEVEL
from wasm_runtime.sources import (
    CdnSource,
    GitHubReleasesSource,
    JsDelivrSource,
    source_from_name,
)

ENV_PREFIX = "WASM_RUNTIME_"


@dataclass(frozen=True)
class Settings:
    """Loader configuration, fixed at construction time"""
    cache_dir: Optional[Path] = None
    source_order: Tuple[str, ...] = DEFAULT_SOURCE_ORDER
    releases_base: Optional[str] = None
    cdn_base: Optional[str] = None
    timeout: Optional[float] = None
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ

        def get(name: str) -> Optional[str]:
            value = env.get(ENV_PREFIX + name, "").strip()
            return value or None

        cache_dir = get("CACHE_DIR")
        sources = get("SOURCES")
        timeout = get("TIMEOUT")

        source_order = DEFAULT_SOURCE_ORDER
        if sources:
            source_order = tuple(s.strip().lower() for s in sources.split(",") if s.strip())
            # fail early on typos
            for name in source_order:
                source_from_name(name)

        parsed_timeout = None
        if timeout:
            try:
                parsed_timeout = float(timeout)
            except ValueError as e:
                raise ValueError(f"Invalid {ENV_PREFIX}TIMEOUT: {timeout!r}") from e
            if parsed_timeout <= 0:
                raise ValueError(f"Invalid {ENV_PREFIX}TIMEOUT: {timeout!r}")

        return cls(
            cache_dir=Path(cache_dir).expanduser() if cache_dir else None,
            source_order=source_order,
            releases_base=get("RELEASES_BASE"),
            cdn_base=get("CDN_BASE"),
            timeout=parsed_timeout,
            log_level=(get("LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper(),
        )

    def build_sources(self) -> List[CdnSource]:
        """Instantiate the configured sources in priority order."""
        overrides = {
            GitHubReleasesSource.name: self.releases_base,
            JsDelivrSource.name: self.cdn_base,
        }
        return [source_from_name(name, overrides.get(name)) for name in self.source_order]
