"""Runtime binary cache management."""
import os
import shutil
import tempfile
from pathlib import Path
from typing import List, Optional, Union

import appdirs

from wasm_runtime.constants import CACHE_SUBDIR, PARTIAL_SUFFIX, WASM_EXT
from wasm_runtime.errors import CacheDirError, IntegrityCheckError, InvalidVersionError
from wasm_runtime.logging import get_logger
from wasm_runtime.types import Language, Runtime
from wasm_runtime.utils.generic import has_wasm_magic, sha256_file

logger = get_logger(__name__)

CACHE_DIR_ENV = "WASM_RUNTIME_CACHE_DIR"

# Characters that would let a version escape its language directory
UNSAFE_VERSION_CHARS = ("/", "\\", "\0")
TEMP_PREFIX = ".tmp-"


def default_cache_dir() -> Path:
    """Resolve the cache root: env override, else the OS user cache directory."""
    override = os.environ.get(CACHE_DIR_ENV, "").strip()
    if override:
        return Path(override).expanduser()

    try:
        base = appdirs.user_cache_dir()
    except (KeyError, OSError, RuntimeError) as e:
        raise CacheDirError(str(e)) from e

    # An unexpanded "~" means no home directory could be found
    if not base or base.startswith("~"):
        raise CacheDirError(f"no usable user cache directory ({base!r})")

    return Path(base) / CACHE_SUBDIR


class CacheStore:
    """Disk-backed runtime store keyed by (language, version).

    Entries are never trusted: every read recomputes size and digest from
    the file on disk.
    """

    def __init__(self, cache_dir: Optional[Union[str, Path]] = None):
        self.cache_dir = Path(cache_dir) if cache_dir is not None else default_cache_dir()

    def path_for(self, language: Language, version: str) -> Path:
        if (
            version in ("", ".", "..")
            or any(c in version for c in UNSAFE_VERSION_CHARS)
        ):
            raise InvalidVersionError(version)
        return self.cache_dir / language.canonical_name / f"{version}{WASM_EXT}"

    @staticmethod
    def compute_digest(path: Path) -> str:
        return sha256_file(path)

    @staticmethod
    def has_wasm_magic(path: Path) -> bool:
        return has_wasm_magic(path)

    def _describe(self, language: Language, version: str, path: Path) -> Runtime:
        return Runtime(
            language=language,
            version=version,
            path=path,
            size=path.stat().st_size,
            sha256=self.compute_digest(path),
        )

    def get(self, language: Language, version: str) -> Optional[Runtime]:
        """Return the cached runtime, or None when nothing is stored."""
        path = self.path_for(language, version)
        if not path.is_file():
            return None
        return self._describe(language, version, path)

    def store(self, language: Language, version: str, data: bytes) -> Runtime:
        """Write a runtime into the cache, replacing any existing entry."""
        path = self.path_for(language, version)
        path.parent.mkdir(parents=True, exist_ok=True)

        # Write next to the target and swap in, so readers never see a partial file
        fd, tmp_name = tempfile.mkstemp(
            dir=path.parent, prefix=TEMP_PREFIX, suffix=PARTIAL_SUFFIX
        )
        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp_path, path)
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise

        runtime = self._describe(language, version, path)
        logger.info({
            "event": "runtime_cached",
            "language": language.canonical_name,
            "version": version,
            "path": str(path),
            "size": runtime.size,
            "sha256": runtime.sha256,
        })
        return runtime

    def clear(self, language: Language, version: str) -> None:
        path = self.path_for(language, version)
        if path.exists():
            path.unlink()
            logger.info({
                "event": "runtime_cleared",
                "language": language.canonical_name,
                "version": version,
            })

    def clear_all(self) -> None:
        if self.cache_dir.exists():
            shutil.rmtree(self.cache_dir)
            logger.info({"event": "cache_cleared", "path": str(self.cache_dir)})

    def list(self) -> List[Runtime]:
        """Describe every cached runtime, grouped by language."""
        runtimes: List[Runtime] = []
        if not self.cache_dir.exists():
            return runtimes

        for language in Language.all():
            lang_dir = self.cache_dir / language.canonical_name
            if not lang_dir.is_dir():
                continue

            for path in lang_dir.iterdir():
                if not path.is_file() or path.suffix != WASM_EXT:
                    continue
                runtimes.append(self._describe(language, path.stem, path))

        return runtimes

    def verify_integrity(self, runtime: Runtime, expected_sha256: str) -> None:
        """Raise IntegrityCheckError unless the file still hashes to `expected_sha256`."""
        actual = self.compute_digest(runtime.path)
        if actual != expected_sha256:
            logger.error({
                "event": "integrity_check_failed",
                "language": runtime.language.canonical_name,
                "version": runtime.version,
                "expected": expected_sha256,
                "actual": actual,
            })
            raise IntegrityCheckError(expected_sha256, actual)
