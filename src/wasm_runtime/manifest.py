"""Manifest documents describing published runtimes.

Two documents are published per release channel:

* the global manifest, listing every language with its latest/LTS
  versions and upstream metadata
* one per-language manifest, mapping each version to the binary's
  file name, size, digest and download URL
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from wasm_runtime.errors import ManifestParseError


def _require(data: Dict[str, Any], key: str, kind: type, source: str) -> Any:
    if key not in data:
        raise ManifestParseError(source, f"missing field `{key}`")
    value = data[key]
    # bool is an int subclass; sizes must be real integers
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise ManifestParseError(
            source, f"invalid type for `{key}`: expected {kind.__name__}"
        )
    return value


def _require_object(data: Any, source: str) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise ManifestParseError(source, "expected a JSON object")
    return data


def _string_list(data: Dict[str, Any], key: str, source: str) -> List[str]:
    values = data.get(key, [])
    if not isinstance(values, list) or not all(isinstance(v, str) for v in values):
        raise ManifestParseError(source, f"invalid type for `{key}`: expected list of strings")
    return values


@dataclass
class RuntimeInfo:
    """Per-language summary from the global manifest"""
    latest: str
    source: str
    license: str
    lts: Optional[str] = None
    versions: List[str] = field(default_factory=list)

    def with_lts(self, lts: str) -> "RuntimeInfo":
        self.lts = lts
        return self

    def add_version(self, version: str) -> None:
        if version not in self.versions:
            self.versions.append(version)

    @classmethod
    def from_dict(cls, data: Any, source: str = "<manifest>") -> "RuntimeInfo":
        data = _require_object(data, source)
        lts = data.get("lts")
        if lts is not None and not isinstance(lts, str):
            raise ManifestParseError(source, "invalid type for `lts`: expected str")

        info = cls(
            latest=_require(data, "latest", str, source),
            source=_require(data, "source", str, source),
            license=_require(data, "license", str, source),
            lts=lts,
        )
        for version in _require(data, "versions", list, source):
            if not isinstance(version, str):
                raise ManifestParseError(source, "invalid type for `versions`: expected list of strings")
            info.add_version(version)
        return info

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"latest": self.latest}
        if self.lts is not None:
            result["lts"] = self.lts
        result.update({
            "versions": list(self.versions),
            "source": self.source,
            "license": self.license,
        })
        return result


@dataclass
class GlobalManifest:
    """Index of every published language"""
    version: str
    languages: Dict[str, RuntimeInfo] = field(default_factory=dict)

    def add_language(self, name: str, info: RuntimeInfo) -> None:
        self.languages[name] = info

    def get_language(self, name: str) -> Optional[RuntimeInfo]:
        return self.languages.get(name)

    @classmethod
    def from_dict(cls, data: Any, source: str = "<manifest>") -> "GlobalManifest":
        data = _require_object(data, source)
        manifest = cls(version=_require(data, "version", str, source))
        languages = data.get("languages", {})
        if not isinstance(languages, dict):
            raise ManifestParseError(source, "invalid type for `languages`: expected object")
        for name, info in languages.items():
            manifest.add_language(name, RuntimeInfo.from_dict(info, source))
        return manifest

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "languages": {name: info.to_dict() for name, info in self.languages.items()},
        }


@dataclass
class RuntimeVersion:
    """One downloadable binary"""
    file: str
    size: int
    sha256: str
    released: str
    url: str
    wasi: bool = False
    features: List[str] = field(default_factory=list)

    def with_wasi(self, wasi: bool) -> "RuntimeVersion":
        self.wasi = wasi
        return self

    def add_feature(self, feature: str) -> None:
        if feature not in self.features:
            self.features.append(feature)

    @classmethod
    def from_dict(cls, data: Any, source: str = "<manifest>") -> "RuntimeVersion":
        data = _require_object(data, source)
        wasi = data.get("wasi", False)
        if not isinstance(wasi, bool):
            raise ManifestParseError(source, "invalid type for `wasi`: expected bool")

        version = cls(
            file=_require(data, "file", str, source),
            size=_require(data, "size", int, source),
            sha256=_require(data, "sha256", str, source),
            released=_require(data, "released", str, source),
            url=_require(data, "url", str, source),
            wasi=wasi,
        )
        if version.size < 0:
            raise ManifestParseError(source, "invalid value for `size`: expected a non-negative integer")
        for feature in _string_list(data, "features", source):
            version.add_feature(feature)
        return version

    def to_dict(self) -> Dict[str, Any]:
        return {
            "file": self.file,
            "size": self.size,
            "sha256": self.sha256,
            "released": self.released,
            "wasi": self.wasi,
            "features": list(self.features),
            "url": self.url,
        }


@dataclass
class RuntimeManifest:
    """Version table for a single language"""
    language: str
    versions: Dict[str, RuntimeVersion] = field(default_factory=dict)

    def add_version(self, version: str, info: RuntimeVersion) -> None:
        self.versions[version] = info

    def get_version(self, version: str) -> Optional[RuntimeVersion]:
        return self.versions.get(version)

    @classmethod
    def from_dict(cls, data: Any, source: str = "<manifest>") -> "RuntimeManifest":
        data = _require_object(data, source)
        manifest = cls(language=_require(data, "language", str, source))
        for version, info in _require(data, "versions", dict, source).items():
            manifest.add_version(version, RuntimeVersion.from_dict(info, source))
        return manifest

    def to_dict(self) -> Dict[str, Any]:
        return {
            "language": self.language,
            "versions": {name: info.to_dict() for name, info in self.versions.items()},
        }
