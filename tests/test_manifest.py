"""Tests for manifest documents."""
import pytest

from wasm_runtime.errors import ManifestParseError
from wasm_runtime.manifest import (
    GlobalManifest,
    RuntimeInfo,
    RuntimeManifest,
    RuntimeVersion,
)


def make_version(**overrides):
    fields = dict(
        file="python-3.11.7.wasm",
        size=1024,
        sha256="abc123",
        released="2024-01-01",
        url="https://example.com/python-3.11.7.wasm",
    )
    fields.update(overrides)
    return RuntimeVersion(**fields)


def test_global_manifest():
    manifest = GlobalManifest("1.0.0")
    assert manifest.version == "1.0.0"
    assert manifest.languages == {}

    manifest.add_language(
        "python", RuntimeInfo("3.11.7", "https://github.com/pyodide/pyodide", "MIT")
    )
    assert len(manifest.languages) == 1
    assert manifest.get_language("python").latest == "3.11.7"
    assert manifest.get_language("ruby") is None


def test_runtime_info_versions_are_unique():
    info = RuntimeInfo("20.2.0", "https://nodejs.org", "MIT")
    assert info.lts is None

    info = info.with_lts("18.19.0")
    assert info.lts == "18.19.0"

    info.add_version("20.2.0")
    info.add_version("18.19.0")
    info.add_version("20.2.0")
    assert info.versions == ["20.2.0", "18.19.0"]


def test_runtime_manifest():
    manifest = RuntimeManifest("python")
    assert manifest.versions == {}

    manifest.add_version("3.11.7", make_version())
    assert manifest.get_version("3.11.7").file == "python-3.11.7.wasm"
    assert manifest.get_version("3.12.0") is None


def test_runtime_version_features():
    version = make_version()
    assert not version.wasi
    assert version.features == []

    version = version.with_wasi(True)
    assert version.wasi

    version.add_feature("async")
    version.add_feature("filesystem")
    version.add_feature("async")
    assert version.features == ["async", "filesystem"]


def test_parse_global_manifest(global_manifest_data):
    manifest = GlobalManifest.from_dict(global_manifest_data)

    assert manifest.version == "0.1.0"
    assert set(manifest.languages) == {"python", "nodejs", "go"}

    python = manifest.get_language("python")
    assert python.latest == "3.11.7"
    assert python.lts == "3.10.13"
    assert python.versions == ["3.11.7", "3.10.13"]
    assert python.license == "PSF-2.0"
    assert manifest.get_language("nodejs").lts is None


def test_parse_runtime_manifest(python_manifest_data, wasm_sha256):
    manifest = RuntimeManifest.from_dict(python_manifest_data)

    assert manifest.language == "python"
    latest = manifest.get_version("3.11.7")
    assert latest.sha256 == wasm_sha256
    assert latest.wasi is True
    assert latest.features == ["filesystem", "stdio"]

    older = manifest.get_version("3.10.13")
    assert older.wasi is False
    assert older.features == []


def test_global_manifest_to_dict_omits_missing_lts(global_manifest_data):
    data = GlobalManifest.from_dict(global_manifest_data).to_dict()

    assert "build_date" not in data
    assert "lts" not in data["languages"]["nodejs"]
    assert data["languages"]["python"]["lts"] == "3.10.13"
    assert GlobalManifest.from_dict(data) == GlobalManifest.from_dict(global_manifest_data)


def test_duplicate_versions_collapse_on_parse():
    info = RuntimeInfo.from_dict({
        "latest": "1.0",
        "versions": ["1.0", "0.9", "1.0"],
        "source": "https://example.com",
        "license": "MIT",
    })
    assert info.versions == ["1.0", "0.9"]


@pytest.mark.parametrize(
    "data,reason",
    [
        ([], "expected a JSON object"),
        ({"languages": {}}, "missing field `version`"),
        ({"version": 1}, "invalid type for `version`"),
        ({"version": "1", "languages": []}, "invalid type for `languages`"),
        ({"version": "1", "languages": {"go": {"latest": "1.21"}}}, "missing field `source`"),
    ],
)
def test_parse_global_manifest_rejects_bad_shapes(data, reason):
    with pytest.raises(ManifestParseError) as exc_info:
        GlobalManifest.from_dict(data, "https://example.com/manifest.json")
    assert reason in str(exc_info.value)
    assert exc_info.value.details["source"] == "https://example.com/manifest.json"


@pytest.mark.parametrize(
    "entry",
    [
        {"file": "a.wasm", "size": "12", "sha256": "x", "released": "d", "url": "u"},
        {"file": "a.wasm", "size": True, "sha256": "x", "released": "d", "url": "u"},
        {"file": "a.wasm", "size": -1, "sha256": "x", "released": "d", "url": "u"},
        {"file": "a.wasm", "size": 12, "sha256": "x", "released": "d"},
        {"file": "a.wasm", "size": 12, "sha256": "x", "released": "d", "url": "u", "wasi": "yes"},
        {"file": "a.wasm", "size": 12, "sha256": "x", "released": "d", "url": "u", "features": "fs"},
    ],
)
def test_parse_runtime_manifest_rejects_bad_versions(entry):
    with pytest.raises(ManifestParseError):
        RuntimeManifest.from_dict({"language": "python", "versions": {"1.0": entry}})
