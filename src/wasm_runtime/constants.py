"""Runtime artifact locations and cache constants."""

# Release hosting
GITHUB_RELEASES_BASE = "https://github.com/anistark/wasm-runtime/releases/download"
JSDELIVR_BASE = "https://cdn.jsdelivr.net/gh/anistark/wasm-runtime@latest"

LATEST_PATH = "latest"
RUNTIMES_PATH = "runtimes"
MANIFEST_FILE = "manifest.json"

# Cache layout
CACHE_SUBDIR = "wasm-runtime"
WASM_EXT = ".wasm"
PARTIAL_SUFFIX = ".part"
HASH_CHUNK_SIZE = 8192

WASM_MAGIC = b"\x00asm"

# Version selectors
LATEST_SELECTOR = "latest"
LTS_SELECTOR = "lts"

DEFAULT_SOURCE_ORDER = ("github", "jsdelivr")
