import hashlib
from pathlib import Path

from wasm_runtime.constants import HASH_CHUNK_SIZE, WASM_MAGIC


def sha256_bytes(data: bytes) -> str:
    """SHA-256 of an in-memory buffer as lowercase hex."""
    return hashlib.sha256(data).hexdigest()


def sha256_file(path: Path, chunk_size: int = HASH_CHUNK_SIZE) -> str:
    """Streaming SHA-256 of a file as lowercase hex.

    The file is read in fixed-size chunks so large runtimes are never
    held in memory at once.
    """
    sha256_hash = hashlib.sha256()
    with open(path, "rb") as f:
        for byte_block in iter(lambda: f.read(chunk_size), b""):
            sha256_hash.update(byte_block)
    return sha256_hash.hexdigest()


def has_wasm_magic(path: Path) -> bool:
    """Check the WebAssembly module preamble."""
    with open(path, "rb") as f:
        return f.read(len(WASM_MAGIC)) == WASM_MAGIC
