"""HTTP helpers for manifests and runtime binaries."""
import asyncio
import json
from typing import Any, Optional

import aiohttp

from wasm_runtime.errors import ManifestParseError, NetworkError
from wasm_runtime.logging import get_logger

logger = get_logger(__name__)

DOWNLOAD_CHUNK_SIZE = 8192


def _client_timeout(timeout: Optional[float]) -> Optional[aiohttp.ClientTimeout]:
    if timeout is None:
        return None
    return aiohttp.ClientTimeout(total=timeout)


async def _read_body(url: str, timeout: Optional[float]) -> bytes:
    session_kwargs = {}
    client_timeout = _client_timeout(timeout)
    if client_timeout is not None:
        session_kwargs["timeout"] = client_timeout

    try:
        async with aiohttp.ClientSession(**session_kwargs) as session:
            async with session.get(url) as response:
                if not 200 <= response.status < 300:
                    logger.debug({
                        "event": "fetch_bad_status",
                        "url": url,
                        "status": response.status,
                        "reason": response.reason,
                    })
                    raise NetworkError(
                        url,
                        f"HTTP {response.status} {response.reason or ''}".strip(),
                        status=response.status,
                    )

                body = bytearray()
                while chunk := await response.content.read(DOWNLOAD_CHUNK_SIZE):
                    body.extend(chunk)
                return bytes(body)

    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        raise NetworkError(url, str(e) or e.__class__.__name__) from e


async def fetch_bytes(url: str, timeout: Optional[float] = None) -> bytes:
    """Download a URL into memory."""
    logger.debug({"event": "fetch_bytes", "url": url})
    data = await _read_body(url, timeout)
    logger.debug({"event": "fetch_bytes_complete", "url": url, "size": len(data)})
    return data


async def fetch_json(url: str, timeout: Optional[float] = None) -> Any:
    """Download and decode a JSON document."""
    data = await _read_body(url, timeout)
    try:
        return json.loads(data)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ManifestParseError(url, str(e)) from e
