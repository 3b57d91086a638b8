"""Test MCP server implementation."""
import json

import mcp.types as types
import pytest

from wasm_runtime.errors import WasmRuntimeError
from wasm_runtime.server import handle_tool, init_server, tools
from wasm_runtime.types import Language


async def call(server, name, arguments):
    handler = server.request_handlers[types.CallToolRequest]
    request = types.CallToolRequest(
        method="tools/call",
        params=types.CallToolRequestParams(name=name, arguments=arguments),
    )
    result = await handler(request)
    content = result.root.content
    assert len(content) == 1
    return json.loads(content[0].text)


def test_tool_definitions():
    assert [t.name for t in tools] == [
        "wasm_runtime_get",
        "wasm_runtime_list",
        "wasm_runtime_info",
        "wasm_runtime_cache_show",
        "wasm_runtime_cache_clear",
        "wasm_runtime_cache_clear_all",
    ]
    for tool in tools:
        assert tool.inputSchema["type"] == "object"


@pytest.mark.asyncio
async def test_list_tools(loader):
    server = await init_server(loader)
    handler = server.request_handlers[types.ListToolsRequest]

    result = await handler(types.ListToolsRequest(method="tools/list"))

    assert [t.name for t in result.root.tools] == [t.name for t in tools]


@pytest.mark.asyncio
async def test_get_tool(loader, network, github, python_manifest_data, wasm_bytes, wasm_sha256):
    network.add(github.runtime_manifest_url(Language.PYTHON), python_manifest_data)
    network.add(github.download_url(Language.PYTHON, "3.11.7"), wasm_bytes)
    server = await init_server(loader)

    payload = await call(server, "wasm_runtime_get", {"language": "python", "version": "3.11.7"})

    assert payload["success"] is True
    assert payload["data"]["sha256"] == wasm_sha256
    assert payload["data"]["language"] == "python"


@pytest.mark.asyncio
async def test_tool_error_payload(loader, network):
    server = await init_server(loader)

    payload = await call(server, "wasm_runtime_info", {"language": "cobol"})

    assert payload == {
        "success": False,
        "error": "Invalid language: cobol",
        "details": {"value": "cobol"},
    }


@pytest.mark.asyncio
async def test_cache_tools(loader):
    loader.cache.store(Language.RUST, "1.75.0", b"\x00asm\x01\x00\x00\x00")

    shown = await handle_tool(loader, "wasm_runtime_cache_show", {})
    assert shown["count"] == 1
    assert shown["runtimes"][0]["version"] == "1.75.0"

    cleared = await handle_tool(loader, "wasm_runtime_cache_clear", {"language": "rs", "version": "1.75.0"})
    assert "rs 1.75.0" in cleared["message"]
    assert loader.list_cached() == []

    loader.cache.store(Language.GO, "1.21.5", b"go")
    await handle_tool(loader, "wasm_runtime_cache_clear_all", {})
    assert not loader.cache.cache_dir.exists()


@pytest.mark.asyncio
async def test_list_and_info_tools(loader, network, github, global_manifest_data):
    network.add(github.global_manifest_url(), global_manifest_data)

    listed = await handle_tool(loader, "wasm_runtime_list", {"language": "node"})
    assert listed == {
        "nodejs": {
            "latest": "20.2.0",
            "versions": ["20.2.0"],
            "source": "https://nodejs.org/",
            "license": "MIT",
        }
    }

    info = await handle_tool(loader, "wasm_runtime_info", {"language": "go"})
    assert info["latest"] == "1.21.5"


@pytest.mark.asyncio
async def test_unknown_tool(loader):
    with pytest.raises(WasmRuntimeError, match="Unknown tool: nope"):
        await handle_tool(loader, "nope", {})


@pytest.mark.asyncio
async def test_cache_clear_rejects_path_traversal(loader, tmp_path):
    loader.cache.store(Language.PYTHON, "3.11.7", b"\x00asm\x01\x00\x00\x00")
    victim = tmp_path / "victim.wasm"
    victim.write_bytes(b"keep me")
    server = await init_server(loader)

    payload = await call(
        server, "wasm_runtime_cache_clear", {"language": "python", "version": "../../victim"}
    )

    assert payload == {
        "success": False,
        "error": "Invalid version: '../../victim'",
        "details": {"value": "../../victim"},
    }
    assert victim.read_bytes() == b"keep me"
    assert loader.cache.get(Language.PYTHON, "3.11.7") is not None
