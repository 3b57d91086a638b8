"""MCP server exposing runtime acquisition as tools."""
import asyncio
import json
from typing import Any, Dict, List, Optional

import mcp.types as types
from mcp.server.lowlevel import Server
from mcp.server.models import InitializationOptions
from mcp.server import stdio

from wasm_runtime import __version__
from wasm_runtime.config import Settings
from wasm_runtime.errors import WasmRuntimeError, log_error
from wasm_runtime.loader import RuntimeLoader
from wasm_runtime.logging import configure_logging, get_logger
from wasm_runtime.operations import (
    cache_contents,
    clear_all_cached,
    clear_cached,
    fetch_runtime,
    list_runtimes,
    runtime_info,
)

logger = get_logger("server")

SERVER_NAME = "wasm-runtime"

LANGUAGE_PROPERTY = {
    "type": "string",
    "description": "Language (nodejs, python, ruby, php, go, rust) or alias",
}

tools = [
    types.Tool(
        name="wasm_runtime_get",
        description="Download a WASM runtime, or return it from the local cache",
        inputSchema={
            "type": "object",
            "properties": {
                "language": LANGUAGE_PROPERTY,
                "version": {
                    "type": "string",
                    "description": "Exact version, 'latest' or 'lts'",
                    "default": "latest",
                },
                "force": {
                    "type": "boolean",
                    "description": "Re-download even if cached",
                    "default": False,
                },
            },
            "required": ["language"],
        },
    ),
    types.Tool(
        name="wasm_runtime_list",
        description="List published runtimes, optionally for one language",
        inputSchema={
            "type": "object",
            "properties": {"language": LANGUAGE_PROPERTY},
        },
    ),
    types.Tool(
        name="wasm_runtime_info",
        description="Show metadata for a language or one of its versions",
        inputSchema={
            "type": "object",
            "properties": {
                "language": LANGUAGE_PROPERTY,
                "version": {"type": "string", "description": "Specific version"},
            },
            "required": ["language"],
        },
    ),
    types.Tool(
        name="wasm_runtime_cache_show",
        description="Show cache location and cached runtimes",
        inputSchema={"type": "object", "properties": {}},
    ),
    types.Tool(
        name="wasm_runtime_cache_clear",
        description="Remove one cached runtime",
        inputSchema={
            "type": "object",
            "properties": {
                "language": LANGUAGE_PROPERTY,
                "version": {"type": "string", "description": "Version"},
            },
            "required": ["language", "version"],
        },
    ),
    types.Tool(
        name="wasm_runtime_cache_clear_all",
        description="Remove every cached runtime",
        inputSchema={"type": "object", "properties": {}},
    ),
]


def _text(payload: Dict[str, Any]) -> List[types.TextContent]:
    return [types.TextContent(type="text", text=json.dumps(payload))]


async def handle_tool(loader: RuntimeLoader, name: str, arguments: Dict[str, Any]) -> Any:
    """Run one tool and return its JSON-serialisable result data."""
    if name == "wasm_runtime_get":
        runtime = await fetch_runtime(
            loader,
            arguments["language"],
            arguments.get("version") or "latest",
            bool(arguments.get("force", False)),
        )
        return runtime.to_dict()

    elif name == "wasm_runtime_list":
        runtimes = await list_runtimes(loader, arguments.get("language"))
        return {lang: info.to_dict() for lang, info in runtimes.items()}

    elif name == "wasm_runtime_info":
        return await runtime_info(loader, arguments["language"], arguments.get("version"))

    elif name == "wasm_runtime_cache_show":
        return cache_contents(loader)

    elif name == "wasm_runtime_cache_clear":
        clear_cached(loader, arguments["language"], arguments["version"])
        return {"message": f"Cleared cache for {arguments['language']} {arguments['version']}"}

    elif name == "wasm_runtime_cache_clear_all":
        clear_all_cached(loader)
        return {"message": "Cleared all cached runtimes"}

    raise WasmRuntimeError(f"Unknown tool: {name}", code=types.METHOD_NOT_FOUND)


async def init_server(loader: Optional[RuntimeLoader] = None) -> Server:
    logger.info(f"Registered tools: {', '.join(t.name for t in tools)}")

    loader = loader or RuntimeLoader()
    server = Server(SERVER_NAME)

    @server.list_tools()
    async def list_tools() -> List[types.Tool]:
        logger.debug("Tools requested")
        return tools

    @server.call_tool()
    async def call_tool(name: str, arguments: Dict[str, Any]) -> List[types.TextContent]:
        logger.debug(f"Tool call received: {name} with arguments {arguments}")
        try:
            data = await handle_tool(loader, name, arguments or {})
            return _text({"success": True, "data": data})

        except WasmRuntimeError as e:
            log_error(e, {"tool": name, "arguments": arguments})
            return _text({"success": False, "error": str(e), "details": e.details})

        except OSError as e:
            log_error(e, {"tool": name, "arguments": arguments})
            return _text({"success": False, "error": str(e)})

    return server


async def serve() -> None:
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    logger.info("Starting WASM runtime server")
    server = await init_server(RuntimeLoader(settings=settings))
    async with stdio.stdio_server() as (read_stream, write_stream):
        init_options = InitializationOptions(
            server_name=SERVER_NAME,
            server_version=__version__,
            capabilities=types.ServerCapabilities(
                tools=types.ToolsCapability(listChanged=False),
                logging=types.LoggingCapability(),
            ),
        )
        await server.run(read_stream, write_stream, init_options)


def main() -> None:
    """Run the MCP server."""
    asyncio.run(serve())
