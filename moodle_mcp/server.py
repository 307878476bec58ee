"""
MCP stdio Server

Exposes the tool registry over the Model Context Protocol on stdin/stdout.
Logs go to stderr only; stdout is the protocol channel.
"""

import logging
from typing import Any, Dict, Optional

import mcp.types as types
from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.shared.exceptions import McpError

from .base import InvalidParamsError, ToolNotFoundError, ToolResult
from .config import Settings
from .gateway import MoodleGateway
from .registry import ToolRegistry

logger = logging.getLogger(__name__)


def to_call_tool_result(result: ToolResult) -> types.CallToolResult:
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=block["text"]) for block in result.content],
        isError=result.is_error,
    )


async def call_tool(registry: ToolRegistry, name: str, arguments: Optional[Dict[str, Any]]) -> types.CallToolResult:
    """
    Dispatch one tools/call request.

    Unknown tools and bad arguments become JSON-RPC errors, not results.
    """
    try:
        result = await registry.execute_tool(name, arguments or {})
    except ToolNotFoundError as e:
        raise McpError(types.ErrorData(code=types.METHOD_NOT_FOUND, message=e.message))
    except InvalidParamsError as e:
        raise McpError(types.ErrorData(code=types.INVALID_PARAMS, message=e.message))

    return to_call_tool_result(result)


def create_server(registry: ToolRegistry, settings: Settings) -> Server:
    server = Server(settings.server_name, version=settings.server_version)

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        return [
            types.Tool(
                name=definition.name,
                description=definition.description,
                inputSchema=definition.input_schema(),
            )
            for definition in registry.list_tools()
        ]

    # Registered directly instead of via @server.call_tool(), which would turn
    # protocol errors into error-flagged results.
    async def handle_call_tool(req: types.CallToolRequest) -> types.ServerResult:
        return types.ServerResult(await call_tool(registry, req.params.name, req.params.arguments))

    server.request_handlers[types.CallToolRequest] = handle_call_tool
    return server


async def run_stdio(settings: Settings) -> None:
    """Run the MCP server until stdin closes."""
    async with MoodleGateway(settings) as gateway:
        registry = ToolRegistry(gateway, settings)
        server = create_server(registry, settings)

        async with stdio_server() as (read_stream, write_stream):
            logger.info("Moodle MCP server running on stdio")
            await server.run(
                read_stream,
                write_stream,
                server.create_initialization_options()
            )
