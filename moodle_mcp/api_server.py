"""
HTTP API Server

Exposes the same tool registry over plain HTTP, for debugging and for
clients that do not speak MCP.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, List

import uvicorn
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from .base import InvalidParamsError, ToolNotFoundError
from .config import Settings
from .gateway import MoodleGateway
from .registry import ToolRegistry

logger = logging.getLogger(__name__)


class ToolRequest(BaseModel):
    """Request body for tool execution."""

    arguments: Dict[str, Any] = {}


class ToolResponse(BaseModel):
    """Response from tool execution."""

    content: List[Dict[str, str]]
    isError: bool = False


def _describe(definition) -> Dict[str, Any]:
    return {
        "name": definition.name,
        "description": definition.description,
        "parameters": [
            {
                "name": p.name,
                "type": p.type,
                "description": p.description,
                "required": p.required,
                "default": p.default,
            }
            for p in definition.parameters
        ],
        "inputSchema": definition.input_schema(),
    }


def create_app(registry: ToolRegistry, settings: Settings, lifespan=None) -> FastAPI:
    app = FastAPI(
        title="Moodle MCP Server",
        description="Moodle course tools over HTTP",
        version=settings.server_version,
        lifespan=lifespan,
    )

    @app.get("/")
    async def root():
        return {
            "service": settings.server_name,
            "version": settings.server_version,
            "tools_count": len(registry.list_tool_names()),
            "endpoints": {
                "list_tools": "/tools",
                "execute": "/tools/{tool_name}/execute",
                "health": "/health",
            },
        }

    @app.get("/health")
    async def health():
        return {"status": "healthy", "tools_loaded": len(registry.list_tool_names())}

    @app.get("/tools")
    async def list_tools():
        tools = registry.list_tools()
        return {"total": len(tools), "tools": [_describe(t) for t in tools]}

    @app.get("/tools/{tool_name}")
    async def get_tool_info(tool_name: str):
        definition = registry.get_tool(tool_name)
        if definition is None:
            raise HTTPException(status_code=404, detail=f"Tool not found: {tool_name}")
        return _describe(definition)

    @app.post("/tools/{tool_name}/execute", response_model=ToolResponse)
    async def execute_tool_endpoint(tool_name: str, request: ToolRequest):
        try:
            result = await registry.execute_tool(tool_name, request.arguments)
        except ToolNotFoundError as e:
            raise HTTPException(status_code=404, detail=e.message)
        except InvalidParamsError as e:
            raise HTTPException(status_code=400, detail=e.message)
        return ToolResponse(**result.to_dict())

    return app


def run_http(settings: Settings) -> None:
    """Serve the HTTP API with uvicorn."""
    gateway = MoodleGateway(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"HTTP server starting with {len(registry.list_tool_names())} tools")
        yield
        await gateway.aclose()
        logger.info("HTTP server shutting down")

    registry = ToolRegistry(gateway, settings)
    app = create_app(registry, settings, lifespan=lifespan)

    logger.info(f"Starting HTTP server on {settings.http_host}:{settings.http_port}")
    uvicorn.run(app, host=settings.http_host, port=settings.http_port, log_config=None)
