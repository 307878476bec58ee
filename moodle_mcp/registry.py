"""
MCP Tool Registry

Single Source of Truth (SSOT) for the tool catalog and call dispatch.
Built once at startup from tools.TOOL_CLASSES and read-only afterwards.
"""

import logging
from typing import Any, Dict, List, Optional

from .base import MCPTool, ToolDefinition, ToolNotFoundError, ToolResult
from .tools import TOOL_CLASSES

logger = logging.getLogger(__name__)


class ToolRegistry:
    """
    Catalog of tools bound to one gateway and one set of settings.

    list_tools() returns definitions in catalog order; execute_tool()
    routes a call by name.
    """

    def __init__(self, gateway, settings, tool_classes=TOOL_CLASSES):
        self._tools: Dict[str, MCPTool] = {}

        for cls in tool_classes:
            tool = cls(gateway, settings)
            if tool.name in self._tools:
                raise ValueError(f"Duplicate tool name: {tool.name}")
            self._tools[tool.name] = tool
            logger.debug(f"Registered tool: {tool.name}")

        logger.info(f"Tool registry ready. Total tools: {len(self._tools)}")

    def list_tools(self) -> List[ToolDefinition]:
        return [tool.to_definition() for tool in self._tools.values()]

    def list_tool_names(self) -> List[str]:
        return list(self._tools.keys())

    def get_tool(self, name: str) -> Optional[ToolDefinition]:
        """Returns None if tool not found."""
        tool = self._tools.get(name)
        return tool.to_definition() if tool else None

    async def execute_tool(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> ToolResult:
        """
        Execute a tool by name.

        Raises ToolNotFoundError for unknown names and InvalidParamsError
        for bad arguments; everything else comes back as a ToolResult.
        """
        tool = self._tools.get(name)
        if tool is None:
            raise ToolNotFoundError(f"Unknown tool: {name}", tool_name=name)

        logger.info(f"[Tool] Executing tool: {name}")
        return await tool.run(arguments or {})
