"""
Moodle MCP Server

Course enrolment, assignments, quizzes, submissions and grading on a
Moodle site, exposed as MCP tools.
"""

from .base import InvalidParamsError, MCPTool, ToolNotFoundError, ToolParameter, ToolResult
from .config import ConfigurationError, Settings
from .gateway import MoodleAPIError, MoodleGateway
from .registry import ToolRegistry

__all__ = [
    "ConfigurationError",
    "InvalidParamsError",
    "MCPTool",
    "MoodleAPIError",
    "MoodleGateway",
    "Settings",
    "ToolNotFoundError",
    "ToolParameter",
    "ToolRegistry",
    "ToolResult",
]
