"""
MCP Tool Base Classes

Provides common descriptors, argument validation, and the uniform
success/error result envelope for all Moodle tools.
"""

import json
import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from .gateway import MoodleAPIError

logger = logging.getLogger(__name__)


@dataclass
class ToolParameter:
    """Definition of a tool parameter."""
    name: str
    type: str
    description: str
    required: bool = True
    default: Any = None


@dataclass
class ToolDefinition:
    """Complete definition of an MCP tool."""
    name: str
    description: str
    parameters: List[ToolParameter] = field(default_factory=list)
    handler: Optional[Callable] = None

    def input_schema(self) -> Dict[str, Any]:
        """JSON schema for the tool's arguments."""
        return {
            "type": "object",
            "properties": {
                p.name: {"type": p.type, "description": p.description}
                for p in self.parameters
            },
            "required": [p.name for p in self.parameters if p.required],
        }


@dataclass
class ToolResult:
    """Outcome of one tool call: text content blocks plus an error flag."""
    content: List[Dict[str, str]]
    is_error: bool = False

    @classmethod
    def text(cls, text: str) -> "ToolResult":
        return cls(content=[{"type": "text", "text": text}])

    @classmethod
    def json(cls, data: Any) -> "ToolResult":
        return cls.text(json.dumps(data, indent=2, ensure_ascii=False))

    @classmethod
    def error(cls, message: str) -> "ToolResult":
        return cls(content=[{"type": "text", "text": message}], is_error=True)

    @property
    def first_text(self) -> str:
        return self.content[0]["text"] if self.content else ""

    def to_dict(self) -> Dict[str, Any]:
        return {"content": list(self.content), "isError": self.is_error}


class MCPToolError(Exception):
    """Base exception for protocol-level tool errors."""
    def __init__(self, message: str, tool_name: str = None, details: Dict = None):
        self.message = message
        self.tool_name = tool_name
        self.details = details or {}
        super().__init__(self.message)


class InvalidParamsError(MCPToolError):
    """Raised when required arguments are missing or malformed."""
    pass


class ToolNotFoundError(MCPToolError):
    """Raised when a call names a tool that is not registered."""
    pass


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _coerce_number(value: Any) -> Any:
    """Accept numbers and numeric strings; integral values become int."""
    if isinstance(value, bool):
        raise ValueError(value)
    if isinstance(value, str):
        value = float(value.strip())
    if isinstance(value, float) and not math.isfinite(value):
        raise ValueError(value)
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, (int, float)):
        return value
    raise ValueError(value)


class MCPTool(ABC):
    """
    Abstract base class for Moodle tools.

    All tools must inherit from this class and implement:
    - name: Tool identifier
    - description: What the tool does
    - parameters: List of ToolParameter definitions
    - execute(): The actual tool logic, returning a ToolResult
    """

    # Prefix for remote errors that reach run()
    error_prefix = "Moodle API error"

    def __init__(self, gateway, settings):
        self.gateway = gateway
        self.settings = settings

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique identifier for the tool."""
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        """Human-readable description of what the tool does."""
        pass

    @property
    def parameters(self) -> List[ToolParameter]:
        """List of parameters the tool accepts."""
        return []

    @property
    def course_id(self) -> int:
        return self.settings.course_id

    def validate(self, arguments: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Validate input parameters.
        Returns validated/normalized parameters; undeclared keys are dropped.
        Raises InvalidParamsError naming every missing required parameter.
        """
        arguments = arguments or {}
        validated = {}
        missing = []

        for param in self.parameters:
            value = arguments.get(param.name)

            if _is_missing(value):
                if param.required:
                    missing.append(param.name)
                    continue
                value = param.default
            elif param.type in ("number", "integer"):
                try:
                    value = _coerce_number(value)
                except (TypeError, ValueError):
                    raise InvalidParamsError(
                        f"Parameter {param.name} must be a number, got {value!r}",
                        tool_name=self.name
                    )

            validated[param.name] = value

        if missing:
            raise InvalidParamsError(
                f"Missing required parameter(s): {', '.join(missing)}",
                tool_name=self.name,
                details={"missing": missing}
            )

        return validated

    @abstractmethod
    async def execute(self, **kwargs) -> ToolResult:
        """
        Execute the tool with validated parameters.
        Gateway failures may propagate; run() converts them.
        """
        pass

    async def run(self, arguments: Optional[Dict[str, Any]] = None) -> ToolResult:
        """
        Public entry point: validate and execute.

        InvalidParamsError propagates to the transport. Remote and
        unexpected failures come back as error-flagged results.
        """
        validated = self.validate(arguments)
        try:
            return await self.execute(**validated)
        except MoodleAPIError as e:
            logger.error(f"Moodle API error in {self.name}: {e.message}")
            return ToolResult.error(f"{self.error_prefix}: {e.message}")
        except MCPToolError:
            raise
        except Exception as e:
            logger.exception(f"Unexpected error in {self.name}")
            return ToolResult.error(f"Error executing {self.name}: {e}")

    def to_definition(self) -> ToolDefinition:
        """Convert tool to ToolDefinition for registry."""
        return ToolDefinition(
            name=self.name,
            description=self.description,
            parameters=self.parameters,
            handler=self.run,
        )
