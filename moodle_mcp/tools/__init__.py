"""
Moodle Tools Package

TOOL_CLASSES is the catalog in discovery order. Each entry inherits
from MCPTool and is instantiated by the registry with the shared
gateway and settings.
"""

from .assignments import (
    GetAssignmentsTool,
    GetSubmissionContentTool,
    GetSubmissionsTool,
    ProvideFeedbackTool,
)
from .enrolment import GetStudentsTool
from .quizzes import GetQuizGradeTool, GetQuizzesTool

TOOL_CLASSES = (
    GetStudentsTool,
    GetAssignmentsTool,
    GetQuizzesTool,
    GetSubmissionsTool,
    ProvideFeedbackTool,
    GetSubmissionContentTool,
    GetQuizGradeTool,
)

__all__ = [
    "TOOL_CLASSES",
    "GetStudentsTool",
    "GetAssignmentsTool",
    "GetQuizzesTool",
    "GetSubmissionsTool",
    "ProvideFeedbackTool",
    "GetSubmissionContentTool",
    "GetQuizGradeTool",
]
