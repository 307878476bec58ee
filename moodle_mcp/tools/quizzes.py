"""
Quiz Tools

- get_quizzes: quizzes of the configured course
- get_quiz_grade: a student's best grade in one quiz
"""

import logging
from typing import List

from ..base import MCPTool, ToolParameter, ToolResult
from ..models import NOT_GRADED

logger = logging.getLogger(__name__)


class GetQuizzesTool(MCPTool):

    @property
    def name(self) -> str:
        return "get_quizzes"

    @property
    def description(self) -> str:
        return "Gets the list of quizzes in the configured course"

    async def execute(self) -> ToolResult:
        logger.info("[API] Requesting quizzes")
        data = await self.gateway.call(
            "mod_quiz_get_quizzes_by_courses",
            {"courseids": [self.course_id]},
        )
        return ToolResult.json((data or {}).get("quizzes") or [])


class GetQuizGradeTool(MCPTool):
    """Reports `hasGrade`, and the literal "Not graded" when there is none."""

    error_prefix = "Error getting the quiz grade"

    @property
    def name(self) -> str:
        return "get_quiz_grade"

    @property
    def description(self) -> str:
        return "Gets the grade of a student in a specific quiz"

    @property
    def parameters(self) -> List[ToolParameter]:
        return [
            ToolParameter(
                name="studentId",
                type="number",
                description="Student ID",
                required=True,
            ),
            ToolParameter(
                name="quizId",
                type="number",
                description="Quiz ID",
                required=True,
            ),
        ]

    async def execute(self, studentId: int, quizId: int) -> ToolResult:
        logger.info(f"[API] Requesting quiz grade for student {studentId} on quiz {quizId}")
        data = await self.gateway.call(
            "mod_quiz_get_user_best_grade",
            {"quizid": quizId, "userid": studentId},
        ) or {}

        has_grade = bool(data.get("hasgrade"))
        return ToolResult.json({
            "quizId": quizId,
            "studentId": studentId,
            "hasGrade": has_grade,
            "grade": data.get("grade") if has_grade else NOT_GRADED,
        })
