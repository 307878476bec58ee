"""
Enrolment Tools

Lists the students enrolled in the configured course.
"""

import logging
from typing import List

from ..base import MCPTool, ToolResult
from ..models import EnrolledUser

logger = logging.getLogger(__name__)


class GetStudentsTool(MCPTool):
    """Enrolled users filtered to the `student` role."""

    @property
    def name(self) -> str:
        return "get_students"

    @property
    def description(self) -> str:
        return "Gets the list of students enrolled in the configured course"

    async def execute(self) -> ToolResult:
        logger.info("[API] Requesting enrolled users")
        data = await self.gateway.call(
            "core_enrol_get_enrolled_users",
            {"courseid": self.course_id},
        )

        users: List[EnrolledUser] = [EnrolledUser.model_validate(u) for u in data or []]
        students = [user.to_student().model_dump() for user in users if user.is_student]

        return ToolResult.json(students)
