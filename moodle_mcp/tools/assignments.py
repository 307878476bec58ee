"""
Assignment Tools

- get_assignments: assignments of the configured course
- get_submissions: submissions joined with grades, optionally narrowed
- provide_feedback: grade + feedback comment for one student (the only write)
- get_submission_content: online text and attached files of one submission
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

from ..base import MCPTool, ToolParameter, ToolResult
from ..models import (
    GradeRecord,
    SubmissionRecord,
    SubmissionStatus,
    join_grades,
    normalize_submission_content,
)

logger = logging.getLogger(__name__)

NO_ASSIGNMENTS_FOUND = "No assignments found for the specified criteria."
NO_SUBMISSIONS = "No submissions"

# mod_assign_save_grade policy
LATEST_ATTEMPT = -1
WORKFLOW_RELEASED = "released"
FORMAT_HTML = 1


def _find_entry(entries: List[Dict[str, Any]], key: str, value: Any) -> Optional[Dict[str, Any]]:
    return next((entry for entry in entries if entry.get(key) == value), None)


async def fetch_assignments(gateway, course_id: int) -> List[Dict[str, Any]]:
    """Assignment list of the configured course, empty if the course is absent."""
    data = await gateway.call(
        "mod_assign_get_assignments",
        {"courseids": [course_id]},
    )
    course = _find_entry((data or {}).get("courses") or [], "id", course_id)
    return (course or {}).get("assignments") or []


class GetAssignmentsTool(MCPTool):

    @property
    def name(self) -> str:
        return "get_assignments"

    @property
    def description(self) -> str:
        return "Gets the list of assignments in the configured course"

    async def execute(self) -> ToolResult:
        logger.info("[API] Requesting assignments")
        return ToolResult.json(await fetch_assignments(self.gateway, self.course_id))


class GetSubmissionsTool(MCPTool):
    """
    Fan out over the selected assignments.

    For each assignment the submission and grade listings are fetched
    concurrently, and all assignments run concurrently. Results keep the
    assignment order of the source list.
    """

    @property
    def name(self) -> str:
        return "get_submissions"

    @property
    def description(self) -> str:
        return "Gets the assignment submissions in the configured course"

    @property
    def parameters(self) -> List[ToolParameter]:
        return [
            ToolParameter(
                name="studentId",
                type="number",
                description="Optional student ID. If not provided, submissions from all students will be returned",
                required=False,
            ),
            ToolParameter(
                name="assignmentId",
                type="number",
                description="Optional assignment ID. If not provided, all submissions will be returned",
                required=False,
            ),
        ]

    async def _fetch_listing(self, function: str, assignment_id: int, key: str) -> List[Dict[str, Any]]:
        data = await self.gateway.call(function, {"assignmentids": [assignment_id]})
        entry = _find_entry((data or {}).get("assignments") or [], "assignmentid", assignment_id)
        return (entry or {}).get(key) or []

    async def _collect(self, assignment: Dict[str, Any], student_id: Optional[int]) -> Dict[str, Any]:
        assignment_id = assignment.get("id")
        submissions, grades = await asyncio.gather(
            self._fetch_listing("mod_assign_get_submissions", assignment_id, "submissions"),
            self._fetch_listing("mod_assign_get_grades", assignment_id, "grades"),
        )

        summaries = join_grades(
            [SubmissionRecord.model_validate(s) for s in submissions],
            [GradeRecord.model_validate(g) for g in grades],
            student_id=student_id,
        )

        return {
            "assignment": assignment.get("name"),
            "assignmentId": assignment_id,
            "submissions": [s.model_dump() for s in summaries] or NO_SUBMISSIONS,
        }

    async def execute(self, studentId: Optional[int] = None, assignmentId: Optional[int] = None) -> ToolResult:
        logger.info(
            "[API] Requesting submissions"
            + (f" for student {studentId}" if studentId is not None else "")
        )

        assignments = await fetch_assignments(self.gateway, self.course_id)
        if assignmentId is not None:
            assignments = [a for a in assignments if a.get("id") == assignmentId]

        if not assignments:
            return ToolResult.text(NO_ASSIGNMENTS_FOUND)

        outcomes = await asyncio.gather(
            *(self._collect(a, studentId) for a in assignments),
            return_exceptions=True,
        )
        # Every branch has finished; surface the first failure in assignment order
        for outcome in outcomes:
            if isinstance(outcome, BaseException):
                raise outcome

        return ToolResult.json(list(outcomes))


class ProvideFeedbackTool(MCPTool):
    """Saves a grade and an HTML feedback comment on the latest attempt, released to the student."""

    @property
    def name(self) -> str:
        return "provide_feedback"

    @property
    def description(self) -> str:
        return "Provides feedback on an assignment submitted by a student"

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
                name="assignmentId",
                type="number",
                description="Assignment ID",
                required=True,
            ),
            ToolParameter(
                name="grade",
                type="number",
                description="Numeric grade to assign",
                required=False,
                default=0,
            ),
            ToolParameter(
                name="feedback",
                type="string",
                description="Text of the feedback to provide",
                required=True,
            ),
        ]

    async def execute(self, studentId: int, assignmentId: int, feedback: str, grade: float = 0) -> ToolResult:
        logger.info(f"[API] Providing feedback for student {studentId} on assignment {assignmentId}")

        # The response body is not inspected; failures surface as MoodleAPIError
        await self.gateway.call(
            "mod_assign_save_grade",
            {
                "assignmentid": assignmentId,
                "userid": studentId,
                "grade": grade,
                "attemptnumber": LATEST_ATTEMPT,
                "addattempt": False,
                "workflowstate": WORKFLOW_RELEASED,
                "applytoall": False,
                "plugindata": {
                    "assignfeedbackcomments_editor": {
                        "text": feedback,
                        "format": FORMAT_HTML,
                    },
                },
            },
            method="POST",
        )

        return ToolResult.text(
            f"Feedback successfully provided for student {studentId} on assignment {assignmentId}."
        )


class GetSubmissionContentTool(MCPTool):
    """Online text and attachments of one submission, always in the same two-plugin shape."""

    error_prefix = "Error getting submission content"

    @property
    def name(self) -> str:
        return "get_submission_content"

    @property
    def description(self) -> str:
        return "Gets the detailed content of a specific submission, including text and attachments"

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
                name="assignmentId",
                type="number",
                description="Assignment ID",
                required=True,
            ),
        ]

    async def execute(self, studentId: int, assignmentId: int) -> ToolResult:
        logger.info(f"[API] Requesting submission content for student {studentId} on assignment {assignmentId}")
        data = await self.gateway.call(
            "mod_assign_get_submission_status",
            {"assignid": assignmentId, "userid": studentId},
        )

        status = SubmissionStatus.model_validate(data or {})
        return ToolResult.json(normalize_submission_content(assignmentId, studentId, status))
