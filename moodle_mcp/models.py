"""
Remote record projections.

Moodle responses are deeply nested and vary per plugin type and file area.
These models keep only the fields the tools promise and ignore the rest.
"""

from datetime import datetime, timezone
from typing import Annotated, Any, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag

NOT_GRADED = "Not graded"


class RemoteRecord(BaseModel):
    model_config = ConfigDict(extra="ignore")


# ========== Enrolment ==========

class Role(RemoteRecord):
    shortname: str = ""


class Student(RemoteRecord):
    id: int
    username: Optional[str] = None
    firstname: Optional[str] = None
    lastname: Optional[str] = None
    email: Optional[str] = None


class EnrolledUser(Student):
    roles: List[Role] = Field(default_factory=list)

    @property
    def is_student(self) -> bool:
        return any(role.shortname == "student" for role in self.roles)

    def to_student(self) -> Student:
        return Student(**self.model_dump(include=set(Student.model_fields)))


# ========== Submissions and grades ==========

class SubmissionRecord(RemoteRecord):
    userid: int
    status: Optional[str] = None
    timemodified: int = 0


class GradeRecord(RemoteRecord):
    userid: int
    grade: Any = None


class SubmissionSummary(BaseModel):
    userid: int
    status: Optional[str]
    timemodified: str
    grade: Any


def format_timestamp(seconds: Union[int, float]) -> str:
    """Epoch seconds -> UTC ISO-8601 with millisecond precision, e.g. 2023-11-14T22:13:20.000Z"""
    moment = datetime.fromtimestamp(seconds, tz=timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def join_grades(
    submissions: List[SubmissionRecord],
    grades: List[GradeRecord],
    student_id: Optional[int] = None,
) -> List[SubmissionSummary]:
    """Pair each submission with the grade sharing its userid, keeping submission order."""
    grade_by_user: Dict[int, Any] = {}
    for grade in grades:
        # first grade per user wins
        grade_by_user.setdefault(grade.userid, grade.grade)

    return [
        SubmissionSummary(
            userid=submission.userid,
            status=submission.status,
            timemodified=format_timestamp(submission.timemodified),
            grade=grade_by_user.get(submission.userid, NOT_GRADED),
        )
        for submission in submissions
        if student_id is None or submission.userid == student_id
    ]


# ========== Submission plugins (tagged on `type`) ==========

class EditorField(RemoteRecord):
    name: str = ""
    text: Optional[str] = None


class RemoteFile(RemoteRecord):
    filename: Optional[str] = None
    fileurl: Optional[str] = None
    filesize: Optional[int] = None
    mimetype: Optional[str] = None


class FileArea(RemoteRecord):
    area: str = ""
    files: List[RemoteFile] = Field(default_factory=list)


class OnlineTextPlugin(RemoteRecord):
    type: Literal["onlinetext"]
    editorfields: List[EditorField] = Field(default_factory=list)


class FilePlugin(RemoteRecord):
    type: Literal["file"]
    fileareas: List[FileArea] = Field(default_factory=list)


class OtherPlugin(RemoteRecord):
    type: str = ""


def _plugin_kind(value: Any) -> str:
    kind = value.get("type") if isinstance(value, dict) else getattr(value, "type", None)
    return kind if kind in ("onlinetext", "file") else "other"


SubmissionPlugin = Annotated[
    Union[
        Annotated[OnlineTextPlugin, Tag("onlinetext")],
        Annotated[FilePlugin, Tag("file")],
        Annotated[OtherPlugin, Tag("other")],
    ],
    Discriminator(_plugin_kind),
]


class SubmissionFile(BaseModel):
    filename: Optional[str]
    fileurl: Optional[str]
    filesize: Optional[int]
    filetype: Optional[str]


class AttemptSubmission(RemoteRecord):
    status: Optional[str] = None
    timemodified: Optional[int] = None
    plugins: List[SubmissionPlugin] = Field(default_factory=list)


class LastAttempt(RemoteRecord):
    submission: Optional[AttemptSubmission] = None


class SubmissionStatus(RemoteRecord):
    """Subset of mod_assign_get_submission_status."""

    lastattempt: Optional[LastAttempt] = None
    submission: Optional[AttemptSubmission] = None

    @property
    def current(self) -> Optional[AttemptSubmission]:
        if self.lastattempt and self.lastattempt.submission:
            return self.lastattempt.submission
        return self.submission


def extract_content(plugins: List[SubmissionPlugin]) -> Tuple[str, List[SubmissionFile]]:
    """Pull the online text (first `onlinetext` editor field) and all submitted files."""
    text: Optional[str] = None
    files: List[SubmissionFile] = []

    for plugin in plugins:
        match plugin:
            case OnlineTextPlugin(editorfields=fields):
                if text is None:
                    editor = next((f for f in fields if f.name == "onlinetext"), None)
                    if editor is not None:
                        text = editor.text or ""
            case FilePlugin(fileareas=areas):
                for area in areas:
                    if area.area != "submission_files":
                        continue
                    files.extend(
                        SubmissionFile(
                            filename=f.filename,
                            fileurl=f.fileurl,
                            filesize=f.filesize,
                            filetype=f.mimetype,
                        )
                        for f in area.files
                    )
            case _:
                pass

    return text or "", files


def normalize_submission_content(assignment_id: int, student_id: int, status: SubmissionStatus) -> Dict[str, Any]:
    """Build the stable output shape. Both plugin kinds are always present."""
    current = status.current
    text, files = extract_content(current.plugins if current else [])

    return {
        "assignment": assignment_id,
        "userid": student_id,
        "status": (current.status if current else None) or "unknown",
        "submissiontext": text,
        "plugins": [
            {"type": "onlinetext", "content": text},
            {"type": "file", "files": [f.model_dump() for f in files]},
        ],
        "timemodified": (current.timemodified if current else None) or 0,
    }
