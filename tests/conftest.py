"""Shared fixtures: settings, a fake Moodle endpoint, and a wired registry."""

import json
from typing import Any, Callable, Dict, List, Tuple, Union
from urllib.parse import parse_qsl

import httpx
import pytest

from moodle_mcp.config import Settings
from moodle_mcp.gateway import MoodleGateway
from moodle_mcp.registry import ToolRegistry

API_URL = "https://moodle.test/webservice/rest/server.php"
COURSE_ID = 2

Payload = Union[Any, Callable[[Dict[str, str]], Any]]


class FakeMoodle:
    """
    Deterministic stand-in for the Moodle REST endpoint.

    Responses are registered per wsfunction; every request is recorded
    so tests can assert exactly which remote calls were issued.
    """

    def __init__(self):
        self.responses: Dict[str, Tuple[int, Payload]] = {}
        self.calls: List[Tuple[str, str, Dict[str, str]]] = []
        self.fail_all_with: Tuple[int, Any] = None

    def respond(self, function: str, payload: Payload, status_code: int = 200) -> None:
        self.responses[function] = (status_code, payload)

    def fail_everything(self, status_code: int = 403, body: Any = None) -> None:
        self.fail_all_with = (status_code, body if body is not None else {"message": "token expired"})

    def called(self, function: str) -> List[Dict[str, str]]:
        return [params for _, fn, params in self.calls if fn == function]

    def handler(self, request: httpx.Request) -> httpx.Response:
        params = dict(request.url.params)
        if request.method == "POST":
            params.update(parse_qsl(request.content.decode()))

        function = params.get("wsfunction", "")
        self.calls.append((request.method, function, params))

        if self.fail_all_with is not None:
            status_code, body = self.fail_all_with
            return httpx.Response(status_code, json=body)

        if function not in self.responses:
            return httpx.Response(200, json={
                "exception": "invalid_parameter_exception",
                "errorcode": "invalidparameter",
                "message": f"Unexpected call: {function}",
            })

        status_code, payload = self.responses[function]
        if callable(payload):
            payload = payload(params)
        # json=None would yield an empty body; Moodle sends a literal `null`
        return httpx.Response(status_code, content=json.dumps(payload).encode(),
                              headers={"Content-Type": "application/json"})

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def settings() -> Settings:
    return Settings(api_url=API_URL, api_token="secret-token", course_id=COURSE_ID)


@pytest.fixture
def fake_moodle() -> FakeMoodle:
    return FakeMoodle()


@pytest.fixture
def gateway(settings, fake_moodle) -> MoodleGateway:
    return MoodleGateway(settings, transport=fake_moodle.transport())


@pytest.fixture
def registry(gateway, settings) -> ToolRegistry:
    return ToolRegistry(gateway, settings)


# ========== Canned Moodle payloads ==========

@pytest.fixture
def enrolled_users() -> List[Dict]:
    return [
        {
            "id": 7, "username": "astudent", "firstname": "Ana", "lastname": "Student",
            "email": "ana@example.org", "fullname": "Ana Student",
            "roles": [{"roleid": 5, "shortname": "student"}],
        },
        {
            "id": 3, "username": "tteacher", "firstname": "Tom", "lastname": "Teacher",
            "email": "tom@example.org",
            "roles": [{"roleid": 3, "shortname": "editingteacher"}],
        },
        {
            "id": 9, "username": "noroles", "firstname": "No", "lastname": "Roles",
            "email": "none@example.org", "roles": [],
        },
        {
            "id": 11, "username": "tastudent", "firstname": "Tia", "lastname": "Assistant",
            "email": "tia@example.org",
            "roles": [{"roleid": 4, "shortname": "teacher"}, {"roleid": 5, "shortname": "student"}],
        },
    ]


@pytest.fixture
def assignments_payload() -> Dict:
    return {
        "courses": [
            {
                "id": COURSE_ID,
                "fullname": "Intro to Testing",
                "assignments": [
                    {"id": 101, "name": "Essay", "duedate": 1700000000, "grade": 100},
                    {"id": 102, "name": "Lab report", "duedate": 1700500000, "grade": 10},
                ],
            }
        ],
        "warnings": [],
    }


@pytest.fixture
def submissions_by_assignment() -> Dict[str, List[Dict]]:
    return {
        "101": [
            {"id": 1, "userid": 7, "status": "submitted", "timemodified": 1700000000},
            {"id": 2, "userid": 11, "status": "draft", "timemodified": 1700003600},
        ],
        "102": [
            {"id": 3, "userid": 11, "status": "submitted", "timemodified": 1700500000},
        ],
    }


@pytest.fixture
def grades_by_assignment() -> Dict[str, List[Dict]]:
    return {
        "101": [{"id": 50, "userid": 7, "grade": "85.00"}],
        "102": [],
    }


@pytest.fixture
def course_moodle(fake_moodle, enrolled_users, assignments_payload,
                  submissions_by_assignment, grades_by_assignment) -> FakeMoodle:
    """Fake Moodle preloaded with one course of two assignments."""

    def submissions(params):
        aid = params["assignmentids[0]"]
        return {"assignments": [{"assignmentid": int(aid), "submissions": submissions_by_assignment[aid]}]}

    def grades(params):
        aid = params["assignmentids[0]"]
        return {"assignments": [{"assignmentid": int(aid), "grades": grades_by_assignment[aid]}]}

    fake_moodle.respond("core_enrol_get_enrolled_users", enrolled_users)
    fake_moodle.respond("mod_assign_get_assignments", assignments_payload)
    fake_moodle.respond("mod_assign_get_submissions", submissions)
    fake_moodle.respond("mod_assign_get_grades", grades)
    fake_moodle.respond("mod_quiz_get_quizzes_by_courses", {
        "quizzes": [{"id": 31, "name": "Week 1 quiz", "timeopen": 0, "timeclose": 0, "grade": 10}],
        "warnings": [],
    })
    fake_moodle.respond("mod_quiz_get_user_best_grade", {"hasgrade": True, "grade": "9.50"})
    fake_moodle.respond("mod_assign_save_grade", None)
    fake_moodle.respond("mod_assign_get_submission_status", {"lastattempt": {}, "warnings": []})
    return fake_moodle
