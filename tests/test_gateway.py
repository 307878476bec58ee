"""
Unit tests for the Moodle web service gateway.
"""

import httpx
import pytest

from moodle_mcp.gateway import MoodleAPIError, MoodleGateway, flatten_params


class TestFlattenParams:

    def test_scalars_pass_through(self):
        assert flatten_params({"courseid": 2, "name": "x"}) == {"courseid": 2, "name": "x"}

    def test_lists_are_indexed(self):
        assert flatten_params({"courseids": [5, 6]}) == {"courseids[0]": 5, "courseids[1]": 6}

    def test_nested_dicts(self):
        params = {"plugindata": {"assignfeedbackcomments_editor": {"text": "Nice", "format": 1}}}
        assert flatten_params(params) == {
            "plugindata[assignfeedbackcomments_editor][text]": "Nice",
            "plugindata[assignfeedbackcomments_editor][format]": 1,
        }

    def test_booleans_and_none(self):
        assert flatten_params({"addattempt": False, "applytoall": True, "skip": None}) == {
            "addattempt": 0,
            "applytoall": 1,
        }


class TestCall:

    @pytest.mark.asyncio
    async def test_get_carries_token_format_and_function(self, gateway, fake_moodle):
        fake_moodle.respond("core_enrol_get_enrolled_users", [])

        result = await gateway.call("core_enrol_get_enrolled_users", {"courseid": 2})

        assert result == []
        method, function, params = fake_moodle.calls[0]
        assert method == "GET"
        assert function == "core_enrol_get_enrolled_users"
        assert params["wstoken"] == "secret-token"
        assert params["moodlewsrestformat"] == "json"
        assert params["courseid"] == "2"

    @pytest.mark.asyncio
    async def test_post_sends_form_body(self, gateway, fake_moodle):
        fake_moodle.respond("mod_assign_save_grade", None)

        await gateway.call(
            "mod_assign_save_grade",
            {"plugindata": {"assignfeedbackcomments_editor": {"text": "<p>Good</p>"}}},
            method="POST",
        )

        method, _, params = fake_moodle.calls[0]
        assert method == "POST"
        assert params["plugindata[assignfeedbackcomments_editor][text]"] == "<p>Good</p>"
        assert params["wstoken"] == "secret-token"

    @pytest.mark.asyncio
    async def test_error_status_prefers_remote_message(self, gateway, fake_moodle):
        fake_moodle.respond("mod_quiz_get_quizzes_by_courses", {"message": "token expired"}, status_code=403)

        with pytest.raises(MoodleAPIError) as exc_info:
            await gateway.call("mod_quiz_get_quizzes_by_courses")

        assert exc_info.value.message == "token expired"
        assert exc_info.value.status_code == 403

    @pytest.mark.asyncio
    async def test_error_status_without_message(self, settings):
        transport = httpx.MockTransport(lambda request: httpx.Response(500, text="<html>boom</html>"))
        gateway = MoodleGateway(settings, transport=transport)

        with pytest.raises(MoodleAPIError) as exc_info:
            await gateway.call("mod_quiz_get_quizzes_by_courses")

        assert exc_info.value.status_code == 500
        assert exc_info.value.message == "HTTP 500 Internal Server Error"
        assert settings.api_token not in exc_info.value.message

    @pytest.mark.asyncio
    async def test_network_failure(self, settings):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        gateway = MoodleGateway(settings, transport=httpx.MockTransport(refuse))

        with pytest.raises(MoodleAPIError, match="connection refused"):
            await gateway.call("core_enrol_get_enrolled_users")

    @pytest.mark.asyncio
    async def test_exception_payload_with_ok_status(self, gateway, fake_moodle):
        fake_moodle.respond("core_enrol_get_enrolled_users", {
            "exception": "moodle_exception",
            "errorcode": "invalidtoken",
            "message": "Invalid token - token not found",
        })

        with pytest.raises(MoodleAPIError) as exc_info:
            await gateway.call("core_enrol_get_enrolled_users")

        assert exc_info.value.errorcode == "invalidtoken"
        assert exc_info.value.message == "Invalid token - token not found"

    @pytest.mark.asyncio
    async def test_invalid_json(self, settings):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, text="not json"))
        gateway = MoodleGateway(settings, transport=transport)

        with pytest.raises(MoodleAPIError, match="Invalid JSON"):
            await gateway.call("core_enrol_get_enrolled_users")

    @pytest.mark.asyncio
    async def test_context_manager_closes_client(self, settings, fake_moodle):
        async with MoodleGateway(settings, transport=fake_moodle.transport()) as gateway:
            pass

        assert gateway._client.is_closed
