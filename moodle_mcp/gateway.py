"""
Moodle Web Service Gateway

Thin async wrapper around the Moodle REST endpoint.
Every call is a single HTTP request carrying the token, the JSON format
selector and a `wsfunction` naming the remote operation.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from .config import Settings

logger = logging.getLogger(__name__)


class MoodleAPIError(Exception):
    """Raised when a web service call fails at the HTTP or Moodle level."""

    def __init__(self, message: str, status_code: int = None, errorcode: str = None):
        self.message = message
        self.status_code = status_code
        self.errorcode = errorcode
        super().__init__(self.message)


def flatten_params(params: Dict[str, Any], prefix: str = "") -> Dict[str, Any]:
    """
    Flatten nested lists/dicts into Moodle's bracketed parameter names.

    {"courseids": [5]}                  -> {"courseids[0]": 5}
    {"plugindata": {"editor": {"format": 1}}} -> {"plugindata[editor][format]": 1}
    """
    flat: Dict[str, Any] = {}

    for key, value in params.items():
        name = f"{prefix}[{key}]" if prefix else str(key)

        if value is None:
            continue
        if isinstance(value, dict):
            flat.update(flatten_params(value, name))
        elif isinstance(value, (list, tuple)):
            flat.update(flatten_params(dict(enumerate(value)), name))
        elif isinstance(value, bool):
            flat[name] = int(value)
        else:
            flat[name] = value

    return flat


class MoodleGateway:
    """
    Issues raw web service calls.

    Usage:
        async with MoodleGateway(settings) as gateway:
            users = await gateway.call("core_enrol_get_enrolled_users", {"courseid": 2})
    """

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self._client = httpx.AsyncClient(
            params={
                "wstoken": settings.api_token,
                "moodlewsrestformat": "json",
            },
            transport=transport,
        )

    async def __aenter__(self) -> "MoodleGateway":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def call(self, function: str, params: Dict[str, Any] = None, *, method: str = "GET") -> Any:
        """
        Call a web service function and return the decoded JSON payload.

        GET sends parameters in the query string, POST as a form body.
        Raises MoodleAPIError on transport failures, non-2xx responses and
        Moodle exception payloads.
        """
        payload = {"wsfunction": function, **flatten_params(params or {})}
        logger.debug(f"[API] {method} {function}")

        try:
            if method == "POST":
                resp = await self._client.post(self.settings.api_url, data=payload)
            else:
                resp = await self._client.get(self.settings.api_url, params=payload)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            # str(e) carries the request URL, token included
            detail = f"HTTP {e.response.status_code} {e.response.reason_phrase}".strip()
            try:
                body = e.response.json()
                if isinstance(body, dict) and body.get("message"):
                    detail = body["message"]
            except ValueError:
                pass
            raise MoodleAPIError(detail, status_code=e.response.status_code) from e
        except httpx.RequestError as e:
            raise MoodleAPIError(str(e) or type(e).__name__) from e

        try:
            data = resp.json()
        except ValueError as e:
            raise MoodleAPIError("Invalid JSON response from Moodle", status_code=resp.status_code) from e

        # Moodle reports failures as 200 responses with an exception body
        if isinstance(data, dict) and "exception" in data:
            raise MoodleAPIError(
                data.get("message") or data["exception"],
                status_code=resp.status_code,
                errorcode=data.get("errorcode"),
            )

        return data
