"""
Server Configuration

All process-wide settings come from the environment (optionally seeded
from a .env file by the entrypoint) and are frozen after startup.

Environment variables:
  - MOODLE_API_URL: Web service endpoint, e.g. https://lms.example.org/webservice/rest/server.php
  - MOODLE_API_TOKEN: Web service token
  - MOODLE_COURSE_ID: Course every tool operates on
  - LOG_LEVEL, MCP_HOST, MCP_PORT: optional
"""

import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

SERVER_NAME = "moodle-mcp-server"
SERVER_VERSION = "0.1.0"

REQUIRED_VARIABLES = ("MOODLE_API_URL", "MOODLE_API_TOKEN", "MOODLE_COURSE_ID")


class ConfigurationError(Exception):
    """Raised when the environment cannot produce a usable configuration."""


@dataclass(frozen=True)
class Settings:
    api_url: str
    api_token: str = field(repr=False)
    course_id: int
    log_level: str = "INFO"
    http_host: str = "0.0.0.0"
    http_port: int = 8000
    server_name: str = SERVER_NAME
    server_version: str = SERVER_VERSION

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from environment variables. Reports every missing variable at once."""
        env = os.environ if environ is None else environ

        values = {name: (env.get(name) or "").strip() for name in REQUIRED_VARIABLES}
        missing: List[str] = [name for name, value in values.items() if not value]
        if missing:
            raise ConfigurationError(
                f"Missing required environment variable(s): {', '.join(missing)}"
            )

        return cls(
            api_url=values["MOODLE_API_URL"],
            api_token=values["MOODLE_API_TOKEN"],
            course_id=_parse_int("MOODLE_COURSE_ID", values["MOODLE_COURSE_ID"]),
            log_level=(env.get("LOG_LEVEL") or "INFO").strip().upper(),
            http_host=(env.get("MCP_HOST") or "0.0.0.0").strip(),
            http_port=_parse_int("MCP_PORT", (env.get("MCP_PORT") or "8000").strip()),
        )


def _parse_int(name: str, raw: str) -> int:
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None
