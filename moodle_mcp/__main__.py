#!/usr/bin/env python3
"""
Entry point: python -m moodle_mcp [--http]

Loads .env, validates configuration, then serves the tools over MCP stdio
(default) or HTTP.
"""

import argparse
import asyncio
import logging
import sys

from dotenv import load_dotenv

from .api_server import run_http
from .config import ConfigurationError, Settings
from .server import run_stdio

logger = logging.getLogger("moodle_mcp")


def configure_logging(level: str) -> None:
    # stderr only: stdout carries the MCP protocol
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )
    # httpx logs full request URLs, which include the token
    logging.getLogger("httpx").setLevel(logging.WARNING)


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(prog="moodle-mcp", description="Moodle course tools over MCP")
    parser.add_argument("--http", action="store_true", help="Serve over HTTP instead of MCP stdio")
    args = parser.parse_args(argv)

    load_dotenv()
    try:
        settings = Settings.from_env()
    except ConfigurationError as e:
        configure_logging("INFO")
        logger.error(str(e))
        sys.exit(1)

    configure_logging(settings.log_level)

    if args.http:
        run_http(settings)
        return

    try:
        asyncio.run(run_stdio(settings))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
