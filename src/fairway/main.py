"""
Fairway Server (fairwayd)

Main entry point for the Fairway booking service.

Usage:
    fairwayd              # Start with default config
    fairwayd --debug      # Start with debug logging

The server:
1. Loads configuration
2. Initializes logging
3. Builds the FastAPI app (database, LLM gateway and chat sessions start
   in the app lifespan)
4. Serves it with uvicorn until SIGINT/SIGTERM
"""

from __future__ import annotations

import argparse
import sys
from typing import NoReturn

import uvicorn

from fairway import __version__
from fairway.api.app import create_app
from fairway.config import get_config
from fairway.utils.logging import get_logger, setup_logging


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="fairwayd",
        description="Fairway - golf course booking service",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--console",
        action="store_true",
        help="Use pretty console logging instead of JSON",
    )
    parser.add_argument("--host", help="Bind address (overrides config)")
    parser.add_argument("--port", type=int, help="Bind port (overrides config)")

    return parser.parse_args(argv)


def main() -> NoReturn:
    """Main entry point for fairwayd command."""
    args = parse_args()

    config = get_config()

    if args.debug:
        config.log.level = "DEBUG"
    if args.console:
        config.log.format = "console"
    if args.host:
        config.api.host = args.host
    if args.port:
        config.api.port = args.port

    setup_logging(
        level=config.log.level,
        format=config.log.format,
        log_file=config.log.file,
    )
    logger = get_logger("fairway.server")
    logger.info(
        "fairway_starting",
        version=config.app.version,
        host=config.api.host,
        port=config.api.port,
        log_level=config.log.level,
    )

    app = create_app(config)
    try:
        uvicorn.run(
            app,
            host=config.api.host,
            port=config.api.port,
            log_level=config.log.level.lower(),
        )
    except Exception as e:
        logger.error("server_error", error=str(e), exc_info=True)
        sys.exit(1)

    sys.exit(0)


if __name__ == "__main__":
    main()
