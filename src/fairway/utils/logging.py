"""
Fairway Structured Logging

structlog setup shared by the API server and the chat session manager.
JSON lines in production, colored console output for development.

Request-scoped fields (the chat route binds ``user_id``) are carried in
structlog contextvars, so every event logged while serving a request,
including those from the session manager and LLM gateway, is tagged with
the caller.
"""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Literal

import structlog
from structlog.typing import EventDict, WrappedLogger

# Third-party loggers that are chatty at INFO
_NOISY_LOGGERS = (
    "asyncio",
    "aiosqlite",
    "httpx",
    "httpcore",
    "anthropic",
    "openai",
    "uvicorn.access",
)


def add_app_context(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    event_dict["app"] = "fairway"
    return event_dict


def setup_logging(
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO",
    format: Literal["json", "console"] = "json",
    log_file: Path | None = None,
) -> None:
    """
    Configure structured logging for the service.

    Args:
        level: Minimum log level to output
        format: 'json' for production, 'console' for development
        log_file: Optional file that also receives stdlib log records
    """
    log_level = getattr(logging, level.upper())

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        add_app_context,
    ]
    if format == "json":
        processors += [
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=True,
                exception_formatter=structlog.dev.plain_traceback,
            )
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # uvicorn, sqlalchemy and the provider SDKs log through stdlib
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(log_level)
        file_handler.setFormatter(logging.Formatter("%(message)s"))
        logging.getLogger().addHandler(file_handler)

    if log_level > logging.DEBUG:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)


@contextmanager
def log_context(**fields: Any) -> Iterator[None]:
    """
    Bind fields to every log event emitted inside the block.

    Fields bound by an enclosing block are restored on exit.

        with log_context(user_id=user.id):
            await manager.handle(user.id, message)
    """
    with structlog.contextvars.bound_contextvars(**fields):
        yield


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """Get a logger, usually with ``__name__``."""
    return structlog.get_logger(name)
