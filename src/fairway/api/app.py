"""FastAPI application factory.

Creates and configures the FastAPI application with middleware,
exception handlers, route registration and the chat service lifespan.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from fairway import __version__
from fairway.api.routes import register_routes
from fairway.chat.errors import UNAVAILABLE_MESSAGE, ChatError
from fairway.chat.manager import SessionManager
from fairway.chat.store import SessionStore
from fairway.config import FairwayConfig, get_config
from fairway.context.provider import DatabaseContextProvider
from fairway.llm.chat import ChatHandle, GenerationConfig
from fairway.llm.providers import build_gateway
from fairway.llm.retry import RetryPolicy, linear_backoff
from fairway.models import close_database, init_database
from fairway.utils.logging import get_logger

logger = get_logger(__name__)


def _lifespan(config: FairwayConfig):
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await init_database(url=config.database.url, echo=config.database.echo)
        logger.info("database_ready", driver=config.database.driver)

        gateway = build_gateway(config.llm)
        await gateway.start()

        generation = GenerationConfig(
            max_tokens=config.llm.max_tokens,
            temperature=config.llm.temperature,
        )
        manager = SessionManager(
            context_provider=DatabaseContextProvider(),
            handle_factory=lambda: ChatHandle(
                gateway, generation, max_turns=config.chat.max_history_turns
            ),
            store=SessionStore(idle_timeout=config.chat.idle_timeout),
            retry_policy=RetryPolicy(
                max_attempts=config.chat.max_attempts,
                backoff=linear_backoff(config.chat.backoff_step),
            ),
            sweep_interval=config.chat.sweep_interval,
        )
        app.state.session_manager = manager
        await manager.start()

        try:
            yield
        finally:
            await manager.stop()
            await gateway.stop()
            await close_database()
            logger.info("fairway_stopped")

    return lifespan


def create_app(config: FairwayConfig | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: Configuration to use (defaults to the global config)

    Returns:
        Configured FastAPI application
    """
    config = config or get_config()

    app = FastAPI(
        title=config.app.name,
        description="Golf course booking service with a conversational assistant",
        version=__version__,
        lifespan=_lifespan(config),
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.api.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_exception_handlers(app)
    register_routes(app)

    logger.info("app_created", cors_origins=config.api.cors_origins)
    return app


def _register_exception_handlers(app: FastAPI) -> None:
    """Register global exception handlers.

    Every error response uses the {success, message} envelope with a
    generic message; details only go to the log.
    """

    @app.exception_handler(ChatError)
    async def chat_error_handler(request: Request, exc: ChatError) -> JSONResponse:
        cause = exc.__cause__
        logger.warning(
            "chat_error",
            error_type=type(exc).__name__,
            cause=str(cause) if cause else None,
            path=request.url.path,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": exc.public_message},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": str(exc.detail)},
            headers=exc.headers,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        logger.warning("validation_error", errors=exc.errors(), path=request.url.path)
        return JSONResponse(
            status_code=400,
            content={"success": False, "message": "Invalid request"},
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(
            "unexpected_error",
            error=str(exc),
            error_type=type(exc).__name__,
            path=request.url.path,
        )
        return JSONResponse(
            status_code=500,
            content={"success": False, "message": UNAVAILABLE_MESSAGE},
        )
