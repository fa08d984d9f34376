"""API route registration."""

from fastapi import FastAPI

from fairway.api.routes import chat, health


def register_routes(app: FastAPI) -> None:
    """Attach all routers to the application."""
    app.include_router(health.router)
    app.include_router(chat.router, prefix="/api")
