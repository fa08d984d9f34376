"""FastAPI dependency providers."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from fairway.chat.manager import SessionManager


def get_session_manager(request: Request) -> SessionManager:
    """Session manager created by the application lifespan."""
    return request.app.state.session_manager


SessionManagerDep = Annotated[SessionManager, Depends(get_session_manager)]
