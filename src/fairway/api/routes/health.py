"""Health check endpoint."""

from __future__ import annotations

from fastapi import APIRouter
from pydantic import BaseModel

from fairway import __version__
from fairway.api.dependencies import SessionManagerDep

router = APIRouter()


class HealthResponse(BaseModel):
    status: str
    version: str
    active_sessions: int


@router.get("/health", response_model=HealthResponse)
async def health_check(manager: SessionManagerDep) -> HealthResponse:
    """Report liveness and the number of open chat sessions."""
    return HealthResponse(
        status="healthy" if manager.is_running else "starting",
        version=__version__,
        active_sessions=manager.active_sessions,
    )
