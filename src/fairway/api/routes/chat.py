"""Chat endpoint for the booking assistant."""

from __future__ import annotations

from fastapi import APIRouter
from pydantic import BaseModel

from fairway.api.auth import CurrentUserDep
from fairway.api.dependencies import SessionManagerDep
from fairway.utils.logging import get_logger, log_context

logger = get_logger(__name__)

router = APIRouter()


class ChatRequest(BaseModel):
    """Inbound chat message. Blank or missing messages are rejected by the manager."""

    message: str | None = None


class ChatResponse(BaseModel):
    """Result envelope shared by success and error responses."""

    success: bool
    message: str


@router.post("/chat", response_model=ChatResponse)
async def chat(
    body: ChatRequest,
    user: CurrentUserDep,
    manager: SessionManagerDep,
) -> ChatResponse:
    """Send a message to the booking assistant and return its reply.

    ChatError subclasses propagate to the app's exception handler, which
    turns them into a generic {success: false} response.
    """
    with log_context(user_id=user.id):
        logger.debug("chat_request", message_chars=len(body.message or ""))
        reply = await manager.handle(user.id, body.message)
    return ChatResponse(success=True, message=reply)
