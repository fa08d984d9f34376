"""JWT bearer authentication for API requests."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from fairway.config import get_config
from fairway.utils.logging import get_logger

logger = get_logger(__name__)

# Security scheme for OpenAPI docs
security_scheme = HTTPBearer(auto_error=False)


@dataclass
class CurrentUser:
    """The authenticated caller."""

    id: str
    role: str | None = None
    claims: dict = field(default_factory=dict)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_jwt_secret() -> str:
    """Get the JWT signing secret from configuration."""
    secret = get_config().api.jwt_secret
    if not secret:
        raise RuntimeError("FAIRWAY_API__JWT_SECRET is not set")
    return secret


async def get_current_user(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security_scheme)],
) -> CurrentUser:
    """
    Validate the bearer token and return the caller.

    The user id is taken from the "id" claim, falling back to "sub".

    Raises:
        HTTPException: 401 if the token is missing, invalid, expired or has no user id
    """
    if credentials is None:
        logger.warning("auth_missing_token", path=request.url.path)
        raise _unauthorized("Missing authentication token")

    try:
        payload = jwt.decode(
            credentials.credentials,
            get_jwt_secret(),
            algorithms=[get_config().api.jwt_algorithm],
        )
    except JWTError as e:
        logger.warning("auth_jwt_error", error=str(e), path=request.url.path)
        raise _unauthorized("Invalid or expired token") from None

    user_id = payload.get("id", payload.get("sub"))
    if user_id is None or str(user_id) == "":
        logger.warning("auth_missing_user_id", path=request.url.path)
        raise _unauthorized("Token missing user id")

    user = CurrentUser(id=str(user_id), role=payload.get("role"), claims=payload)
    logger.debug("auth_success", user_id=user.id)
    return user


CurrentUserDep = Annotated[CurrentUser, Depends(get_current_user)]
