"""
FastAPI authentication dependencies.
"""
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from proftest.models import get_db, User
from .security import decode_token, verify_token_type
from .error_responses import ErrorMessages, raise_unauthorized

# HTTP Bearer token scheme
security = HTTPBearer()


def _decode_user_id(token: str) -> int:
    """
    Decode an access token and return the user_id it carries.

    Raises:
        HTTPException: 401 if token is invalid, wrong type, or missing user_id
    """
    payload = decode_token(token)
    if payload is None:
        raise_unauthorized(ErrorMessages.INVALID_TOKEN)

    if not verify_token_type(payload, "access"):
        raise_unauthorized(ErrorMessages.INVALID_TOKEN_TYPE)

    user_id = payload.get("user_id")
    if user_id is None:
        raise_unauthorized(ErrorMessages.INVALID_TOKEN_PAYLOAD)

    return user_id


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Get the current authenticated user from JWT token.

    Args:
        credentials: HTTP Bearer token credentials from request header
        db: Database session

    Returns:
        User object for the authenticated user

    Raises:
        HTTPException: 401 if token is invalid or user not found
    """
    user_id = _decode_user_id(credentials.credentials)
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise_unauthorized(ErrorMessages.USER_NOT_FOUND_AUTH)
    return user
