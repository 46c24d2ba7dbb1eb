"""
FastAPI dependency functions for authentication.

These can be used in routes with Depends() to require a registered caller.
The registry is looked up on `request.app.state.users`, so every app built by
the factory keeps its own users.
"""

from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import APIKeyHeader

from .config import USER_ID_HEADER
from .service import UserRegistry

# Header scheme; auto_error=False so a missing header gets our own 401 text
security = APIKeyHeader(name=USER_ID_HEADER, auto_error=False)


def get_registry(request: Request) -> UserRegistry:
    return request.app.state.users


def get_current_user(
    user_id: Optional[str] = Depends(security),
    registry: UserRegistry = Depends(get_registry),
) -> str:
    """
    Dependency that retrieves and validates the calling user.

    Returns:
        str: The caller's user handle.

    Raises:
        HTTPException: 401 if the header is missing or the user is unknown.
    """
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Please register or login",
        )
    if not registry.is_user_exist(user_id):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="A user with this id is not registered",
        )
    return user_id
