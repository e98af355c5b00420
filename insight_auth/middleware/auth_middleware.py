"""Session cookie authentication"""

from typing import Optional

from fastapi import Depends, HTTPException, Request, Response, status

from insight_auth.api.dependencies import get_session_service
from insight_auth.config import settings
from insight_auth.domain import UserIdentity
from insight_auth.services.session_service import SessionService


def set_session_cookie(response: Response, session_id: str):
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=session_id,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
    )


def clear_session_cookie(response: Response):
    response.delete_cookie(
        key=settings.SESSION_COOKIE_NAME,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
    )


def get_session_id(request: Request) -> Optional[str]:
    return request.cookies.get(settings.SESSION_COOKIE_NAME)


def get_optional_user(
    session_id: Optional[str] = Depends(get_session_id),
    sessions: SessionService = Depends(get_session_service),
) -> Optional[UserIdentity]:
    """Resolve the session cookie; None when absent, unknown or revoked"""
    if not session_id:
        return None
    return sessions.lookup(session_id)


def require_user(user: Optional[UserIdentity] = Depends(get_optional_user)) -> UserIdentity:
    """Dependency for routes that need a signed-in user"""
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    return user
