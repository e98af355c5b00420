"""Session and federated sign-in routes"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response, status
from fastapi.responses import RedirectResponse
from pydantic import BaseModel, EmailStr

from insight_auth.api.dependencies import get_session_service, get_sso_service
from insight_auth.config import settings
from insight_auth.domain import UserIdentity
from insight_auth.middleware.auth_middleware import (
    clear_session_cookie,
    get_session_id,
    set_session_cookie,
)
from insight_auth.services.session_service import SessionService
from insight_auth.services.sso_service import GoogleSsoService

router = APIRouter()

GOOGLE_SSO_PATH = "/api/v1/sso/google"


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class UserResponse(BaseModel):
    id: str
    organization_id: str
    email: str
    role: str
    full_name: Optional[str] = None

    @classmethod
    def from_identity(cls, user: UserIdentity) -> "UserResponse":
        return cls(
            id=user.id,
            organization_id=user.organization_id,
            email=user.email,
            role=user.role,
            full_name=user.full_name,
        )


def _no_session() -> Response:
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    clear_session_cookie(response)
    return response


@router.post("/login", response_model=UserResponse)
async def login(
    request: LoginRequest,
    response: Response,
    sessions: SessionService = Depends(get_session_service),
):
    """Sign in with email and password; the session id is set as a cookie"""
    session_id, user = await sessions.login(request.email, request.password)
    set_session_cookie(response, session_id)
    return UserResponse.from_identity(user)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    session_id: Optional[str] = Depends(get_session_id),
    sessions: SessionService = Depends(get_session_service),
):
    """Revoke the current session. Always succeeds."""
    if session_id:
        sessions.revoke(session_id)
    return _no_session()


@router.get("/session", response_model=UserResponse)
async def get_session(
    session_id: str = Query(..., alias="id", min_length=1),
    sessions: SessionService = Depends(get_session_service),
):
    """Resolve a session id to its user; 204 when the session is gone"""
    user = sessions.lookup(session_id)
    if user is None:
        return _no_session()
    return UserResponse.from_identity(user)


@router.get("/me", response_model=UserResponse)
async def me(
    session_id: Optional[str] = Depends(get_session_id),
    sessions: SessionService = Depends(get_session_service),
):
    """Current user from the session cookie; 204 when not signed in"""
    user = sessions.lookup(session_id) if session_id else None
    if user is None:
        return _no_session()
    return UserResponse.from_identity(user)


@router.get("/google/signin")
async def google_signin(
    dest: Optional[str] = None,
    sso: GoogleSsoService = Depends(get_sso_service),
):
    """
    Start Google sign-in.

    Redirects to the provider. The state is stored in a short-lived cookie
    scoped to the callback for CSRF protection.
    """
    authorization_url, state = sso.signin(dest)

    redirect_response = RedirectResponse(url=authorization_url, status_code=status.HTTP_302_FOUND)
    redirect_response.set_cookie(
        key=settings.OAUTH_STATE_COOKIE_NAME,
        value=state,
        max_age=settings.OAUTH_STATE_COOKIE_MAX_AGE,
        path=GOOGLE_SSO_PATH,
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
    )
    return redirect_response


@router.get("/google/oauth2callback")
async def google_oauth2callback(
    request: Request,
    state: Optional[str] = None,
    code: Optional[str] = None,
    sso: GoogleSsoService = Depends(get_sso_service),
):
    """
    Provider callback.

    Verifies the state against the cookie, signs the user in and redirects
    to the destination captured at sign-in.
    """
    stored_state = request.cookies.get(settings.OAUTH_STATE_COOKIE_NAME)
    login = await sso.oauth2callback(state, code, stored_state)

    redirect_response = RedirectResponse(url=login.location, status_code=status.HTTP_302_FOUND)
    set_session_cookie(redirect_response, login.session_id)
    redirect_response.delete_cookie(settings.OAUTH_STATE_COOKIE_NAME, path=GOOGLE_SSO_PATH)
    return redirect_response
