"""
Authentication routes: sign in, sign out and session refresh.
Sessions live in a signed cookie; nothing is stored server-side.
"""

from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, Form, HTTPException, Request, status
from fastapi.responses import JSONResponse, RedirectResponse

from realty.api.deps import (
    OptionalIdentity,
    SessionDep,
    clear_session_cookies,
    read_session_claims,
    set_session_cookie,
)
from realty.core.config import settings
from realty.core.logging import get_logger
from realty.core.rate_limit import RateLimiter, get_client_identifier, get_rate_limiter
from realty.core.security import create_session_token, now_ms
from realty.core.server_epoch import get_server_start_time
from realty.middleware.session_gate import GateState, inactivity_timeout_ms, session_state
from realty.models.activity import ActivityAction
from realty.services.activity_service import ActivityLogger, get_activity_logger
from realty.services.user_service import UserService

logger = get_logger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login")
def login(
    request: Request,
    session: SessionDep,
    background_tasks: BackgroundTasks,
    limiter: Annotated[RateLimiter, Depends(get_rate_limiter)],
    activity: Annotated[ActivityLogger, Depends(get_activity_logger)],
    email: Annotated[str, Form()],
    password: Annotated[str, Form()],
) -> RedirectResponse:
    """
    Sign in with email and password.

    On success the session cookie is set and the browser is sent to
    ``/auth/callback``, which picks the landing page for the role.

    Raises:
        HTTPException: 429 when the client exceeded the login rate limit
    """
    identifier = get_client_identifier(request)
    rate = limiter.check(
        identifier,
        window_ms=settings.LOGIN_RATE_LIMIT_WINDOW_MS,
        max_requests=settings.LOGIN_RATE_LIMIT_MAX_REQUESTS,
    )
    if not rate.allowed:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many requests",
            headers=rate.headers(settings.LOGIN_RATE_LIMIT_MAX_REQUESTS),
        )

    user = UserService.authenticate(session, email=email, password=password)
    if not user:
        logger.warning(f"Failed login attempt for email: {email}")
        return RedirectResponse("/login?error=credentials", status_code=status.HTTP_303_SEE_OTHER)

    token = create_session_token(user.id, user.role, email=user.email, name=user.name)
    response = RedirectResponse("/auth/callback", status_code=status.HTTP_303_SEE_OTHER)
    set_session_cookie(response, token)

    activity.log_auth_activity(background_tasks, user.id, ActivityAction.LOGIN, request)
    logger.info(f"User logged in: {user.email} (ID: {user.id})")
    return response


@router.post("/logout")
def logout(
    request: Request,
    identity: OptionalIdentity,
    background_tasks: BackgroundTasks,
    activity: Annotated[ActivityLogger, Depends(get_activity_logger)],
) -> RedirectResponse:
    """Clear the session cookies and return to the home page."""
    response = RedirectResponse("/", status_code=status.HTTP_303_SEE_OTHER)
    clear_session_cookies(response)
    if identity is not None:
        activity.log_auth_activity(background_tasks, identity.id, ActivityAction.LOGOUT, request)
        logger.info(f"User logged out: {identity.id}")
    return response


@router.get("/session")
def get_session_info(identity: OptionalIdentity) -> dict:
    """The caller's identity, or ``{"user": null}`` when anonymous."""
    if identity is None:
        return {"user": None}
    return {"user": {"id": identity.id, "role": identity.role.value}}


@router.post("/session")
def refresh_session(request: Request, session: SessionDep) -> JSONResponse:
    """
    Activity ping: re-issue the token with a fresh ``lastActivity``.

    Tokens from a previous server process or past the inactivity timeout
    are not revived; their cookies are cleared and 401 is returned.
    """
    claims = read_session_claims(request)
    state = session_state(claims, now_ms(), get_server_start_time(), inactivity_timeout_ms())
    if state != GateState.AUTHENTICATING or not claims or not claims.get("id"):
        response = JSONResponse({"detail": "Unauthorized"}, status_code=status.HTTP_401_UNAUTHORIZED)
        clear_session_cookies(response)
        return response

    user = UserService.get_by_id(session, str(claims["id"]))
    if user is None:
        response = JSONResponse({"detail": "Unauthorized"}, status_code=status.HTTP_401_UNAUTHORIZED)
        clear_session_cookies(response)
        return response

    last_activity = now_ms()
    token = create_session_token(
        user.id, user.role, email=user.email, name=user.name, last_activity=last_activity
    )
    response = JSONResponse({"success": True, "lastActivity": last_activity})
    set_session_cookie(response, token)
    return response
