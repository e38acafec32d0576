"""
API dependencies for FastAPI dependency injection.

Identity comes from the signed session token. ``get_user_from_token`` reads
it without touching the database when the token carries both ``id`` and
``role``; otherwise ``resolve_session`` loads the user. Neither raises:
any failure means "anonymous".
"""

from typing import Annotated, Any, Optional

from fastapi import Depends, HTTPException, Request, Response, status
from sqlmodel import Session

from realty.core.config import settings
from realty.core.logging import get_logger
from realty.core.security import try_decode_session_token
from realty.db.session import get_session
from realty.models.user import normalize_role
from realty.schemas.token import AdminCheck, Identity
from realty.services.user_service import UserService

logger = get_logger(__name__)


def read_cookie_token(request: Request) -> Optional[str]:
    """Session token from either cookie name, plain name first."""
    for name in settings.session_cookie_names:
        token = request.cookies.get(name)
        if token:
            return token
    return None


def read_bearer_token(request: Request) -> Optional[str]:
    """Session token from an ``Authorization: Bearer`` header."""
    authorization = request.headers.get("authorization", "")
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return None


def read_session_claims(request: Request) -> Optional[dict[str, Any]]:
    """Verified claims of the cookie token, or None."""
    return try_decode_session_token(read_cookie_token(request))


def resolve_session(request: Request, session: Session) -> Optional[Identity]:
    """
    Slow path: find the token in cookies or headers and load the user.

    Returns:
        Identity built from the stored user, or None
    """
    try:
        claims = read_session_claims(request)
        if claims is None:
            claims = try_decode_session_token(read_bearer_token(request))
        if claims is None:
            return None

        user_id = claims.get("id") or claims.get("sub")
        if not user_id:
            return None

        user = UserService.get_by_id(session, str(user_id))
        if user is None:
            logger.warning(f"Session token refers to missing user {user_id}")
            return None

        role = normalize_role(user.role)
        if role is None:
            return None
        return Identity(id=user.id, role=role)
    except Exception as e:
        logger.error(f"Session resolution failed: {e}")
        return None


def get_user_from_token(request: Request, session: Session) -> Optional[Identity]:
    """
    Identity of the caller, or None.

    Fast path trusts ``id`` and ``role`` from the verified token. Tokens
    without a role claim, and requests without a cookie, fall back to
    ``resolve_session``.
    """
    try:
        claims = read_session_claims(request)
        if claims and claims.get("id"):
            role = normalize_role(claims.get("role"))
            if role is not None:
                return Identity(id=str(claims["id"]), role=role)
    except Exception as e:
        logger.warning(f"Error reading session token: {e}")

    return resolve_session(request, session)


def verify_admin_role(request: Request, session: Session) -> AdminCheck:
    """
    Whether the caller is an admin.

    The role is trusted from the signed token; casing differences such as
    "admin" or "Admin" are normalized.
    """
    try:
        identity = get_user_from_token(request, session)
    except Exception as e:
        logger.error(f"verify_admin_role error: {e}")
        return AdminCheck(is_admin=False, user_id=None)

    if identity is None:
        return AdminCheck(is_admin=False, user_id=None)
    return AdminCheck(is_admin=UserService.is_admin(identity), user_id=identity.id)


def clear_session_cookies(response: Response) -> None:
    """Expire both session cookie names on ``response``."""
    response.delete_cookie(settings.SESSION_COOKIE_NAME, path="/", httponly=True, samesite="lax")
    response.delete_cookie(
        settings.SECURE_SESSION_COOKIE_NAME, path="/", secure=True, httponly=True, samesite="lax"
    )


def set_session_cookie(response: Response, token: str) -> None:
    """Store ``token`` under the cookie name matching the Secure setting."""
    name = settings.SECURE_SESSION_COOKIE_NAME if settings.COOKIE_SECURE else settings.SESSION_COOKIE_NAME
    response.set_cookie(
        name,
        token,
        max_age=settings.SESSION_MAX_AGE_MINUTES * 60,
        path="/",
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
    )


# Dependencies

def get_optional_identity(
    request: Request,
    session: Annotated[Session, Depends(get_session)],
) -> Optional[Identity]:
    """Dependency: caller identity, None when anonymous."""
    return get_user_from_token(request, session)


def get_current_identity(
    identity: Annotated[Optional[Identity], Depends(get_optional_identity)],
) -> Identity:
    """
    Dependency: caller identity, 401 when anonymous.

    Raises:
        HTTPException: If no valid session token was presented
    """
    if identity is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )
    return identity


def require_admin(
    request: Request,
    session: Annotated[Session, Depends(get_session)],
) -> AdminCheck:
    """
    Dependency for admin-only endpoints.

    Raises:
        HTTPException: 401 unless the caller is an admin with a user id
    """
    check = verify_admin_role(request, session)
    if not check.is_admin or not check.user_id:
        logger.warning(f"Non-admin caller {check.user_id} attempted admin access to {request.url.path}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )
    return check


SessionDep = Annotated[Session, Depends(get_session)]
OptionalIdentity = Annotated[Optional[Identity], Depends(get_optional_identity)]
CurrentIdentity = Annotated[Identity, Depends(get_current_identity)]
AdminDep = Annotated[AdminCheck, Depends(require_admin)]
