"""
Session gate for the admin panel and the dashboard.

Runs before routing on ``/admin`` and ``/dashboard`` paths and decides from
the session token alone whether the request may continue. It only checks
that a live identity exists; the admin role itself is verified by the admin
pages, which redirect non-admins to ``/403``.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from fastapi import Request, Response
from fastapi.responses import RedirectResponse
from pydantic import ValidationError
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from realty.api.deps import clear_session_cookies, read_session_claims
from realty.core.config import settings
from realty.core.logging import get_logger
from realty.core.security import now_ms
from realty.core.server_epoch import get_server_start_time, has_server_restarted
from realty.schemas.token import SessionClaims

logger = get_logger(__name__)

ADMIN_PREFIX = "/admin"
DASHBOARD_PREFIX = "/dashboard"
PROTECTED_PREFIXES = (ADMIN_PREFIX, DASHBOARD_PREFIX)

HOME_ROUTE = "/"
PUBLIC_PREFIXES = ("/listings", "/blog", "/contact", "/login", "/api/auth", "/403", "/auth/callback")


class GateState(str, Enum):
    PUBLIC = "PUBLIC"
    AUTHENTICATING = "AUTHENTICATING"
    AUTHORIZED = "AUTHORIZED"
    AUTHORIZED_PENDING_ROLE_CHECK = "AUTHORIZED_PENDING_ROLE_CHECK"
    REJECTED_NO_TOKEN = "REJECTED_NO_TOKEN"
    REJECTED_EPOCH = "REJECTED_EPOCH"
    REJECTED_IDLE = "REJECTED_IDLE"


ALLOWED_STATES = frozenset(
    {GateState.PUBLIC, GateState.AUTHORIZED, GateState.AUTHORIZED_PENDING_ROLE_CHECK}
)


@dataclass(frozen=True)
class GateDecision:
    state: GateState
    redirect_to: Optional[str] = None
    clear_cookies: bool = False

    @property
    def allowed(self) -> bool:
        return self.state in ALLOWED_STATES


def _under(path: str, prefix: str) -> bool:
    return path == prefix or path.startswith(prefix + "/")


def is_public_path(path: str) -> bool:
    """Home (exact) and the public sections (prefix)."""
    return path == HOME_ROUTE or any(_under(path, prefix) for prefix in PUBLIC_PREFIXES)


def is_protected_path(path: str) -> bool:
    return any(_under(path, prefix) for prefix in PROTECTED_PREFIXES)


def inactivity_timeout_ms() -> int:
    return settings.INACTIVITY_TIMEOUT_MINUTES * 60 * 1000


def session_state(
    claims: Optional[dict[str, Any]],
    now: int,
    server_start_time: int,
    timeout_ms: int,
) -> GateState:
    """
    Liveness of a decoded token: no token, stale process epoch, idle, or
    AUTHENTICATING when it may be honored.
    """
    if not claims:
        return GateState.REJECTED_NO_TOKEN
    try:
        parsed = SessionClaims.model_validate(claims)
    except ValidationError:
        # Signed but malformed; treated like an expired session
        logger.warning("Session token carries malformed claims")
        return GateState.REJECTED_IDLE

    if has_server_restarted(parsed.server_start_time, server_start_time):
        return GateState.REJECTED_EPOCH
    if parsed.last_activity is None or now - parsed.last_activity > timeout_ms:
        return GateState.REJECTED_IDLE
    return GateState.AUTHENTICATING


def evaluate_request(
    path: str,
    load_claims: Callable[[], Optional[dict[str, Any]]],
    now: Optional[int] = None,
    server_start_time: Optional[int] = None,
    timeout_ms: Optional[int] = None,
) -> GateDecision:
    """
    Walk one request through the gate.

    ``load_claims`` is only called for protected, non-public paths.
    """
    if is_public_path(path) or not is_protected_path(path):
        return GateDecision(GateState.PUBLIC)

    claims = load_claims()
    state = session_state(
        claims,
        now if now is not None else now_ms(),
        server_start_time if server_start_time is not None else get_server_start_time(),
        timeout_ms if timeout_ms is not None else inactivity_timeout_ms(),
    )

    if state == GateState.REJECTED_NO_TOKEN:
        return GateDecision(state, redirect_to=HOME_ROUTE)
    if state in (GateState.REJECTED_EPOCH, GateState.REJECTED_IDLE):
        return GateDecision(state, redirect_to=HOME_ROUTE, clear_cookies=True)

    if _under(path, ADMIN_PREFIX):
        if not claims or not claims.get("id"):
            return GateDecision(GateState.REJECTED_NO_TOKEN, redirect_to=HOME_ROUTE, clear_cookies=True)
        return GateDecision(GateState.AUTHORIZED_PENDING_ROLE_CHECK)

    return GateDecision(GateState.AUTHORIZED)


class SessionGateMiddleware(BaseHTTPMiddleware):
    """Redirects protected page requests that carry no live session."""

    def __init__(self, app: ASGIApp) -> None:
        super().__init__(app)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = request.url.path
        decision = evaluate_request(path, lambda: read_session_claims(request))

        if decision.allowed:
            return await call_next(request)

        logger.info(f"Session gate rejected {path}: {decision.state.value}")
        response = RedirectResponse(decision.redirect_to or HOME_ROUTE, status_code=307)
        if decision.clear_cookies:
            clear_session_cookies(response)
        return response
