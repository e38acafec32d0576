"""
Shared pieces of the server-rendered pages: the template environment,
display filters and the page-level access checks.
"""

from datetime import date, datetime
from pathlib import Path
from typing import Annotated, Any, Optional

from fastapi import Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from realty.api.deps import SessionDep, get_user_from_token, verify_admin_role
from realty.core.config import settings
from realty.core.logging import get_logger
from realty.models.listing import PROPERTY_TYPE_LABELS
from realty.models.user import UserRole
from realty.schemas.token import Identity

logger = get_logger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


class PageRedirect(Exception):
    """Raised by page dependencies to send the browser elsewhere."""

    def __init__(self, location: str) -> None:
        super().__init__(location)
        self.location = location


def page_redirect_handler(request: Request, exc: PageRedirect) -> RedirectResponse:
    return RedirectResponse(exc.location, status_code=303)


# ========== Filters ==========

def format_price(value: Optional[float]) -> str:
    """Format a price with thousands separators, or "Price on request"."""
    if value is None:
        return "Price on request"
    formatted = f"{value:,.2f}"
    if formatted.endswith(".00"):
        formatted = formatted[:-3]
    return f"${formatted}"


def fmt_date(value: Any) -> str:
    """Format date values for display."""
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.strftime("%m/%d/%Y %H:%M")
    if isinstance(value, date):
        return value.strftime("%m/%d/%Y")
    return str(value)


def enum_value(value: Any) -> str:
    if value is None:
        return ""
    return str(getattr(value, "value", value))


def property_type_label(value: Any) -> str:
    if value is None:
        return ""
    return PROPERTY_TYPE_LABELS.get(value, str(getattr(value, "value", value)))


templates.env.filters["price"] = format_price
templates.env.filters["fmt_date"] = fmt_date
templates.env.filters["property_type"] = property_type_label
templates.env.filters["value"] = enum_value
templates.env.globals["site_name"] = settings.PROJECT_NAME
templates.env.globals["api_prefix"] = settings.API_PREFIX


def render(
    request: Request,
    name: str,
    context: Optional[dict[str, Any]] = None,
    status_code: int = 200,
) -> HTMLResponse:
    """Render ``name`` with the caller's identity available as ``identity``."""
    ctx = dict(context or {})
    ctx.setdefault("identity", getattr(request.state, "identity", None))
    return templates.TemplateResponse(request, name, ctx, status_code=status_code)


# ========== Page access ==========

def dashboard_identity(request: Request, session: SessionDep) -> Identity:
    """
    Identity for dashboard pages.

    The session gate has already rejected anonymous and stale sessions;
    admins are sent to their own panel.
    """
    identity = get_user_from_token(request, session)
    if identity is None:
        raise PageRedirect("/")
    if identity.role == UserRole.ADMIN:
        raise PageRedirect("/admin/dashboard")
    request.state.identity = identity
    return identity


def admin_identity(request: Request, session: SessionDep) -> Identity:
    """
    Identity for admin pages; anyone who is not an admin goes to ``/403``.
    """
    check = verify_admin_role(request, session)
    if not check.is_admin or not check.user_id:
        logger.info(f"Admin page {request.url.path} refused for {check.user_id}")
        raise PageRedirect("/403")
    identity = Identity(id=check.user_id, role=UserRole.ADMIN)
    request.state.identity = identity
    return identity


DashboardIdentity = Annotated[Identity, Depends(dashboard_identity)]
AdminIdentity = Annotated[Identity, Depends(admin_identity)]
