"""
Admin panel pages. Every page re-checks the admin role; the session gate
only guarantees a live session.
"""

from typing import Optional

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse

from realty.api.deps import SessionDep
from realty.models.activity import ActivityAction, ActivityItemType
from realty.models.user import UserRole
from realty.services.activity_service import MAX_ACTIVITY_PAGE, recent_activities
from realty.services.blog_service import BlogService
from realty.services.listing_service import ListingService
from realty.services.user_service import UserService
from realty.ui.common import AdminIdentity, render

router = APIRouter(prefix="/admin")

DEFAULT_LOG_LIMIT = 200


def _parse(enum_cls, raw: Optional[str]):
    """Enum member for a filter value; empty or unknown values mean no filter."""
    try:
        return enum_cls(raw) if raw else None
    except ValueError:
        return None


def _parse_limit(raw: Optional[str]) -> int:
    """Page size from the log filter form; blank or invalid input means the default."""
    try:
        limit = int(raw) if raw else DEFAULT_LOG_LIMIT
    except ValueError:
        return DEFAULT_LOG_LIMIT
    return max(1, min(limit, MAX_ACTIVITY_PAGE))


@router.get("/dashboard", response_class=HTMLResponse)
def admin_dashboard(request: Request, session: SessionDep, identity: AdminIdentity):
    """Site-wide counts, pending content and the latest activity."""
    return render(
        request,
        "admin/dashboard.html",
        {
            "listing_counts": ListingService.counts(session),
            "blog_counts": BlogService.counts(session),
            "user_count": len(UserService.list_all(session)),
            "pending_listings": ListingService.list_all(session, pending_only=True),
            "pending_posts": BlogService.list_all(session, pending_only=True),
            "activities": recent_activities(session, limit=10),
        },
    )


@router.get("/listings", response_class=HTMLResponse)
def admin_listings(
    request: Request, session: SessionDep, identity: AdminIdentity, pending: bool = False
):
    listings = ListingService.list_all(session, pending_only=pending)
    return render(request, "admin/listings.html", {"listings": listings, "pending": pending})


@router.get("/blogs", response_class=HTMLResponse)
def admin_blogs(
    request: Request, session: SessionDep, identity: AdminIdentity, pending: bool = False
):
    posts = BlogService.list_all(session, pending_only=pending)
    return render(request, "admin/blogs.html", {"posts": posts, "pending": pending})


@router.get("/users", response_class=HTMLResponse)
def admin_users(request: Request, session: SessionDep, identity: AdminIdentity):
    return render(request, "admin/users.html", {"users": UserService.list_all(session)})


@router.get("/users/new", response_class=HTMLResponse)
def admin_new_user(request: Request, identity: AdminIdentity):
    return render(request, "admin/user_form.html", {"user": None, "roles": list(UserRole)})


@router.get("/users/{user_id}/edit", response_class=HTMLResponse)
def admin_edit_user(user_id: str, request: Request, session: SessionDep, identity: AdminIdentity):
    user = UserService.get_by_id(session, user_id)
    if user is None:
        return render(request, "not_found.html", {"what": "User"}, status_code=404)
    return render(request, "admin/user_form.html", {"user": user, "roles": list(UserRole)})


@router.get("/logs", response_class=HTMLResponse)
def admin_logs(
    request: Request,
    session: SessionDep,
    identity: AdminIdentity,
    action: Optional[str] = None,
    item_type: Optional[str] = None,
    limit: Optional[str] = None,
):
    """Audit log viewer with action, item type and page size filters."""
    page_size = _parse_limit(limit)
    action_filter = _parse(ActivityAction, action)
    item_type_filter = _parse(ActivityItemType, item_type)
    activities = recent_activities(
        session, limit=page_size, action=action_filter, item_type=item_type_filter
    )
    return render(
        request,
        "admin/logs.html",
        {
            "activities": activities,
            "actions": list(ActivityAction),
            "item_types": list(ActivityItemType),
            "filters": {"action": action_filter, "item_type": item_type_filter, "limit": page_size},
        },
    )
