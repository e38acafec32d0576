"""
Dashboard pages for agents and writers.

Forms on these pages submit to the JSON API; the pages only read.
"""

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse

from realty.api.deps import SessionDep
from realty.models.listing import PROPERTY_TYPE_LABELS, ListingType
from realty.services.activity_service import recent_activities
from realty.services.blog_service import BlogService
from realty.services.listing_service import ListingService
from realty.services.user_service import UserService
from realty.ui.common import DashboardIdentity, PageRedirect, render

router = APIRouter(prefix="/dashboard")

RECENT_ITEMS = 5


def _listing_form_context(listing=None) -> dict:
    return {
        "listing": listing,
        "property_types": PROPERTY_TYPE_LABELS,
        "listing_types": list(ListingType),
    }


@router.get("", response_class=HTMLResponse)
def dashboard_home(request: Request, session: SessionDep, identity: DashboardIdentity):
    """Overview of the caller's own content and latest activity."""
    user = UserService.get_by_id(session, identity.id)
    if user is None:
        raise PageRedirect("/")
    return render(
        request,
        "dashboard/index.html",
        {
            "user": user,
            "listing_counts": ListingService.counts(session, user_id=identity.id),
            "blog_counts": BlogService.counts(session, user_id=identity.id),
            "listings": ListingService.list_for_owner(session, identity.id)[:RECENT_ITEMS],
            "posts": BlogService.list_for_owner(session, identity.id)[:RECENT_ITEMS],
            "activities": recent_activities(session, limit=RECENT_ITEMS, user_id=identity.id),
        },
    )


@router.get("/listings", response_class=HTMLResponse)
def dashboard_listings(request: Request, session: SessionDep, identity: DashboardIdentity):
    listings = ListingService.list_for_owner(session, identity.id)
    return render(request, "dashboard/listings.html", {"listings": listings})


@router.get("/listings/new", response_class=HTMLResponse)
def new_listing_page(request: Request, identity: DashboardIdentity):
    return render(request, "dashboard/listing_form.html", _listing_form_context())


@router.get("/listings/{listing_id}/edit", response_class=HTMLResponse)
def edit_listing_page(
    listing_id: str, request: Request, session: SessionDep, identity: DashboardIdentity
):
    """Edit form for one of the caller's listings; others are not found."""
    listing = ListingService.get(session, listing_id)
    if listing is None or listing.user_id != identity.id:
        return render(request, "not_found.html", {"what": "Listing"}, status_code=404)
    return render(request, "dashboard/listing_form.html", _listing_form_context(listing))


@router.get("/blogs", response_class=HTMLResponse)
def dashboard_blogs(request: Request, session: SessionDep, identity: DashboardIdentity):
    posts = BlogService.list_for_owner(session, identity.id)
    return render(request, "dashboard/blogs.html", {"posts": posts})


@router.get("/blogs/new", response_class=HTMLResponse)
def new_blog_page(request: Request, identity: DashboardIdentity):
    return render(request, "dashboard/blog_form.html")


@router.get("/activity", response_class=HTMLResponse)
def dashboard_activity(request: Request, session: SessionDep, identity: DashboardIdentity):
    activities = recent_activities(session, limit=100, user_id=identity.id)
    return render(request, "dashboard/activity.html", {"activities": activities})


@router.get("/settings", response_class=HTMLResponse)
def dashboard_settings(request: Request, session: SessionDep, identity: DashboardIdentity):
    user = UserService.get_by_id(session, identity.id)
    if user is None:
        raise PageRedirect("/")
    return render(request, "dashboard/settings.html", {"user": user})
