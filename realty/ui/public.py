"""
Public pages: home, listings, blog, contact, login and the auth callback.
"""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from pydantic import ValidationError

from realty.api.deps import SessionDep, get_user_from_token
from realty.core.config import settings
from realty.core.logging import get_logger
from realty.core.rate_limit import RateLimiter, get_client_identifier, get_rate_limiter
from realty.models.listing import PROPERTY_TYPE_LABELS, ListingType
from realty.models.user import UserRole
from realty.schemas.contact import ContactMessage
from realty.services.blog_service import BlogService
from realty.services.listing_service import ListingService
from realty.ui.common import render

logger = get_logger(__name__)

router = APIRouter()

FEATURED_LISTINGS = 6

LOGIN_ERRORS = {
    "credentials": "Invalid email or password.",
    "no-token": "Your session could not be established. Please sign in again.",
}


@router.get("/", response_class=HTMLResponse)
def home(request: Request, session: SessionDep):
    """Landing page with the newest published listings."""
    listings = ListingService.search_published(session, limit=FEATURED_LISTINGS)
    return render(request, "index.html", {"listings": listings})


@router.get("/listings", response_class=HTMLResponse)
def listings_page(
    request: Request,
    session: SessionDep,
    city: Optional[str] = None,
    listing_type: Optional[str] = None,
    property_type: Optional[str] = None,
):
    """Published listings; empty filter values from the search form are ignored."""
    kind = ListingType(listing_type) if listing_type in {t.value for t in ListingType} else None
    listings = ListingService.search_published(
        session, city=city, listing_type=kind, property_type=property_type or None
    )
    return render(
        request,
        "listings.html",
        {
            "listings": listings,
            "property_types": PROPERTY_TYPE_LABELS,
            "filters": {"city": city or "", "listing_type": kind, "property_type": property_type or ""},
        },
    )


@router.get("/listings/{listing_id}", response_class=HTMLResponse)
def listing_detail_page(listing_id: str, request: Request, session: SessionDep):
    """Published listing detail; drafts are reported as missing."""
    listing = ListingService.get(session, listing_id)
    if listing is None or not listing.is_published:
        return render(request, "not_found.html", {"what": "Listing"}, status_code=404)
    return render(request, "listing_detail.html", {"listing": listing})


@router.get("/blog", response_class=HTMLResponse)
def blog_page(request: Request, session: SessionDep):
    posts = BlogService.list_visible(session, published_only=True)
    return render(request, "blog.html", {"posts": posts})


@router.get("/blog/{slug}", response_class=HTMLResponse)
def blog_post_page(slug: str, request: Request, session: SessionDep):
    post = BlogService.get_published_by_slug(session, slug)
    if post is None:
        return render(request, "not_found.html", {"what": "Blog post"}, status_code=404)
    return render(request, "blog_post.html", {"post": post})


@router.get("/contact", response_class=HTMLResponse)
def contact_page(request: Request):
    return render(request, "contact.html", {"form": {}, "errors": [], "sent": False})


@router.post("/contact", response_class=HTMLResponse)
def submit_contact(
    request: Request,
    limiter: Annotated[RateLimiter, Depends(get_rate_limiter)],
    full_name: str = Form("", alias="fullName"),
    email: str = Form(""),
    phone: str = Form(""),
    interest: str = Form(""),
    message: str = Form(""),
    consent: Optional[str] = Form(None),
):
    """
    Handle a contact form submission.

    The rate limit is checked before anything else; rejected submissions
    get 429 with the X-RateLimit headers.
    """
    identifier = get_client_identifier(request)
    result = limiter.check(
        f"contact:{identifier}",
        window_ms=settings.CONTACT_RATE_LIMIT_WINDOW_MS,
        max_requests=settings.CONTACT_RATE_LIMIT_MAX_REQUESTS,
    )
    form = {
        "fullName": full_name,
        "email": email,
        "phone": phone,
        "interest": interest,
        "message": message,
    }
    if not result.allowed:
        logger.warning(f"Contact form rate limited for {identifier}")
        response = render(
            request,
            "contact.html",
            {"form": form, "errors": ["Too many messages. Please try again later."], "sent": False},
            status_code=429,
        )
        response.headers.update(result.headers(settings.CONTACT_RATE_LIMIT_MAX_REQUESTS))
        return response

    try:
        contact = ContactMessage(
            full_name=full_name,
            email=email,
            phone=phone,
            interest=interest,
            message=message,
            consent=consent in ("on", "true", "1", "yes"),
        )
    except ValidationError as e:
        errors = [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()]
        return render(
            request, "contact.html", {"form": form, "errors": errors, "sent": False}, status_code=400
        )

    logger.info(
        f"Contact message from {contact.email} ({contact.interest})",
        extra={"contact": contact.model_dump()},
    )
    return render(request, "contact.html", {"form": {}, "errors": [], "sent": True})


@router.get("/login", response_class=HTMLResponse)
def login_page(request: Request, error: Optional[str] = None):
    message = LOGIN_ERRORS.get(error, "Sign-in failed.") if error else None
    return render(request, "login.html", {"error": message})


@router.get("/403", response_class=HTMLResponse)
def forbidden_page(request: Request):
    return render(request, "403.html", status_code=403)


@router.get("/auth/callback")
def auth_callback(request: Request, session: SessionDep) -> RedirectResponse:
    """Send a freshly signed-in user to the panel for their role."""
    identity = get_user_from_token(request, session)
    if identity is None:
        logger.info("Auth callback without a usable session token")
        return RedirectResponse("/login?error=no-token", status_code=303)

    target = "/admin/dashboard" if identity.role == UserRole.ADMIN else "/dashboard"
    return RedirectResponse(target, status_code=303)
