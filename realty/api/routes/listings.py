"""
Listing routes for agents: browse, create, edit and delete own listings.
"""

from typing import Annotated, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request, status

from realty.api.deps import CurrentIdentity, OptionalIdentity, SessionDep
from realty.core.logging import get_logger
from realty.models.activity import ActivityAction
from realty.schemas.listing import ListingCreate, ListingResponse, ListingUpdate
from realty.services.activity_service import ActivityLogger, get_activity_logger
from realty.services.listing_service import ListingService
from realty.services.user_service import UserService

logger = get_logger(__name__)

router = APIRouter(prefix="/listings", tags=["listings"])

ActivityDep = Annotated[ActivityLogger, Depends(get_activity_logger)]


@router.get("")
def list_listings(
    session: SessionDep,
    identity: OptionalIdentity,
    published: Optional[bool] = None,
) -> dict:
    """
    Published listings, plus the caller's own drafts when signed in.
    ``published=true`` restricts the result to published listings.
    """
    listings = ListingService.list_visible(
        session,
        viewer_id=identity.id if identity else None,
        published_only=bool(published),
    )
    return {"listings": [ListingResponse.model_validate(item) for item in listings]}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_listing(
    listing_in: ListingCreate,
    request: Request,
    session: SessionDep,
    identity: CurrentIdentity,
    background_tasks: BackgroundTasks,
    activity: ActivityDep,
) -> dict:
    """Create a listing. It stays unpublished until an admin approves it."""
    listing = ListingService.create(session, listing_in, owner_id=identity.id)
    logger.info(f"Listing {listing.property_id} created by {identity.id}")

    activity.log_listing_activity(
        background_tasks, identity.id, ActivityAction.CREATE, listing.id,
        {"title": listing.title}, request,
    )
    return {"success": True, "listing": ListingResponse.model_validate(listing)}


@router.get("/{listing_id}")
def get_listing(listing_id: str, session: SessionDep) -> dict:
    listing = ListingService.get(session, listing_id)
    if listing is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Listing not found")
    return {"listing": ListingResponse.model_validate(listing)}


@router.put("/{listing_id}")
def update_listing(
    listing_id: str,
    listing_in: ListingUpdate,
    request: Request,
    session: SessionDep,
    identity: CurrentIdentity,
    background_tasks: BackgroundTasks,
    activity: ActivityDep,
) -> dict:
    """
    Update a listing.

    Owners may edit their own listings; admins may edit any listing and
    publish or unpublish it.
    """
    listing = ListingService.get(session, listing_id)
    if listing is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Listing not found")

    is_admin = UserService.is_admin(identity)
    if listing.user_id != identity.id and not is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")

    updated = ListingService.update(session, listing, listing_in, identity.id, is_admin)
    activity.log_listing_activity(
        background_tasks, identity.id, ActivityAction.UPDATE, listing_id,
        {"title": updated.title}, request,
    )
    return {"success": True, "listing": ListingResponse.model_validate(updated)}


@router.post("/{listing_id}/delete")
def delete_listing(
    listing_id: str,
    request: Request,
    session: SessionDep,
    identity: CurrentIdentity,
    background_tasks: BackgroundTasks,
    activity: ActivityDep,
) -> dict:
    """Delete one of the caller's own listings."""
    listing = ListingService.get(session, listing_id)
    if listing is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Listing not found")
    if listing.user_id != identity.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")

    # Captured before the row disappears
    metadata = {
        "title": listing.title,
        "propertyId": listing.property_id,
        "uploadedBy": listing.user_id,
        "uploadedByName": listing.owner.name if listing.owner else None,
    }
    ListingService.delete(session, listing)
    logger.info(f"Listing {listing_id} deleted by owner {identity.id}")

    activity.log_listing_activity(
        background_tasks, identity.id, ActivityAction.DELETE, listing_id, metadata, request
    )
    return {"success": True}
