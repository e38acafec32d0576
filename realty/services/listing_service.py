"""
Listing service layer: visibility rules, creation, approval.
"""

import secrets
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import or_
from sqlmodel import Session, col, func, select

from realty.core.logging import get_logger
from realty.models.listing import Listing, ListingType
from realty.schemas.listing import ListingCreate, ListingUpdate

logger = get_logger(__name__)

PROPERTY_ID_PREFIX = "TSR"
# No 0/O or 1/I so references can be read aloud over the phone
PROPERTY_ID_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
PROPERTY_ID_ATTEMPTS = 10


def generate_property_id() -> str:
    """Random public reference such as ``TSR-7KQ2MX``."""
    suffix = "".join(secrets.choice(PROPERTY_ID_ALPHABET) for _ in range(6))
    return f"{PROPERTY_ID_PREFIX}-{suffix}"


class ListingService:
    """Service class for listing operations."""

    @staticmethod
    def get(session: Session, listing_id: str) -> Optional[Listing]:
        return session.get(Listing, listing_id)

    @staticmethod
    def list_visible(
        session: Session,
        viewer_id: Optional[str] = None,
        published_only: bool = False,
    ) -> List[Listing]:
        """
        Listings a caller may see, newest first.

        Anonymous callers and ``published_only`` requests get published
        listings; signed-in callers additionally see their own drafts.
        """
        statement = select(Listing)
        if published_only or viewer_id is None:
            statement = statement.where(Listing.is_published == True)  # noqa: E712
        else:
            statement = statement.where(
                or_(Listing.is_published == True, Listing.user_id == viewer_id)  # noqa: E712
            )
        statement = statement.order_by(col(Listing.created_at).desc())
        return list(session.exec(statement).all())

    @staticmethod
    def search_published(
        session: Session,
        city: Optional[str] = None,
        listing_type: Optional[ListingType] = None,
        property_type: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Listing]:
        """Published listings for the public pages, with optional filters."""
        statement = select(Listing).where(Listing.is_published == True)  # noqa: E712
        if city:
            statement = statement.where(func.lower(Listing.city) == city.strip().lower())
        if listing_type:
            statement = statement.where(Listing.listing_type == listing_type)
        if property_type:
            statement = statement.where(Listing.property_type == property_type)
        statement = statement.order_by(col(Listing.created_at).desc())
        if limit:
            statement = statement.limit(limit)
        return list(session.exec(statement).all())

    @staticmethod
    def list_for_owner(session: Session, user_id: str) -> List[Listing]:
        statement = (
            select(Listing)
            .where(Listing.user_id == user_id)
            .order_by(col(Listing.created_at).desc())
        )
        return list(session.exec(statement).all())

    @staticmethod
    def list_all(session: Session, pending_only: bool = False) -> List[Listing]:
        statement = select(Listing)
        if pending_only:
            statement = statement.where(Listing.is_published == False)  # noqa: E712
        statement = statement.order_by(col(Listing.created_at).desc())
        return list(session.exec(statement).all())

    @staticmethod
    def unique_property_id(session: Session) -> str:
        """Generate a property reference not used by any listing yet."""
        property_id = generate_property_id()
        for _ in range(PROPERTY_ID_ATTEMPTS):
            taken = session.exec(
                select(Listing.id).where(Listing.property_id == property_id)
            ).first()
            if not taken:
                break
            logger.debug(f"Property id collision on {property_id}, regenerating")
            property_id = generate_property_id()
        return property_id

    @staticmethod
    def create(session: Session, data: ListingCreate, owner_id: str) -> Listing:
        """Create an unpublished listing owned by ``owner_id``."""
        listing = Listing(
            **data.model_dump(),
            property_id=ListingService.unique_property_id(session),
            user_id=owner_id,
            is_published=False,
        )
        session.add(listing)
        session.commit()
        session.refresh(listing)
        return listing

    @staticmethod
    def update(
        session: Session,
        listing: Listing,
        data: ListingUpdate,
        editor_id: str,
        editor_is_admin: bool,
    ) -> Listing:
        """
        Apply an edit. Only admins may change the publication state; an admin
        publishing the listing becomes its approver.
        """
        for field, value in data.model_dump(exclude={"is_published"}).items():
            setattr(listing, field, value)

        if editor_is_admin and data.is_published is not None:
            listing.is_published = data.is_published
            if data.is_published:
                listing.approved_by = editor_id
                listing.approved_at = datetime.now(timezone.utc)

        listing.updated_at = datetime.now(timezone.utc)
        session.add(listing)
        session.commit()
        session.refresh(listing)
        return listing

    @staticmethod
    def approve(session: Session, listing: Listing, admin_id: str) -> Listing:
        """Publish a listing on behalf of an admin."""
        listing.is_published = True
        listing.approved_by = admin_id
        listing.approved_at = datetime.now(timezone.utc)
        listing.updated_at = listing.approved_at
        session.add(listing)
        session.commit()
        session.refresh(listing)
        return listing

    @staticmethod
    def delete(session: Session, listing: Listing) -> None:
        session.delete(listing)
        session.commit()

    @staticmethod
    def counts(session: Session, user_id: Optional[str] = None) -> dict[str, int]:
        """Total, published and pending listing counts, optionally per owner."""
        statement = select(Listing.is_published, func.count()).group_by(Listing.is_published)
        if user_id is not None:
            statement = statement.where(Listing.user_id == user_id)
        by_state = {bool(published): int(n) for published, n in session.exec(statement).all()}
        published = by_state.get(True, 0)
        pending = by_state.get(False, 0)
        return {"total": published + pending, "published": published, "pending": pending}
