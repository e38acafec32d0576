"""
Property listing model.
Listings are created unpublished and go live once an admin approves them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, List, Optional
from uuid import uuid4

from sqlmodel import JSON, Column, Field, Relationship, SQLModel

from realty.models.user import User


class ListingType(str, Enum):
    """Whether the property is offered for sale or for rent."""

    SALE = "sale"
    RENT = "rent"


class PropertyType(str, Enum):
    """Property categories shown in the listings filter."""

    CONDOMINIUM = "condominium"
    HOUSE_AND_LOT = "house-and-lot"
    TOWNHOUSE = "townhouse"
    APARTMENT = "apartment"
    PENTHOUSE = "penthouse"
    LOT = "lot"
    BUILDING = "building"
    COMMERCIAL = "commercial"


PROPERTY_TYPE_LABELS = {
    PropertyType.CONDOMINIUM: "Condominium",
    PropertyType.HOUSE_AND_LOT: "House and Lot",
    PropertyType.TOWNHOUSE: "Townhouse",
    PropertyType.APARTMENT: "Apartment",
    PropertyType.PENTHOUSE: "Penthouse",
    PropertyType.LOT: "Lot",
    PropertyType.BUILDING: "Building",
    PropertyType.COMMERCIAL: "Commercial Space",
}


class Listing(SQLModel, table=True):
    """
    A property offered by an agent.

    ``property_id`` is the short public reference (``TSR-XXXXXX``) quoted in
    inquiries; ``id`` is the internal key.
    """

    __tablename__ = "listings"  # type: ignore

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    property_id: str = Field(unique=True, index=True, max_length=20)

    title: str = Field(max_length=200)
    description: str
    price: Optional[float] = None
    location: Optional[str] = Field(default=None, max_length=200)
    city: Optional[str] = Field(default=None, max_length=100, index=True)
    address: Optional[str] = Field(default=None, max_length=500)
    property_type: Optional[PropertyType] = None
    listing_type: ListingType = Field(default=ListingType.SALE)

    bedrooms: Optional[int] = None
    bathrooms: Optional[float] = None
    size: Optional[float] = None  # floor area in square meters
    parking: Optional[int] = None
    year_built: Optional[int] = None
    floor: Optional[int] = None
    total_floors: Optional[int] = None

    # Image URLs on the external image host
    images: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    amenities: Any = Field(default_factory=list, sa_column=Column(JSON))
    available: bool = Field(default=True)

    # Approval
    is_published: bool = Field(default=False, index=True)
    approved_by: Optional[str] = Field(default=None, foreign_key="users.id", ondelete="SET NULL")
    approved_at: Optional[datetime] = None

    user_id: str = Field(foreign_key="users.id", index=True, ondelete="CASCADE")

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    owner: Optional[User] = Relationship(
        sa_relationship_kwargs={"foreign_keys": "[Listing.user_id]", "lazy": "selectin"}
    )
    approver: Optional[User] = Relationship(
        sa_relationship_kwargs={"foreign_keys": "[Listing.approved_by]", "lazy": "selectin"}
    )

    @property
    def property_type_label(self) -> str:
        if self.property_type is None:
            return ""
        return PROPERTY_TYPE_LABELS.get(PropertyType(self.property_type), str(self.property_type))
