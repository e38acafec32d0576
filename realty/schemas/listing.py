"""
Listing schemas for API request/response validation.
"""

from datetime import datetime, timezone
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator

from realty.models.listing import ListingType, PropertyType


class OwnerSummary(BaseModel):
    """Name and email of the account behind a listing or post."""

    name: str
    email: str

    model_config = {"from_attributes": True}


class ListingBase(BaseModel):
    """Fields shared by create and update payloads."""

    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1, max_length=10000)
    price: Optional[float] = Field(default=None, ge=0, le=999_999_999_999)
    location: Optional[str] = Field(default=None, min_length=1, max_length=200)
    city: Optional[str] = Field(default=None, max_length=100)
    address: Optional[str] = Field(default=None, max_length=500)
    property_type: Optional[PropertyType] = None
    listing_type: ListingType = ListingType.SALE
    bedrooms: Optional[int] = Field(default=None, ge=0, le=50)
    bathrooms: Optional[float] = Field(default=None, ge=0, le=50)
    size: Optional[float] = Field(default=None, ge=0, le=1_000_000)
    parking: Optional[int] = Field(default=None, ge=0, le=100)
    year_built: Optional[int] = None
    floor: Optional[int] = Field(default=None, ge=0, le=200)
    total_floors: Optional[int] = Field(default=None, ge=1, le=200)
    images: List[str] = Field(default_factory=list)
    amenities: Any = Field(default_factory=list)
    available: bool = True

    @field_validator("title", "description")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must be a non-empty string")
        return v

    @field_validator("year_built")
    @classmethod
    def year_built_in_range(cls, v: Optional[int]) -> Optional[int]:
        latest = datetime.now(timezone.utc).year + 10
        if v is not None and not 1800 <= v <= latest:
            raise ValueError(f"Year built must be a number between 1800 and {latest}")
        return v


class ListingCreate(ListingBase):
    """Schema for creating a listing. New listings always start unpublished."""


class ListingUpdate(ListingBase):
    """
    Schema for updating a listing.
    ``is_published`` is honored only when an admin edits.
    """

    is_published: Optional[bool] = None


class ListingResponse(ListingBase):
    """Listing as returned by the API."""

    id: str
    property_id: str
    is_published: bool
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    user_id: str
    created_at: datetime
    updated_at: datetime
    owner: Optional[OwnerSummary] = None

    model_config = {"from_attributes": True}
