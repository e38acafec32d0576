"""
Blog post schemas.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from realty.schemas.listing import OwnerSummary

SLUG_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"


class BlogPostCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    content: str = Field(min_length=1)
    slug: str = Field(min_length=1, max_length=200, pattern=SLUG_PATTERN)
    excerpt: Optional[str] = Field(default=None, max_length=500)
    featured_image: Optional[str] = None


class BlogPostUpdate(BaseModel):
    """Partial update; omitted fields keep their current value."""

    title: Optional[str] = Field(default=None, max_length=200)
    content: Optional[str] = None
    slug: Optional[str] = Field(default=None, max_length=200, pattern=SLUG_PATTERN)
    excerpt: Optional[str] = Field(default=None, max_length=500)
    featured_image: Optional[str] = None
    is_published: Optional[bool] = None


class BlogPostResponse(BaseModel):
    id: str
    title: str
    slug: str
    content: str
    excerpt: Optional[str] = None
    featured_image: Optional[str] = None
    is_published: bool
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    user_id: str
    created_at: datetime
    updated_at: datetime
    owner: Optional[OwnerSummary] = None

    model_config = {"from_attributes": True}
