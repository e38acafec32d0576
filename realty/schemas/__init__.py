"""Pydantic schemas for request/response validation."""

from realty.schemas.activity import ActivityEntry, ActivityResponse
from realty.schemas.blog import BlogPostCreate, BlogPostResponse, BlogPostUpdate
from realty.schemas.contact import ContactMessage
from realty.schemas.listing import ListingCreate, ListingResponse, ListingUpdate, OwnerSummary
from realty.schemas.token import AdminCheck, Identity, SessionClaims
from realty.schemas.user import (
    AdminUserCreate,
    AdminUserUpdate,
    PasswordChange,
    UserCreate,
    UserResponse,
    UserWithPassword,
)

__all__ = [
    "ActivityEntry",
    "ActivityResponse",
    "AdminCheck",
    "AdminUserCreate",
    "AdminUserUpdate",
    "BlogPostCreate",
    "BlogPostResponse",
    "BlogPostUpdate",
    "ContactMessage",
    "Identity",
    "ListingCreate",
    "ListingResponse",
    "ListingUpdate",
    "OwnerSummary",
    "PasswordChange",
    "SessionClaims",
    "UserCreate",
    "UserResponse",
    "UserWithPassword",
]
