"""
User model with role-based access control.
Role is the only authorization axis: ADMIN, AGENT or WRITER.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from uuid import uuid4

from sqlmodel import Field, SQLModel


class UserRole(str, Enum):
    """User role enumeration for RBAC."""

    ADMIN = "ADMIN"
    AGENT = "AGENT"
    WRITER = "WRITER"


def normalize_role(value: object) -> Optional[UserRole]:
    """
    Map any role representation onto the canonical enum.

    Accepts the enum itself or a string in any casing ("ADMIN", "admin",
    "Admin"). Unknown or empty values yield None.
    """
    if isinstance(value, UserRole):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return UserRole(value.strip().upper())
    except ValueError:
        return None


class User(SQLModel, table=True):
    """
    User model with authentication and role support.

    Attributes:
        id: Primary key (UUID string)
        email: Unique email address (used for login)
        name: Display name
        hashed_password: Password hash
        role: User role
        created_at: Timestamp of account creation
        updated_at: Timestamp of last update
    """

    __tablename__ = "users"  # type: ignore

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    email: str = Field(unique=True, index=True, max_length=255)
    name: str = Field(max_length=255)
    hashed_password: str
    role: UserRole = Field(default=UserRole.AGENT)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
