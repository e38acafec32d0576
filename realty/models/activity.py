"""
Audit trail model.
Rows are only ever inserted; the admin log viewer reads them back.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional
from uuid import uuid4

from sqlmodel import JSON, Column, Field, Relationship, SQLModel

from realty.models.user import User


class ActivityAction(str, Enum):
    """What the user did."""

    LOGIN = "LOGIN"
    LOGOUT = "LOGOUT"
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    APPROVE = "APPROVE"


class ActivityItemType(str, Enum):
    """What kind of record the action touched."""

    AUTH = "AUTH"
    LISTING = "LISTING"
    BLOG = "BLOG"
    USER = "USER"


class Activity(SQLModel, table=True):
    """
    One audit record.

    ``details`` is stored in the ``metadata`` column; the attribute name
    differs because ``metadata`` is reserved on declarative models.
    """

    __tablename__ = "activities"  # type: ignore

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    user_id: Optional[str] = Field(
        default=None, foreign_key="users.id", index=True, ondelete="SET NULL"
    )
    action: ActivityAction = Field(index=True)
    item_type: ActivityItemType = Field(index=True)
    item_id: Optional[str] = None
    details: Dict[str, Any] = Field(default_factory=dict, sa_column=Column("metadata", JSON))
    ip_address: Optional[str] = Field(default=None, max_length=100)
    user_agent: Optional[str] = Field(default=None, max_length=500)
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), index=True
    )

    user: Optional[User] = Relationship(sa_relationship_kwargs={"lazy": "selectin"})
