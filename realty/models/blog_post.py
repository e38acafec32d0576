"""
Blog post model.
"""

from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from sqlmodel import Field, Relationship, SQLModel

from realty.models.user import User


class BlogPost(SQLModel, table=True):
    """Article written by a writer or agent; public once approved."""

    __tablename__ = "blog_posts"  # type: ignore

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    title: str = Field(max_length=200)
    slug: str = Field(unique=True, index=True, max_length=200)
    content: str
    excerpt: Optional[str] = Field(default=None, max_length=500)
    featured_image: Optional[str] = None

    is_published: bool = Field(default=False, index=True)
    approved_by: Optional[str] = Field(default=None, foreign_key="users.id", ondelete="SET NULL")
    approved_at: Optional[datetime] = None

    user_id: str = Field(foreign_key="users.id", index=True, ondelete="CASCADE")

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    owner: Optional[User] = Relationship(
        sa_relationship_kwargs={"foreign_keys": "[BlogPost.user_id]", "lazy": "selectin"}
    )
    approver: Optional[User] = Relationship(
        sa_relationship_kwargs={"foreign_keys": "[BlogPost.approved_by]", "lazy": "selectin"}
    )
