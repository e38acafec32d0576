"""
Blog post service layer.
"""

from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import or_
from sqlmodel import Session, col, func, select

from realty.models.blog_post import BlogPost
from realty.schemas.blog import BlogPostCreate, BlogPostUpdate


class BlogService:
    """Service class for blog post operations."""

    @staticmethod
    def get(session: Session, post_id: str) -> Optional[BlogPost]:
        return session.get(BlogPost, post_id)

    @staticmethod
    def get_by_slug(session: Session, slug: str) -> Optional[BlogPost]:
        return session.exec(select(BlogPost).where(BlogPost.slug == slug)).first()

    @staticmethod
    def get_published_by_slug(session: Session, slug: str) -> Optional[BlogPost]:
        """Public lookup; drafts are treated as missing."""
        post = BlogService.get_by_slug(session, slug)
        if post is None or not post.is_published:
            return None
        return post

    @staticmethod
    def list_visible(
        session: Session,
        viewer_id: Optional[str] = None,
        published_only: bool = False,
    ) -> List[BlogPost]:
        """Published posts, plus the viewer's own drafts when signed in."""
        statement = select(BlogPost)
        if published_only or viewer_id is None:
            statement = statement.where(BlogPost.is_published == True)  # noqa: E712
        else:
            statement = statement.where(
                or_(BlogPost.is_published == True, BlogPost.user_id == viewer_id)  # noqa: E712
            )
        statement = statement.order_by(col(BlogPost.created_at).desc())
        return list(session.exec(statement).all())

    @staticmethod
    def list_for_owner(session: Session, user_id: str) -> List[BlogPost]:
        statement = (
            select(BlogPost)
            .where(BlogPost.user_id == user_id)
            .order_by(col(BlogPost.created_at).desc())
        )
        return list(session.exec(statement).all())

    @staticmethod
    def list_all(session: Session, pending_only: bool = False) -> List[BlogPost]:
        statement = select(BlogPost)
        if pending_only:
            statement = statement.where(BlogPost.is_published == False)  # noqa: E712
        statement = statement.order_by(col(BlogPost.created_at).desc())
        return list(session.exec(statement).all())

    @staticmethod
    def slug_taken(session: Session, slug: str) -> bool:
        return BlogService.get_by_slug(session, slug) is not None

    @staticmethod
    def create(session: Session, data: BlogPostCreate, owner_id: str) -> BlogPost:
        """Create an unpublished post owned by ``owner_id``."""
        post = BlogPost(**data.model_dump(), user_id=owner_id, is_published=False)
        session.add(post)
        session.commit()
        session.refresh(post)
        return post

    @staticmethod
    def update(
        session: Session,
        post: BlogPost,
        data: BlogPostUpdate,
        editor_id: str,
        editor_is_admin: bool,
    ) -> BlogPost:
        """
        Apply a partial edit. Empty title/content/slug keep the current value;
        only admins may change the publication state.
        """
        post.title = data.title or post.title
        post.content = data.content or post.content
        post.slug = data.slug or post.slug
        fields_set = data.model_fields_set
        if "excerpt" in fields_set:
            post.excerpt = data.excerpt
        if "featured_image" in fields_set:
            post.featured_image = data.featured_image

        if editor_is_admin and data.is_published is not None:
            post.is_published = data.is_published
            if data.is_published:
                post.approved_by = editor_id
                post.approved_at = datetime.now(timezone.utc)

        post.updated_at = datetime.now(timezone.utc)
        session.add(post)
        session.commit()
        session.refresh(post)
        return post

    @staticmethod
    def approve(session: Session, post: BlogPost, admin_id: str) -> BlogPost:
        post.is_published = True
        post.approved_by = admin_id
        post.approved_at = datetime.now(timezone.utc)
        post.updated_at = post.approved_at
        session.add(post)
        session.commit()
        session.refresh(post)
        return post

    @staticmethod
    def delete(session: Session, post: BlogPost) -> None:
        session.delete(post)
        session.commit()

    @staticmethod
    def counts(session: Session, user_id: Optional[str] = None) -> dict[str, int]:
        """Total, published and pending post counts, optionally per owner."""
        statement = select(BlogPost.is_published, func.count()).group_by(BlogPost.is_published)
        if user_id is not None:
            statement = statement.where(BlogPost.user_id == user_id)
        by_state = {bool(published): int(n) for published, n in session.exec(statement).all()}
        published = by_state.get(True, 0)
        pending = by_state.get(False, 0)
        return {"total": published + pending, "published": published, "pending": pending}
