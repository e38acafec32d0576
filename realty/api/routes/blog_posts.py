"""
Blog post routes for writers and agents.
"""

from typing import Annotated, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request, status

from realty.api.deps import CurrentIdentity, OptionalIdentity, SessionDep
from realty.core.logging import get_logger
from realty.models.activity import ActivityAction
from realty.schemas.blog import BlogPostCreate, BlogPostResponse, BlogPostUpdate
from realty.services.activity_service import ActivityLogger, get_activity_logger
from realty.services.blog_service import BlogService
from realty.services.user_service import UserService

logger = get_logger(__name__)

router = APIRouter(tags=["blog"])

ActivityDep = Annotated[ActivityLogger, Depends(get_activity_logger)]


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Blog post not found")


@router.get("/blog-posts")
def list_blog_posts(
    session: SessionDep,
    identity: OptionalIdentity,
    published: Optional[bool] = None,
) -> dict:
    posts = BlogService.list_visible(
        session,
        viewer_id=identity.id if identity else None,
        published_only=bool(published),
    )
    return {"blogs": [BlogPostResponse.model_validate(post) for post in posts]}


@router.post("/blog-posts", status_code=status.HTTP_201_CREATED)
def create_blog_post(
    post_in: BlogPostCreate,
    request: Request,
    session: SessionDep,
    identity: CurrentIdentity,
    background_tasks: BackgroundTasks,
    activity: ActivityDep,
) -> dict:
    """Create a draft post; the slug must be unused."""
    if BlogService.slug_taken(session, post_in.slug):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Slug already exists")

    post = BlogService.create(session, post_in, owner_id=identity.id)
    activity.log_blog_activity(
        background_tasks, identity.id, ActivityAction.CREATE, post.id, {"title": post.title}, request
    )
    return {"success": True, "blog": BlogPostResponse.model_validate(post)}


@router.get("/blog-posts/slug/{slug}")
def get_blog_post_by_slug(slug: str, session: SessionDep) -> dict:
    """Public lookup by slug; unpublished posts are reported as missing."""
    post = BlogService.get_published_by_slug(session, slug)
    if post is None:
        raise _not_found()
    return {"blog": BlogPostResponse.model_validate(post)}


@router.get("/blog-posts/{post_id}")
def get_blog_post(post_id: str, session: SessionDep) -> dict:
    post = BlogService.get(session, post_id)
    if post is None:
        raise _not_found()
    return {"blog": BlogPostResponse.model_validate(post)}


@router.put("/blog-posts/{post_id}")
def update_blog_post(
    post_id: str,
    post_in: BlogPostUpdate,
    request: Request,
    session: SessionDep,
    identity: CurrentIdentity,
    background_tasks: BackgroundTasks,
    activity: ActivityDep,
) -> dict:
    post = BlogService.get(session, post_id)
    if post is None:
        raise _not_found()

    is_admin = UserService.is_admin(identity)
    if post.user_id != identity.id and not is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")

    if post_in.slug and post_in.slug != post.slug and BlogService.slug_taken(session, post_in.slug):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Slug already exists")

    updated = BlogService.update(session, post, post_in, identity.id, is_admin)
    activity.log_blog_activity(
        background_tasks, identity.id, ActivityAction.UPDATE, post_id, {"title": updated.title}, request
    )
    return {"success": True, "blog": BlogPostResponse.model_validate(updated)}


@router.post("/blogs/{post_id}/delete")
def delete_blog_post(
    post_id: str,
    request: Request,
    session: SessionDep,
    identity: CurrentIdentity,
    background_tasks: BackgroundTasks,
    activity: ActivityDep,
) -> dict:
    """Delete one of the caller's own posts."""
    post = BlogService.get(session, post_id)
    if post is None:
        raise _not_found()
    if post.user_id != identity.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")

    metadata = {
        "title": post.title,
        "slug": post.slug,
        "uploadedBy": post.user_id,
        "uploadedByName": post.owner.name if post.owner else None,
    }
    BlogService.delete(session, post)
    activity.log_blog_activity(
        background_tasks, identity.id, ActivityAction.DELETE, post_id, metadata, request
    )
    return {"success": True}
